import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from blog_api.auth.passwords import hash_password
from blog_api.database import get_db
from blog_api.errors import server_error
from blog_api.models.author import Author
from blog_api.schemas import (
    AuthorDeletedResponse,
    AuthorResponse,
    CreateAuthorRequest,
    UpdateAuthorRequest,
)

router = APIRouter(tags=['authors'])

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL = 'An author with this email already exists'


def get_author_or_404(author_id: str, db: Session) -> Author:
    author = db.query(Author).filter(Author.id == author_id).first()
    if author is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Author not found')
    return author


def email_in_use(email: str, db: Session, exclude_id: str | None = None) -> bool:
    query = db.query(Author.id).filter(Author.email == email)
    if exclude_id is not None:
        query = query.filter(Author.id != exclude_id)
    return query.first() is not None


@router.get('', response_model=list[AuthorResponse])
def list_authors(db: Session = Depends(get_db)):
    try:
        authors = db.query(Author).order_by(Author.created_at.asc()).all()
        return [AuthorResponse.model_validate(author) for author in authors]
    except SQLAlchemyError as exc:
        logger.exception('Error fetching authors')
        raise server_error('Failed to fetch authors', exc) from exc


@router.post('', response_model=AuthorResponse, status_code=status.HTTP_201_CREATED)
def create_author(data: CreateAuthorRequest, db: Session = Depends(get_db)):
    try:
        if email_in_use(data.email, db):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_EMAIL)

        author = Author(
            name=data.name,
            email=data.email,
            password=hash_password(data.password),
            bio=data.bio,
            avatar=data.avatar,
            role=data.role,
        )
        db.add(author)
        db.commit()
        db.refresh(author)

        logger.info('Created author %s (%s)', author.id, author.role)
        return AuthorResponse.model_validate(author)
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_EMAIL) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error creating author')
        raise server_error('Failed to create author', exc) from exc


@router.get('/{author_id}', response_model=AuthorResponse)
def get_author(author_id: str, db: Session = Depends(get_db)):
    try:
        return AuthorResponse.model_validate(get_author_or_404(author_id, db))
    except SQLAlchemyError as exc:
        logger.exception('Error fetching author')
        raise server_error('Failed to fetch author', exc) from exc


@router.put('/{author_id}', response_model=AuthorResponse)
def update_author(author_id: str, data: UpdateAuthorRequest, db: Session = Depends(get_db)):
    try:
        author = get_author_or_404(author_id, db)

        if data.email and data.email != author.email and email_in_use(data.email, db, exclude_id=author.id):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_EMAIL)

        author.name = data.name or author.name
        author.email = data.email or author.email
        author.role = data.role or author.role
        author.bio = data.bio
        author.avatar = data.avatar
        if data.password:
            author.password = hash_password(data.password)

        db.commit()
        db.refresh(author)

        return AuthorResponse.model_validate(author)
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_EMAIL) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error updating author')
        raise server_error('Failed to update author', exc) from exc


@router.delete('/{author_id}', response_model=AuthorDeletedResponse)
def delete_author(author_id: str, db: Session = Depends(get_db)):
    try:
        author = get_author_or_404(author_id, db)
        deleted = AuthorResponse.model_validate(author)

        db.delete(author)
        db.commit()

        logger.info('Deleted author %s', author_id)
        return AuthorDeletedResponse(message='Author deleted successfully', author=deleted)
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail='Author still has posts. Reassign or delete them first.',
        ) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error deleting author')
        raise server_error('Failed to delete author', exc) from exc
