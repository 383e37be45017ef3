import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from blog_api.auth import jwt_handler
from blog_api.auth.dependencies import get_current_author
from blog_api.auth.passwords import burn_verification, verify_password
from blog_api.database import get_db
from blog_api.errors import server_error
from blog_api.models.author import Author
from blog_api.schemas import AuthorResponse, LoginRequest, LoginResponse

router = APIRouter(tags=['auth'])

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = 'Invalid credentials'


def authenticate_author(email: str, password: str, db: Session) -> Author | None:
    """Return the author owning ``email`` if ``password`` matches its hash.

    Unknown emails and wrong passwords both yield ``None`` so callers cannot
    tell which one failed.
    """
    author = db.query(Author).filter(Author.email == email).first()
    if author is None:
        burn_verification(password)
        return None
    if not verify_password(password, author.password):
        return None
    return author


@router.post('/login', response_model=LoginResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    try:
        author = authenticate_author(data.email, data.password, db)
    except SQLAlchemyError as exc:
        logger.exception('Login error')
        raise server_error('Internal server error', exc) from exc

    if author is None:
        logger.warning('Failed login attempt for %s', data.email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

    token = jwt_handler.create_access_token(author.id, role=author.role)
    return LoginResponse(
        **AuthorResponse.model_validate(author).model_dump(),
        token=token,
    )


@router.get('/me', response_model=AuthorResponse)
def me(current_author: Author = Depends(get_current_author)):
    return AuthorResponse.model_validate(current_author)
