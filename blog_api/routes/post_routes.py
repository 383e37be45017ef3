import html
import logging
import math
import re
from collections import Counter
from collections.abc import Iterable

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from blog_api.auth.dependencies import get_optional_token_author_id
from blog_api.core import config
from blog_api.database import get_db
from blog_api.errors import server_error
from blog_api.models.author import Author
from blog_api.models.post import Post
from blog_api.schemas import (
    PostDeletedResponse,
    PostDetailResponse,
    PostRequest,
    PostResponse,
    RelatedPostResponse,
    TagCountResponse,
)

router = APIRouter(tags=['posts'])

logger = logging.getLogger(__name__)

POPULAR_TAG_LIMIT = 10
RELATED_POST_LIMIT = 3
MAX_LIST_LIMIT = 100
DUPLICATE_SLUG = 'A post with this slug already exists'
HTML_TAG_PATTERN = re.compile(r'<[^>]+>')


def estimate_read_time(content: str, words_per_minute: int = config.READ_TIME_WORDS_PER_MINUTE) -> str:
    text = html.unescape(HTML_TAG_PATTERN.sub(' ', content or ''))
    minutes = max(1, math.ceil(len(text.split()) / words_per_minute))
    return f'{minutes} min read'


def rank_popular_tags(tag_lists: Iterable[list[str] | None], limit: int = POPULAR_TAG_LIMIT) -> list[tuple[str, int]]:
    """Count the posts carrying each tag and return the ``limit`` most frequent.

    A tag repeated inside one list counts once. Equal counts keep the order in
    which the tags were first seen.
    """
    counts: Counter[str] = Counter()
    for tags in tag_lists:
        counts.update(dict.fromkeys(tags or [], 1))
    return counts.most_common(limit)


def get_popular_tags(db: Session, limit: int = POPULAR_TAG_LIMIT) -> list[TagCountResponse]:
    ranked = rank_popular_tags((tags for (tags,) in db.query(Post.tags).all()), limit)
    return [TagCountResponse(tag=tag, count=count) for tag, count in ranked]


def find_related_posts(post: Post, db: Session, limit: int = RELATED_POST_LIMIT) -> list[Post]:
    """Return up to ``limit`` other posts sharing at least one tag with ``post``.

    Matches are not ranked by how many tags they share; they come back in
    the table's natural order.
    """
    shared_tags = set(post.tags or [])
    if not shared_tags:
        return []

    related: list[Post] = []
    for candidate in db.query(Post).filter(Post.id != post.id).all():
        if shared_tags.intersection(candidate.tags or []):
            related.append(candidate)
            if len(related) >= limit:
                break
    return related


def get_post_or_404(slug: str, db: Session) -> Post:
    post = db.query(Post).filter(Post.slug == slug.strip()).first()
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Post not found')
    return post


def slug_in_use(slug: str, db: Session, exclude_id: str | None = None) -> bool:
    query = db.query(Post.id).filter(Post.slug == slug)
    if exclude_id is not None:
        query = query.filter(Post.id != exclude_id)
    return query.first() is not None


def ensure_author_exists(author_id: str, db: Session) -> None:
    if db.query(Author.id).filter(Author.id == author_id).first() is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Author not found')


def build_post_detail(post: Post, db: Session) -> PostDetailResponse:
    detail = PostDetailResponse.model_validate(post)
    return detail.model_copy(
        update={
            'related_posts': [RelatedPostResponse.model_validate(item) for item in find_related_posts(post, db)],
            'popular_tags': get_popular_tags(db),
        }
    )


@router.get('', response_model=list[PostResponse])
def list_posts(
    limit: int | None = Query(default=None, ge=1, le=MAX_LIST_LIMIT),
    tag: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    try:
        query = db.query(Post).order_by(Post.created_at.desc())
        wanted_tag = (tag or '').strip()

        if not wanted_tag:
            posts = query.limit(limit).all() if limit else query.all()
        else:
            posts = [post for post in query.all() if wanted_tag in (post.tags or [])]
            if limit:
                posts = posts[:limit]

        return [PostResponse.model_validate(post) for post in posts]
    except SQLAlchemyError as exc:
        logger.exception('Error fetching posts')
        raise server_error('Failed to fetch posts', exc) from exc


@router.post('', response_model=PostResponse, status_code=status.HTTP_201_CREATED)
def create_post(
    data: PostRequest,
    db: Session = Depends(get_db),
    token_author_id: str | None = Depends(get_optional_token_author_id),
):
    author_id = data.author_id or token_author_id
    if not author_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Missing required field: authorId')

    try:
        ensure_author_exists(author_id, db)

        if slug_in_use(data.slug, db):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_SLUG)

        post = Post(
            title=data.title,
            slug=data.slug,
            content=data.content,
            excerpt=data.excerpt,
            featured_image=data.featured_image,
            tags=data.tags,
            author_id=author_id,
            read_time=data.read_time or estimate_read_time(data.content),
        )
        db.add(post)
        db.commit()
        db.refresh(post)

        logger.info('Created post %s by author %s', post.slug, author_id)
        return PostResponse.model_validate(post)
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_SLUG) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error creating post')
        raise server_error('Failed to create post', exc) from exc


@router.get('/{slug}', response_model=PostDetailResponse)
def get_post(slug: str, db: Session = Depends(get_db)):
    try:
        return build_post_detail(get_post_or_404(slug, db), db)
    except SQLAlchemyError as exc:
        logger.exception('Error fetching post')
        raise server_error('Failed to fetch post', exc) from exc


@router.put('/{slug}', response_model=PostResponse)
def update_post(slug: str, data: PostRequest, db: Session = Depends(get_db)):
    try:
        post = get_post_or_404(slug, db)

        if data.slug != post.slug and slug_in_use(data.slug, db, exclude_id=post.id):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_SLUG)

        if data.author_id:
            ensure_author_exists(data.author_id, db)
            post.author_id = data.author_id

        content_changed = data.content != post.content

        post.title = data.title
        post.slug = data.slug
        post.content = data.content
        post.excerpt = data.excerpt
        post.featured_image = data.featured_image
        post.tags = data.tags
        if data.read_time:
            post.read_time = data.read_time
        elif content_changed or not post.read_time:
            post.read_time = estimate_read_time(data.content)

        db.commit()
        db.refresh(post)

        return PostResponse.model_validate(post)
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_SLUG) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error updating post')
        raise server_error('Failed to update post', exc) from exc


@router.delete('/{slug}', response_model=PostDeletedResponse)
def delete_post(slug: str, db: Session = Depends(get_db)):
    try:
        post = get_post_or_404(slug, db)
        deleted = PostResponse.model_validate(post)

        db.delete(post)
        db.commit()

        logger.info('Deleted post %s', deleted.slug)
        return PostDeletedResponse(message='Post deleted successfully', post=deleted)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error deleting post')
        raise server_error('Failed to delete post', exc) from exc
