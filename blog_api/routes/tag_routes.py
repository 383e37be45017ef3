import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from blog_api.database import get_db
from blog_api.errors import server_error
from blog_api.routes.post_routes import get_popular_tags
from blog_api.schemas import TagCountResponse

router = APIRouter(tags=['tags'])

logger = logging.getLogger(__name__)


@router.get('/popular', response_model=list[TagCountResponse])
def list_popular_tags(db: Session = Depends(get_db)):
    try:
        return get_popular_tags(db)
    except SQLAlchemyError as exc:
        logger.exception('Error fetching popular tags')
        raise server_error('Failed to fetch popular tags', exc) from exc
