import logging

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from blog_api.auth import jwt_handler
from blog_api.database import get_db
from blog_api.models.author import Author

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_token_author_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str:
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    try:
        return jwt_handler.read_author_id(credentials.credentials)
    except jwt.InvalidTokenError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc


def get_optional_token_author_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str | None:
    if credentials is None or not credentials.credentials:
        return None
    try:
        return jwt_handler.read_author_id(credentials.credentials)
    except jwt.InvalidTokenError:
        logger.info("Ignoring invalid bearer token")
        return None


def get_current_author(
    author_id: str = Depends(get_token_author_id),
    db: Session = Depends(get_db),
) -> Author:
    author = db.query(Author).filter(Author.id == author_id).first()
    if author is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return author
