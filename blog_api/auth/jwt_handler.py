"""Signed bearer tokens for authors.

The token subject is the author id. Tokens expire after
``JWT_EXPIRES_MINUTES``.
"""

from datetime import datetime, timedelta, timezone

import jwt

from blog_api.core import config

TOKEN_TYPE = "access"


def create_access_token(author_id: str, role: str | None = None, expires_minutes: int | None = None) -> str:
    issued_at = datetime.now(timezone.utc)
    expire = issued_at + timedelta(minutes=expires_minutes or config.JWT_EXPIRES_MINUTES)
    payload = {"sub": author_id, "type": TOKEN_TYPE, "iat": issued_at, "exp": expire}
    if role:
        payload["role"] = role
    return jwt.encode(payload, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def read_author_id(token: str) -> str:
    """Return the author id carried by ``token``.

    Raises ``jwt.InvalidTokenError`` for expired, tampered or foreign tokens.
    """
    payload = jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])
    if payload.get("type") != TOKEN_TYPE:
        raise jwt.InvalidTokenError("Token is not an access token")

    author_id = str(payload.get("sub") or "").strip()
    if not author_id:
        raise jwt.InvalidTokenError("Token has no subject")
    return author_id
