"""Author model definitions."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, String, Text
from blog_api.database import Base

AUTHOR_ROLES = ('author', 'admin')


class Author(Base):
    """Represents a content creator or admin account."""
    __tablename__ = "authors"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password = Column(String, nullable=False)  # bcrypt hash
    bio = Column(Text)
    avatar = Column(String)
    role = Column(String, nullable=False, default='author')  # author/admin
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
