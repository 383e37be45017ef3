"""Post model definitions."""

import uuid
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship
from blog_api.database import Base
from blog_api.models.author import Author


class Post(Base):
    """Represents a blog article owned by an author."""
    __tablename__ = "posts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String, nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False)
    content = Column(Text, nullable=False)
    excerpt = Column(Text)
    featured_image = Column(String)
    tags = Column(JSON, nullable=False, default=list)
    author_id = Column(String(36), ForeignKey("authors.id"))
    read_time = Column(String)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    author = relationship(Author, lazy="joined")
