import os

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from blog_api.auth.passwords import hash_password  # noqa: E402
from blog_api.database import Base  # noqa: E402
from blog_api.models.author import Author  # noqa: E402
from blog_api.models.post import Post  # noqa: E402

DEFAULT_PASSWORD = 'correct-horse'


@pytest.fixture
def db_engine():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine, tables=[Author.__table__, Post.__table__])
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine, tables=[Post.__table__, Author.__table__])
        engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def blog_db(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def make_author(blog_db):
    def _make_author(
        email: str = 'writer@example.com',
        name: str = 'Writer',
        password: str = DEFAULT_PASSWORD,
        role: str = 'author',
    ) -> Author:
        author = Author(name=name, email=email, password=hash_password(password), role=role)
        blog_db.add(author)
        blog_db.commit()
        blog_db.refresh(author)
        return author

    return _make_author


@pytest.fixture
def make_post(blog_db, make_author):
    def _make_post(slug: str, tags: list[str] | None = None, author: Author | None = None, **fields) -> Post:
        if author is None:
            author = blog_db.query(Author).first() or make_author()
        post = Post(
            title=fields.pop('title', slug.replace('-', ' ').title()),
            slug=slug,
            content=fields.pop('content', '<p>Body</p>'),
            tags=tags or [],
            author_id=author.id,
            **fields,
        )
        blog_db.add(post)
        blog_db.commit()
        blog_db.refresh(post)
        return post

    return _make_post
