"""Seed the database with an admin author and sample posts.

Usage:
    python -m blog_api.seed [--reset]

``--reset`` drops and recreates every table first. Otherwise existing rows
are kept and records whose email or slug already exist are skipped.
"""
import logging
import os
import sys

from sqlalchemy.orm import Session

from blog_api.auth.passwords import hash_password
from blog_api.database import SessionLocal, engine, init_db, reset_db
from blog_api.models.author import Author
from blog_api.models.post import Post
from blog_api.routes.post_routes import estimate_read_time

logger = logging.getLogger(__name__)

ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "change-me-now")

SAMPLE_POSTS = [
    {
        "title": "Getting Started with SQLAlchemy",
        "slug": "getting-started-sqlalchemy",
        "content": "<p>SQLAlchemy is the Python SQL toolkit and object relational mapper...</p>",
        "excerpt": "Learn the basics of SQLAlchemy and how to wire it into a web API.",
        "featured_image": "https://example.com/images/sqlalchemy.jpg",
        "tags": ["python", "databases"],
    },
    {
        "title": "Building a Blog API with FastAPI",
        "slug": "fastapi-blog-tutorial",
        "content": "<p>In this tutorial we build a small blog backend with FastAPI...</p>",
        "excerpt": "Step-by-step guide to a blog backend with FastAPI and pydantic.",
        "featured_image": "https://example.com/images/fastapi.jpg",
        "tags": ["python", "fastapi", "tutorial"],
    },
    {
        "title": "Type Hints Best Practices",
        "slug": "type-hints-best-practices",
        "content": "<p>Type hints make large Python codebases easier to change...</p>",
        "excerpt": "Essential tips and patterns for writing well-typed Python.",
        "featured_image": "https://example.com/images/typing.jpg",
        "tags": ["python", "typing"],
    },
]


def seed(db: Session) -> tuple[int, int]:
    """Insert the admin author and sample posts. Returns (authors, posts) added."""
    authors_added = 0
    posts_added = 0

    admin = db.query(Author).filter(Author.email == ADMIN_EMAIL).first()
    if admin is None:
        admin = Author(
            name="Site Admin",
            email=ADMIN_EMAIL,
            password=hash_password(ADMIN_PASSWORD),
            role="admin",
        )
        db.add(admin)
        db.flush()
        authors_added += 1

    for sample in SAMPLE_POSTS:
        if db.query(Post.id).filter(Post.slug == sample["slug"]).first() is not None:
            continue
        db.add(Post(**sample, author_id=admin.id, read_time=estimate_read_time(sample["content"])))
        posts_added += 1

    db.commit()
    return authors_added, posts_added


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    args = sys.argv[1:] if argv is None else argv

    if "--reset" in args:
        reset_db(engine)
        logger.info("Dropped and recreated all tables")
    else:
        init_db(engine)

    db = SessionLocal()
    try:
        authors_added, posts_added = seed(db)
    except Exception:
        db.rollback()
        logger.exception("Error seeding database")
        sys.exit(1)
    finally:
        db.close()

    logger.info("Seeded %d author(s) and %d post(s)", authors_added, posts_added)


if __name__ == "__main__":
    main()
