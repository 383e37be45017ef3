import os
from threading import Lock

from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from blog_api.core import config


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./blog.db")

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, echo=config.SQL_ECHO, connect_args=connect_args)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


_schema_lock = Lock()
_post_schema_checked = False


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ensure_post_schema(bind=None) -> None:
    """Bring a ``posts`` table created by the first release up to date.

    That release had no tags, author reference or read time. Missing columns
    are added in place so existing rows survive.
    """
    global _post_schema_checked

    if _post_schema_checked:
        return

    bind = bind or engine

    with _schema_lock:
        if _post_schema_checked:
            return

        inspector = inspect(bind)

        if 'posts' not in inspector.get_table_names():
            _post_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('posts')}
        migration_steps = [
            ('tags', 'ALTER TABLE posts ADD COLUMN tags JSON'),
            ('author_id', 'ALTER TABLE posts ADD COLUMN author_id VARCHAR(36) REFERENCES authors(id)'),
            ('read_time', 'ALTER TABLE posts ADD COLUMN read_time VARCHAR'),
        ]

        with bind.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_posts_created_at ON posts(created_at)')
            )
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_posts_author_id ON posts(author_id)')
            )

        _post_schema_checked = True


def init_db(bind=None) -> None:
    # Model modules register their tables on Base when imported.
    from blog_api.models import author, post  # noqa: F401

    bind = bind or engine
    Base.metadata.create_all(bind=bind)
    ensure_post_schema(bind)


def reset_db(bind=None) -> None:
    global _post_schema_checked

    from blog_api.models import author, post  # noqa: F401

    bind = bind or engine
    Base.metadata.drop_all(bind=bind)
    _post_schema_checked = False
    init_db(bind)
