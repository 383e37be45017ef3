import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from blog_api.core import config
from blog_api.database import init_db
from blog_api.errors import register_exception_handlers
from blog_api.routes import (
    auth_routes,
    author_routes,
    contact_routes,
    post_routes,
    tag_routes,
    upload_routes,
)

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)

app = FastAPI(title='Blog API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

register_exception_handlers(app)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()
    try:
        init_db()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.get('/')
def root():
    return {'status': 'Blog API Running'}


app.include_router(auth_routes.router, prefix='/auth')
app.include_router(author_routes.router, prefix='/authors')
app.include_router(post_routes.router, prefix='/posts')
app.include_router(tag_routes.router, prefix='/tags')
app.include_router(upload_routes.router, prefix='/upload')
app.include_router(contact_routes.router, prefix='/contact')
