"""Mapping of failures to JSON error bodies.

Every error response has the shape ``{"error": <message>}``; server-side
failures add ``"details"`` with the underlying error text.
"""

import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


def server_error(message: str, exc: Exception | None = None) -> HTTPException:
    detail = {'error': message}
    if exc is not None:
        detail['details'] = str(exc) or exc.__class__.__name__
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


def _validation_message(errors: list[dict]) -> str:
    if not errors:
        return 'Invalid request.'
    first = errors[0]
    if first.get('type') == 'missing':
        field = first.get('loc', ('', ''))[-1]
        return f'Missing required field: {field}'
    message = str(first.get('msg') or 'Invalid request.')
    return message.removeprefix('Value error, ')


async def http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    if isinstance(exc.detail, dict):
        content = exc.detail
    else:
        content = {'error': exc.detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, 'headers', None))


async def validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            'error': _validation_message(errors),
            'details': jsonable_encoder(errors, custom_encoder={Exception: str}),
        },
    )


async def unhandled_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    logger.exception('Unhandled error while serving request')
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={'error': 'Internal server error', 'details': str(exc)},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
