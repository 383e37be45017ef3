"""Request and response models shared by the API routes.

Field names are camelCase on the wire and snake_case in Python. Request
bodies accept either form.
"""

import re
from datetime import datetime

from pydantic import BaseModel, field_validator
from pydantic.alias_generators import to_camel

from blog_api.auth.passwords import MAX_PASSWORD_BYTES
from blog_api.models.author import AUTHOR_ROLES

SLUG_PATTERN = re.compile(r'^[A-Za-z0-9._~-]+$')
INVALID_ROLE_MESSAGE = 'Invalid role. Must be either "author" or "admin"'


def _required(value: str | None, field_name: str) -> str:
    normalized = (value or '').strip()
    if not normalized:
        raise ValueError(f'{field_name} is required.')
    return normalized


def _optional(value: str | None) -> str | None:
    if value is None:
        return None
    normalized = value.strip()
    return normalized or None


def _normalize_email(value: str | None) -> str | None:
    normalized = _optional(value)
    if normalized is None:
        return None
    normalized = normalized.lower()
    if '@' not in normalized:
        raise ValueError('Email address is invalid.')
    return normalized


def _check_password_length(value: str) -> str:
    if len(value.encode('utf-8')) > MAX_PASSWORD_BYTES:
        raise ValueError(f'Password must be at most {MAX_PASSWORD_BYTES} bytes.')
    return value


def normalize_tags(tags: list[str] | None) -> list[str]:
    if not tags:
        return []
    return list(dict.fromkeys(tag.strip() for tag in tags if tag and tag.strip()))


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class AuthorResponse(CamelModel):
    id: str
    name: str
    email: str
    bio: str | None = None
    avatar: str | None = None
    role: str
    created_at: datetime
    updated_at: datetime


class LoginResponse(AuthorResponse):
    token: str
    token_type: str = 'bearer'


class AuthorDeletedResponse(CamelModel):
    message: str
    author: AuthorResponse


class LoginRequest(CamelModel):
    email: str
    password: str

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _required(value, 'Email').lower()

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str) -> str:
        if not value:
            raise ValueError('Password is required.')
        return value


class CreateAuthorRequest(CamelModel):
    name: str
    email: str
    password: str
    bio: str | None = None
    avatar: str | None = None
    role: str | None = 'author'

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _required(value, 'Name')

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _normalize_email(_required(value, 'Email'))

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str) -> str:
        if not value:
            raise ValueError('Password is required.')
        return _check_password_length(value)

    @field_validator('bio', 'avatar')
    @classmethod
    def validate_optional_text(cls, value: str | None) -> str | None:
        return _optional(value)

    @field_validator('role')
    @classmethod
    def validate_role(cls, value: str | None) -> str:
        normalized = (_optional(value) or 'author').lower()
        if normalized not in AUTHOR_ROLES:
            raise ValueError(INVALID_ROLE_MESSAGE)
        return normalized


class UpdateAuthorRequest(CamelModel):
    name: str | None = None
    email: str | None = None
    password: str | None = None
    bio: str | None = None
    avatar: str | None = None
    role: str | None = None

    @field_validator('name', 'bio', 'avatar')
    @classmethod
    def validate_optional_text(cls, value: str | None) -> str | None:
        return _optional(value)

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str | None) -> str | None:
        return _normalize_email(value)

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str | None) -> str | None:
        if not value:
            return None
        return _check_password_length(value)

    @field_validator('role')
    @classmethod
    def validate_role(cls, value: str | None) -> str | None:
        normalized = _optional(value)
        if normalized is None:
            return None
        normalized = normalized.lower()
        if normalized not in AUTHOR_ROLES:
            raise ValueError(INVALID_ROLE_MESSAGE)
        return normalized


class AuthorSummaryResponse(CamelModel):
    id: str
    name: str
    avatar: str | None = None
    bio: str | None = None


class TagCountResponse(CamelModel):
    tag: str
    count: int


class PostRequest(CamelModel):
    title: str
    slug: str
    content: str
    excerpt: str | None = None
    featured_image: str | None = None
    tags: list[str] = []
    author_id: str | None = None
    read_time: str | None = None

    @field_validator('title', 'content')
    @classmethod
    def validate_required_text(cls, value: str, info) -> str:
        return _required(value, info.field_name.capitalize())

    @field_validator('slug')
    @classmethod
    def validate_slug(cls, value: str) -> str:
        normalized = _required(value, 'Slug')
        if not SLUG_PATTERN.match(normalized):
            raise ValueError('Slug may only contain letters, numbers, hyphens, underscores, dots and tildes.')
        return normalized

    @field_validator('excerpt', 'featured_image', 'author_id', 'read_time')
    @classmethod
    def validate_optional_text(cls, value: str | None) -> str | None:
        return _optional(value)

    @field_validator('tags', mode='before')
    @classmethod
    def validate_tags(cls, value: list[str] | None) -> list[str]:
        return normalize_tags(value)


class PostResponse(CamelModel):
    id: str
    title: str
    slug: str
    content: str
    excerpt: str | None = None
    featured_image: str | None = None
    tags: list[str] = []
    author_id: str | None = None
    read_time: str | None = None
    created_at: datetime
    updated_at: datetime
    author: AuthorSummaryResponse | None = None

    @field_validator('tags', mode='before')
    @classmethod
    def validate_tags(cls, value: list[str] | None) -> list[str]:
        return list(value or [])


class RelatedPostResponse(CamelModel):
    id: str
    title: str
    slug: str
    excerpt: str | None = None
    featured_image: str | None = None
    tags: list[str] = []
    created_at: datetime

    @field_validator('tags', mode='before')
    @classmethod
    def validate_tags(cls, value: list[str] | None) -> list[str]:
        return list(value or [])


class PostDetailResponse(PostResponse):
    related_posts: list[RelatedPostResponse] = []
    popular_tags: list[TagCountResponse] = []


class PostDeletedResponse(CamelModel):
    message: str
    post: PostResponse


class UploadResponse(CamelModel):
    url: str
    public_id: str


class ContactRequest(CamelModel):
    name: str
    email: str
    message: str

    @field_validator('name', 'message')
    @classmethod
    def validate_required_text(cls, value: str, info) -> str:
        return _required(value, info.field_name.capitalize())

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _normalize_email(_required(value, 'Email'))
