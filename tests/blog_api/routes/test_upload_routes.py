import asyncio
import io

import pytest
from fastapi import HTTPException, UploadFile
from starlette.datastructures import Headers

from blog_api.media import cloudinary
from blog_api.routes import upload_routes

TEN_MB = 10 * 1024 * 1024


def _upload_file(data: bytes, content_type: str, filename: str = 'cover.png') -> UploadFile:
    return UploadFile(
        file=io.BytesIO(data),
        filename=filename,
        headers=Headers({'content-type': content_type}),
    )


def test_upload_rejects_missing_file() -> None:
    with pytest.raises(HTTPException) as exception_info:
        asyncio.run(upload_routes.upload_image(file=None))

    assert exception_info.value.status_code == 400
    assert exception_info.value.detail == 'No file provided'


def test_upload_rejects_non_image_type() -> None:
    with pytest.raises(HTTPException) as exception_info:
        asyncio.run(upload_routes.upload_image(file=_upload_file(b'hello', 'text/plain', 'notes.txt')))

    assert exception_info.value.status_code == 400
    assert exception_info.value.detail == 'File must be an image'


def test_upload_rejects_file_over_ten_megabytes(monkeypatch) -> None:
    async def fail_if_called(*_args, **_kwargs):
        raise AssertionError('Oversized files must not reach the media host')

    monkeypatch.setattr(cloudinary, 'upload_image', fail_if_called)

    with pytest.raises(HTTPException) as exception_info:
        asyncio.run(upload_routes.upload_image(file=_upload_file(b'\0' * (TEN_MB + 1), 'image/png')))

    assert exception_info.value.status_code == 400
    assert exception_info.value.detail == 'File size must be less than 10MB'


def test_upload_accepts_file_of_exactly_ten_megabytes(monkeypatch) -> None:
    received = {}

    async def fake_upload(data: bytes, filename: str, content_type: str) -> dict:
        received['size'] = len(data)
        return {'url': 'https://res.cloudinary.com/demo/image/upload/big.png', 'public_id': 'blog-posts/big'}

    monkeypatch.setattr(cloudinary, 'upload_image', fake_upload)
    monkeypatch.setattr('blog_api.core.config.UPLOAD_MAX_BYTES', TEN_MB)

    response = asyncio.run(upload_routes.upload_image(file=_upload_file(b'\0' * TEN_MB, 'image/png', 'big.png')))

    assert response.public_id == 'blog-posts/big'
    assert received['size'] == TEN_MB


def test_upload_returns_url_and_public_id(monkeypatch) -> None:
    received = {}

    async def fake_upload(data: bytes, filename: str, content_type: str) -> dict:
        received.update(data=data, filename=filename, content_type=content_type)
        return {'url': 'https://res.cloudinary.com/demo/image/upload/cover.png', 'public_id': 'blog-posts/cover'}

    monkeypatch.setattr(cloudinary, 'upload_image', fake_upload)

    response = asyncio.run(upload_routes.upload_image(file=_upload_file(b'png-bytes', 'image/png')))

    assert response.model_dump(by_alias=True) == {
        'url': 'https://res.cloudinary.com/demo/image/upload/cover.png',
        'publicId': 'blog-posts/cover',
    }
    assert received == {'data': b'png-bytes', 'filename': 'cover.png', 'content_type': 'image/png'}


def test_upload_maps_media_host_failure_to_500(monkeypatch) -> None:
    async def failing_upload(*_args, **_kwargs):
        raise cloudinary.MediaUploadError('Cloudinary upload failed: 401 invalid signature')

    monkeypatch.setattr(cloudinary, 'upload_image', failing_upload)

    with pytest.raises(HTTPException) as exception_info:
        asyncio.run(upload_routes.upload_image(file=_upload_file(b'png-bytes', 'image/png')))

    assert exception_info.value.status_code == 500
    assert exception_info.value.detail['error'] == 'Failed to upload image'
    assert 'invalid signature' in exception_info.value.detail['details']


def test_cloudinary_upload_requires_credentials(monkeypatch) -> None:
    monkeypatch.setattr('blog_api.core.config.CLOUDINARY_CLOUD_NAME', '')

    with pytest.raises(cloudinary.MediaUploadError):
        asyncio.run(cloudinary.upload_image(b'png-bytes', 'cover.png', 'image/png'))


def test_sign_params_matches_documented_example() -> None:
    params = {
        'timestamp': '1315060510',
        'public_id': 'sample_image',
        'eager': 'w_400,h_300,c_pad|w_260,h_200,c_crop',
    }

    assert cloudinary.sign_params(params, 'abcd') == 'bfd09f95f331f558cbd1320e67aa8d488770583e'


def test_build_upload_params_uses_folder_and_transformation(monkeypatch) -> None:
    monkeypatch.setattr('blog_api.core.config.CLOUDINARY_FOLDER', 'blog-posts')

    params = cloudinary.build_upload_params(timestamp=1700000000)

    assert params == {
        'folder': 'blog-posts',
        'timestamp': '1700000000',
        'transformation': 'c_limit,w_1200/q_auto:good',
    }
