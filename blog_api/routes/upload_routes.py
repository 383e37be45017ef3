import logging

from fastapi import APIRouter, File, HTTPException, UploadFile, status

from blog_api.core import config
from blog_api.errors import server_error
from blog_api.media import cloudinary
from blog_api.schemas import UploadResponse

router = APIRouter(tags=['upload'])

logger = logging.getLogger(__name__)


def validate_image_upload(content_type: str | None, size: int) -> None:
    if not (content_type or '').lower().startswith('image/'):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='File must be an image')

    if size > config.UPLOAD_MAX_BYTES:
        limit_mb = config.UPLOAD_MAX_BYTES // (1024 * 1024)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f'File size must be less than {limit_mb}MB',
        )


@router.post('', response_model=UploadResponse)
async def upload_image(file: UploadFile | None = File(default=None)):
    if file is None or not file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='No file provided')

    # Reject on the declared type before reading the body.
    validate_image_upload(file.content_type, 0)

    data = await file.read(config.UPLOAD_MAX_BYTES + 1)
    validate_image_upload(file.content_type, len(data))

    try:
        result = await cloudinary.upload_image(data, file.filename, file.content_type)
    except cloudinary.MediaUploadError as exc:
        logger.exception('Error uploading image')
        raise server_error('Failed to upload image', exc) from exc

    return UploadResponse(url=result['url'], public_id=result['public_id'])
