"""Cloudinary image uploads over its REST API.

Used endpoint:
- POST https://api.cloudinary.com/v1_1/<cloud>/auto/upload
  -> {"secure_url": "...", "public_id": "...", ...}
"""

import hashlib
import time

import httpx

from blog_api.core import config

UPLOAD_API_BASE_URL = "https://api.cloudinary.com/v1_1"
UPLOAD_TRANSFORMATION = "c_limit,w_1200/q_auto:good"


class MediaUploadError(RuntimeError):
    pass


def build_upload_params(timestamp: int | None = None) -> dict:
    return {
        "folder": config.CLOUDINARY_FOLDER,
        "timestamp": str(timestamp if timestamp is not None else int(time.time())),
        "transformation": UPLOAD_TRANSFORMATION,
    }


def sign_params(params: dict, api_secret: str) -> str:
    to_sign = "&".join(f"{key}={params[key]}" for key in sorted(params) if params[key] not in (None, ""))
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()


def upload_url(cloud_name: str) -> str:
    return f"{UPLOAD_API_BASE_URL}/{cloud_name}/auto/upload"


async def upload_image(data: bytes, filename: str, content_type: str) -> dict:
    """Upload ``data`` and return ``{"url", "public_id"}`` for the stored asset."""
    if not (config.CLOUDINARY_CLOUD_NAME and config.CLOUDINARY_API_KEY and config.CLOUDINARY_API_SECRET):
        raise MediaUploadError("Cloudinary credentials are not configured.")

    params = build_upload_params()
    form = {
        **params,
        "api_key": config.CLOUDINARY_API_KEY,
        "signature": sign_params(params, config.CLOUDINARY_API_SECRET),
    }

    try:
        async with httpx.AsyncClient(timeout=config.CLOUDINARY_TIMEOUT_SECONDS) as client:
            resp = await client.post(
                upload_url(config.CLOUDINARY_CLOUD_NAME),
                data=form,
                files={"file": (filename, data, content_type)},
            )
    except httpx.HTTPError as exc:
        raise MediaUploadError(f"Cloudinary request failed: {exc}") from exc

    if resp.status_code != 200:
        raise MediaUploadError(f"Cloudinary upload failed: {resp.status_code} {resp.text[:500]}")

    payload = resp.json()
    url = payload.get("secure_url")
    public_id = payload.get("public_id")
    if not url or not public_id:
        raise MediaUploadError("Cloudinary returned no asset URL.")
    return {"url": url, "public_id": public_id}
