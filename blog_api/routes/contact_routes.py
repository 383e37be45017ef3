import logging
from datetime import datetime, timezone

from fastapi import APIRouter

from blog_api.schemas import ContactRequest

router = APIRouter(tags=['contact'])

logger = logging.getLogger(__name__)


@router.post('')
def submit_contact_form(data: ContactRequest):
    # Submissions are only logged; nothing is stored or mailed.
    logger.info(
        'Contact form submission: name=%s email=%s message=%r at=%s',
        data.name,
        data.email,
        data.message,
        datetime.now(timezone.utc).isoformat(),
    )
    return {'ok': True}
