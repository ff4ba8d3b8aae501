"""Image upload router."""

import logging

from fastapi import APIRouter, Depends, File, UploadFile

from ..core.dependencies import CurrentUser
from ..models.user import User
from ..schemas.common import UploadOut
from ..services.upload_service import UploadService, get_upload_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/uploads", tags=["uploads"])

UPLOAD_DEPENDENCY = Depends(get_upload_service)


@router.post("/images", response_model=UploadOut, status_code=201)
async def upload_image(
    file: UploadFile = File(...),
    user: User = CurrentUser,
    uploads: UploadService = UPLOAD_DEPENDENCY,
) -> UploadOut:
    """
    Store an image on the CDN and return its public URL.

    The returned URL is what offers, blog posts and avatars reference.
    """
    content = await file.read()
    uploads.validate(file.content_type, len(content))
    image = await uploads.upload_image(file.filename or "upload", content, file.content_type)
    logger.info("Image stored", extra={"user_id": user.id, "public_id": image.public_id})
    return UploadOut(
        url=image.url,
        public_id=image.public_id,
        width=image.width,
        height=image.height,
        bytes=image.bytes,
    )
