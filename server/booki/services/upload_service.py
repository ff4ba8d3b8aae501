"""Image uploads to the Cloudinary CDN."""

import hashlib
import time
from dataclasses import dataclass
from typing import Optional

import httpx

from ..core.config import settings
from ..core.exceptions import UpstreamServiceError, ValidationError
from ..core.observability import get_logger

logger = get_logger(__name__)

CLOUDINARY_API_URL = "https://api.cloudinary.com/v1_1"


def sign_params(params: dict[str, str], api_secret: str) -> str:
    """Cloudinary request signature: SHA-1 of the sorted params followed by the secret."""
    to_sign = "&".join(f"{key}={params[key]}" for key in sorted(params) if params[key] != "")
    return hashlib.sha1(f"{to_sign}{api_secret}".encode()).hexdigest()


@dataclass(frozen=True)
class UploadedImage:
    url: str
    public_id: str
    width: Optional[int] = None
    height: Optional[int] = None
    bytes: Optional[int] = None


class UploadService:
    def __init__(self, transport: httpx.AsyncBaseTransport | None = None, timeout: float = 30.0):
        self._transport = transport
        self._timeout = timeout

    @staticmethod
    def validate(content_type: Optional[str], size: int) -> None:
        """
        Raises:
            ValidationError: If the file is not an image or is too large
        """
        if not content_type or not content_type.startswith("image/"):
            raise ValidationError("Only image uploads are accepted", errors={"content_type": content_type})
        if size == 0:
            raise ValidationError("The uploaded file is empty")
        if size > settings.upload_max_bytes:
            raise ValidationError(
                f"The file exceeds the {settings.upload_max_bytes} byte limit",
                errors={"size": size, "max_size": settings.upload_max_bytes},
            )

    async def upload_image(
        self,
        filename: str,
        content: bytes,
        content_type: Optional[str],
        folder: Optional[str] = None,
    ) -> UploadedImage:
        """
        Upload one image with a signed Cloudinary request.

        Raises:
            ValidationError: If the file is rejected before upload
            UpstreamServiceError: If the CDN is not configured or refuses the file
        """
        self.validate(content_type, len(content))
        if not settings.cdn_enabled:
            raise UpstreamServiceError("cloudinary", "Image uploads are not configured")

        params = {
            "folder": folder or settings.upload_folder,
            "timestamp": str(int(time.time())),
        }
        data = {
            **params,
            "api_key": settings.cloudinary_api_key,
            "signature": sign_params(params, settings.cloudinary_api_secret),
        }
        url = f"{CLOUDINARY_API_URL}/{settings.cloudinary_cloud_name}/image/upload"

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(url, data=data, files={"file": (filename, content, content_type)})
        except httpx.HTTPError as e:
            logger.error("Image upload failed", filename=filename, error=str(e))
            raise UpstreamServiceError("cloudinary", "The image CDN is unreachable") from e

        if response.status_code >= 400:
            logger.warning(
                "Image CDN rejected upload",
                filename=filename,
                status_code=response.status_code,
                body=response.text[:500],
            )
            raise UpstreamServiceError("cloudinary", "The image CDN rejected the upload")

        body = response.json()
        logger.info("Image uploaded", public_id=body.get("public_id"), size=len(content))
        return UploadedImage(
            url=body["secure_url"],
            public_id=body["public_id"],
            width=body.get("width"),
            height=body.get("height"),
            bytes=body.get("bytes"),
        )


def get_upload_service() -> UploadService:
    return UploadService()
