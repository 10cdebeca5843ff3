# backend/services/image_storage.py
"""
Storage for uploaded listing images and profile pictures.

Cloudinary is used when its credentials are configured; otherwise files are
written under the local upload directory and served from ``/uploads``.
"""

import hashlib
import logging
import os
import time
from typing import Dict, Optional

import cloudinary
import cloudinary.uploader
from starlette.concurrency import run_in_threadpool

from config import settings
from services.errors import ValidationError, StorageError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp"}


def _is_valid_image_header(file_content: bytes) -> bool:
    if len(file_content) < 10:
        return False
    if file_content.startswith(b"\xff\xd8\xff"):                  # JPEG
        return True
    if file_content.startswith(b"\x89PNG\r\n\x1a\n"):             # PNG
        return True
    if file_content.startswith((b"GIF87a", b"GIF89a")):          # GIF
        return True
    if file_content.startswith(b"BM"):                            # BMP
        return True
    if file_content[8:12] == b"WEBP":
        return True
    return False


def validate_image_file(file_content: bytes, filename: str) -> None:
    ext = os.path.splitext(filename or "")[1].lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise ValidationError(f"Unsupported file type. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}")
    if len(file_content) > settings.MAX_IMAGE_BYTES:
        raise ValidationError("Image is larger than 10MB.")
    if not _is_valid_image_header(file_content):
        raise ValidationError("File is not a valid image.")


def _unique_name(prefix: str, owner_id: int, filename: str) -> str:
    stem = hashlib.md5(f"{filename}{time.time_ns()}".encode()).hexdigest()[:12]
    return f"{prefix}_{owner_id}_{stem}"


class LocalImageStorage:
    """Writes images to disk; the returned URL is the path under the upload dir."""

    def __init__(self, upload_dir: str = None):
        self.upload_dir = upload_dir or settings.UPLOAD_DIR
        os.makedirs(self.upload_dir, exist_ok=True)

    async def save(self, file_content: bytes, filename: str, prefix: str, owner_id: int) -> Dict[str, str]:
        validate_image_file(file_content, filename)
        ext = os.path.splitext(filename)[1].lower()
        name = _unique_name(prefix, owner_id, filename) + ext
        path = os.path.join(self.upload_dir, name)
        try:
            with open(path, "wb") as fh:
                fh.write(file_content)
        except OSError as e:
            logger.error(f"Failed writing upload {path}: {e}")
            raise StorageError("Could not store the uploaded image.")
        return {"public_id": name, "url": f"/uploads/{name}"}

    async def delete(self, public_id: str) -> bool:
        path = os.path.join(self.upload_dir, os.path.basename(public_id))
        try:
            os.remove(path)
            return True
        except FileNotFoundError:
            return False


class CloudinaryImageStorage:
    """Uploads images to Cloudinary under the ``storage-market`` folder."""

    def __init__(self):
        if not all([settings.CLOUDINARY_CLOUD_NAME, settings.CLOUDINARY_API_KEY, settings.CLOUDINARY_API_SECRET]):
            raise ValueError(
                "Missing Cloudinary settings: CLOUDINARY_CLOUD_NAME, CLOUDINARY_API_KEY, CLOUDINARY_API_SECRET"
            )
        cloudinary.config(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
            secure=True,
        )

    async def save(self, file_content: bytes, filename: str, prefix: str, owner_id: int) -> Dict[str, str]:
        validate_image_file(file_content, filename)
        try:
            result = await run_in_threadpool(
                cloudinary.uploader.upload,
                file_content,
                public_id=_unique_name(prefix, owner_id, filename),
                folder="storage-market",
                resource_type="image",
                transformation=[
                    {"width": 1600, "height": 1200, "crop": "limit"},
                    {"quality": "auto:good"},
                ],
                format="jpg",
            )
        except Exception as e:
            logger.error(f"Cloudinary upload failed: {e}")
            raise StorageError("Could not store the uploaded image.")
        return {"public_id": result["public_id"], "url": result["secure_url"]}

    async def delete(self, public_id: str) -> bool:
        try:
            result = await run_in_threadpool(cloudinary.uploader.destroy, public_id, resource_type="image")
            return result.get("result") == "ok"
        except Exception as e:
            logger.warning(f"Cloudinary delete failed for {public_id}: {e}")
            return False


_storage: Optional[object] = None


def get_image_storage():
    global _storage
    if _storage is None:
        if settings.CLOUDINARY_CLOUD_NAME:
            _storage = CloudinaryImageStorage()
            logger.info(f"Image storage: Cloudinary ({settings.CLOUDINARY_CLOUD_NAME})")
        else:
            _storage = LocalImageStorage()
            logger.info(f"Image storage: local directory {os.path.abspath(settings.UPLOAD_DIR)}")
    return _storage
