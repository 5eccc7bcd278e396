"""Object storage for uploaded files: S3 (boto3) or a local directory."""

import logging
import os
import re
import time
from pathlib import Path

import boto3

from app.config import settings

logger = logging.getLogger(__name__)

ALLOWED_RESUME_MIME_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}
ALLOWED_RESUME_EXTENSIONS = {".pdf", ".doc", ".docx"}
AVATAR_PREFIX = "avatars"


class StorageError(Exception):
    pass


def validate_resume_file(filename: str | None, content_type: str | None, size: int) -> str | None:
    """Returns an error message, or None when the file is acceptable."""
    max_bytes = settings.max_resume_upload_mb * 1024 * 1024
    if size <= 0:
        return "File is empty"
    if size > max_bytes:
        return f"File size must be less than {settings.max_resume_upload_mb}MB"
    if content_type not in ALLOWED_RESUME_MIME_TYPES:
        return "Invalid file type. Only PDF and Word documents are allowed"
    ext = os.path.splitext(filename or "")[1].lower()
    if ext not in ALLOWED_RESUME_EXTENSIONS:
        return "Invalid file extension. Only .pdf, .doc and .docx are allowed"
    return None


def build_resume_path(owner_id: str, filename: str) -> str:
    safe = re.sub(r"[^a-zA-Z0-9._-]", "_", filename or "resume")
    return f"{owner_id}/{int(time.time() * 1000)}-{safe}"


def _s3_client():
    return boto3.client("s3", region_name=settings.aws_region)


def public_url(path: str) -> str:
    base = settings.storage_public_base_url.rstrip("/")
    if base:
        return f"{base}/{path}"
    if settings.storage_backend == "s3":
        return f"https://{settings.storage_bucket}.s3.{settings.aws_region}.amazonaws.com/{path}"
    return f"/uploads/{path}"


def validate_avatar_file(content_type: str | None, size: int) -> str | None:
    """Returns an error message, or None when the image is acceptable."""
    if size <= 0:
        return "File is empty"
    if not (content_type or "").startswith("image/"):
        return "File must be an image"
    if size > settings.max_avatar_upload_mb * 1024 * 1024:
        return f"File size must be less than {settings.max_avatar_upload_mb}MB"
    return None


def build_avatar_path(profile_id: str, filename: str | None) -> str:
    ext = os.path.splitext(filename or "")[1].lstrip(".").lower()
    ext = re.sub(r"[^a-z0-9]", "", ext) or "img"
    return f"{AVATAR_PREFIX}/{profile_id}/avatar-{int(time.time() * 1000)}.{ext}"


def path_from_url(url: str | None) -> str | None:
    """Storage path for a URL this module issued; None for external URLs."""
    prefix = public_url("")
    if not url or not url.startswith(prefix):
        return None
    return url[len(prefix):] or None


def upload_file(path: str, data: bytes, content_type: str) -> str:
    """Store bytes under path and return the public URL."""
    try:
        if settings.storage_backend == "s3":
            _s3_client().put_object(
                Bucket=settings.storage_bucket,
                Key=path,
                Body=data,
                ContentType=content_type,
            )
        else:
            target = Path(settings.local_storage_dir) / path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
    except Exception as e:
        logger.exception("Upload failed for path=%s: %s", path, e)
        raise StorageError("Failed to upload file") from e
    logger.info("Stored file path=%s size=%d backend=%s", path, len(data), settings.storage_backend)
    return public_url(path)


def delete_file(path: str) -> bool:
    """Best-effort delete. Returns False instead of raising."""
    try:
        if settings.storage_backend == "s3":
            _s3_client().delete_object(Bucket=settings.storage_bucket, Key=path)
        else:
            Path(settings.local_storage_dir, path).unlink(missing_ok=True)
        return True
    except Exception as e:
        logger.warning("Storage delete failed for path=%s: %s", path, e)
        return False
