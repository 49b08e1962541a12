"""
Storage service - report photo uploads.

Photos arrive as base64 data URIs, are stored privately in the Firebase
Storage bucket and exposed through a 24 hour signed URL. In mock mode the
bytes are written under MOCK_UPLOAD_DIR and served from /uploads.
"""

import base64
import binascii
import logging
import os
import random
import re
import string
import time
from datetime import timedelta
from typing import Tuple

from geocity.config.firebase import get_bucket
from geocity.core.settings import settings

logger = logging.getLogger(__name__)

SIGNED_URL_TTL = timedelta(hours=24)
CACHE_CONTROL = "public, max-age=31536000"
MOCK_UPLOAD_URL_PREFIX = "/uploads"

FILE_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/avif": "avif",
    "image/svg+xml": "svg",
}

_DATA_URI_RE = re.compile(r"^data:(image/[\w.+-]+);base64,(.*)$", re.DOTALL)


def parse_data_uri(data_uri: str) -> Tuple[str, bytes]:
    """Decode an image data URI into (mime_type, bytes). Raises ValueError."""
    match = _DATA_URI_RE.match(data_uri or "")
    if not match:
        raise ValueError("Photo must be a base64 encoded image data URI")
    mime_type, payload = match.groups()
    try:
        content = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Photo is not valid base64: {e}")
    if not content:
        raise ValueError("Photo is empty")
    return mime_type, content


def get_file_extension(mime_type: str) -> str:
    return FILE_EXTENSIONS.get((mime_type or "").lower(), "jpg")


def generate_unique_filename(original_name: str, mime_type: str) -> str:
    """`{clean_name}_{millis}_{random}.{ext}`, clean_name capped at 50 chars."""
    clean_name = re.sub(r"[^a-zA-Z0-9]", "_", original_name or "")[:50]
    millis = int(time.time() * 1000)
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=13))
    return f"{clean_name}_{millis}_{suffix}.{get_file_extension(mime_type)}"


def _save_mock_upload(filename: str, content: bytes) -> str:
    os.makedirs(settings.MOCK_UPLOAD_DIR, exist_ok=True)
    path = os.path.join(settings.MOCK_UPLOAD_DIR, filename)
    with open(path, "wb") as f:
        f.write(content)
    logger.info(f"✅ Photo stored locally (mock mode): {path}")
    return f"{MOCK_UPLOAD_URL_PREFIX}/{filename}"


def upload_report_photo(data_uri: str, filename: str, mime_type: str) -> str:
    """
    Upload a report photo and return a URL the client can display.

    Raises:
        ValueError: photo is not a decodable image data URI
        RuntimeError: storage is not configured or the upload failed
    """
    _, content = parse_data_uri(data_uri)
    logger.info(f"Uploading photo {filename} ({len(content)} bytes, {mime_type})")

    if settings.USE_MOCK_DB:
        return _save_mock_upload(filename, content)

    try:
        bucket = get_bucket()
        blob = bucket.blob(filename)
        blob.cache_control = CACHE_CONTROL
        blob.upload_from_string(content, content_type=mime_type, predefined_acl="private")
        signed_url = blob.generate_signed_url(expiration=SIGNED_URL_TTL, method="GET", version="v4")
        logger.info(f"✅ Photo uploaded to bucket {bucket.name}: {filename}")
        return signed_url
    except RuntimeError:
        raise
    except Exception as e:
        logger.error(f"Photo upload failed for {filename}: {e}", exc_info=True)
        message = str(e)
        if "Forbidden" in message or "403" in message:
            raise RuntimeError("Permission error: service account cannot write to the storage bucket")
        if "Not Found" in message or "404" in message:
            raise RuntimeError("Storage bucket not found or not accessible")
        raise RuntimeError(f"Cloud storage error: {message}")
