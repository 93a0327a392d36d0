from __future__ import annotations

import base64
import binascii
import logging
import re
from datetime import datetime
from pathlib import Path
from uuid import uuid4

from postboard.core.settings import settings
from postboard.services.errors import ValidationError


logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def _uploads_dir() -> Path:
    return Path(settings.uploads_dir)


def _safe_filename(filename: str) -> str:
    name = Path(str(filename or "").replace("\\", "/")).name
    name = _UNSAFE_CHARS.sub("_", name).strip("._")
    if not name:
        raise ValidationError("image_filename is invalid", field="image_filename")
    return name


def save_image(image_data: str, image_filename: str, now: datetime) -> str:
    """Decode a base64 image payload into the uploads dir and return its public path."""
    try:
        content = base64.b64decode(str(image_data or ""), validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("image_data must be base64 encoded", field="image_data")
    if not content:
        raise ValidationError("image_data is empty", field="image_data")

    stored_name = f"{int(now.timestamp() * 1000)}-{uuid4().hex[:8]}-{_safe_filename(image_filename)}"
    target_dir = _uploads_dir()
    target_dir.mkdir(parents=True, exist_ok=True)
    (target_dir / stored_name).write_bytes(content)
    logger.info("storage.save name=%s bytes=%s", stored_name, len(content))
    return f"{settings.uploads_url_prefix.rstrip('/')}/{stored_name}"


def delete_image(image_path: str | None) -> None:
    if not image_path:
        return
    name = Path(image_path).name
    if not name:
        return
    target = _uploads_dir() / name
    try:
        target.unlink()
    except FileNotFoundError:
        return
    logger.info("storage.delete name=%s", name)
