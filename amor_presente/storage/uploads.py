from __future__ import annotations

import mimetypes
import os
from uuid import uuid4

import structlog

from amor_presente.config import get_settings
from amor_presente.integrations import supabase
from amor_presente.kernel.errors import ValidationError

logger = structlog.get_logger()

_EXTENSION_OVERRIDES = {"image/jpeg": "jpg"}


def object_extension(filename: str | None, content_type: str) -> str:
    """Extension from the filename, falling back to the content type."""
    ext = os.path.splitext(filename or "")[1].lstrip(".").lower()
    if ext and ext.isalnum():
        return ext
    if content_type in _EXTENSION_OVERRIDES:
        return _EXTENSION_OVERRIDES[content_type]
    guessed = mimetypes.guess_extension(content_type) or ""
    return guessed.lstrip(".") or "bin"


async def upload_image(owner_id: str, filename: str | None, content_type: str | None, data: bytes) -> dict[str, str]:
    """Store one image under `{owner_id}/` and return its path and public URL."""
    content_type = (content_type or "").lower()
    if not content_type.startswith("image/"):
        raise ValidationError(message="Apenas imagens são permitidas", code="upload.invalid_type")
    if not data:
        raise ValidationError(message="Arquivo vazio", code="upload.empty")

    max_bytes = get_settings().upload_max_bytes
    if len(data) > max_bytes:
        raise ValidationError(
            message="Imagem muito grande",
            code="upload.too_large",
            status_code=413,
            meta={"max_bytes": max_bytes},
        )

    object_path = f"{owner_id}/{uuid4()}.{object_extension(filename, content_type)}"
    await supabase.storage_upload(object_path, data, content_type)
    logger.info("Image uploaded", owner_id=owner_id, path=object_path, size=len(data))
    return {"path": object_path, "url": supabase.public_object_url(object_path)}
