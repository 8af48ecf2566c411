"""
Validation of multipart uploads: image files and the JSON-encoded intake field.
"""
import json
from typing import Optional, Tuple

from fastapi import UploadFile
from pydantic import ValidationError as PydanticValidationError

from dressgenius.config import settings
from dressgenius.core.exceptions import ValidationError
from dressgenius.schemas import Intake

IMAGE_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
}
SCAN_EXTENSIONS = ("jpg", "jpeg", "png")
CHAT_EXTENSIONS = ("jpg", "jpeg", "png", "webp")


def read_image(upload: UploadFile, extensions=SCAN_EXTENSIONS, field: str = "image") -> Tuple[bytes, str]:
    """Return (bytes, mime type) of an uploaded image, rejecting wrong types and oversize files."""
    filename = (upload.filename or "").lower()
    ext = filename.rsplit(".", 1)[-1] if "." in filename else ""
    allowed_mimes = {IMAGE_TYPES[e] for e in extensions}
    content_type = (upload.content_type or "").lower()

    if ext not in extensions and content_type not in allowed_mimes:
        raise ValidationError(f"The {field} must be a file of type: {', '.join(extensions)}.", field=field)

    data = upload.file.read()
    if not data:
        raise ValidationError(f"The {field} field is required.", field=field)
    if len(data) > settings.MAX_IMAGE_SIZE:
        raise ValidationError(
            f"The {field} may not be greater than {settings.MAX_IMAGE_SIZE // 1024} kilobytes.",
            field=field,
        )

    mime_type = content_type if content_type in allowed_mimes else IMAGE_TYPES.get(ext, "image/jpeg")
    return data, mime_type


def parse_intake(raw: Optional[str]) -> dict:
    """Decode the optional ``intake`` form field (a JSON object) into its filled-in fields."""
    if raw is None or not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        raise ValidationError("The intake must be a JSON object.", field="intake")
    if not isinstance(data, dict):
        raise ValidationError("The intake must be a JSON object.", field="intake")

    try:
        intake = Intake(**data)
    except PydanticValidationError as e:
        err = e.errors()[0]
        loc = ".".join(str(p) for p in err.get("loc", ()))
        raise ValidationError(err.get("msg", "Invalid intake."), field=f"intake.{loc}" if loc else "intake")
    return intake.to_dict()
