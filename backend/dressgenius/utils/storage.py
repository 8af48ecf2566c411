"""
File storage backends: local disk (served under /storage) and Cloudinary.
"""
import logging
import os
import uuid
from pathlib import Path
from typing import Optional

from dressgenius.config import settings

logger = logging.getLogger(__name__)

EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


def build_filename(mime_type: Optional[str], original_name: Optional[str] = None) -> str:
    """Random file name keeping a sensible extension"""
    ext = EXTENSIONS.get((mime_type or "").lower())
    if not ext and original_name and "." in original_name:
        ext = original_name.rsplit(".", 1)[-1].lower()
    return f"{uuid.uuid4().hex}.{ext or 'bin'}"


class Storage:
    """Store-by-path, public URL, delete"""

    def store(self, data: bytes, directory: str, mime_type: Optional[str] = None, original_name: Optional[str] = None) -> str:
        raise NotImplementedError

    def url(self, path: Optional[str]) -> Optional[str]:
        raise NotImplementedError

    def delete(self, path: str) -> bool:
        raise NotImplementedError

    def exists(self, path: str) -> bool:
        raise NotImplementedError


class LocalStorage(Storage):
    """Writes files under a root directory; URLs point at the /storage static mount"""

    def __init__(self, root: str, base_url: str):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def _full_path(self, path: str) -> Path:
        full = (self.root / path).resolve()
        if self.root.resolve() not in full.parents:
            raise ValueError(f"Path escapes storage root: {path}")
        return full

    def store(self, data: bytes, directory: str, mime_type: Optional[str] = None, original_name: Optional[str] = None) -> str:
        path = f"{directory.strip('/')}/{build_filename(mime_type, original_name)}"
        full = self._full_path(path)
        full.parent.mkdir(parents=True, exist_ok=True)
        full.write_bytes(data)
        logger.debug(f"Stored {len(data)} bytes at {path}")
        return path

    def url(self, path: Optional[str]) -> Optional[str]:
        if not path:
            return None
        return f"{self.base_url}/storage/{path}"

    def delete(self, path: str) -> bool:
        try:
            full = self._full_path(path)
        except ValueError:
            return False
        if full.exists():
            os.remove(full)
            return True
        return False

    def exists(self, path: str) -> bool:
        try:
            return self._full_path(path).is_file()
        except ValueError:
            return False


def build_storage() -> Storage:
    """Pick the configured backend"""
    if settings.USE_CLOUDINARY and settings.cloudinary_configured:
        from dressgenius.utils.cloudinary_helper import CloudinaryStorage
        return CloudinaryStorage(folder=settings.CLOUDINARY_FOLDER)
    if settings.USE_CLOUDINARY:
        logger.warning("USE_CLOUDINARY is set but Cloudinary is not configured; using local storage")
    return LocalStorage(settings.MEDIA_ROOT, settings.APP_URL)
