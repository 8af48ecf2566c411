"""
Cloudinary storage backend
"""
import logging
from typing import Any, Dict, Optional

import cloudinary
import cloudinary.api
import cloudinary.exceptions
import cloudinary.uploader
from cloudinary import CloudinaryImage

from dressgenius.config import settings
from dressgenius.utils.storage import Storage

logger = logging.getLogger(__name__)

"""Initialize Cloudinary with configuration from settings"""
def initialize_cloudinary():
    if settings.cloudinary_configured:
        cloudinary.config(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
            secure=True
        )
        return True
    return False


def get_cloudinary_status() -> Dict[str, Any]:
    """Get Cloudinary configuration status"""
    return {
        "enabled": settings.USE_CLOUDINARY,
        "configured": settings.cloudinary_configured,
        "cloud_name": settings.CLOUDINARY_CLOUD_NAME if settings.cloudinary_configured else None,
        "folder": settings.CLOUDINARY_FOLDER
    }


class CloudinaryStorage(Storage):
    """Paths are Cloudinary public IDs under the configured folder"""

    def __init__(self, folder: str):
        self.folder = folder.strip("/")
        initialize_cloudinary()

    def store(self, data: bytes, directory: str, mime_type: Optional[str] = None, original_name: Optional[str] = None) -> str:
        upload_options: Dict[str, Any] = {
            "folder": f"{self.folder}/{directory.strip('/')}",
            "resource_type": "image",
            "transformation": [
                {"quality": "auto:good"},
                {"fetch_format": "auto"}
            ]
        }
        try:
            result = cloudinary.uploader.upload(data, **upload_options)
        except cloudinary.exceptions.Error as e:
            raise RuntimeError(f"Cloudinary upload failed: {str(e)}") from e
        return result["public_id"]

    def url(self, path: Optional[str]) -> Optional[str]:
        if not path:
            return None
        return CloudinaryImage(path).build_url(secure=True)

    def delete(self, path: str) -> bool:
        try:
            result = cloudinary.uploader.destroy(path)
            return result.get("result") == "ok"
        except Exception as e:
            logger.warning(f"Failed to delete image from Cloudinary: {e}")
            return False

    def exists(self, path: str) -> bool:
        try:
            cloudinary.api.resource(path)
            return True
        except cloudinary.exceptions.NotFound:
            return False
