import logging

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from dressgenius.core.exceptions import ValidationError
from dressgenius.database import get_db
from dressgenius.dependencies import get_storage
from dressgenius.models import User
from dressgenius.repositories import users as user_repo
from dressgenius.schemas import MessageResponse, PasswordUpdate, ProfileUpdate, UserEnvelope
from dressgenius.services.serializers import serialize_user
from dressgenius.services.uploads import SCAN_EXTENSIONS, read_image
from dressgenius.utils.auth import get_current_user, get_password_hash, verify_password
from dressgenius.utils.storage import Storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.patch("", response_model=UserEnvelope)
def update_profile(
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    # Update only provided fields
    if payload.name is not None:
        name = payload.name.strip()
        if not name:
            raise ValidationError("The name field is required.", field="name")
        current_user.name = name
    if payload.email is not None:
        if user_repo.email_taken(db, payload.email, exclude_user_id=current_user.id):
            raise ValidationError("The email has already been taken.", field="email")
        current_user.email = payload.email.lower()

    db.commit()
    db.refresh(current_user)
    return {"user": serialize_user(current_user, storage)}


@router.patch("/password", response_model=MessageResponse)
def update_password(
    payload: PasswordUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not verify_password(payload.current_password, current_user.hashed_password):
        raise ValidationError("Current password is incorrect.", field="current_password")

    current_user.hashed_password = get_password_hash(payload.password)
    db.commit()
    return {"message": "Password updated."}


@router.post("/photo", response_model=UserEnvelope)
def upload_photo(
    photo: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Replace the profile photo; the previous file is deleted"""
    data, mime_type = read_image(photo, SCAN_EXTENSIONS, field="photo")
    old_path = current_user.profile_photo_path

    current_user.profile_photo_path = storage.store(data, f"profile-photos/{current_user.id}", mime_type, photo.filename)
    db.commit()
    db.refresh(current_user)

    if old_path and not storage.delete(old_path):
        logger.warning(f"Old profile photo was not deleted: {old_path}")

    return {"user": serialize_user(current_user, storage)}
