from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from dressgenius.core.exceptions import ConflictError, NotFoundError, ValidationError
from dressgenius.database import get_db
from dressgenius.dependencies import get_storage
from dressgenius.models import User
from dressgenius.repositories import outfits as outfit_repo
from dressgenius.repositories import wardrobe as wardrobe_repo
from dressgenius.schemas import WardrobeItemCreate, WardrobeItemUpdate
from dressgenius.services.serializers import serialize_wardrobe_item
from dressgenius.utils.auth import get_current_user
from dressgenius.utils.storage import Storage

router = APIRouter(prefix="/wardrobe-items", tags=["Wardrobe"])

MAX_LABEL_LENGTH = 64


@router.get("")
def list_items(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    items = wardrobe_repo.list_items(db, current_user.id)
    return {"items": [serialize_wardrobe_item(i, storage) for i in items]}


@router.post("")
def create_item(
    payload: WardrobeItemCreate,
    response: Response,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """
    Save a garment to the closet.

    With ``detected_item_id`` the detected garment is copied; otherwise
    ``label`` (and optional ``category``) is used. Saving something already
    in the closet returns the existing item with ``created: false``.
    """
    if payload.detected_item_id:
        detected = outfit_repo.find_detected_item(db, payload.detected_item_id, current_user.id)
        if detected is None:
            raise NotFoundError("Detected item not found.")
        item, created = wardrobe_repo.first_or_create(
            db,
            current_user.id,
            label=detected.label,
            category=detected.category or None,
            colors=detected.colors if isinstance(detected.colors, list) else None,
            cover_image_path=(detected.meta or {}).get("cover_image_path") or None,
        )
    else:
        label = payload.label or ""
        if not label.strip():
            raise ValidationError("label is required.", field="label")
        item, created = wardrobe_repo.first_or_create(db, current_user.id, label=label, category=payload.category)

    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return {"created": created, "item": serialize_wardrobe_item(item, storage)}


@router.patch("/{item_id}")
def update_item(
    item_id: int,
    payload: WardrobeItemUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Rename an item; the category is kept"""
    item = wardrobe_repo.find_item(db, item_id, current_user.id)

    label = (payload.label or "").strip()
    if not label:
        raise ValidationError("label is required.", field="label")
    if len(label) > MAX_LABEL_LENGTH:
        raise ValidationError(f"label must be at most {MAX_LABEL_LENGTH} characters.", field="label")

    key = wardrobe_repo.canonical_key(label, item.category)
    if wardrobe_repo.find_by_key(db, current_user.id, key, exclude_id=item.id) is not None:
        raise ConflictError("An item with this name already exists in your closet.")

    item.label = label
    item.canonical_key = key
    db.commit()
    db.refresh(item)
    return {"item": serialize_wardrobe_item(item, storage)}


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_item(
    item_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    item = wardrobe_repo.find_item(db, item_id, current_user.id)
    db.delete(item)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
