"""
Wardrobe items keyed by a canonical (label, category) pair per user.
"""
import re
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from dressgenius.core.exceptions import NotFoundError
from dressgenius.models import WardrobeItem

_WHITESPACE_RE = re.compile(r"\s+")


def canonical_key(label: str, category: Optional[str] = None) -> str:
    """lowercase(trim(label)) + "|" + lowercase(trim(category)), inner whitespace collapsed"""
    label = _WHITESPACE_RE.sub(" ", (label or "").strip().lower())
    category = _WHITESPACE_RE.sub(" ", (category or "").strip().lower())
    return f"{label}|{category}"


def list_items(db: Session, user_id: int, limit: int = 200) -> List[WardrobeItem]:
    return (
        db.query(WardrobeItem)
        .filter(WardrobeItem.user_id == user_id)
        .order_by(WardrobeItem.id.desc())
        .limit(limit)
        .all()
    )


def find_item(db: Session, item_id: int, user_id: int) -> WardrobeItem:
    item = db.query(WardrobeItem).filter(WardrobeItem.id == item_id, WardrobeItem.user_id == user_id).first()
    if item is None:
        raise NotFoundError("Wardrobe item not found.")
    return item


def find_by_key(db: Session, user_id: int, key: str, exclude_id: Optional[int] = None) -> Optional[WardrobeItem]:
    query = db.query(WardrobeItem).filter(WardrobeItem.user_id == user_id, WardrobeItem.canonical_key == key)
    if exclude_id is not None:
        query = query.filter(WardrobeItem.id != exclude_id)
    return query.first()


def first_or_create(
    db: Session,
    user_id: int,
    label: str,
    category: Optional[str] = None,
    colors: Optional[list] = None,
    cover_image_path: Optional[str] = None,
) -> Tuple[WardrobeItem, bool]:
    """Return the user's item for this key, creating it if absent. Second value is True when created."""
    key = canonical_key(label, category)
    existing = find_by_key(db, user_id, key)
    if existing is not None:
        return existing, False

    item = WardrobeItem(
        user_id=user_id,
        canonical_key=key,
        label=label.strip(),
        category=category,
        colors=colors,
        cover_image_path=cover_image_path,
    )
    db.add(item)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with an identical insert
        db.rollback()
        return find_by_key(db, user_id, key), False
    db.refresh(item)
    return item, True
