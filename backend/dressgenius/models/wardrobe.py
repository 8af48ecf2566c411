"""
Wardrobe item model.
"""
from sqlalchemy import Column, Integer, String, JSON, ForeignKey, UniqueConstraint

from .base import Base, TimestampMixin


class WardrobeItem(TimestampMixin, Base):
    """Garment saved to a user's closet, unique per canonical key"""
    __tablename__ = "wardrobe_items"
    __table_args__ = (UniqueConstraint("user_id", "canonical_key", name="uq_wardrobe_user_key"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    canonical_key = Column(String(255), nullable=False)
    label = Column(String(255), nullable=False)
    category = Column(String(64), nullable=True)
    colors = Column(JSON, nullable=True)
    cover_image_path = Column(String(512), nullable=True)
    meta = Column(JSON, nullable=True)
