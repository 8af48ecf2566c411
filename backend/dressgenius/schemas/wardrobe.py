"""
Wardrobe item schemas.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class WardrobeItemCreate(BaseModel):
    """Save a detected item, or add one by hand"""
    detected_item_id: Optional[int] = Field(None, description="Detected item to copy into the closet")
    label: Optional[str] = Field(None, max_length=255, description="Required when detected_item_id is absent")
    category: Optional[str] = Field(None, max_length=64)


class WardrobeItemUpdate(BaseModel):
    """Rename a wardrobe item"""
    label: Optional[str] = None

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "label": "navy chinos"
        }
    })
