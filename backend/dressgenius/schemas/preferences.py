"""
AI preference slider schemas.
"""
from pydantic import BaseModel, Field
from typing import Any, Dict, Optional


class PreferencesUpdate(BaseModel):
    preferences: Dict[str, Any] = Field(..., description="Slider values keyed by name, 0-100")


class PreferencesResponse(BaseModel):
    preferences: Optional[Dict[str, int]] = None
