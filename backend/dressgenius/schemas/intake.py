"""
Outfit context supplied alongside an uploaded photo.
"""
from pydantic import BaseModel, Field
from typing import Optional


class Intake(BaseModel):
    """Occasion/weather/... the user wants the outfit judged against"""
    occasion: Optional[str] = Field(None, max_length=120)
    weather: Optional[str] = Field(None, max_length=120)
    dress_code: Optional[str] = Field(None, max_length=120)
    budget: Optional[str] = Field(None, max_length=120)
    desired_vibe: Optional[str] = Field(None, max_length=120)
    custom_note: Optional[str] = Field(None, max_length=64)

    def to_dict(self) -> dict:
        """Only the fields the user actually filled in"""
        return {k: v for k, v in self.model_dump().items() if v is not None and str(v).strip() != ""}
