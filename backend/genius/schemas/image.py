"""
Pydantic schemas for image endpoints.
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal


class ImageGenerateRequest(BaseModel):
    """Schema for an image generation request."""
    prompt: str = Field(..., min_length=1, description="What to draw")
    style: str = Field("realistic", description="Visual style, e.g. realistic, cartoon, sketch")


class ImageResponse(BaseModel):
    """Schema for a generated image."""
    id: str
    prompt: str
    style: Optional[str] = None
    image_url: str
    model: str
    cost: Optional[Decimal] = None
    created_at: datetime

    class Config:
        from_attributes = True
