from __future__ import annotations

from pydantic import BaseModel, Field


class MenuItem(BaseModel):
    """Response model for menu items."""
    id: str = Field(description="Store-assigned identifier")
    name: str = Field(description="Display name")
    price: float = Field(description="Unit price")
    image: str = Field(description="Hosted image URL")
    is_available: bool = Field(default=False, description="Whether the item can currently be ordered")
