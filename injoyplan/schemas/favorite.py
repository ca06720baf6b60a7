"""Favorite Pydantic schemas."""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from injoyplan.schemas.event import Event, EventDate


class FavoriteCreate(BaseModel):
    """Schema for adding a favorite; omit the date to favorite the whole event."""
    event_id: str = Field(..., min_length=1)
    event_date_id: Optional[str] = None


class Favorite(BaseModel):
    """Schema for favorite response."""
    id: str
    user_id: str
    event_id: str
    event_date_id: Optional[str]
    created_at: datetime
    event: Event
    event_date: Optional[EventDate] = None
    
    class Config:
        from_attributes = True


class FavoritePage(BaseModel):
    """Paged favorites listing."""
    results: List[Favorite]
    total: int
    page: int
    total_pages: int = Field(..., serialization_alias="totalPages")
