"""Event Pydantic schemas."""
from pydantic import BaseModel, Field
from typing import List, Optional, Union
from datetime import datetime, date
from injoyplan.schemas.user import UserPublic

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class TicketUrl(BaseModel):
    """Named ticket sales link."""
    name: str
    url: str


class EventDateCreate(BaseModel):
    """Schema for one scheduled date of an event."""
    date: date
    start_time: Optional[str] = Field(None, pattern=TIME_PATTERN, description="Start time (HH:MM)")
    end_time: Optional[str] = Field(None, pattern=TIME_PATTERN, description="End time (HH:MM)")
    price: Optional[float] = Field(None, ge=0, description="Price; empty or 0 means free")
    capacity: Optional[int] = Field(None, ge=0)


class EventCreate(BaseModel):
    """Schema for creating an event."""
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    image_url: Optional[str] = None
    banner_url: Optional[str] = None
    website_url: Optional[str] = Field(None, description="Ticket sales or source link")
    ticket_urls: Optional[List[TicketUrl]] = None
    is_featured: bool = False
    is_banner: bool = False
    dates: List[EventDateCreate] = Field(default_factory=list)
    
    # Location
    location_name: Optional[str] = None
    department: Optional[str] = None
    province: Optional[str] = None
    district: Optional[str] = None
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class EventUpdate(BaseModel):
    """Schema for updating an event. A non-empty `dates` list replaces every date."""
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    image_url: Optional[str] = None
    banner_url: Optional[str] = None
    website_url: Optional[str] = None
    ticket_urls: Optional[List[TicketUrl]] = None
    is_featured: Optional[bool] = None
    is_banner: Optional[bool] = None
    dates: Optional[List[EventDateCreate]] = None
    location_name: Optional[str] = None
    department: Optional[str] = None
    province: Optional[str] = None
    district: Optional[str] = None
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class EventDate(BaseModel):
    """Schema for event date response."""
    id: str
    event_id: str
    date: date
    start_time: Optional[str]
    end_time: Optional[str]
    price: Optional[float]
    capacity: Optional[int]
    
    class Config:
        from_attributes = True


class Location(BaseModel):
    """Schema for location response."""
    id: str
    name: Optional[str]
    department: str
    province: str
    district: str
    address: Optional[str]
    latitude: Optional[float]
    longitude: Optional[float]
    
    class Config:
        from_attributes = True


class Event(BaseModel):
    """Schema for event response; the organizer is serialized without credentials."""
    id: str
    title: str
    description: str
    category: str
    image_url: Optional[str]
    banner_url: Optional[str]
    website_url: Optional[str]
    ticket_urls: Optional[List[TicketUrl]] = None
    is_active: bool
    is_featured: bool
    is_banner: bool
    user_id: str
    user: Optional[UserPublic] = None
    location: Optional[Location] = None
    dates: List[EventDate] = Field(default_factory=list)
    favorites_count: int = 0
    comments_count: int = 0
    created_at: datetime

    class Config:
        from_attributes = True


class EventResult(Event):
    """Event listing row: `favorite` is False or the caller's favorite id."""
    favorite: Union[str, bool] = False


class EventPage(BaseModel):
    """Paged event listing."""
    results: List[EventResult]
    total: int
    page: int
    total_pages: int = Field(..., serialization_alias="totalPages")


class CategoryStats(BaseModel):
    """Active event count for a category."""
    id: str
    name: str
    icon: Optional[str]
    count: int
    is_active: bool


class StatusToggle(BaseModel):
    """Result of toggling an event's activation flag."""
    id: str
    is_active: bool


class Message(BaseModel):
    """Plain message response."""
    message: str
