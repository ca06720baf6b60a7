"""Public event search request schema."""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import date
from injoyplan.schemas.event import TIME_PATTERN


class EventSearchFilters(BaseModel):
    """Filter request for the public event search. Built per call, never stored."""
    category: Optional[str] = Field(None, description="Category label, case-insensitive")
    department: Optional[str] = None
    province: Optional[str] = None
    district: Optional[str] = None
    query: Optional[str] = Field(None, description="Free text matched against title or venue name")
    date_from: Optional[date] = Field(None, description="Lower date bound; defaults to today")
    date_to: Optional[date] = None
    free_only: bool = False
    in_progress: bool = False
    time_from: Optional[str] = Field(None, pattern=TIME_PATTERN)
    time_to: Optional[str] = Field(None, pattern=TIME_PATTERN)
    exclude_featured: bool = False
    expand_dates: bool = True
    page: Optional[int] = None
    limit: Optional[int] = None
