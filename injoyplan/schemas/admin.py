"""Admin Pydantic schemas."""
from pydantic import BaseModel
from typing import List


class DashboardStats(BaseModel):
    """Platform counters for the admin dashboard."""
    total_users: int
    total_events: int
    active_banners: int
    verified_users: int


class ImportResult(BaseModel):
    """Outcome of a bulk event import."""
    count: int
    errors: List[str]
    message: str


class BulkResult(BaseModel):
    """Outcome of a bulk maintenance operation."""
    count: int
    message: str
