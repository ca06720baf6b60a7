"""Comment Pydantic schemas."""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from injoyplan.schemas.user import UserPublic


class CommentCreate(BaseModel):
    """Schema for a comment or a reply."""
    content: Optional[str] = None
    parent_id: Optional[str] = None


class CommentUpdate(BaseModel):
    """Schema for editing a comment."""
    content: str = Field(..., min_length=1)


class Comment(BaseModel):
    """Schema for comment response."""
    id: str
    event_id: str
    parent_id: Optional[str]
    content: str
    created_at: datetime
    user: UserPublic
    like_count: int = 0
    reply_count: int = 0
    is_liked: bool = False
    replies: List["Comment"] = Field(default_factory=list)


class CommentPage(BaseModel):
    """Paged top-level comments."""
    results: List[Comment]
    total: int
    page: int
    total_pages: int = Field(..., serialization_alias="totalPages")


class LikeResult(BaseModel):
    """Like state after a toggle."""
    is_liked: bool
