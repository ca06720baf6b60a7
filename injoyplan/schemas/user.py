"""User Pydantic schemas. None of them carry credential material."""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime
from injoyplan.db.models import UserRole, UserType


class ProfilePublic(BaseModel):
    """Public profile fields."""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar: Optional[str] = None
    bio: Optional[str] = None
    
    class Config:
        from_attributes = True


class ProfileDetail(ProfilePublic):
    """Profile as seen by its owner."""
    phone: Optional[str] = None
    city: Optional[str] = None
    gender: Optional[str] = None
    birth_date: Optional[date] = None


class ProfileUpdate(BaseModel):
    """Schema for editing the caller's profile. Only sent fields change."""
    first_name: Optional[str] = Field(None, max_length=50)
    last_name: Optional[str] = Field(None, max_length=50)
    bio: Optional[str] = Field(None, max_length=500)
    avatar: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    gender: Optional[str] = Field(None, max_length=10)
    birth_date: Optional[date] = None


class UserPublic(BaseModel):
    """Schema for a user as seen by other users (organizer, commenter, follower)."""
    id: str
    email: str
    user_type: UserType
    is_verified: bool
    profile: Optional[ProfilePublic] = None
    
    class Config:
        from_attributes = True


class AdminUser(UserPublic):
    """Schema for the admin users listing."""
    role: UserRole
    created_at: datetime


class AdminUserList(BaseModel):
    """Paged admin users listing."""
    users: List[AdminUser]
    total: int
    page: int
    total_pages: int = Field(..., serialization_alias="totalPages")


class RoleUpdate(BaseModel):
    """Schema for changing a user's role."""
    role: UserRole


class FollowResult(BaseModel):
    """Follow state after a follow/unfollow call."""
    following: bool


class UserCounts(BaseModel):
    """Follow graph and event totals for a user."""
    followers: int
    following: int
    events: int


class UserProfile(UserPublic):
    """A user's page: public view plus counts and the caller's follow state."""
    created_at: datetime
    counts: UserCounts
    is_following: bool = False


class OwnProfile(UserProfile):
    """The caller's own page, with private profile fields."""
    role: UserRole
    profile: Optional[ProfileDetail] = None


class UserPage(BaseModel):
    """Paged user listing (followers, following)."""
    results: List[UserPublic]
    total: int
    page: int
    total_pages: int = Field(..., serialization_alias="totalPages")
