"""User profile and follow graph API endpoints."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional
from injoyplan.db.session import get_db
from injoyplan.db.models import User
from injoyplan.schemas.user import (
    FollowResult,
    OwnProfile,
    ProfileDetail,
    ProfileUpdate,
    UserPage,
    UserProfile,
)
from injoyplan.services.social import SocialService
from injoyplan.services.users import UserService
from injoyplan.core.security import get_current_user_id, require_user

router = APIRouter()
social_service = SocialService()
user_service = UserService()


@router.get("/users/me", response_model=OwnProfile)
async def get_my_profile(
    user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    """The caller's own page."""
    return user_service.get_own_profile(db, user)


@router.patch("/users/me/profile", response_model=ProfileDetail)
async def update_my_profile(
    payload: ProfileUpdate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    """Edit the caller's profile."""
    return user_service.update_profile(db, user, payload)


@router.get("/users/{user_id}", response_model=UserProfile)
async def get_user_profile(
    user_id: str,
    viewer_id: Optional[str] = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Public page of a user, with counts and whether the caller follows them."""
    return user_service.get_profile(db, user_id, viewer_id=viewer_id)


@router.post("/users/{user_id}/follow", response_model=FollowResult)
async def follow_user(
    user_id: str,
    user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    """Follow a user."""
    social_service.follow(db, user.id, user_id)
    return FollowResult(following=True)


@router.delete("/users/{user_id}/follow", response_model=FollowResult)
async def unfollow_user(
    user_id: str,
    user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    """Stop following a user."""
    social_service.unfollow(db, user.id, user_id)
    return FollowResult(following=False)


@router.get("/users/{user_id}/followers", response_model=UserPage)
async def list_followers(
    user_id: str,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Users following a user, newest first."""
    return social_service.followers(db, user_id, page=page, limit=limit)


@router.get("/users/{user_id}/following", response_model=UserPage)
async def list_following(
    user_id: str,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Users a user follows, newest first."""
    return social_service.following(db, user_id, page=page, limit=limit)
