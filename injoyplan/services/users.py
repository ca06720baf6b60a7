"""User profile service."""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from injoyplan.core.errors import ErrorCode, NotFoundError
from injoyplan.db.models import Event, Follow, Profile, User
from injoyplan.schemas.user import (
    OwnProfile, ProfileDetail, ProfilePublic, ProfileUpdate, UserCounts, UserProfile,
)

logger = logging.getLogger(__name__)


class UserService:
    """Service for user pages and profile edits."""

    def get_user(self, db: Session, user_id: str) -> User:
        """Load a user or raise NotFoundError."""
        user = db.query(User).filter_by(id=user_id).first()
        if not user:
            raise NotFoundError(ErrorCode.USER_NOT_FOUND, "Usuario no encontrado")
        return user

    def _counts(self, db: Session, user_id: str) -> UserCounts:
        return UserCounts(
            followers=db.query(Follow).filter_by(following_id=user_id).count(),
            following=db.query(Follow).filter_by(follower_id=user_id).count(),
            events=db.query(Event).filter_by(user_id=user_id).count(),
        )

    def get_profile(self, db: Session, user_id: str, viewer_id: Optional[str] = None) -> UserProfile:
        """
        Public page of a user.

        Args:
            db: Database session
            user_id: User to show
            viewer_id: Requesting user, if any; drives `is_following`

        Returns:
            UserProfile with follower, following and event counts
        """
        user = self.get_user(db, user_id)
        is_following = False
        if viewer_id and viewer_id != user_id:
            is_following = (
                db.query(Follow).filter_by(follower_id=viewer_id, following_id=user_id).first()
                is not None
            )

        return UserProfile(
            id=user.id,
            email=user.email,
            user_type=user.user_type,
            is_verified=user.is_verified,
            profile=ProfilePublic.model_validate(user.profile) if user.profile else None,
            created_at=user.created_at,
            counts=self._counts(db, user.id),
            is_following=is_following,
        )

    def get_own_profile(self, db: Session, user: User) -> OwnProfile:
        """The caller's page, including role and private profile fields."""
        return OwnProfile(
            id=user.id,
            email=user.email,
            user_type=user.user_type,
            is_verified=user.is_verified,
            role=user.role,
            profile=ProfileDetail.model_validate(user.profile) if user.profile else None,
            created_at=user.created_at,
            counts=self._counts(db, user.id),
        )

    def update_profile(self, db: Session, user: User, payload: ProfileUpdate) -> Profile:
        """Apply the sent fields to the caller's profile, creating it if missing."""
        if user.profile is None:
            user.profile = Profile()

        for field, value in payload.model_dump(exclude_unset=True).items():
            setattr(user.profile, field, value)

        db.commit()
        db.refresh(user.profile)
        logger.info("Profile of %s updated", user.id)
        return user.profile
