"""Follow graph service."""
import math

from sqlalchemy.orm import Session, selectinload

from injoyplan.core.errors import ConflictError, ErrorCode, InvalidInputError, NotFoundError
from injoyplan.db.models import Follow, User
from injoyplan.schemas.user import UserPage, UserPublic
from injoyplan.services.event_query import normalize_pagination


class SocialService:
    """Service for following organizers and other users."""

    def _get_user(self, db: Session, user_id: str) -> User:
        user = db.query(User).filter_by(id=user_id).first()
        if not user:
            raise NotFoundError(ErrorCode.USER_NOT_FOUND, "Usuario no encontrado")
        return user

    def follow(self, db: Session, follower_id: str, following_id: str) -> Follow:
        if follower_id == following_id:
            raise InvalidInputError(ErrorCode.INVALID_FOLLOW, "No puedes seguirte a ti mismo", parameter="userId")
        self._get_user(db, following_id)

        existing = db.query(Follow).filter_by(follower_id=follower_id, following_id=following_id).first()
        if existing:
            raise ConflictError(ErrorCode.ALREADY_FOLLOWING, "Ya sigues a este usuario")

        follow = Follow(follower_id=follower_id, following_id=following_id)
        db.add(follow)
        db.commit()
        return follow

    def unfollow(self, db: Session, follower_id: str, following_id: str) -> None:
        count = db.query(Follow).filter_by(follower_id=follower_id, following_id=following_id).delete()
        if count == 0:
            raise NotFoundError(ErrorCode.USER_NOT_FOUND, "No sigues a este usuario")
        db.commit()

    def _page(self, query, page, limit) -> UserPage:
        page, limit = normalize_pagination(page, limit)
        total = query.count()
        users = (
            query.options(selectinload(User.profile))
            .order_by(Follow.created_at.desc(), User.id)
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return UserPage(
            results=[UserPublic.model_validate(u) for u in users],
            total=total,
            page=page,
            total_pages=math.ceil(total / limit),
        )

    def followers(self, db: Session, user_id: str, page=None, limit=None) -> UserPage:
        """Users following `user_id`, newest follow first."""
        self._get_user(db, user_id)
        query = (
            db.query(User)
            .join(Follow, Follow.follower_id == User.id)
            .filter(Follow.following_id == user_id)
        )
        return self._page(query, page, limit)

    def following(self, db: Session, user_id: str, page=None, limit=None) -> UserPage:
        """Users that `user_id` follows, newest follow first."""
        self._get_user(db, user_id)
        query = (
            db.query(User)
            .join(Follow, Follow.following_id == User.id)
            .filter(Follow.follower_id == user_id)
        )
        return self._page(query, page, limit)
