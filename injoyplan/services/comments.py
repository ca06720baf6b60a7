"""Event comments service."""
import math
from typing import Optional

from sqlalchemy.orm import Session, selectinload

from injoyplan.core.errors import (
    ErrorCode, InvalidInputError, NotFoundError, event_not_found, not_owner,
)
from injoyplan.db.models import Event, EventComment, EventCommentLike, User
from injoyplan.schemas.comment import Comment, CommentPage
from injoyplan.schemas.user import UserPublic
from injoyplan.services.event_query import normalize_pagination


def to_comment(comment: EventComment, viewer_id: Optional[str] = None, with_replies: bool = True) -> Comment:
    """Serialize a comment, marking whether the viewer liked it."""
    return Comment(
        id=comment.id,
        event_id=comment.event_id,
        parent_id=comment.parent_id,
        content=comment.content,
        created_at=comment.created_at,
        user=UserPublic.model_validate(comment.user),
        like_count=len(comment.likes),
        reply_count=len(comment.replies),
        is_liked=bool(viewer_id) and any(like.user_id == viewer_id for like in comment.likes),
        replies=[to_comment(r, viewer_id, with_replies=False) for r in comment.replies] if with_replies else [],
    )


class CommentService:
    """Service for event comments, replies and likes."""

    def _get_comment(self, db: Session, comment_id: str) -> EventComment:
        comment = db.query(EventComment).filter_by(id=comment_id).first()
        if not comment:
            raise NotFoundError(ErrorCode.COMMENT_NOT_FOUND, "Comentario no encontrado")
        return comment

    def list_comments(
        self,
        db: Session,
        event_id: str,
        viewer_id: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None
    ) -> CommentPage:
        """Top-level comments, newest first, each with its replies oldest first."""
        page, limit = normalize_pagination(page, limit)
        query = db.query(EventComment).filter(
            EventComment.event_id == event_id,
            EventComment.parent_id.is_(None),
        )
        total = query.count()
        comments = (
            query.options(
                selectinload(EventComment.user).selectinload(User.profile),
                selectinload(EventComment.likes),
                selectinload(EventComment.replies).selectinload(EventComment.likes),
                selectinload(EventComment.replies).selectinload(EventComment.user),
            )
            .order_by(EventComment.created_at.desc(), EventComment.id)
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return CommentPage(
            results=[to_comment(c, viewer_id) for c in comments],
            total=total,
            page=page,
            total_pages=math.ceil(total / limit),
        )

    def add_comment(
        self,
        db: Session,
        user_id: str,
        event_id: str,
        content: Optional[str],
        parent_id: Optional[str] = None
    ) -> EventComment:
        """Comment on an event, or reply to one of its comments."""
        if not content or not content.strip():
            raise InvalidInputError(
                ErrorCode.INVALID_COMMENT, "El contenido del comentario es requerido", parameter="content"
            )
        if not db.query(Event).filter_by(id=event_id).first():
            raise event_not_found()
        if parent_id:
            parent = self._get_comment(db, parent_id)
            if parent.event_id != event_id:
                raise NotFoundError(ErrorCode.COMMENT_NOT_FOUND, "Comentario no encontrado")

        comment = EventComment(user_id=user_id, event_id=event_id, content=content.strip(), parent_id=parent_id)
        db.add(comment)
        db.commit()
        db.refresh(comment)
        return comment

    def edit_comment(self, db: Session, user_id: str, comment_id: str, content: str) -> EventComment:
        comment = self._get_comment(db, comment_id)
        if comment.user_id != user_id:
            raise not_owner()
        comment.content = content
        db.commit()
        db.refresh(comment)
        return comment

    def delete_comment(self, db: Session, user_id: str, comment_id: str) -> None:
        comment = self._get_comment(db, comment_id)
        if comment.user_id != user_id:
            raise not_owner()
        db.delete(comment)
        db.commit()

    def toggle_like(self, db: Session, user_id: str, comment_id: str) -> bool:
        """Like or unlike a comment. Returns the new like state."""
        self._get_comment(db, comment_id)
        existing = db.query(EventCommentLike).filter_by(user_id=user_id, comment_id=comment_id).first()
        if existing:
            db.delete(existing)
            db.commit()
            return False

        db.add(EventCommentLike(user_id=user_id, comment_id=comment_id))
        db.commit()
        return True
