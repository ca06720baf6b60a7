"""Event comments API endpoints."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import Optional
from injoyplan.db.session import get_db
from injoyplan.db.models import User
from injoyplan.schemas.comment import Comment, CommentCreate, CommentPage, CommentUpdate, LikeResult
from injoyplan.schemas.event import Message
from injoyplan.services.comments import CommentService, to_comment
from injoyplan.core.security import get_current_user_id, require_user

router = APIRouter()
comment_service = CommentService()


@router.get("/events/{event_id}/comments", response_model=CommentPage)
async def list_comments(
    event_id: str,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    user_id: Optional[str] = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Top-level comments of an event with their replies."""
    return comment_service.list_comments(db, event_id, viewer_id=user_id, page=page, limit=limit)


@router.post("/events/{event_id}/comments", response_model=Comment, status_code=status.HTTP_201_CREATED)
async def add_comment(
    event_id: str,
    request: CommentCreate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    """Comment on an event, or reply when parent_id is set."""
    comment = comment_service.add_comment(db, user.id, event_id, request.content, request.parent_id)
    return to_comment(comment, user.id)


@router.patch("/comments/{comment_id}", response_model=Comment)
async def edit_comment(
    comment_id: str,
    request: CommentUpdate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    """Edit an own comment."""
    comment = comment_service.edit_comment(db, user.id, comment_id, request.content)
    return to_comment(comment, user.id)


@router.delete("/comments/{comment_id}", response_model=Message)
async def delete_comment(
    comment_id: str,
    user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    """Delete an own comment with its replies."""
    comment_service.delete_comment(db, user.id, comment_id)
    return Message(message="Comentario eliminado")


@router.post("/comments/{comment_id}/like", response_model=LikeResult)
async def toggle_like(
    comment_id: str,
    user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    """Like or unlike a comment."""
    return LikeResult(is_liked=comment_service.toggle_like(db, user.id, comment_id))
