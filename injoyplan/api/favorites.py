"""Favorites API endpoints."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import Optional
from injoyplan.db.session import get_db
from injoyplan.db.models import User
from injoyplan.schemas.event import Message
from injoyplan.schemas.favorite import Favorite as FavoriteSchema, FavoriteCreate, FavoritePage
from injoyplan.services.favorites import FavoriteService
from injoyplan.core.security import require_user

router = APIRouter()
favorite_service = FavoriteService()


@router.get("/favorites", response_model=FavoritePage)
async def list_favorites(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    """The caller's favorites, newest first."""
    return favorite_service.list_favorites(db, user.id, page=page, limit=limit)


@router.post("/favorites", response_model=FavoriteSchema, status_code=status.HTTP_201_CREATED)
async def add_favorite(
    request: FavoriteCreate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    """Favorite an event, or one of its dates."""
    return favorite_service.add_favorite(db, user.id, request.event_id, request.event_date_id)


@router.delete("/favorites/event/{event_id}", response_model=Message)
async def remove_favorites_by_event(
    event_id: str,
    user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    """Remove every favorite the caller holds on an event."""
    count = favorite_service.remove_by_event(db, user.id, event_id)
    return Message(message=f"{count} favoritos eliminados")


@router.delete("/favorites/{favorite_id}", response_model=Message)
async def remove_favorite(
    favorite_id: str,
    user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    """Remove one favorite."""
    favorite_service.remove_favorite(db, user.id, favorite_id)
    return Message(message="Favorito eliminado")
