"""Favorites service."""
import math
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session, selectinload

from injoyplan.core.errors import ConflictError, ErrorCode, NotFoundError, event_not_found
from injoyplan.db.models import Event, EventDate, Favorite, User
from injoyplan.schemas.event import EventDate as EventDateSchema
from injoyplan.schemas.favorite import Favorite as FavoriteSchema, FavoritePage
from injoyplan.services.event_query import DatePredicate, local_today, matching_dates, normalize_pagination


class FavoriteService:
    """Service for a user's event bookmarks."""

    def add_favorite(
        self,
        db: Session,
        user_id: str,
        event_id: str,
        event_date_id: Optional[str] = None
    ) -> Favorite:
        """
        Favorite an event, or one specific date of it.

        A whole-event favorite and a date favorite are independent records.
        The database treats NULL dates as distinct, so the whole-event case
        is checked here.

        Args:
            db: Database session
            user_id: Requesting user
            event_id: Event to favorite
            event_date_id: Optional date of that event

        Returns:
            Created Favorite model
        """
        event = db.query(Event).filter_by(id=event_id).first()
        if not event:
            raise event_not_found()

        if event_date_id:
            event_date = db.query(EventDate).filter_by(id=event_date_id, event_id=event_id).first()
            if not event_date:
                raise NotFoundError(ErrorCode.DATE_NOT_FOUND, "Fecha no encontrada")

        existing = db.query(Favorite).filter_by(
            user_id=user_id,
            event_id=event_id,
            event_date_id=event_date_id or None,
        ).first()
        if existing:
            raise ConflictError(ErrorCode.FAVORITE_EXISTS, "El evento ya está en favoritos")

        favorite = Favorite(user_id=user_id, event_id=event_id, event_date_id=event_date_id or None)
        db.add(favorite)
        db.commit()
        db.refresh(favorite)
        return favorite

    def remove_favorite(self, db: Session, user_id: str, favorite_id: str) -> None:
        """Delete one favorite. Someone else's favorite is reported as missing."""
        favorite = db.query(Favorite).filter_by(id=favorite_id).first()
        if not favorite or favorite.user_id != user_id:
            raise NotFoundError(ErrorCode.FAVORITE_NOT_FOUND, "Favorito no encontrado")
        db.delete(favorite)
        db.commit()

    def remove_by_event(self, db: Session, user_id: str, event_id: str) -> int:
        """Delete every favorite the user holds on an event, date-scoped ones included."""
        count = db.query(Favorite).filter_by(user_id=user_id, event_id=event_id).delete()
        if count == 0:
            raise NotFoundError(ErrorCode.FAVORITE_NOT_FOUND, "Favorito no encontrado")
        db.commit()
        return count

    def list_favorites(
        self,
        db: Session,
        user_id: str,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        today: Optional[date] = None
    ) -> FavoritePage:
        """
        The user's favorites, newest first.

        A date-scoped favorite shows only that date. A whole-event favorite
        shows the upcoming dates, or every date once none are left.
        """
        page, limit = normalize_pagination(page, limit)
        today = today or local_today()

        query = db.query(Favorite).filter_by(user_id=user_id)
        total = query.count()
        favorites = (
            query.options(
                selectinload(Favorite.event_date),
                selectinload(Favorite.event).selectinload(Event.dates),
                selectinload(Favorite.event).selectinload(Event.location),
                selectinload(Favorite.event).selectinload(Event.user).selectinload(User.profile),
            )
            .order_by(Favorite.created_at.desc(), Favorite.id)
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

        results = []
        for favorite in favorites:
            item = FavoriteSchema.model_validate(favorite)
            if favorite.event_date is not None:
                dates = [favorite.event_date]
            else:
                dates = matching_dates(favorite.event, DatePredicate(start=today))
                if not dates:
                    dates = sorted(favorite.event.dates, key=lambda d: (d.date, d.start_time or ""))
            item.event.dates = [EventDateSchema.model_validate(d) for d in dates]
            results.append(item)

        return FavoritePage(
            results=results,
            total=total,
            page=page,
            total_pages=math.ceil(total / limit),
        )
