"""Bulk reads behind the event search pipeline."""
from typing import List, Sequence
from sqlalchemy.orm import Session, contains_eager, selectinload
from injoyplan.db.models import Event, Favorite, Location, User


class EventRepository:
    """Fetches full event aggregates for a coarse predicate. Never paginates."""

    def fetch_candidates(
        self,
        db: Session,
        clauses: Sequence,
        require_location: bool = False
    ) -> List[Event]:
        """
        Return every event matching the coarse clauses, newest first.

        Each event comes with its dates, location and organizer profile loaded.

        Args:
            db: Database session
            clauses: SQLAlchemy boolean clauses over Event and Location columns
            require_location: Inner-join the location (sub-region filters need one)

        Returns:
            List of Event models
        """
        query = db.query(Event)
        if require_location:
            query = query.join(Event.location)
        else:
            query = query.outerjoin(Event.location)

        query = query.options(
            contains_eager(Event.location),
            selectinload(Event.dates),
            selectinload(Event.user).selectinload(User.profile),
        )

        return (
            query.filter(*clauses)
            .order_by(Event.created_at.desc(), Event.id)
            .all()
        )

    def fetch_user_favorites(
        self,
        db: Session,
        user_id: str,
        event_ids: Sequence[str]
    ) -> List[Favorite]:
        """Return the user's favorites restricted to the given events, oldest first."""
        if not event_ids:
            return []
        return (
            db.query(Favorite)
            .filter(Favorite.user_id == user_id, Favorite.event_id.in_(list(event_ids)))
            .order_by(Favorite.created_at, Favorite.id)
            .all()
        )
