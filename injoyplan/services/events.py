"""Event catalog service: organizer CRUD and the non-search listings."""
import logging
import math
from datetime import date
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from injoyplan.core.errors import ErrorCode, ForbiddenError, NotFoundError, event_not_found, not_owner
from injoyplan.db.models import (
    Category, Event, EventDate, Favorite, Follow, Location, User, UserType,
)
from injoyplan.schemas.event import (
    CategoryStats, EventCreate, EventDateCreate, EventPage, EventResult, EventUpdate,
)
from injoyplan.schemas.search import EventSearchFilters
from injoyplan.services.event_query import (
    DatePredicate, EventQueryService, ResultRow, group_rows, local_today, matching_dates,
    normalize_pagination, overlay_favorites, paginate, sort_rows, to_event_page, to_event_result,
)

logger = logging.getLogger(__name__)

RELATED_LIMIT = 10


class EventService:
    """Service for event catalog operations."""

    def __init__(self, query_service: Optional[EventQueryService] = None):
        self.query_service = query_service or EventQueryService()

    # Lookups

    def get_event(self, db: Session, event_id: str) -> Event:
        """Load an event or raise NotFoundError."""
        event = db.query(Event).filter_by(id=event_id).first()
        if not event:
            raise event_not_found()
        return event

    def _owned_event(self, db: Session, user: User, event_id: str) -> Event:
        event = self.get_event(db, event_id)
        if event.user_id != user.id:
            raise not_owner()
        return event

    def _user_favorites(self, db: Session, user_id: Optional[str], events: List[Event]) -> Optional[List[Favorite]]:
        if not user_id:
            return None
        return self.query_service.repository.fetch_user_favorites(db, user_id, [e.id for e in events])

    def _listing(
        self,
        db: Session,
        query,
        page: Optional[int],
        limit: Optional[int],
        viewer_id: Optional[str] = None,
        today: Optional[date] = None
    ) -> EventPage:
        """
        Database-paged listing with every stored date and the favorite overlay.

        Events without a date on or after today are left out before counting.
        """
        page, limit = normalize_pagination(page, limit)
        query = query.filter(Event.dates.any(EventDate.date >= (today or local_today())))
        total = query.count()
        events = (
            query.options(selectinload(Event.dates), selectinload(Event.location),
                          selectinload(Event.user).selectinload(User.profile))
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        rows = [ResultRow(event=e, dates=list(e.dates)) for e in events]
        overlay_favorites(rows, self._user_favorites(db, viewer_id, events))
        return EventPage(
            results=[to_event_result(row) for row in rows],
            total=total,
            page=page,
            total_pages=math.ceil(total / limit),
        )

    # Organizer CRUD

    def _build_dates(self, dates: List[EventDateCreate]) -> List[EventDate]:
        return [
            EventDate(
                date=d.date,
                start_time=d.start_time,
                end_time=d.end_time,
                price=d.price,
                capacity=d.capacity,
            )
            for d in dates
        ]

    def create_event(self, db: Session, user: User, payload: EventCreate) -> Event:
        """
        Create an event with its dates and optional location.

        Args:
            db: Database session
            user: Authenticated organizer
            payload: Event data

        Returns:
            Created Event model
        """
        if user.user_type != UserType.COMPANY:
            raise ForbiddenError(ErrorCode.NOT_ORGANIZER, "Solo usuarios COMPANY pueden crear eventos")

        location = None
        if payload.department and payload.province and payload.district:
            location = Location(
                name=payload.location_name,
                department=payload.department,
                province=payload.province,
                district=payload.district,
                address=payload.address,
                latitude=payload.latitude,
                longitude=payload.longitude,
            )

        event = Event(
            title=payload.title,
            description=payload.description,
            category=payload.category,
            image_url=payload.image_url,
            banner_url=payload.banner_url,
            website_url=payload.website_url,
            ticket_urls=[t.model_dump() for t in payload.ticket_urls] if payload.ticket_urls else [],
            is_featured=payload.is_featured,
            is_banner=payload.is_banner,
            user_id=user.id,
            location=location,
            dates=self._build_dates(payload.dates),
        )
        db.add(event)
        db.commit()
        db.refresh(event)

        logger.info("Event %s created by %s with %d dates", event.id, user.id, len(event.dates))
        return event

    def update_event(self, db: Session, user: User, event_id: str, payload: EventUpdate) -> Event:
        """Update an owned event. Location fields upsert; a non-empty date list replaces all dates."""
        event = self._owned_event(db, user, event_id)
        data = payload.model_dump(exclude_unset=True)

        location_fields = {
            "location_name": "name",
            "department": "department",
            "province": "province",
            "district": "district",
            "address": "address",
            "latitude": "latitude",
            "longitude": "longitude",
        }
        location_data = {
            column: data[key] for key, column in location_fields.items() if key in data
        }
        if any(location_data.get(k) for k in ("name", "department", "province", "district", "address")):
            if event.location is None:
                event.location = Location(
                    department=location_data.pop("department", None) or "Lima",
                    province=location_data.pop("province", None) or "Lima",
                    district=location_data.pop("district", None) or "",
                )
            for column, value in location_data.items():
                if value is not None:
                    setattr(event.location, column, value)

        if payload.dates:
            event.dates = self._build_dates(payload.dates)

        for field in ("title", "description", "category", "image_url", "banner_url",
                      "website_url", "is_featured", "is_banner"):
            if field in data and data[field] is not None:
                setattr(event, field, data[field])
        if "ticket_urls" in data:
            event.ticket_urls = [t.model_dump() for t in payload.ticket_urls or []]

        db.commit()
        db.refresh(event)
        return event

    def toggle_status(self, db: Session, user: User, event_id: str) -> Event:
        """Flip the activation flag of an owned event."""
        event = self._owned_event(db, user, event_id)
        event.is_active = not event.is_active
        db.commit()
        db.refresh(event)
        return event

    def remove_event(self, db: Session, user: User, event_id: str) -> None:
        """Delete an owned event with its dates, favorites and comments."""
        event = self._owned_event(db, user, event_id)
        db.delete(event)
        db.commit()
        logger.info("Event %s deleted by %s", event_id, user.id)

    def my_events(self, db: Session, user: User) -> List[Event]:
        """The caller's own events, inactive included, newest first."""
        return (
            db.query(Event)
            .filter_by(user_id=user.id)
            .order_by(Event.created_at.desc())
            .all()
        )

    # Listings

    def list_events(
        self,
        db: Session,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        status: str = "active",
        is_featured: Optional[bool] = None,
        is_banner: Optional[bool] = None,
        search: Optional[str] = None,
        viewer_id: Optional[str] = None,
        today: Optional[date] = None
    ) -> EventPage:
        """Generic newest-first listing of upcoming events. Status is 'active', 'inactive' or 'all'."""
        query = db.query(Event)
        if status == "active":
            query = query.filter(Event.is_active.is_(True))
        elif status == "inactive":
            query = query.filter(Event.is_active.is_(False))
        if is_featured is not None:
            query = query.filter(Event.is_featured.is_(is_featured))
        if is_banner is not None:
            query = query.filter(Event.is_banner.is_(is_banner))
        if search:
            query = query.outerjoin(Event.location).filter(or_(
                Event.title.icontains(search, autoescape=True),
                Event.description.icontains(search, autoescape=True),
                Location.name.icontains(search, autoescape=True),
            ))
        query = query.order_by(Event.created_at.desc(), Event.id)
        return self._listing(db, query, page, limit, viewer_id, today)

    def featured(self, db: Session, viewer_id: Optional[str] = None, today: Optional[date] = None) -> EventPage:
        """Active featured events with an upcoming date, soonest first, on one page."""
        today = today or local_today()
        events = (
            db.query(Event)
            .filter(Event.is_active.is_(True), Event.is_featured.is_(True))
            .options(selectinload(Event.dates), selectinload(Event.location),
                     selectinload(Event.user).selectinload(User.profile))
            .order_by(Event.created_at.desc(), Event.id)
            .all()
        )
        rows = group_rows(events, DatePredicate(start=today))
        overlay_favorites(rows, self._user_favorites(db, viewer_id, events))
        rows = sort_rows(rows)
        return to_event_page(paginate(rows, 1, max(len(rows), 1)))

    def search_text(
        self,
        db: Session,
        q: str,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        today: Optional[date] = None
    ) -> EventPage:
        """Title or venue text search with upcoming dates only, grouped per event."""
        page, limit = normalize_pagination(page, limit)
        filters = EventSearchFilters(query=q, expand_dates=False, page=page, limit=limit)
        return self.query_service.search(db, filters, today=today)

    def by_category(
        self,
        db: Session,
        category: str,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        today: Optional[date] = None
    ) -> EventPage:
        """Upcoming events of one category, grouped per event."""
        page, limit = normalize_pagination(page, limit)
        filters = EventSearchFilters(category=category, expand_dates=False, page=page, limit=limit)
        return self.query_service.search(db, filters, today=today)

    def feed(
        self,
        db: Session,
        user: User,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        today: Optional[date] = None
    ) -> EventPage:
        """
        Personal feed.

        With followed users: own events, followed users' events and featured
        events. Without any: every active event (discovery mode). Only events
        with an upcoming date are listed. Featured events come first, then
        newest.
        """
        following_ids = [
            f.following_id for f in db.query(Follow).filter_by(follower_id=user.id).all()
        ]
        query = db.query(Event).filter(Event.is_active.is_(True))
        if following_ids:
            query = query.filter(or_(
                Event.user_id == user.id,
                Event.user_id.in_(following_ids),
                Event.is_featured.is_(True),
            ))
        query = query.order_by(Event.is_featured.desc(), Event.created_at.desc(), Event.id)
        return self._listing(db, query, page, limit, viewer_id=user.id, today=today)

    def by_user(
        self,
        db: Session,
        owner_id: str,
        viewer_id: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        today: Optional[date] = None
    ) -> EventPage:
        """An organizer's active upcoming events. Favorites are those of the viewer, not the owner."""
        query = (
            db.query(Event)
            .filter(Event.user_id == owner_id, Event.is_active.is_(True))
            .order_by(Event.created_at.desc(), Event.id)
        )
        return self._listing(db, query, page, limit, viewer_id, today)

    def related_by_event(
        self,
        db: Session,
        event_id: str,
        exclude_featured: bool = False,
        today: Optional[date] = None
    ) -> List[Event]:
        """Up to ten other active upcoming events in the same category."""
        event = self.get_event(db, event_id)
        query = db.query(Event).filter(
            Event.is_active.is_(True),
            Event.category == event.category,
            Event.id != event_id,
            Event.dates.any(EventDate.date >= (today or local_today())),
        )
        if exclude_featured:
            query = query.filter(Event.is_featured.is_(False))
        return query.order_by(Event.created_at.desc()).limit(RELATED_LIMIT).all()

    def related_by_category(
        self,
        db: Session,
        category: str,
        exclude_featured: bool = False,
        today: Optional[date] = None
    ) -> List[Event]:
        """Up to ten active upcoming events of a category."""
        query = db.query(Event).filter(
            Event.is_active.is_(True),
            Event.category == category,
            Event.dates.any(EventDate.date >= (today or local_today())),
        )
        if exclude_featured:
            query = query.filter(Event.is_featured.is_(False))
        return query.order_by(Event.created_at.desc()).limit(RELATED_LIMIT).all()

    def stats_by_category(self, db: Session) -> List[CategoryStats]:
        """Active categories in display order with their active event counts."""
        categories = (
            db.query(Category)
            .filter(Category.is_active.is_(True))
            .order_by(Category.order)
            .all()
        )
        counts = dict(
            db.query(Event.category, func.count(Event.id))
            .filter(Event.is_active.is_(True))
            .group_by(Event.category)
            .all()
        )
        return [
            CategoryStats(
                id=c.id,
                name=c.name,
                icon=c.icon,
                count=counts.get(c.name, 0),
                is_active=c.is_active,
            )
            for c in categories
        ]

    def get_dates(self, db: Session, event_id: str) -> List[EventDate]:
        """All dates of an event, ascending."""
        self.get_event(db, event_id)
        return (
            db.query(EventDate)
            .filter_by(event_id=event_id)
            .order_by(EventDate.date, EventDate.start_time)
            .all()
        )

    def detail_by_date(
        self,
        db: Session,
        event_id: str,
        date_id: str,
        viewer_id: Optional[str] = None,
        today: Optional[date] = None
    ) -> EventResult:
        """Event detail restricted to its upcoming dates, with the viewer's favorite marker."""
        event = self.get_event(db, event_id)
        if not event.dates:
            raise NotFoundError(ErrorCode.DATE_NOT_FOUND, "Fecha no encontrada")

        today = today or local_today()
        upcoming = matching_dates(event, DatePredicate(start=today))
        row = ResultRow(event=event, dates=upcoming)

        # A favorite on the requested date takes precedence over the event-level one
        selected = [d for d in upcoming if d.id == date_id]
        marker = ResultRow(event=event, dates=selected or upcoming)
        overlay_favorites([marker], self._user_favorites(db, viewer_id, [event]))
        row.favorite = marker.favorite
        return to_event_result(row)
