"""Public event search pipeline.

The pipeline runs in fixed stages:

1. compile the filter request into coarse SQL clauses plus a per-date predicate;
2. bulk-fetch the candidate events and the caller's favorites;
3. keep only the dates that satisfy the predicate;
4. shape rows, either one per date (expanded) or one per event (grouped);
5. overlay the caller's favorite marker;
6. stable-sort by the earliest retained date;
7. paginate.

Stages 3-7 are pure functions over in-memory objects. "Today" is passed in
explicitly so none of them read the clock. Totals always come from the
filtered list, never from a separate count query.
"""
import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional, Sequence, Tuple, Union
from zoneinfo import ZoneInfo

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from injoyplan.core.config import settings
from injoyplan.core.errors import ErrorCode, InvalidInputError
from injoyplan.db.models import Event, EventDate, Favorite, Location
from injoyplan.schemas.event import EventDate as EventDateSchema, EventPage, EventResult
from injoyplan.schemas.search import EventSearchFilters
from injoyplan.services.event_repository import EventRepository

logger = logging.getLogger(__name__)

FavoriteMarker = Union[bool, str]


def local_today(tz_name: Optional[str] = None) -> date:
    """Calendar date at the caller's local midnight."""
    return datetime.now(ZoneInfo(tz_name or settings.timezone)).date()


@dataclass(frozen=True)
class DatePredicate:
    """Per-date conditions that the coarse query cannot express."""
    start: date
    end: Optional[date] = None
    free_only: bool = False
    time_from: Optional[str] = None
    time_to: Optional[str] = None


@dataclass
class CompiledQuery:
    """Coarse event-level clauses plus the fine-grained date predicate."""
    clauses: List = field(default_factory=list)
    require_location: bool = False
    dates: Optional[DatePredicate] = None


@dataclass
class ResultRow:
    """An event with the subset of its dates retained by filtering."""
    event: Event
    dates: List[EventDate]
    favorite: FavoriteMarker = False


@dataclass
class Page:
    """One page of an ordered result list."""
    rows: List[ResultRow]
    total: int
    page: int
    total_pages: int


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def effective_start(filters: EventSearchFilters, today: date) -> date:
    """
    Lower date bound for a search.

    The explicit `date_from` wins when given, otherwise today. The
    in-progress flag clamps the bound so it never precedes today.
    """
    start = filters.date_from or today
    if filters.in_progress and start < today:
        start = today
    return start


def compile_filters(filters: EventSearchFilters, today: date) -> CompiledQuery:
    """
    Translate a filter request into coarse clauses and a date predicate.

    Pure: never touches the database. Absent fields add no clause.

    Args:
        filters: Search filters
        today: Caller's local date

    Returns:
        CompiledQuery
    """
    clauses = [Event.is_active.is_(True)]
    require_location = False

    if filters.exclude_featured:
        clauses.append(Event.is_featured.is_(False))

    category = _clean(filters.category)
    if category:
        clauses.append(func.lower(Event.category) == category.lower())

    text = _clean(filters.query)
    if text:
        clauses.append(or_(
            Event.title.icontains(text, autoescape=True),
            Location.name.icontains(text, autoescape=True),
        ))

    for column, value in (
        (Location.department, filters.department),
        (Location.province, filters.province),
        (Location.district, filters.district),
    ):
        value = _clean(value)
        if value:
            require_location = True
            clauses.append(func.lower(column) == value.lower())

    predicate = DatePredicate(
        start=effective_start(filters, today),
        end=filters.date_to,
        free_only=filters.free_only,
        time_from=filters.time_from,
        time_to=filters.time_to,
    )
    return CompiledQuery(clauses=clauses, require_location=require_location, dates=predicate)


def _as_date(value) -> date:
    # Normalizes to midnight: only the calendar day takes part in comparisons
    if isinstance(value, datetime):
        return value.date()
    return value


def time_matches(start_time: Optional[str], time_from: Optional[str], time_to: Optional[str]) -> bool:
    """
    Check a HH:MM start time against an optional time-of-day window.

    A window whose lower bound is after its upper bound wraps past
    midnight (22:00-02:00 accepts 23:30 and 01:00, rejects 10:00).
    A missing start time fails any active window.
    """
    if time_from is None and time_to is None:
        return True
    if not start_time:
        return False

    if time_from is not None and time_to is not None:
        if time_from > time_to:
            return start_time >= time_from or start_time <= time_to
        return time_from <= start_time <= time_to
    if time_from is not None:
        return start_time >= time_from
    return start_time <= time_to


def date_matches(event_date: EventDate, predicate: DatePredicate) -> bool:
    """Whether a single event date satisfies every condition of the predicate."""
    day = _as_date(event_date.date)
    if day < predicate.start:
        return False
    if predicate.end is not None and day > predicate.end:
        return False
    if predicate.free_only and event_date.price not in (None, 0):
        return False
    return time_matches(event_date.start_time, predicate.time_from, predicate.time_to)


def _chronological(dates: Sequence[EventDate]) -> List[EventDate]:
    return sorted(dates, key=lambda d: (_as_date(d.date), d.start_time or ""))


def matching_dates(event: Event, predicate: DatePredicate) -> List[EventDate]:
    """The event's dates that satisfy the predicate, in chronological order."""
    return [d for d in _chronological(event.dates or []) if date_matches(d, predicate)]


def expand_rows(events: Sequence[Event], predicate: DatePredicate) -> List[ResultRow]:
    """One row per matching date. Events without matches contribute nothing."""
    return [
        ResultRow(event=event, dates=[event_date])
        for event in events
        for event_date in matching_dates(event, predicate)
    ]


def group_rows(events: Sequence[Event], predicate: DatePredicate) -> List[ResultRow]:
    """One row per event holding all of its matching dates. Empty events are dropped."""
    rows = []
    for event in events:
        dates = matching_dates(event, predicate)
        if dates:
            rows.append(ResultRow(event=event, dates=dates))
    return rows


def _pick_favorite(row: ResultRow, favorites: List[Favorite]) -> Favorite:
    if len(row.dates) == 1:
        for favorite in favorites:
            if favorite.event_date_id == row.dates[0].id:
                return favorite
    for favorite in favorites:
        if favorite.event_date_id is None:
            return favorite
    return favorites[0]


def overlay_favorites(
    rows: List[ResultRow],
    favorites: Optional[Sequence[Favorite]]
) -> List[ResultRow]:
    """
    Mark each row with the caller's favorite id, or False.

    Any favorite on the event flags the row. When several exist, the one
    scoped to the row's single date wins, then the event-level one.
    Anonymous callers pass None and every row stays False.
    """
    by_event: Dict[str, List[Favorite]] = {}
    for favorite in favorites or []:
        by_event.setdefault(favorite.event_id, []).append(favorite)

    for row in rows:
        matches = by_event.get(row.event.id)
        row.favorite = _pick_favorite(row, matches).id if matches else False
    return rows


def sort_rows(rows: List[ResultRow]) -> List[ResultRow]:
    """Stable ascending sort by each row's earliest retained date."""
    return sorted(rows, key=lambda row: min(_as_date(d.date) for d in row.dates))


def _positive_int(value, name: str) -> int:
    if isinstance(value, bool):
        value = None
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise InvalidInputError(
            ErrorCode.INVALID_PAGINATION, f"{name} must be a positive integer", parameter=name
        )
    if number < 1:
        raise InvalidInputError(
            ErrorCode.INVALID_PAGINATION, f"{name} must be a positive integer", parameter=name
        )
    return number


def normalize_pagination(page=None, limit=None) -> Tuple[int, int]:
    """Apply defaults and reject non-positive or non-numeric values."""
    page = 1 if page is None else _positive_int(page, "page")
    limit = settings.default_page_size if limit is None else _positive_int(limit, "limit")
    if limit > settings.max_page_size:
        raise InvalidInputError(
            ErrorCode.INVALID_PAGINATION,
            f"limit must not exceed {settings.max_page_size}",
            parameter="limit",
        )
    return page, limit


def paginate(rows: List[ResultRow], page: int, limit: int) -> Page:
    """Slice an ordered list. A page past the end is empty, not an error."""
    total = len(rows)
    offset = (page - 1) * limit
    return Page(
        rows=rows[offset:offset + limit],
        total=total,
        page=page,
        total_pages=math.ceil(total / limit),
    )


def to_event_result(row: ResultRow) -> EventResult:
    """Serialize a row: sanitized event, retained dates only, favorite marker."""
    result = EventResult.model_validate(row.event)
    result.dates = [EventDateSchema.model_validate(d) for d in row.dates]
    result.favorite = row.favorite
    return result


def to_event_page(page: Page) -> EventPage:
    return EventPage(
        results=[to_event_result(row) for row in page.rows],
        total=page.total,
        page=page.page,
        total_pages=page.total_pages,
    )


class EventQueryService:
    """Runs the public event search against the database."""

    def __init__(self, repository: Optional[EventRepository] = None):
        self.repository = repository or EventRepository()

    def search_rows(
        self,
        db: Session,
        filters: EventSearchFilters,
        user_id: Optional[str] = None,
        today: Optional[date] = None
    ) -> List[ResultRow]:
        """
        Run every stage except pagination.

        Args:
            db: Database session
            filters: Search filters
            user_id: Requesting user for the favorite overlay (None = anonymous)
            today: Caller's local date (defaults to today in the configured zone)

        Returns:
            Ordered list of ResultRow
        """
        today = today or local_today()
        compiled = compile_filters(filters, today)

        events = self.repository.fetch_candidates(
            db, compiled.clauses, require_location=compiled.require_location
        )
        favorites = None
        if user_id:
            favorites = self.repository.fetch_user_favorites(db, user_id, [e.id for e in events])

        shape = expand_rows if filters.expand_dates else group_rows
        rows = shape(events, compiled.dates)
        overlay_favorites(rows, favorites)
        rows = sort_rows(rows)

        logger.debug(
            "Event search: %d candidates, %d rows (expanded=%s)",
            len(events), len(rows), filters.expand_dates
        )
        return rows

    def search(
        self,
        db: Session,
        filters: EventSearchFilters,
        user_id: Optional[str] = None,
        today: Optional[date] = None
    ) -> EventPage:
        """Run the search and return the requested page."""
        page, limit = normalize_pagination(filters.page, filters.limit)
        rows = self.search_rows(db, filters, user_id=user_id, today=today)
        return to_event_page(paginate(rows, page, limit))
