"""Event catalog and search API endpoints."""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
from injoyplan.db.session import get_db
from injoyplan.db.models import User
from injoyplan.schemas.event import (
    CategoryStats,
    Event as EventSchema,
    EventCreate,
    EventDate as EventDateSchema,
    EventPage,
    EventResult,
    EventUpdate,
    Message,
    StatusToggle,
    TIME_PATTERN,
)
from injoyplan.schemas.search import EventSearchFilters
from injoyplan.services.events import EventService
from injoyplan.services.event_query import normalize_pagination
from injoyplan.core.security import get_current_user_id, require_user

router = APIRouter()
event_service = EventService()


@router.get("/events/public/search", response_model=EventPage)
async def public_search(
    categoria: Optional[str] = None,
    departamento: Optional[str] = None,
    provincia: Optional[str] = None,
    distrito: Optional[str] = None,
    busqueda: Optional[str] = None,
    fecha_inicio: Optional[date] = Query(None, alias="fechaInicio"),
    fecha_fin: Optional[date] = Query(None, alias="fechaFin"),
    es_gratis: bool = Query(False, alias="esGratis"),
    en_curso: bool = Query(False, alias="enCurso"),
    hora_inicio: Optional[str] = Query(None, alias="horaInicio", pattern=TIME_PATTERN),
    hora_fin: Optional[str] = Query(None, alias="horaFin", pattern=TIME_PATTERN),
    exclude_featured: bool = Query(False, alias="excludeFeatured"),
    expand_dates: bool = Query(True, alias="expandDates"),
    page: Optional[str] = None,
    limit: Optional[str] = None,
    user_id: Optional[str] = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Public event search.

    Anonymous callers get `favorite: false` on every row; authenticated
    callers get the id of their matching favorite.
    """
    page, limit = normalize_pagination(page, limit)
    filters = EventSearchFilters(
        category=categoria,
        department=departamento,
        province=provincia,
        district=distrito,
        query=busqueda,
        date_from=fecha_inicio,
        date_to=fecha_fin,
        free_only=es_gratis,
        in_progress=en_curso,
        time_from=hora_inicio,
        time_to=hora_fin,
        exclude_featured=exclude_featured,
        expand_dates=expand_dates,
        page=page,
        limit=limit,
    )
    return event_service.query_service.search(db, filters, user_id=user_id)


@router.get("/events", response_model=EventPage)
async def list_events(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    status_filter: str = Query("active", alias="status", pattern="^(active|inactive|all)$"),
    is_featured: Optional[bool] = Query(None, alias="isFeatured"),
    is_banner: Optional[bool] = Query(None, alias="isBanner"),
    search: Optional[str] = None,
    user_id: Optional[str] = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """List events, newest first."""
    return event_service.list_events(
        db, page=page, limit=limit, status=status_filter,
        is_featured=is_featured, is_banner=is_banner, search=search, viewer_id=user_id
    )


@router.get("/events/featured", response_model=EventPage)
async def featured_events(
    user_id: Optional[str] = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Featured events with upcoming dates."""
    return event_service.featured(db, viewer_id=user_id)


@router.get("/events/search", response_model=EventPage)
async def search_events(
    q: str = Query(..., min_length=1),
    page: Optional[str] = None,
    limit: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Text search over title and venue name."""
    return event_service.search_text(db, q, page=page, limit=limit)


@router.get("/events/category/{category}", response_model=EventPage)
async def events_by_category(
    category: str,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Upcoming events of one category."""
    return event_service.by_category(db, category, page=page, limit=limit)


@router.get("/events/feed", response_model=EventPage)
async def feed(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    """Personal feed of the caller."""
    return event_service.feed(db, user, page=page, limit=limit)


@router.get("/events/my", response_model=List[EventSchema])
async def my_events(
    user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    """The caller's own events, inactive included."""
    return event_service.my_events(db, user)


@router.get("/events/user/{owner_id}", response_model=EventPage)
async def events_by_user(
    owner_id: str,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    user_id: Optional[str] = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """An organizer's active events."""
    return event_service.by_user(db, owner_id, viewer_id=user_id, page=page, limit=limit)


@router.get("/events/related/category/{category}", response_model=List[EventSchema])
async def related_by_category(
    category: str,
    exclude_featured: bool = Query(False, alias="excludeFeatured"),
    db: Session = Depends(get_db)
):
    """Other active events of a category."""
    return event_service.related_by_category(db, category, exclude_featured=exclude_featured)


@router.get("/events/related/{event_id}", response_model=List[EventSchema])
async def related_by_event(
    event_id: str,
    exclude_featured: bool = Query(False, alias="excludeFeatured"),
    db: Session = Depends(get_db)
):
    """Active events sharing the category of an event."""
    return event_service.related_by_event(db, event_id, exclude_featured=exclude_featured)


@router.get("/events/stats/by-category", response_model=List[CategoryStats])
async def stats_by_category(db: Session = Depends(get_db)):
    """Active event counts per category."""
    return event_service.stats_by_category(db)


@router.get("/events/detail/{event_id}/{date_id}", response_model=EventResult)
async def event_detail(
    event_id: str,
    date_id: str,
    user_id: Optional[str] = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Event detail for a selected date."""
    return event_service.detail_by_date(db, event_id, date_id, viewer_id=user_id)


@router.post("/events", response_model=EventSchema, status_code=status.HTTP_201_CREATED)
async def create_event(
    event: EventCreate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    """Create a new event (organizer accounts only)."""
    return event_service.create_event(db, user, event)


@router.get("/events/{event_id}", response_model=EventSchema)
async def get_event(
    event_id: str,
    db: Session = Depends(get_db)
):
    """Get a specific event by ID."""
    return event_service.get_event(db, event_id)


@router.get("/events/{event_id}/dates", response_model=List[EventDateSchema])
async def get_event_dates(
    event_id: str,
    db: Session = Depends(get_db)
):
    """All dates of an event."""
    return event_service.get_dates(db, event_id)


@router.patch("/events/{event_id}", response_model=EventSchema)
async def update_event(
    event_id: str,
    event: EventUpdate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    """Update an owned event."""
    return event_service.update_event(db, user, event_id, event)


@router.patch("/events/{event_id}/toggle-status", response_model=StatusToggle)
async def toggle_status(
    event_id: str,
    user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    """Activate or deactivate an owned event."""
    event = event_service.toggle_status(db, user, event_id)
    return StatusToggle(id=event.id, is_active=event.is_active)


@router.delete("/events/{event_id}", response_model=Message)
async def delete_event(
    event_id: str,
    user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    """Delete an owned event."""
    event_service.remove_event(db, user, event_id)
    return Message(message="Evento eliminado")
