"""Admin console service."""
import math
import logging
from datetime import date
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from injoyplan.core.errors import ErrorCode, NotFoundError
from injoyplan.db.models import Event, EventDate, Profile, User, UserRole
from injoyplan.schemas.admin import BulkResult, DashboardStats
from injoyplan.schemas.user import AdminUser, AdminUserList
from injoyplan.services.event_query import local_today, normalize_pagination

logger = logging.getLogger(__name__)


class AdminService:
    """Service for platform administration."""

    def get_stats(self, db: Session) -> DashboardStats:
        return DashboardStats(
            total_users=db.query(User).count(),
            total_events=db.query(Event).count(),
            active_banners=db.query(Event).filter(Event.is_banner.is_(True), Event.is_active.is_(True)).count(),
            verified_users=db.query(User).filter(User.is_verified.is_(True)).count(),
        )

    def list_users(
        self,
        db: Session,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        search: Optional[str] = None
    ) -> AdminUserList:
        """Users newest first, optionally matching email or profile names."""
        page, limit = normalize_pagination(page, limit)
        query = db.query(User).outerjoin(User.profile)
        if search:
            query = query.filter(or_(
                User.email.icontains(search, autoescape=True),
                Profile.first_name.icontains(search, autoescape=True),
                Profile.last_name.icontains(search, autoescape=True),
            ))
        total = query.count()
        users = (
            query.options(selectinload(User.profile))
            .order_by(User.created_at.desc(), User.id)
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return AdminUserList(
            users=[AdminUser.model_validate(u) for u in users],
            total=total,
            page=page,
            total_pages=math.ceil(total / limit),
        )

    def update_role(self, db: Session, user_id: str, role: UserRole) -> User:
        user = db.query(User).filter_by(id=user_id).first()
        if not user:
            raise NotFoundError(ErrorCode.USER_NOT_FOUND, "Usuario no encontrado")
        user.role = role
        db.commit()
        db.refresh(user)
        logger.info("User %s role set to %s", user_id, role.value)
        return user

    def delete_all_events(self, db: Session) -> BulkResult:
        """Remove every event with its dates, favorites and comments."""
        events = db.query(Event).all()
        for event in events:
            db.delete(event)
        db.commit()
        logger.warning("Deleted all %d events", len(events))
        return BulkResult(count=len(events), message="Todos los eventos han sido eliminados")

    def roll_dates_to_current_year(self, db: Session, today: Optional[date] = None) -> BulkResult:
        """Move dates from earlier years into the current year (demo data refresh)."""
        year = (today or local_today()).year
        updated = 0
        for event_date in db.query(EventDate).filter(EventDate.date < date(year, 1, 1)).all():
            try:
                event_date.date = event_date.date.replace(year=year)
            except ValueError:
                # 29 February outside a leap year
                event_date.date = date(year, 2, 28)
            updated += 1
        db.commit()
        return BulkResult(count=updated, message=f"Updated {updated} dates to {year}")
