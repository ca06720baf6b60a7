"""Admin console API endpoints."""
from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session
from typing import Optional
from injoyplan.db.session import get_db
from injoyplan.db.models import User
from injoyplan.schemas.admin import BulkResult, DashboardStats, ImportResult
from injoyplan.schemas.user import AdminUser, AdminUserList, RoleUpdate
from injoyplan.services.admin import AdminService
from injoyplan.services.importer import EventImporter
from injoyplan.core.security import require_admin

router = APIRouter()
admin_service = AdminService()
importer = EventImporter()


@router.get("/admin/stats", response_model=DashboardStats)
async def dashboard_stats(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Platform counters."""
    return admin_service.get_stats(db)


@router.get("/admin/users", response_model=AdminUserList)
async def list_users(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    search: Optional[str] = None,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Users newest first, with optional search."""
    return admin_service.list_users(db, page=page, limit=limit, search=search)


@router.patch("/admin/users/{user_id}/role", response_model=AdminUser)
async def update_role(
    user_id: str,
    request: RoleUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Change a user's role."""
    return admin_service.update_role(db, user_id, request.role)


@router.post("/admin/events/import", response_model=ImportResult)
async def import_events(
    file: UploadFile = File(...),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Import events from an Excel workbook or CSV file."""
    content = await file.read()
    return importer.import_file(db, file.filename or "", content)


@router.delete("/admin/events", response_model=BulkResult)
async def delete_all_events(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Delete every event."""
    return admin_service.delete_all_events(db)


@router.post("/admin/events/roll-dates", response_model=BulkResult)
async def roll_dates(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Move past-year dates into the current year."""
    return admin_service.roll_dates_to_current_year(db)
