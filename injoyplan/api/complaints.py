"""Libro de Reclamaciones API endpoint."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from injoyplan.db.session import get_db
from injoyplan.schemas.complaint import ComplaintCreate, ComplaintReceipt
from injoyplan.services.complaints import ComplaintService

router = APIRouter()
complaint_service = ComplaintService()


@router.post("/complaints", response_model=ComplaintReceipt, status_code=status.HTTP_201_CREATED)
async def create_complaint(
    complaint: ComplaintCreate,
    db: Session = Depends(get_db)
):
    """File a complaint. It is stored even when the notification email fails."""
    return await complaint_service.create_complaint(db, complaint)
