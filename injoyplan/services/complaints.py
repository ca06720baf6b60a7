"""Libro de Reclamaciones service."""
import logging
from typing import Optional
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from injoyplan.core.config import settings
from injoyplan.db.models import Complaint
from injoyplan.schemas.complaint import ComplaintCreate, ComplaintReceipt
from injoyplan.services.email import EmailClient, EmailMessage, get_email_client, render_complaint_email

logger = logging.getLogger(__name__)

LIMA = ZoneInfo("America/Lima")


class ComplaintService:
    """Stores complaints and notifies the platform by email."""

    def __init__(self, email_client: Optional[EmailClient] = None):
        self._email_client = email_client

    @property
    def email_client(self) -> EmailClient:
        if self._email_client is None:
            self._email_client = get_email_client()
        return self._email_client

    async def create_complaint(self, db: Session, payload: ComplaintCreate) -> ComplaintReceipt:
        """
        Persist a complaint and send the notification email.

        The complaint is kept even when the email fails; the failure is logged.

        Args:
            db: Database session
            payload: Complaint form

        Returns:
            ComplaintReceipt
        """
        complaint = Complaint(**payload.model_dump())
        db.add(complaint)
        db.commit()
        db.refresh(complaint)

        created_at = complaint.created_at.replace(tzinfo=ZoneInfo("UTC")).astimezone(LIMA)
        fields = payload.model_dump()
        fields.update(
            id=complaint.id,
            created_at=created_at.strftime("%d/%m/%Y %H:%M"),
            claim_amount=f"{payload.claim_amount:.2f}",
        )
        message = EmailMessage(
            to=settings.complaints_email,
            subject=f"Nueva reclamación {complaint.id} - {payload.consumer_name}",
            html=render_complaint_email(fields),
            sender=f"Injoyplan Reclamos <{settings.resend_from_email}>",
            reply_to=payload.consumer_email,
        )

        try:
            await self.email_client.send(message)
        except Exception:
            logger.exception("Failed to send complaint email for %s", complaint.id)
            return ComplaintReceipt(message="Reclamación registrada", id=complaint.id)

        return ComplaintReceipt(message="Reclamación registrada y correo enviado", id=complaint.id)
