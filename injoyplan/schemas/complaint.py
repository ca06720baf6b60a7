"""Complaint (Libro de Reclamaciones) Pydantic schemas."""
from pydantic import BaseModel, Field, field_validator
from typing import Optional
import re

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class ComplaintCreate(BaseModel):
    """Schema for filing a complaint."""
    consumer_name: str = Field(..., min_length=1)
    consumer_doc_type: str = Field(..., min_length=1)
    consumer_doc_number: str = Field(..., min_length=1)
    consumer_address: Optional[str] = None
    consumer_department: Optional[str] = None
    consumer_province: Optional[str] = None
    consumer_district: Optional[str] = None
    consumer_phone: Optional[str] = None
    consumer_email: Optional[str] = None
    is_minor: bool = False
    
    rep_name: Optional[str] = None
    rep_doc_type: Optional[str] = None
    rep_doc_number: Optional[str] = None
    rep_address: Optional[str] = None
    rep_department: Optional[str] = None
    rep_province: Optional[str] = None
    rep_district: Optional[str] = None
    rep_phone: Optional[str] = None
    rep_email: Optional[str] = None
    
    good_type: str = Field(..., min_length=1)
    claim_amount: float = Field(..., ge=0)
    good_description: str = Field(..., min_length=1)
    claim_type: str = Field(..., min_length=1)
    claim_detail: str = Field(..., min_length=1)
    order_request: str = Field(..., min_length=1)
    
    @field_validator("consumer_email", "rep_email")
    @classmethod
    def check_email(cls, value: Optional[str]) -> Optional[str]:
        # Empty strings come from blank form fields
        if not value:
            return None
        if not _EMAIL_RE.match(value):
            raise ValueError("invalid email address")
        return value


class ComplaintReceipt(BaseModel):
    """Result of filing a complaint."""
    message: str
    id: str
