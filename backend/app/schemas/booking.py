# backend/app/schemas/booking.py

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from ..models.booking import BookingPaymentMethod, PreferredTime, Urgency, WorkerArrival
from ..models.booking_status import BookingStatus
from .common import Pagination


class BookingBase(BaseModel):
    work_type: str = Field(min_length=1)
    location: str = Field(min_length=1)
    description: str = ""
    start_date: datetime
    end_date: Optional[datetime] = None
    contact_phone: str = ""
    contact_email: str = ""
    urgency: Urgency = Urgency.NORMAL
    preferred_time: PreferredTime = PreferredTime.FLEXIBLE
    worker_arrival: WorkerArrival = WorkerArrival.FLEXIBLE
    payment_method: BookingPaymentMethod = BookingPaymentMethod.CASH
    budget: Optional[Decimal] = Field(default=None, ge=0)
    notes: str = ""


class BookingCreate(BookingBase):
    worker_id: int
    use_wallet: bool = False

    @model_validator(mode="after")
    def _end_after_start(self):
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class BookingUpdate(BaseModel):
    """Customer-editable details; every field optional."""
    work_type: Optional[str] = Field(default=None, min_length=1)
    location: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    preferred_time: Optional[PreferredTime] = None
    urgency: Optional[Urgency] = None
    budget: Optional[Decimal] = Field(default=None, ge=0)
    payment_method: Optional[BookingPaymentMethod] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    notes: Optional[str] = None


class BookingAccept(BaseModel):
    notes: Optional[str] = None


class BookingReject(BaseModel):
    reason: Optional[str] = None


class BookingCancel(BaseModel):
    reason: Optional[str] = None


class BookingStatusUpdate(BaseModel):
    status: BookingStatus
    notes: Optional[str] = None
    final_price: Optional[Decimal] = Field(default=None, ge=0)


class BookingResponse(BookingBase):
    id: int
    customer_id: int
    worker_id: int
    contractor_id: Optional[int] = None
    use_wallet: bool
    wallet_transaction_id: Optional[int] = None
    final_price: Optional[Decimal] = None
    commission_amount: Optional[Decimal] = None
    status: BookingStatus
    accepted_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    rejected_reason: Optional[str] = None
    cancellation_reason: Optional[str] = None
    has_rated: bool
    rating_submitted_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class BookingListResponse(BaseModel):
    bookings: List[BookingResponse]
    pagination: Pagination
