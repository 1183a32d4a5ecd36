# backend/app/models/booking.py

import enum

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from .base import BaseModel
from .booking_status import BookingStatus
from .types import CaseInsensitiveEnum


class Urgency(str, enum.Enum):
    NORMAL = "normal"
    URGENT = "urgent"
    EMERGENCY = "emergency"


class PreferredTime(str, enum.Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    FLEXIBLE = "flexible"


class WorkerArrival(str, enum.Enum):
    FLEXIBLE = "flexible"
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"
    ASAP = "asap"


class BookingPaymentMethod(str, enum.Enum):
    CASH = "cash"
    ONLINE = "online"
    UPI = "upi"
    CHEQUE = "cheque"
    OTHER = "other"


class Booking(BaseModel):
    __tablename__ = "bookings"

    id            = Column(Integer, primary_key=True, index=True)
    customer_id   = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    worker_id     = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # Null for independent workers
    contractor_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    work_type     = Column(String, nullable=False)
    location      = Column(String, nullable=False)
    description   = Column(Text, nullable=False, default="")
    start_date    = Column(DateTime, nullable=False)
    end_date      = Column(DateTime, nullable=True)

    contact_phone = Column(String, nullable=False, default="")
    contact_email = Column(String, nullable=False, default="")
    urgency       = Column(CaseInsensitiveEnum(Urgency, name="bookingurgency"), default=Urgency.NORMAL)
    preferred_time = Column(
        CaseInsensitiveEnum(PreferredTime, name="preferredtime"), default=PreferredTime.FLEXIBLE
    )
    worker_arrival = Column(
        CaseInsensitiveEnum(WorkerArrival, name="workerarrival"), default=WorkerArrival.FLEXIBLE
    )

    payment_method = Column(
        CaseInsensitiveEnum(BookingPaymentMethod, name="bookingpaymentmethod"),
        default=BookingPaymentMethod.CASH,
    )
    budget        = Column(Numeric(12, 2), nullable=True)
    use_wallet    = Column(Boolean, nullable=False, default=False)
    wallet_transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=True, unique=True)
    # Set on completion; commission is the rate at that moment applied to final_price
    final_price   = Column(Numeric(12, 2), nullable=True)
    commission_amount = Column(Numeric(12, 2), nullable=True)

    status        = Column(
        CaseInsensitiveEnum(BookingStatus, name="bookingstatus"),
        nullable=False,
        default=BookingStatus.PENDING,
        index=True,
    )
    accepted_at   = Column(DateTime, nullable=True)
    confirmed_at  = Column(DateTime, nullable=True)
    started_at    = Column(DateTime, nullable=True)
    completed_at  = Column(DateTime, nullable=True, index=True)
    cancelled_at  = Column(DateTime, nullable=True)
    rejected_at   = Column(DateTime, nullable=True)
    rejected_reason = Column(String, nullable=True)
    cancellation_reason = Column(String, nullable=True)

    has_rated     = Column(Boolean, nullable=False, default=False)
    rating_submitted_at = Column(DateTime, nullable=True)

    notes         = Column(Text, nullable=False, default="")

    # Optimistic concurrency: every UPDATE is conditioned on the version read
    version       = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    # Relationships
    customer   = relationship("User", foreign_keys=[customer_id])
    worker     = relationship("User", foreign_keys=[worker_id])
    contractor = relationship("User", foreign_keys=[contractor_id])
    wallet_transaction = relationship("WalletTransaction", foreign_keys=[wallet_transaction_id])
    rating     = relationship("Rating", back_populates="booking", uselist=False)
