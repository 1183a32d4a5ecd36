from .user import User, UserRole, AccountStatus, WORKER_ROLES
from .booking_status import BookingStatus
from .booking import Booking, Urgency, PreferredTime, WorkerArrival, BookingPaymentMethod
from .transaction import (
    WalletTransaction,
    TransactionType,
    TransactionStatus,
    WalletPaymentMethod,
    AppendOnlyViolation,
)
from .rating import Rating

__all__ = [
    "User",
    "UserRole",
    "AccountStatus",
    "WORKER_ROLES",
    "Booking",
    "BookingStatus",
    "Urgency",
    "PreferredTime",
    "WorkerArrival",
    "BookingPaymentMethod",
    "WalletTransaction",
    "TransactionType",
    "TransactionStatus",
    "WalletPaymentMethod",
    "AppendOnlyViolation",
    "Rating",
]
