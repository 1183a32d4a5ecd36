import enum


class BookingStatus(str, enum.Enum):
    """Central booking status enumeration used across the application."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REJECTED = "rejected"


# Legal forward moves for worker/contractor driven updates.
ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.ACCEPTED, BookingStatus.REJECTED}),
    BookingStatus.ACCEPTED: frozenset(
        {BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS, BookingStatus.CANCELLED}
    ),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.IN_PROGRESS, BookingStatus.CANCELLED}),
    BookingStatus.IN_PROGRESS: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.REJECTED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}

CUSTOMER_CANCELLABLE = frozenset(
    {BookingStatus.PENDING, BookingStatus.ACCEPTED, BookingStatus.CONFIRMED}
)
CUSTOMER_EDITABLE = CUSTOMER_CANCELLABLE
DELETABLE = frozenset({BookingStatus.PENDING, BookingStatus.REJECTED, BookingStatus.CANCELLED})
ACTIVE_STATUSES = frozenset(
    {BookingStatus.ACCEPTED, BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS}
)

# Timestamp column stamped when a booking first enters a status
STATUS_TIMESTAMPS: dict[BookingStatus, str] = {
    BookingStatus.ACCEPTED: "accepted_at",
    BookingStatus.CONFIRMED: "confirmed_at",
    BookingStatus.IN_PROGRESS: "started_at",
    BookingStatus.COMPLETED: "completed_at",
    BookingStatus.CANCELLED: "cancelled_at",
    BookingStatus.REJECTED: "rejected_at",
}


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())
