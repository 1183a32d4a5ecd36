from sqlalchemy.orm import Session
from typing import Iterable, List, Optional, Tuple

from .. import models
from ..models.booking_status import BookingStatus
from .pagination import paginate

WORK_HISTORY_DEFAULT = (BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.REJECTED)
CONTRACTOR_ACTIVE_DEFAULT = (
    BookingStatus.ACCEPTED,
    BookingStatus.CONFIRMED,
    BookingStatus.IN_PROGRESS,
    BookingStatus.COMPLETED,
    BookingStatus.CANCELLED,
)


def _statuses(status: Optional[BookingStatus], default: Optional[Iterable[BookingStatus]]):
    if status is not None:
        return [status]
    return list(default) if default else None


class CRUDBooking:
    def get_booking(self, db: Session, booking_id: int) -> Optional[models.Booking]:
        return db.query(models.Booking).filter(models.Booking.id == booking_id).first()

    def _list(
        self,
        db: Session,
        column,
        owner_id: int,
        statuses: Optional[List[BookingStatus]],
        page: int,
        limit: int,
    ) -> Tuple[List[models.Booking], dict]:
        query = db.query(models.Booking).filter(column == owner_id)
        if statuses:
            query = query.filter(models.Booking.status.in_(statuses))
        query = query.order_by(models.Booking.created_at.desc(), models.Booking.id.desc())
        return paginate(query, page, limit)

    def get_bookings_by_customer(
        self, db: Session, customer_id: int, status: Optional[BookingStatus] = None, page: int = 1, limit: int = 20
    ):
        return self._list(db, models.Booking.customer_id, customer_id, _statuses(status, None), page, limit)

    def get_jobs_by_worker(
        self, db: Session, worker_id: int, status: Optional[BookingStatus] = None, page: int = 1, limit: int = 20
    ):
        return self._list(db, models.Booking.worker_id, worker_id, _statuses(status, None), page, limit)

    def get_work_history(
        self, db: Session, worker_id: int, status: Optional[BookingStatus] = None, page: int = 1, limit: int = 20
    ):
        return self._list(
            db, models.Booking.worker_id, worker_id, _statuses(status, WORK_HISTORY_DEFAULT), page, limit
        )

    def get_contractor_requests(
        self, db: Session, contractor_id: int, status: Optional[BookingStatus] = None, page: int = 1, limit: int = 20
    ):
        return self._list(
            db, models.Booking.contractor_id, contractor_id, _statuses(status, None), page, limit
        )

    def get_contractor_active_jobs(
        self, db: Session, contractor_id: int, status: Optional[BookingStatus] = None, page: int = 1, limit: int = 20
    ):
        return self._list(
            db,
            models.Booking.contractor_id,
            contractor_id,
            _statuses(status, CONTRACTOR_ACTIVE_DEFAULT),
            page,
            limit,
        )

booking = CRUDBooking()
