from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from .. import crud, models
from ..models.booking_status import BookingStatus
from ..models.user import WORKER_ROLES
from ..utils.errors import (
    ConcurrentUpdate,
    DuplicateRating,
    Forbidden,
    InvalidTransition,
    NotFound,
    ValidationError,
)

logger = logging.getLogger(__name__)

REVIEW_MIN = 10
REVIEW_MAX = 1000


def round_rating(value: Optional[float]) -> float:
    if value is None:
        return 0.0
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def recompute_worker_rating(db: Session, worker_id: int) -> Optional[models.User]:
    """Set the worker's aggregate from all of their rating rows. Does not commit."""
    worker = crud.user.get_user(db, worker_id)
    if worker is None:
        return None
    avg, count = crud.rating.aggregate_for_worker(db, worker_id)
    worker.average_rating = round_rating(avg) if count else 0.0
    worker.total_ratings = count
    return worker


def submit_rating(
    db: Session,
    booking_id: int,
    customer_id: int,
    rating: int,
    review: str,
    worker_id: Optional[int] = None,
) -> models.Rating:
    """Store the customer's rating for a completed booking.

    The rating row, the worker's recomputed aggregate and the booking's
    ``has_rated`` flag commit together. A second rating for the same booking
    is refused by the unique index on ``ratings.booking_id`` even if it slips
    past the lookup below.
    """
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise ValidationError("Rating must be between 1 and 5", {"rating": str(rating)})
    review = (review or "").strip()
    if not REVIEW_MIN <= len(review) <= REVIEW_MAX:
        raise ValidationError(
            f"Review must be between {REVIEW_MIN} and {REVIEW_MAX} characters",
            {"review": f"length {len(review)}"},
        )

    booking = crud.booking.get_booking(db, booking_id)
    if booking is None:
        raise NotFound("Booking not found", {"booking_id": str(booking_id)})
    if booking.customer_id != customer_id:
        raise Forbidden("You can only rate your own bookings", {"booking_id": str(booking_id)})
    if worker_id is not None and booking.worker_id != worker_id:
        raise ValidationError("Worker does not match the booking", {"worker_id": str(worker_id)})
    if booking.status != BookingStatus.COMPLETED:
        raise InvalidTransition(
            "Only completed bookings can be rated",
            {"status": booking.status.value},
        )
    if crud.rating.get_rating_by_booking(db, booking_id) is not None:
        logger.warning("Duplicate rating refused for booking id=%s", booking_id)
        raise DuplicateRating("This booking has already been rated", {"booking_id": str(booking_id)})

    try:
        db_rating = models.Rating(
            booking_id=booking.id,
            customer_id=customer_id,
            worker_id=booking.worker_id,
            rating=rating,
            review=review,
        )
        db.add(db_rating)
        db.flush()
        worker = recompute_worker_rating(db, booking.worker_id)
        booking.has_rated = True
        booking.rating_submitted_at = datetime.utcnow()
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("Duplicate rating refused by storage for booking id=%s", booking_id)
        raise DuplicateRating("This booking has already been rated", {"booking_id": str(booking_id)})
    except StaleDataError:
        db.rollback()
        raise ConcurrentUpdate("Booking was modified concurrently, please retry", {"booking_id": str(booking_id)})
    except Exception:
        db.rollback()
        raise

    db.refresh(db_rating)
    logger.info(
        "Rating id=%s booking=%s worker=%s stars=%s; worker now %s over %s ratings",
        db_rating.id,
        booking_id,
        db_rating.worker_id,
        rating,
        worker.average_rating if worker else None,
        worker.total_ratings if worker else None,
    )
    return db_rating


def recalculate_all_ratings(db: Session) -> int:
    """Recompute every worker's aggregate; workers without ratings reset to 0/0."""
    workers = db.query(models.User).filter(models.User.role.in_(WORKER_ROLES)).all()
    try:
        for worker in workers:
            recompute_worker_rating(db, worker.id)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Recalculated ratings for %s workers", len(workers))
    return len(workers)


def list_worker_ratings(db: Session, worker_id: int, page: int = 1, limit: int = 20) -> dict:
    worker = crud.user.get_user(db, worker_id)
    if worker is None or worker.role not in WORKER_ROLES:
        raise NotFound("Worker not found", {"worker_id": str(worker_id)})
    rows, pagination = crud.rating.get_ratings_by_worker(db, worker_id, page=page, limit=limit)
    return {
        "ratings": rows,
        "summary": {
            "averageRating": worker.average_rating or 0.0,
            "totalRatings": worker.total_ratings or 0,
            "ratingCounts": crud.rating.distribution_for_worker(db, worker_id),
        },
        "pagination": pagination,
    }
