"""Booking lifecycle.

Status writes rely on the ``version`` column mapped as SQLAlchemy's
``version_id_col``: the UPDATE only matches the version that was read, so a
transition racing another one on the same booking fails with
``ConcurrentUpdate`` instead of silently overwriting it.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from .. import crud, models, schemas
from ..core.config import settings
from ..models.booking_status import (
    CUSTOMER_CANCELLABLE,
    CUSTOMER_EDITABLE,
    DELETABLE,
    STATUS_TIMESTAMPS,
    BookingStatus,
    can_transition,
)
from ..models.transaction import TransactionType, WalletPaymentMethod
from ..models.user import AccountStatus, UserRole
from ..utils.errors import ConcurrentUpdate, Forbidden, InvalidTransition, NotFound, ValidationError
from . import ledger

logger = logging.getLogger(__name__)

DEFAULT_REASON = "No reason provided"


def _commit(db: Session, booking_id: int) -> None:
    try:
        db.commit()
    except StaleDataError:
        db.rollback()
        logger.warning("Booking id=%s changed concurrently; update discarded", booking_id)
        raise ConcurrentUpdate(
            "Booking was modified concurrently, please retry",
            {"booking_id": str(booking_id)},
        )
    except Exception:
        db.rollback()
        raise


def _save(db: Session, booking: models.Booking) -> models.Booking:
    _commit(db, booking.id)
    db.refresh(booking)
    return booking


def _get(db: Session, booking_id: int) -> models.Booking:
    booking = crud.booking.get_booking(db, booking_id)
    if booking is None:
        raise NotFound("Booking not found", {"booking_id": str(booking_id)})
    return booking


def _stamp(booking: models.Booking, status: BookingStatus, now: datetime) -> None:
    field = STATUS_TIMESTAMPS.get(status)
    if field and getattr(booking, field) is None:
        setattr(booking, field, now)


def _apply(booking: models.Booking, target: BookingStatus) -> None:
    booking.status = target
    _stamp(booking, target, datetime.utcnow())


def commission_for(amount) -> Decimal:
    """Platform commission on ``amount`` at the currently configured rate."""
    rate = Decimal(str(settings.COMMISSION_RATE)) / Decimal(100)
    return ledger.to_money(ledger.to_money(amount or 0) * rate)


def _is_handler(booking: models.Booking, actor: models.User) -> bool:
    return actor.id == booking.worker_id or (
        booking.contractor_id is not None and actor.id == booking.contractor_id
    )


def resolve_contractor(db: Session, worker: models.User) -> Optional[int]:
    """Return the contractor id a new booking for ``worker`` is attached to."""
    if not worker.requires_contractor:
        return None
    if worker.contractor_id is not None:
        return worker.contractor_id
    if not settings.CONTRACTOR_FALLBACK_ENABLED:
        raise ValidationError(
            "Worker is not assigned to a contractor",
            {"worker_id": "worker has no contractor"},
        )
    contractor = crud.user.first_approved_contractor(db)
    if contractor is None:
        raise ValidationError(
            "No contractor available for this worker",
            {"worker_id": "no approved contractor exists"},
        )
    worker.contractor_id = contractor.id
    logger.warning(
        "Worker id=%s had no contractor; assigned fallback contractor id=%s",
        worker.id,
        contractor.id,
    )
    return contractor.id


def create_booking(
    db: Session, customer: models.User, booking_in: schemas.BookingCreate
) -> models.Booking:
    """Create a pending booking, paying from the customer's wallet when asked.

    The wallet debit, any fallback contractor assignment and the booking row
    commit together; if any step fails none of them is kept.
    """
    worker = crud.user.get_user(db, booking_in.worker_id)
    if worker is None:
        raise NotFound("Worker not found", {"worker_id": str(booking_in.worker_id)})
    if not worker.is_worker:
        raise ValidationError("Selected user is not a worker", {"worker_id": "not a worker"})
    if worker.status != AccountStatus.APPROVED:
        raise ValidationError("Worker is not available for booking", {"worker_id": "worker not approved"})
    if worker.id == customer.id:
        raise ValidationError("Cannot book yourself", {"worker_id": "same as customer"})

    data = booking_in.model_dump(exclude={"worker_id"})
    try:
        contractor_id = resolve_contractor(db, worker)
        booking = models.Booking(
            **data,
            customer_id=customer.id,
            worker_id=worker.id,
            contractor_id=contractor_id,
            status=BookingStatus.PENDING,
        )
        budget = booking_in.budget or Decimal("0")
        if booking_in.use_wallet and budget > 0:
            txn = ledger.post_transaction(
                db,
                customer.id,
                TransactionType.PAYMENT,
                budget,
                payment_method=WalletPaymentMethod.WALLET,
                description=f"Payment for {booking_in.work_type} booking",
                related_account_id=worker.id,
                commit=False,
            )
            booking.wallet_transaction_id = txn.id
        db.add(booking)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(booking)
    logger.info(
        "Booking id=%s created customer=%s worker=%s contractor=%s wallet_txn=%s",
        booking.id,
        customer.id,
        worker.id,
        booking.contractor_id,
        booking.wallet_transaction_id,
    )
    return booking


def get_booking(db: Session, booking_id: int, actor: models.User) -> models.Booking:
    booking = _get(db, booking_id)
    if actor.role == UserRole.ADMIN:
        return booking
    if actor.id not in (booking.customer_id, booking.worker_id, booking.contractor_id):
        raise Forbidden("Not authorized to view this booking", {"booking_id": str(booking_id)})
    return booking


def _transition(
    db: Session,
    booking_id: int,
    actor: models.User,
    target: BookingStatus,
    **changes,
) -> models.Booking:
    booking = _get(db, booking_id)
    if not _is_handler(booking, actor):
        raise Forbidden("Not authorized to update this booking", {"booking_id": str(booking_id)})
    if booking.status == target:
        logger.info("Booking id=%s already %s; nothing to do", booking.id, target.value)
        return booking
    if not can_transition(booking.status, target):
        logger.warning(
            "Rejected transition booking=%s %s -> %s by user=%s",
            booking.id,
            booking.status.value,
            target.value,
            actor.id,
        )
        raise InvalidTransition(
            f"Cannot change booking from {booking.status.value} to {target.value}",
            {"status": target.value},
        )
    _apply(booking, target)
    for key, value in changes.items():
        if value is not None:
            setattr(booking, key, value)
    return _save(db, booking)


def accept_booking(
    db: Session, booking_id: int, actor: models.User, notes: Optional[str] = None
) -> models.Booking:
    return _transition(db, booking_id, actor, BookingStatus.ACCEPTED, notes=notes)


def reject_booking(
    db: Session, booking_id: int, actor: models.User, reason: Optional[str] = None
) -> models.Booking:
    reason = (reason or "").strip() or DEFAULT_REASON
    return _transition(db, booking_id, actor, BookingStatus.REJECTED, rejected_reason=reason)


def update_status(
    db: Session,
    booking_id: int,
    actor: models.User,
    status: BookingStatus | str,
    notes: Optional[str] = None,
    final_price: Optional[Decimal] = None,
) -> models.Booking:
    """Move the booking one step along its lifecycle.

    Completing a booking records its ``final_price`` (the budget when none is
    given) together with the commission owed on it at the current rate.
    """
    try:
        target = BookingStatus(status)
    except ValueError:
        raise ValidationError("Unknown booking status", {"status": str(status)})
    if target != BookingStatus.COMPLETED:
        if final_price is not None:
            raise ValidationError(
                "final_price can only be set when completing a booking",
                {"final_price": target.value},
            )
        return _transition(db, booking_id, actor, target, notes=notes)
    if final_price is not None and ledger.to_money(final_price) < 0:
        raise ValidationError("final_price must not be negative", {"final_price": str(final_price)})
    booking = _get(db, booking_id)
    price = ledger.to_money(final_price if final_price is not None else booking.budget or 0)
    return _transition(
        db,
        booking_id,
        actor,
        target,
        notes=notes,
        final_price=price,
        commission_amount=commission_for(price),
    )


def cancel_by_customer(
    db: Session, booking_id: int, customer: models.User, reason: Optional[str] = None
) -> models.Booking:
    booking = _get(db, booking_id)
    if booking.customer_id != customer.id:
        raise Forbidden("Not authorized to cancel this booking", {"booking_id": str(booking_id)})
    if booking.status not in CUSTOMER_CANCELLABLE:
        logger.warning("Customer cancel refused booking=%s status=%s", booking.id, booking.status.value)
        raise InvalidTransition(
            f"Cannot cancel a booking that is {booking.status.value}",
            {"status": booking.status.value},
        )
    _apply(booking, BookingStatus.CANCELLED)
    booking.cancellation_reason = (reason or "").strip() or DEFAULT_REASON
    return _save(db, booking)


def admin_cancel(
    db: Session, booking_id: int, admin: models.User, reason: Optional[str] = None
) -> models.Booking:
    """Cancel any booking that is not already cancelled or rejected, including completed ones.

    Funds already moved for the booking are left as they are.
    """
    if admin.role != UserRole.ADMIN:
        raise Forbidden("Admin access required", {"role": admin.role.value})
    booking = _get(db, booking_id)
    if booking.status in (BookingStatus.CANCELLED, BookingStatus.REJECTED):
        raise InvalidTransition(
            f"Cannot cancel a booking that is {booking.status.value}",
            {"status": booking.status.value},
        )
    _apply(booking, BookingStatus.CANCELLED)
    booking.cancellation_reason = (reason or "").strip() or DEFAULT_REASON
    logger.info("Admin id=%s cancelled booking id=%s", admin.id, booking.id)
    return _save(db, booking)


def update_details(
    db: Session, booking_id: int, customer: models.User, update_in: schemas.BookingUpdate
) -> models.Booking:
    booking = _get(db, booking_id)
    if booking.customer_id != customer.id:
        raise Forbidden("Not authorized to edit this booking", {"booking_id": str(booking_id)})
    if booking.status not in CUSTOMER_EDITABLE:
        raise InvalidTransition(
            f"Cannot edit a booking that is {booking.status.value}",
            {"status": booking.status.value},
        )
    data = update_in.model_dump(exclude_unset=True)
    if "budget" in data and booking.use_wallet:
        current = ledger.to_money(booking.budget or 0)
        requested = ledger.to_money(data["budget"] or 0)
        if requested != current:
            raise ValidationError(
                "Budget cannot be changed on a wallet-paid booking",
                {"budget": "paid from wallet"},
            )
    start = data.get("start_date", booking.start_date)
    end = data.get("end_date", booking.end_date)
    if start is not None and end is not None and end < start:
        raise ValidationError("end_date must not be before start_date", {"end_date": "before start_date"})
    for key, value in data.items():
        if value is None and key not in ("end_date", "budget"):
            continue
        setattr(booking, key, value)
    return _save(db, booking)


def delete_booking(db: Session, booking_id: int, actor: models.User) -> None:
    booking = _get(db, booking_id)
    is_admin = actor.role == UserRole.ADMIN
    is_contractor = booking.contractor_id is not None and actor.id == booking.contractor_id
    if not (is_admin or is_contractor):
        raise Forbidden("Not authorized to delete this booking", {"booking_id": str(booking_id)})
    if booking.status not in DELETABLE:
        raise InvalidTransition(
            f"Cannot delete a booking that is {booking.status.value}",
            {"status": booking.status.value},
        )
    if booking.has_rated or crud.rating.get_rating_by_booking(db, booking.id) is not None:
        raise InvalidTransition(
            "Cannot delete a booking that has been rated",
            {"booking_id": str(booking_id)},
        )
    db.delete(booking)
    _commit(db, booking_id)
    logger.info("Booking id=%s deleted by user=%s", booking_id, actor.id)


def assign_contractor(db: Session, worker_id: int, contractor_id: int) -> models.User:
    """Attach a contract worker to a contractor (administrative action)."""
    worker = crud.user.get_user(db, worker_id)
    if worker is None:
        raise NotFound("Worker not found", {"worker_id": str(worker_id)})
    if worker.role != UserRole.WORKER:
        raise ValidationError(
            "Only contract workers can be assigned to a contractor",
            {"worker_id": worker.role.value},
        )
    contractor = crud.user.get_user(db, contractor_id)
    if contractor is None or contractor.role != UserRole.CONTRACTOR:
        raise NotFound("Contractor not found", {"contractor_id": str(contractor_id)})
    previous = worker.contractor_id
    worker.contractor_id = contractor.id
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(worker)
    logger.info(
        "Worker id=%s assigned to contractor id=%s (was %s)", worker.id, contractor.id, previous
    )
    return worker


def assign_unassigned_workers(db: Session, contractor_id: int) -> int:
    """Attach every contract worker without a contractor to ``contractor_id``."""
    contractor = crud.user.get_user(db, contractor_id)
    if contractor is None or contractor.role != UserRole.CONTRACTOR:
        raise NotFound("Contractor not found", {"contractor_id": str(contractor_id)})
    workers = crud.user.get_unassigned_workers(db)
    for worker in workers:
        worker.contractor_id = contractor.id
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Assigned %s unassigned workers to contractor id=%s", len(workers), contractor.id)
    return len(workers)
