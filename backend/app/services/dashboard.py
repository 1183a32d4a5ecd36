"""Read-only rollups for the admin, customer, worker and contractor dashboards.

Nothing here writes. Figures reflect whatever is committed when the query
runs; amounts are returned as ``Decimal`` rounded to cents.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from .. import models
from ..models.booking_status import ACTIVE_STATUSES, BookingStatus
from ..models.transaction import TransactionStatus, TransactionType
from ..models.user import UserRole, WORKER_ROLES
from .ledger import to_money
from .ratings import round_rating

TIME_RANGES: Dict[str, timedelta] = {
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
    "90d": timedelta(days=90),
}
DEFAULT_TIME_RANGE = "7d"

_ROLE_KEYS = {
    UserRole.CUSTOMER: "customers",
    UserRole.WORKER: "workers",
    UserRole.CONTRACTOR: "contractors",
    UserRole.INDEPENDENT_WORKER: "independentWorkers",
    UserRole.ADMIN: "admins",
}


def resolve_time_range(time_range: Optional[str]) -> str:
    return time_range if time_range in TIME_RANGES else DEFAULT_TIME_RANGE


def window_start(time_range: Optional[str], now: Optional[datetime] = None) -> datetime:
    now = now or datetime.utcnow()
    return now - TIME_RANGES[resolve_time_range(time_range)]


def month_bounds(now: datetime) -> Tuple[datetime, datetime]:
    """Return ``(start of previous month, start of this month)``."""
    this_month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    last_month = (this_month - timedelta(days=1)).replace(day=1)
    return last_month, this_month


def _status_counts(query) -> Dict[str, int]:
    counts = {status.value: 0 for status in BookingStatus}
    for status, n in query.group_by(models.Booking.status).all():
        counts[BookingStatus(status).value] = int(n)
    counts["total"] = sum(counts.values())
    return counts


def _booking_counts(db: Session, *criteria) -> Dict[str, int]:
    query = db.query(models.Booking.status, func.count(models.Booking.id)).filter(*criteria)
    return _status_counts(query)


def _rating_stats(db: Session, *criteria) -> Dict[str, Any]:
    avg, total = (
        db.query(func.avg(models.Rating.rating), func.count(models.Rating.id))
        .filter(*criteria)
        .one()
    )
    distribution = {star: 0 for star in range(1, 6)}
    rows = (
        db.query(models.Rating.rating, func.count(models.Rating.id))
        .filter(*criteria)
        .group_by(models.Rating.rating)
        .all()
    )
    for star, n in rows:
        distribution[int(star)] = int(n)
    return {
        "average": round_rating(avg) if total else 0.0,
        "total": int(total or 0),
        "distribution": distribution,
    }


def _price(booking: models.Booking) -> Decimal:
    if booking.final_price is not None:
        return to_money(booking.final_price)
    return to_money(booking.budget or 0)


def _sum_price(bookings: List[models.Booking]) -> Decimal:
    return to_money(sum((_price(b) for b in bookings), Decimal("0")))


def admin_dashboard_stats(
    db: Session, time_range: Optional[str] = DEFAULT_TIME_RANGE, now: Optional[datetime] = None
) -> Dict[str, Any]:
    now = now or datetime.utcnow()
    resolved = resolve_time_range(time_range)
    start = window_start(resolved, now)

    users = {key: 0 for key in _ROLE_KEYS.values()}
    for role, n in (
        db.query(models.User.role, func.count(models.User.id))
        .filter(models.User.created_at >= start)
        .group_by(models.User.role)
        .all()
    ):
        users[_ROLE_KEYS[UserRole(role)]] = int(n)
    users["total"] = sum(users.values())

    bookings = _booking_counts(db, models.Booking.created_at >= start)

    txns = (
        db.query(models.WalletTransaction.type, models.WalletTransaction.amount)
        .filter(
            models.WalletTransaction.status == TransactionStatus.COMPLETED,
            models.WalletTransaction.created_at >= start,
        )
        .all()
    )
    by_type: Dict[TransactionType, Decimal] = {t: Decimal("0") for t in TransactionType}
    for txn_type, amount in txns:
        by_type[TransactionType(txn_type)] += to_money(amount)
    transactions = {
        "total": len(txns),
        "totalAmount": to_money(sum(by_type.values(), Decimal("0"))),
        "recharge": to_money(by_type[TransactionType.RECHARGE]),
        "payments": to_money(by_type[TransactionType.PAYMENT]),
        "earnings": to_money(by_type[TransactionType.EARNING]),
    }

    last_month, this_month = month_bounds(now)
    completed = (
        db.query(models.Booking)
        .filter(
            models.Booking.status == BookingStatus.COMPLETED,
            models.Booking.created_at >= start,
        )
        .all()
    )
    total = Decimal("0")
    current = Decimal("0")
    previous = Decimal("0")
    for booking in completed:
        fee = to_money(booking.commission_amount or 0)
        total += fee
        done = booking.completed_at
        if done is not None and done >= this_month:
            current += fee
        elif done is not None and last_month <= done < this_month:
            previous += fee
    revenue = {
        "total": to_money(total),
        "thisMonth": to_money(current),
        "lastMonth": to_money(previous),
        "commission": to_money(total),
    }

    return {
        "timeRange": resolved,
        "users": users,
        "bookings": bookings,
        "transactions": transactions,
        "revenue": revenue,
        "ratings": _rating_stats(db, models.Rating.created_at >= start),
    }


def user_stats(db: Session) -> Dict[str, int]:
    stats = {key: 0 for key in _ROLE_KEYS.values()}
    for role, n in db.query(models.User.role, func.count(models.User.id)).group_by(models.User.role).all():
        stats[_ROLE_KEYS[UserRole(role)]] = int(n)
    stats["total"] = sum(stats.values())
    return stats


def booking_stats(db: Session) -> Dict[str, int]:
    return _booking_counts(db)


def transaction_stats(db: Session) -> Dict[str, Dict[str, Any]]:
    stats = {t.value: {"count": 0, "totalAmount": Decimal("0.00")} for t in TransactionType}
    rows = (
        db.query(
            models.WalletTransaction.type,
            func.count(models.WalletTransaction.id),
            func.sum(models.WalletTransaction.amount),
        )
        .filter(models.WalletTransaction.status == TransactionStatus.COMPLETED)
        .group_by(models.WalletTransaction.type)
        .all()
    )
    for txn_type, n, amount in rows:
        stats[TransactionType(txn_type).value] = {"count": int(n), "totalAmount": to_money(amount or 0)}
    return stats


def rating_stats(db: Session) -> Dict[str, Any]:
    return _rating_stats(db)


def _recent_bookings(db: Session, column, owner_id: int, limit: int = 5) -> List[models.Booking]:
    return (
        db.query(models.Booking)
        .filter(column == owner_id)
        .order_by(models.Booking.created_at.desc(), models.Booking.id.desc())
        .limit(limit)
        .all()
    )


def customer_dashboard(db: Session, customer_id: int) -> Dict[str, Any]:
    stats = _booking_counts(db, models.Booking.customer_id == customer_id)
    completed = (
        db.query(models.Booking)
        .filter(
            models.Booking.customer_id == customer_id,
            models.Booking.status == BookingStatus.COMPLETED,
        )
        .all()
    )
    stats["totalSpent"] = _sum_price(completed)
    return {
        "stats": stats,
        "recentBookings": _recent_bookings(db, models.Booking.customer_id, customer_id),
    }


def worker_dashboard(db: Session, worker_id: int, now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or datetime.utcnow()
    _, this_month = month_bounds(now)
    bookings = db.query(models.Booking).filter(models.Booking.worker_id == worker_id).all()
    completed = [b for b in bookings if b.status == BookingStatus.COMPLETED]
    monthly = [b for b in completed if b.completed_at is not None and b.completed_at >= this_month]
    total = len(bookings)
    stats = {
        "totalJobs": total,
        "activeJobs": sum(1 for b in bookings if b.status in ACTIVE_STATUSES),
        "completedJobs": len(completed),
        "cancelledJobs": sum(1 for b in bookings if b.status == BookingStatus.CANCELLED),
        "pendingJobs": sum(1 for b in bookings if b.status == BookingStatus.PENDING),
        "inProgressJobs": sum(1 for b in bookings if b.status == BookingStatus.IN_PROGRESS),
        "monthlyEarnings": _sum_price(monthly),
        "totalEarnings": _sum_price(completed),
        "performance": round(len(completed) * 100 / total) if total else 0,
    }
    return {
        "stats": stats,
        "recentJobs": _recent_bookings(db, models.Booking.worker_id, worker_id),
    }


def contractor_dashboard(db: Session, contractor_id: int, now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or datetime.utcnow()
    _, this_month = month_bounds(now)
    team = (
        db.query(models.User)
        .filter(models.User.contractor_id == contractor_id, models.User.role.in_(WORKER_ROLES))
        .order_by(models.User.created_at.desc(), models.User.id.desc())
        .all()
    )
    active = (
        db.query(func.count(models.Booking.id))
        .filter(
            models.Booking.contractor_id == contractor_id,
            models.Booking.status.in_(ACTIVE_STATUSES),
        )
        .scalar()
    )
    pending = (
        db.query(func.count(models.Booking.id))
        .filter(
            models.Booking.contractor_id == contractor_id,
            models.Booking.status == BookingStatus.PENDING,
        )
        .scalar()
    )
    monthly = (
        db.query(models.Booking)
        .filter(
            models.Booking.contractor_id == contractor_id,
            models.Booking.status == BookingStatus.COMPLETED,
            models.Booking.completed_at >= this_month,
        )
        .all()
    )

    activities = []
    for worker in team[:3]:
        activities.append(
            {
                "type": "worker_added",
                "description": f'New {worker.role.value.replace("_", " ")} "{worker.name}" joined your team',
                "timestamp": worker.created_at,
            }
        )
    for booking in _recent_bookings(db, models.Booking.contractor_id, contractor_id, limit=3):
        if booking.status == BookingStatus.PENDING:
            customer_name = booking.customer.name if booking.customer else "Customer"
            activities.append(
                {
                    "type": "job_request",
                    "description": f"New job request for {booking.work_type} from {customer_name}",
                    "timestamp": booking.created_at,
                }
            )
        elif booking.status == BookingStatus.COMPLETED:
            activities.append(
                {
                    "type": "job_completed",
                    "description": f'Job "{booking.work_type}" completed successfully',
                    "timestamp": booking.completed_at or booking.created_at,
                }
            )
    activities.sort(key=lambda a: a["timestamp"], reverse=True)

    return {
        "stats": {
            "totalWorkers": len(team),
            "activeJobs": int(active or 0),
            "pendingRequests": int(pending or 0),
            "monthlyEarnings": _sum_price(monthly),
        },
        "recentActivities": activities[:5],
    }
