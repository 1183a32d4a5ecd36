from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import ORJSONResponse
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.user import User
from ..schemas.booking import BookingCancel, BookingResponse
from ..schemas.rating import RecalculateResponse
from ..schemas.user import ContractorAssign, UserResponse
from ..services import bookings, dashboard, ratings
from .dependencies import get_current_admin

router = APIRouter(prefix="/admin", tags=["admin"], default_response_class=ORJSONResponse)
logger = logging.getLogger(__name__)


# ────────────────────────────────────────────────────────────────────────────────
# Bookings and workers

@router.put("/bookings/{booking_id}/cancel", response_model=BookingResponse)
def admin_cancel_booking(
    booking_id: int,
    payload: Optional[BookingCancel] = None,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    """Cancel a booking in any state but cancelled/rejected, completed included."""
    return bookings.admin_cancel(db, booking_id, admin, payload.reason if payload else None)


@router.put("/workers/{worker_id}/contractor", response_model=UserResponse)
def assign_worker_contractor(
    worker_id: int,
    payload: ContractorAssign,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    worker = bookings.assign_contractor(db, worker_id, payload.contractor_id)
    logger.info("Admin id=%s moved worker id=%s to contractor id=%s", admin.id, worker_id, payload.contractor_id)
    return worker


@router.post("/ratings/recalculate", response_model=RecalculateResponse)
def recalculate_ratings(
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    return RecalculateResponse(updated=ratings.recalculate_all_ratings(db))


# ────────────────────────────────────────────────────────────────────────────────
# Dashboards

@router.get("/dashboard-stats")
def read_dashboard_stats(
    time_range: str = Query(dashboard.DEFAULT_TIME_RANGE, alias="timeRange"),
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> Dict[str, Any]:
    """Window rollups; ``timeRange`` is one of 24h, 7d, 30d, 90d (anything else means 7d)."""
    return dashboard.admin_dashboard_stats(db, time_range)


@router.get("/user-stats")
def read_user_stats(db: Session = Depends(get_db), admin: User = Depends(get_current_admin)):
    return dashboard.user_stats(db)


@router.get("/booking-stats")
def read_booking_stats(db: Session = Depends(get_db), admin: User = Depends(get_current_admin)):
    return dashboard.booking_stats(db)


@router.get("/transaction-stats")
def read_transaction_stats(db: Session = Depends(get_db), admin: User = Depends(get_current_admin)):
    return dashboard.transaction_stats(db)


@router.get("/rating-stats")
def read_rating_stats(db: Session = Depends(get_db), admin: User = Depends(get_current_admin)):
    return dashboard.rating_stats(db)
