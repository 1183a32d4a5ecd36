# backend/app/api/api_booking.py

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import ORJSONResponse
from sqlalchemy.orm import Session

from .. import crud
from ..database import get_db
from ..models.booking_status import BookingStatus
from ..models.user import User
from ..schemas.booking import (
    BookingAccept,
    BookingCancel,
    BookingCreate,
    BookingListResponse,
    BookingReject,
    BookingResponse,
    BookingStatusUpdate,
    BookingUpdate,
)
from ..services import bookings
from .dependencies import (
    PageParams,
    get_current_active_user,
    get_current_customer,
    get_current_handler,
)

router = APIRouter(tags=["bookings"], default_response_class=ORJSONResponse)
logger = logging.getLogger(__name__)
# ‣ Note: no prefix here.  main.py already does:
#     app.include_router(router, prefix=f"{API_V1_STR}/bookings", …)


def _page(rows, pagination) -> BookingListResponse:
    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in rows],
        pagination=pagination,
    )


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    *,
    db: Session = Depends(get_db),
    booking_in: BookingCreate,
    current_customer: User = Depends(get_current_customer),
):
    """
    Create a booking request.  When ``use_wallet`` is set and a budget is
    given, the budget is debited from the customer's wallet in the same
    database transaction.
    """
    return bookings.create_booking(db, current_customer, booking_in)


@router.get("/mine", response_model=BookingListResponse)
def read_my_bookings(
    *,
    db: Session = Depends(get_db),
    current_customer: User = Depends(get_current_customer),
    paging: PageParams = Depends(),
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
):
    rows, pagination = crud.booking.get_bookings_by_customer(
        db, current_customer.id, status=status_filter, page=paging.page, limit=paging.limit
    )
    return _page(rows, pagination)


@router.get("/{booking_id}", response_model=BookingResponse)
def read_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    return bookings.get_booking(db, booking_id, current_user)


@router.put("/{booking_id}", response_model=BookingResponse)
def update_booking(
    booking_id: int,
    update_in: BookingUpdate,
    db: Session = Depends(get_db),
    current_customer: User = Depends(get_current_customer),
):
    return bookings.update_details(db, booking_id, current_customer, update_in)


@router.put("/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(
    booking_id: int,
    payload: Optional[BookingCancel] = None,
    db: Session = Depends(get_db),
    current_customer: User = Depends(get_current_customer),
):
    return bookings.cancel_by_customer(db, booking_id, current_customer, payload.reason if payload else None)


@router.put("/{booking_id}/accept", response_model=BookingResponse)
def accept_booking(
    booking_id: int,
    payload: Optional[BookingAccept] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_handler),
):
    return bookings.accept_booking(db, booking_id, current_user, payload.notes if payload else None)


@router.put("/{booking_id}/reject", response_model=BookingResponse)
def reject_booking(
    booking_id: int,
    payload: Optional[BookingReject] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_handler),
):
    return bookings.reject_booking(db, booking_id, current_user, payload.reason if payload else None)


@router.put("/{booking_id}/status", response_model=BookingResponse)
def update_booking_status(
    booking_id: int,
    payload: BookingStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_handler),
):
    return bookings.update_status(
        db, booking_id, current_user, payload.status, payload.notes, payload.final_price
    )


@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    bookings.delete_booking(db, booking_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
