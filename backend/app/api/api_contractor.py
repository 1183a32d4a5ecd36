# backend/app/api/api_contractor.py

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import ORJSONResponse
from sqlalchemy.orm import Session

from .. import crud
from ..database import get_db
from ..models.booking_status import BookingStatus
from ..models.user import User
from ..schemas.booking import BookingListResponse, BookingResponse
from ..services import dashboard
from .dependencies import PageParams, get_current_contractor

router = APIRouter(tags=["contractors"], default_response_class=ORJSONResponse)


@router.get("/requests", response_model=BookingListResponse)
def read_contractor_requests(
    db: Session = Depends(get_db),
    current_contractor: User = Depends(get_current_contractor),
    paging: PageParams = Depends(),
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
):
    rows, pagination = crud.booking.get_contractor_requests(
        db, current_contractor.id, status=status_filter, page=paging.page, limit=paging.limit
    )
    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in rows], pagination=pagination
    )


@router.get("/active-jobs", response_model=BookingListResponse)
def read_contractor_active_jobs(
    db: Session = Depends(get_db),
    current_contractor: User = Depends(get_current_contractor),
    paging: PageParams = Depends(),
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
):
    rows, pagination = crud.booking.get_contractor_active_jobs(
        db, current_contractor.id, status=status_filter, page=paging.page, limit=paging.limit
    )
    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in rows], pagination=pagination
    )


@router.get("/dashboard-stats")
def read_contractor_dashboard(
    db: Session = Depends(get_db),
    current_contractor: User = Depends(get_current_contractor),
):
    return dashboard.contractor_dashboard(db, current_contractor.id)
