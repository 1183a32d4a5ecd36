# backend/app/api/api_worker.py

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import ORJSONResponse
from sqlalchemy.orm import Session

from .. import crud
from ..database import get_db
from ..models.booking_status import BookingStatus
from ..models.user import User
from ..schemas.booking import BookingListResponse, BookingResponse
from ..schemas.rating import RatingResponse, WorkerRatingsResponse
from ..services import dashboard, ratings
from .dependencies import PageParams, get_current_worker

router = APIRouter(tags=["workers"], default_response_class=ORJSONResponse)


def _page(rows, pagination) -> BookingListResponse:
    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in rows],
        pagination=pagination,
    )


@router.get("/jobs", response_model=BookingListResponse)
def read_worker_jobs(
    db: Session = Depends(get_db),
    current_worker: User = Depends(get_current_worker),
    paging: PageParams = Depends(),
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
):
    rows, pagination = crud.booking.get_jobs_by_worker(
        db, current_worker.id, status=status_filter, page=paging.page, limit=paging.limit
    )
    return _page(rows, pagination)


@router.get("/work-history", response_model=BookingListResponse)
def read_work_history(
    db: Session = Depends(get_db),
    current_worker: User = Depends(get_current_worker),
    paging: PageParams = Depends(),
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
):
    """Finished jobs; completed, cancelled and rejected unless ``status`` narrows it."""
    rows, pagination = crud.booking.get_work_history(
        db, current_worker.id, status=status_filter, page=paging.page, limit=paging.limit
    )
    return _page(rows, pagination)


@router.get("/dashboard-stats")
def read_worker_dashboard(
    db: Session = Depends(get_db),
    current_worker: User = Depends(get_current_worker),
):
    data = dashboard.worker_dashboard(db, current_worker.id)
    data["recentJobs"] = [BookingResponse.model_validate(b) for b in data["recentJobs"]]
    return data


@router.get("/{worker_id}/ratings", response_model=WorkerRatingsResponse)
def read_worker_ratings(
    worker_id: int,
    db: Session = Depends(get_db),
    paging: PageParams = Depends(),
):
    """Public list of a worker's ratings with the star distribution."""
    result = ratings.list_worker_ratings(db, worker_id, page=paging.page, limit=paging.limit)
    return WorkerRatingsResponse(
        ratings=[RatingResponse.model_validate(r) for r in result["ratings"]],
        summary=result["summary"],
        pagination=result["pagination"],
    )
