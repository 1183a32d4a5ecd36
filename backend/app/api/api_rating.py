# backend/app/api/api_rating.py

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import ORJSONResponse
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.user import User
from ..schemas.rating import RatingCreate, RatingResponse
from ..services import ratings
from .dependencies import get_current_customer

router = APIRouter(tags=["ratings"], default_response_class=ORJSONResponse)
logger = logging.getLogger(__name__)


@router.post("", response_model=RatingResponse, status_code=status.HTTP_201_CREATED)
def create_rating(
    rating_in: RatingCreate,
    db: Session = Depends(get_db),
    current_customer: User = Depends(get_current_customer),
):
    """Rate the worker of one of your completed bookings. One rating per booking."""
    return ratings.submit_rating(
        db,
        booking_id=rating_in.booking_id,
        customer_id=current_customer.id,
        rating=rating_in.rating,
        review=rating_in.review,
        worker_id=rating_in.worker_id,
    )
