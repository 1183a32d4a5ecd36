# backend/app/api/api_customer.py

from fastapi import APIRouter, Depends
from fastapi.responses import ORJSONResponse
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.user import User
from ..schemas.booking import BookingResponse
from ..services import dashboard
from .dependencies import get_current_customer

router = APIRouter(tags=["customers"], default_response_class=ORJSONResponse)


@router.get("/dashboard-stats")
def read_customer_dashboard(
    db: Session = Depends(get_db),
    current_customer: User = Depends(get_current_customer),
):
    data = dashboard.customer_dashboard(db, current_customer.id)
    data["recentBookings"] = [BookingResponse.model_validate(b) for b in data["recentBookings"]]
    return data
