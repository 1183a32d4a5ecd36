from pydantic import BaseModel, Field
from typing import Annotated, Dict, List, Optional
from datetime import datetime

from .common import Pagination


class RatingCreate(BaseModel):
  """Customer → worker rating payload (booking-bound)."""
  booking_id: int
  rating: Annotated[int, Field(ge=1, le=5)]
  review: str
  worker_id: Optional[int] = None


class RatingResponse(BaseModel):
  id: int
  booking_id: int
  customer_id: int
  worker_id: int
  rating: int
  review: str
  created_at: datetime

  model_config = {"from_attributes": True}


class RatingSummary(BaseModel):
  averageRating: float
  totalRatings: int
  ratingCounts: Dict[int, int]


class WorkerRatingsResponse(BaseModel):
  ratings: List[RatingResponse]
  summary: RatingSummary
  pagination: Pagination


class RecalculateResponse(BaseModel):
  updated: int
