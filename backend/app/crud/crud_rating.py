from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import Dict, List, Optional, Tuple

from .. import models
from .pagination import paginate

class CRUDRating:
    def get_rating_by_booking(self, db: Session, booking_id: int) -> Optional[models.Rating]:
        return db.query(models.Rating).filter(models.Rating.booking_id == booking_id).first()

    def get_ratings_by_worker(
        self, db: Session, worker_id: int, page: int = 1, limit: int = 20
    ) -> Tuple[List[models.Rating], dict]:
        query = (
            db.query(models.Rating)
            .filter(models.Rating.worker_id == worker_id)
            .order_by(models.Rating.created_at.desc(), models.Rating.id.desc())
        )
        return paginate(query, page, limit)

    def aggregate_for_worker(self, db: Session, worker_id: int) -> Tuple[Optional[float], int]:
        """Return ``(mean, count)`` over every rating row of ``worker_id``."""
        avg, count = (
            db.query(func.avg(models.Rating.rating), func.count(models.Rating.id))
            .filter(models.Rating.worker_id == worker_id)
            .one()
        )
        return (float(avg) if avg is not None else None), int(count or 0)

    def distribution_for_worker(self, db: Session, worker_id: int) -> Dict[int, int]:
        rows = (
            db.query(models.Rating.rating, func.count(models.Rating.id))
            .filter(models.Rating.worker_id == worker_id)
            .group_by(models.Rating.rating)
            .all()
        )
        counts = {star: 0 for star in range(1, 6)}
        for star, n in rows:
            counts[int(star)] = int(n)
        return counts

rating = CRUDRating()
