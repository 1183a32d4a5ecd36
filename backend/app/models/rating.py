from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from .base import BaseModel

class Rating(BaseModel):
    __tablename__ = "ratings"
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_ratings_range"),
    )

    id = Column(Integer, primary_key=True, index=True)
    # One rating per booking; storage enforces it, not only the service pre-check
    booking_id  = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, unique=True)
    customer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    worker_id   = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    rating      = Column(Integer, nullable=False)
    review      = Column(Text, nullable=False)

    # Relationships
    #   Each Rating is attached to exactly one Booking
    booking = relationship(
        "Booking",
        back_populates="rating"
    )

    customer = relationship("User", foreign_keys=[customer_id])
    worker   = relationship("User", foreign_keys=[worker_id])
