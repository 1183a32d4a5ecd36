from .crud_user import user
from .crud_booking import booking
from .crud_transaction import transaction
from .crud_rating import rating
from .pagination import paginate

# Usage: `crud.booking.get_booking(db, booking_id)`
