from .errors import (
    error_response,
    to_http,
    MarketplaceError,
    ValidationError,
    InsufficientBalance,
    InvalidTransition,
    Forbidden,
    DuplicateRating,
    NotFound,
    ConcurrentUpdate,
)
from .auth import normalize_phone
