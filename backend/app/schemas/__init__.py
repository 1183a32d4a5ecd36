from .common import Pagination
from .user import UserBase, UserResponse, Token, TokenData, ContractorAssign
from .wallet import (
    RechargeRequest,
    WithdrawRequest,
    TransactionResponse,
    TransactionListResponse,
    WalletResponse,
    PostingResponse,
    WalletSummary,
)
from .booking import (
    BookingBase,
    BookingCreate,
    BookingUpdate,
    BookingAccept,
    BookingReject,
    BookingCancel,
    BookingStatusUpdate,
    BookingResponse,
    BookingListResponse,
)
from .rating import RatingCreate, RatingResponse, RatingSummary, WorkerRatingsResponse, RecalculateResponse

__all__ = [
    "Pagination",
    "UserBase",
    "UserResponse",
    "Token",
    "TokenData",
    "ContractorAssign",
    "RechargeRequest",
    "WithdrawRequest",
    "TransactionResponse",
    "TransactionListResponse",
    "WalletResponse",
    "PostingResponse",
    "WalletSummary",
    "BookingBase",
    "BookingCreate",
    "BookingUpdate",
    "BookingAccept",
    "BookingReject",
    "BookingCancel",
    "BookingStatusUpdate",
    "BookingResponse",
    "BookingListResponse",
    "RatingCreate",
    "RatingResponse",
    "RatingSummary",
    "WorkerRatingsResponse",
    "RecalculateResponse",
]
