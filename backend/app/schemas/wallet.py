from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.transaction import TransactionStatus, TransactionType, WalletPaymentMethod
from .common import Pagination


class RechargeRequest(BaseModel):
    amount: Decimal = Field(gt=0)
    payment_method: WalletPaymentMethod = WalletPaymentMethod.UPI
    payment_reference: Optional[str] = None


class WithdrawRequest(BaseModel):
    amount: Decimal = Field(gt=0)
    payment_method: WalletPaymentMethod = WalletPaymentMethod.BANK_TRANSFER
    payment_reference: Optional[str] = None


class TransactionResponse(BaseModel):
    id: int
    account_id: int
    type: TransactionType
    amount: Decimal
    status: TransactionStatus
    balance_before: Decimal
    balance_after: Decimal
    related_account_id: Optional[int] = None
    related_booking_id: Optional[int] = None
    payment_method: WalletPaymentMethod
    payment_reference: Optional[str] = None
    description: str
    created_at: datetime

    model_config = {"from_attributes": True}


class TransactionListResponse(BaseModel):
    transactions: List[TransactionResponse]
    pagination: Pagination


class WalletResponse(BaseModel):
    balance: Decimal
    currency: str
    transactions: List[TransactionResponse]


class PostingResponse(BaseModel):
    """Result of a recharge or withdrawal."""
    transaction: TransactionResponse
    new_balance: Decimal


class WalletSummary(BaseModel):
    currentBalance: Decimal
    totalRecharged: Decimal
    totalWithdrawn: Decimal
    totalPaid: Decimal
    totalEarned: Decimal
    totalRefunded: Decimal
