# backend/app/models/transaction.py

import enum

from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, Numeric, String, event
from sqlalchemy.orm import relationship

from .base import BaseModel
from .types import CaseInsensitiveEnum


class TransactionType(str, enum.Enum):
    RECHARGE = "recharge"
    WITHDRAW = "withdraw"
    PAYMENT = "payment"
    REFUND = "refund"
    EARNING = "earning"


class TransactionStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class WalletPaymentMethod(str, enum.Enum):
    WALLET = "wallet"
    CASH = "cash"
    UPI = "upi"
    BANK_TRANSFER = "bank_transfer"
    CARD = "card"


CREDIT_TYPES = frozenset({TransactionType.RECHARGE, TransactionType.EARNING, TransactionType.REFUND})


class WalletTransaction(BaseModel):
    """One ledger posting. Rows are written once by the ledger and never updated."""

    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transactions_amount_positive"),
        CheckConstraint("balance_after >= 0", name="ck_transactions_balance_after_non_negative"),
    )

    id             = Column(Integer, primary_key=True, index=True)
    account_id     = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    type           = Column(CaseInsensitiveEnum(TransactionType, name="transactiontype"), nullable=False, index=True)
    amount         = Column(Numeric(12, 2), nullable=False)
    status         = Column(
        CaseInsensitiveEnum(TransactionStatus, name="transactionstatus"),
        nullable=False,
        default=TransactionStatus.COMPLETED,
        index=True,
    )
    balance_before = Column(Numeric(12, 2), nullable=False)
    balance_after  = Column(Numeric(12, 2), nullable=False)

    related_account_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    # Soft reference; bookings.wallet_transaction_id points the other way
    related_booking_id = Column(Integer, nullable=True, index=True)

    payment_method    = Column(
        CaseInsensitiveEnum(WalletPaymentMethod, name="walletpaymentmethod"),
        nullable=False,
        default=WalletPaymentMethod.WALLET,
    )
    payment_reference = Column(String, nullable=True)
    description       = Column(String, nullable=False, default="")

    account         = relationship("User", foreign_keys=[account_id])
    related_account = relationship("User", foreign_keys=[related_account_id])

    @property
    def is_credit(self) -> bool:
        return self.type in CREDIT_TYPES


class AppendOnlyViolation(RuntimeError):
    pass


@event.listens_for(WalletTransaction, "before_update")
def _refuse_update(mapper, connection, target):
    raise AppendOnlyViolation(f"transaction {target.id} is append-only")
