"""Wallet ledger: account balances plus the append-only transaction log.

Every balance change goes through :func:`post_transaction`, which writes the
new balance and the log row in one database transaction. The balance write is
a conditional UPDATE guarded by ``users.wallet_version``; if another writer
posted against the account since it was read, nothing is written and
``ConcurrentUpdate`` is raised. The ledger never retries on its own.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from .. import crud, models
from ..core.config import settings
from ..models.transaction import (
    CREDIT_TYPES,
    TransactionStatus,
    TransactionType,
    WalletPaymentMethod,
)
from ..utils.errors import ConcurrentUpdate, InsufficientBalance, NotFound, ValidationError

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")


def to_money(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError):
            raise ValidationError("Amount must be a number", {"amount": "invalid"})
    if not amount.is_finite():
        raise ValidationError("Amount must be a number", {"amount": "invalid"})
    return amount.quantize(_CENT, rounding=ROUND_HALF_UP)


def _load_account(db: Session, account_id: int) -> Optional[models.User]:
    # populate_existing so a long-lived session never computes from a cached balance
    return (
        db.query(models.User)
        .filter(models.User.id == account_id)
        .with_for_update()
        .populate_existing()
        .first()
    )


def post_transaction(
    db: Session,
    account_id: int,
    type: TransactionType | str,
    amount: Any,
    *,
    payment_method: WalletPaymentMethod | str = WalletPaymentMethod.WALLET,
    description: str = "",
    payment_reference: Optional[str] = None,
    related_account_id: Optional[int] = None,
    related_booking_id: Optional[int] = None,
    commit: bool = True,
) -> models.WalletTransaction:
    """Apply one credit or debit to ``account_id`` and log it.

    With ``commit=False`` the caller owns the unit of work: the balance update
    and the log row are flushed but only become visible when the caller
    commits, and a failure is left for the caller to roll back.
    """
    try:
        txn_type = TransactionType(type)
    except ValueError:
        raise ValidationError("Unknown transaction type", {"type": str(type)})
    amount = to_money(amount)
    if amount <= 0:
        raise ValidationError("Amount must be greater than zero", {"amount": str(amount)})

    try:
        account = _load_account(db, account_id)
        if account is None:
            raise NotFound("Account not found", {"account_id": str(account_id)})

        balance_before = to_money(account.wallet_balance or 0)
        read_version = account.wallet_version or 0
        if txn_type in CREDIT_TYPES:
            balance_after = balance_before + amount
        else:
            balance_after = balance_before - amount
        if balance_after < 0:
            logger.warning(
                "Insufficient balance account=%s balance=%s %s=%s",
                account_id,
                balance_before,
                txn_type.value,
                amount,
            )
            raise InsufficientBalance(
                "Insufficient wallet balance",
                {"amount": f"requested {amount}, available {balance_before}"},
            )

        result = db.execute(
            update(models.User)
            .where(
                models.User.id == account_id,
                models.User.wallet_version == read_version,
            )
            .values(wallet_balance=balance_after, wallet_version=read_version + 1)
            .execution_options(synchronize_session="evaluate")
        )
        if result.rowcount != 1:
            logger.warning("Lost wallet update on account=%s at version=%s", account_id, read_version)
            raise ConcurrentUpdate(
                "Wallet was modified concurrently, please retry",
                {"account_id": str(account_id)},
            )

        txn = models.WalletTransaction(
            account_id=account_id,
            type=txn_type,
            amount=amount,
            status=TransactionStatus.COMPLETED,
            balance_before=balance_before,
            balance_after=balance_after,
            related_account_id=related_account_id,
            related_booking_id=related_booking_id,
            payment_method=WalletPaymentMethod(payment_method),
            payment_reference=payment_reference,
            description=description or f"Wallet {txn_type.value}",
        )
        db.add(txn)
        db.flush()
        if commit:
            db.commit()
            db.refresh(txn)
    except Exception:
        if commit:
            db.rollback()
        raise

    logger.info(
        "Posted %s of %s on account=%s balance %s -> %s txn=%s",
        txn_type.value,
        amount,
        account_id,
        balance_before,
        balance_after,
        txn.id,
    )
    return txn


def recharge(
    db: Session,
    account_id: int,
    amount: Any,
    payment_method: WalletPaymentMethod | str = WalletPaymentMethod.UPI,
    payment_reference: Optional[str] = None,
) -> models.WalletTransaction:
    amount = to_money(amount)
    if amount > to_money(settings.MAX_RECHARGE_AMOUNT):
        raise ValidationError(
            "Recharge amount exceeds the allowed maximum",
            {"amount": f"maximum is {settings.MAX_RECHARGE_AMOUNT:g}"},
        )
    method = WalletPaymentMethod(payment_method)
    return post_transaction(
        db,
        account_id,
        TransactionType.RECHARGE,
        amount,
        payment_method=method,
        payment_reference=payment_reference,
        description=f"Wallet recharge via {method.value}",
    )


def withdraw(
    db: Session,
    account_id: int,
    amount: Any,
    payment_method: WalletPaymentMethod | str = WalletPaymentMethod.BANK_TRANSFER,
    payment_reference: Optional[str] = None,
) -> models.WalletTransaction:
    method = WalletPaymentMethod(payment_method)
    return post_transaction(
        db,
        account_id,
        TransactionType.WITHDRAW,
        amount,
        payment_method=method,
        payment_reference=payment_reference,
        description=f"Wallet withdrawal via {method.value}",
    )


def _require_account(db: Session, account_id: int) -> models.User:
    account = crud.user.get_user(db, account_id)
    if account is None:
        raise NotFound("Account not found", {"account_id": str(account_id)})
    return account


def get_wallet(db: Session, account_id: int) -> dict:
    account = _require_account(db, account_id)
    rows, _ = crud.transaction.list_for_account(db, account_id, page=1, limit=20)
    return {
        "balance": to_money(account.wallet_balance or 0),
        "currency": settings.DEFAULT_CURRENCY,
        "transactions": rows,
    }


def list_transactions(
    db: Session,
    account_id: int,
    *,
    page: int = 1,
    limit: int = 20,
    type: Optional[TransactionType] = None,
    status: Optional[TransactionStatus] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> dict:
    _require_account(db, account_id)
    rows, pagination = crud.transaction.list_for_account(
        db,
        account_id,
        page=page,
        limit=limit,
        type=type,
        status=status,
        start_date=start_date,
        end_date=end_date,
    )
    return {"transactions": rows, "pagination": pagination}


_SUMMARY_KEYS = {
    TransactionType.RECHARGE: "totalRecharged",
    TransactionType.WITHDRAW: "totalWithdrawn",
    TransactionType.PAYMENT: "totalPaid",
    TransactionType.EARNING: "totalEarned",
    TransactionType.REFUND: "totalRefunded",
}


def wallet_summary(db: Session, account_id: int) -> dict:
    account = _require_account(db, account_id)
    rows = (
        db.query(models.WalletTransaction.type, func.sum(models.WalletTransaction.amount))
        .filter(
            models.WalletTransaction.account_id == account_id,
            models.WalletTransaction.status == TransactionStatus.COMPLETED,
        )
        .group_by(models.WalletTransaction.type)
        .all()
    )
    summary = {"currentBalance": to_money(account.wallet_balance or 0)}
    summary.update({key: Decimal("0.00") for key in _SUMMARY_KEYS.values()})
    for txn_type, total in rows:
        summary[_SUMMARY_KEYS[TransactionType(txn_type)]] = to_money(total or 0)
    return summary


def verify_account_ledger(db: Session, account_id: int) -> bool:
    """True when the stored balance equals the last completed posting's ``balance_after``."""
    account = _require_account(db, account_id)
    latest = crud.transaction.get_latest_completed(db, account_id)
    expected = to_money(latest.balance_after) if latest is not None else Decimal("0.00")
    ok = to_money(account.wallet_balance or 0) == expected
    if not ok:
        logger.error(
            "Ledger drift on account=%s stored=%s expected=%s",
            account_id,
            account.wallet_balance,
            expected,
        )
    return ok
