from datetime import datetime
from sqlalchemy.orm import Session
from typing import List, Optional, Tuple

from .. import models
from ..models.transaction import TransactionStatus, TransactionType
from .pagination import paginate


class CRUDTransaction:
    def get_transaction(self, db: Session, transaction_id: int) -> Optional[models.WalletTransaction]:
        return (
            db.query(models.WalletTransaction)
            .filter(models.WalletTransaction.id == transaction_id)
            .first()
        )

    def get_latest_completed(self, db: Session, account_id: int) -> Optional[models.WalletTransaction]:
        return (
            db.query(models.WalletTransaction)
            .filter(
                models.WalletTransaction.account_id == account_id,
                models.WalletTransaction.status == TransactionStatus.COMPLETED,
            )
            .order_by(models.WalletTransaction.id.desc())
            .first()
        )

    def list_for_account(
        self,
        db: Session,
        account_id: int,
        *,
        page: int = 1,
        limit: int = 20,
        type: Optional[TransactionType] = None,
        status: Optional[TransactionStatus] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> Tuple[List[models.WalletTransaction], dict]:
        query = db.query(models.WalletTransaction).filter(
            models.WalletTransaction.account_id == account_id
        )
        if type is not None:
            query = query.filter(models.WalletTransaction.type == type)
        if status is not None:
            query = query.filter(models.WalletTransaction.status == status)
        if start_date is not None:
            query = query.filter(models.WalletTransaction.created_at >= start_date)
        if end_date is not None:
            query = query.filter(models.WalletTransaction.created_at <= end_date)
        query = query.order_by(
            models.WalletTransaction.created_at.desc(), models.WalletTransaction.id.desc()
        )
        return paginate(query, page, limit)

transaction = CRUDTransaction()
