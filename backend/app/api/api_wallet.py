# backend/app/api/api_wallet.py

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import ORJSONResponse
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.transaction import TransactionStatus, TransactionType
from ..models.user import User
from ..schemas.wallet import (
    PostingResponse,
    RechargeRequest,
    TransactionListResponse,
    TransactionResponse,
    WalletResponse,
    WalletSummary,
    WithdrawRequest,
)
from ..services import ledger
from .dependencies import PageParams, get_current_active_user

router = APIRouter(tags=["wallet"], default_response_class=ORJSONResponse)
logger = logging.getLogger(__name__)
# main.py mounts this router at f"{API_V1_STR}/wallet"


@router.get("", response_model=WalletResponse)
def read_wallet(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    wallet = ledger.get_wallet(db, current_user.id)
    return WalletResponse(
        balance=wallet["balance"],
        currency=wallet["currency"],
        transactions=[TransactionResponse.model_validate(t) for t in wallet["transactions"]],
    )


@router.post("/recharge", response_model=PostingResponse, status_code=status.HTTP_201_CREATED)
def recharge_wallet(
    payload: RechargeRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    txn = ledger.recharge(
        db,
        current_user.id,
        payload.amount,
        payment_method=payload.payment_method,
        payment_reference=payload.payment_reference,
    )
    return PostingResponse(transaction=TransactionResponse.model_validate(txn), new_balance=txn.balance_after)


@router.post("/withdraw", response_model=PostingResponse, status_code=status.HTTP_201_CREATED)
def withdraw_from_wallet(
    payload: WithdrawRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    txn = ledger.withdraw(
        db,
        current_user.id,
        payload.amount,
        payment_method=payload.payment_method,
        payment_reference=payload.payment_reference,
    )
    return PostingResponse(transaction=TransactionResponse.model_validate(txn), new_balance=txn.balance_after)


@router.get("/transactions", response_model=TransactionListResponse)
def read_transactions(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    paging: PageParams = Depends(),
    type_filter: Optional[TransactionType] = Query(None, alias="type"),
    status_filter: Optional[TransactionStatus] = Query(None, alias="status"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
):
    result = ledger.list_transactions(
        db,
        current_user.id,
        page=paging.page,
        limit=paging.limit,
        type=type_filter,
        status=status_filter,
        start_date=start_date,
        end_date=end_date,
    )
    return TransactionListResponse(
        transactions=[TransactionResponse.model_validate(t) for t in result["transactions"]],
        pagination=result["pagination"],
    )


@router.get("/summary", response_model=WalletSummary)
def read_wallet_summary(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    return ledger.wallet_summary(db, current_user.id)
