"""
Initial marketplace schema: users, wallet transactions, bookings, ratings.

Revision ID: 20261018_initial_marketplace_schema
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from typing import Union

# revision identifiers, used by Alembic.
revision: str = '20261018_initial_marketplace_schema'
down_revision: Union[str, None] = None
branch_labels = None
depends_on = None


USER_ROLES = ('customer', 'worker', 'independent_worker', 'contractor', 'admin')
ACCOUNT_STATUSES = ('pending', 'approved', 'blocked')
TRANSACTION_TYPES = ('recharge', 'withdraw', 'payment', 'refund', 'earning')
TRANSACTION_STATUSES = ('pending', 'completed', 'failed', 'cancelled')
WALLET_PAYMENT_METHODS = ('wallet', 'cash', 'upi', 'bank_transfer', 'card')
BOOKING_STATUSES = (
    'pending', 'accepted', 'rejected', 'confirmed', 'in_progress', 'completed', 'cancelled',
)


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('phone', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('password', sa.String(), nullable=False),
        sa.Column('role', sa.Enum(*USER_ROLES, name='userrole'), nullable=False),
        sa.Column('status', sa.Enum(*ACCOUNT_STATUSES, name='accountstatus'), nullable=False),
        sa.Column('skill_type', sa.String(), nullable=True),
        sa.Column('shop_name', sa.String(), nullable=True),
        sa.Column('contractor_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('wallet_balance', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('wallet_version', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('average_rating', sa.Float(), nullable=False, server_default='0'),
        sa.Column('total_ratings', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps(),
        sa.CheckConstraint('wallet_balance >= 0', name='ck_users_wallet_non_negative'),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_phone', 'users', ['phone'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'])
    op.create_index('ix_users_role', 'users', ['role'])
    op.create_index('ix_users_contractor_id', 'users', ['contractor_id'])
    op.create_index('ix_users_created_at', 'users', ['created_at'])

    op.create_table(
        'transactions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('account_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('type', sa.Enum(*TRANSACTION_TYPES, name='transactiontype'), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('status', sa.Enum(*TRANSACTION_STATUSES, name='transactionstatus'), nullable=False),
        sa.Column('balance_before', sa.Numeric(12, 2), nullable=False),
        sa.Column('balance_after', sa.Numeric(12, 2), nullable=False),
        sa.Column('related_account_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('related_booking_id', sa.Integer(), nullable=True),
        sa.Column('payment_method', sa.Enum(*WALLET_PAYMENT_METHODS, name='walletpaymentmethod'), nullable=False),
        sa.Column('payment_reference', sa.String(), nullable=True),
        sa.Column('description', sa.String(), nullable=False, server_default=''),
        *_timestamps(),
        sa.CheckConstraint('amount > 0', name='ck_transactions_amount_positive'),
        sa.CheckConstraint('balance_after >= 0', name='ck_transactions_balance_after_non_negative'),
    )
    op.create_index('ix_transactions_id', 'transactions', ['id'])
    op.create_index('ix_transactions_account_id', 'transactions', ['account_id'])
    op.create_index('ix_transactions_type', 'transactions', ['type'])
    op.create_index('ix_transactions_status', 'transactions', ['status'])
    op.create_index('ix_transactions_related_booking_id', 'transactions', ['related_booking_id'])
    op.create_index('ix_transactions_created_at', 'transactions', ['created_at'])

    op.create_table(
        'bookings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('worker_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('contractor_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('work_type', sa.String(), nullable=False),
        sa.Column('location', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('start_date', sa.DateTime(), nullable=False),
        sa.Column('end_date', sa.DateTime(), nullable=True),
        sa.Column('contact_phone', sa.String(), nullable=False, server_default=''),
        sa.Column('contact_email', sa.String(), nullable=False, server_default=''),
        sa.Column('urgency', sa.Enum('normal', 'urgent', 'emergency', name='bookingurgency'), nullable=True),
        sa.Column(
            'preferred_time',
            sa.Enum('morning', 'afternoon', 'evening', 'flexible', name='preferredtime'),
            nullable=True,
        ),
        sa.Column(
            'worker_arrival',
            sa.Enum('flexible', 'morning', 'afternoon', 'evening', 'night', 'asap', name='workerarrival'),
            nullable=True,
        ),
        sa.Column(
            'payment_method',
            sa.Enum('cash', 'online', 'upi', 'cheque', 'other', name='bookingpaymentmethod'),
            nullable=True,
        ),
        sa.Column('budget', sa.Numeric(12, 2), nullable=True),
        sa.Column('use_wallet', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('wallet_transaction_id', sa.Integer(), sa.ForeignKey('transactions.id'), nullable=True, unique=True),
        sa.Column('final_price', sa.Numeric(12, 2), nullable=True),
        sa.Column('commission_amount', sa.Numeric(12, 2), nullable=True),
        sa.Column('status', sa.Enum(*BOOKING_STATUSES, name='bookingstatus'), nullable=False),
        sa.Column('accepted_at', sa.DateTime(), nullable=True),
        sa.Column('confirmed_at', sa.DateTime(), nullable=True),
        sa.Column('started_at', sa.DateTime(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(), nullable=True),
        sa.Column('rejected_at', sa.DateTime(), nullable=True),
        sa.Column('rejected_reason', sa.String(), nullable=True),
        sa.Column('cancellation_reason', sa.String(), nullable=True),
        sa.Column('has_rated', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('rating_submitted_at', sa.DateTime(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=False, server_default=''),
        sa.Column('version', sa.Integer(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_bookings_id', 'bookings', ['id'])
    op.create_index('ix_bookings_customer_id', 'bookings', ['customer_id'])
    op.create_index('ix_bookings_worker_id', 'bookings', ['worker_id'])
    op.create_index('ix_bookings_contractor_id', 'bookings', ['contractor_id'])
    op.create_index('ix_bookings_status', 'bookings', ['status'])
    op.create_index('ix_bookings_completed_at', 'bookings', ['completed_at'])
    op.create_index('ix_bookings_created_at', 'bookings', ['created_at'])

    op.create_table(
        'ratings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('booking_id', sa.Integer(), sa.ForeignKey('bookings.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('worker_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('review', sa.Text(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('rating >= 1 AND rating <= 5', name='ck_ratings_range'),
    )
    op.create_index('ix_ratings_id', 'ratings', ['id'])
    op.create_index('ix_ratings_customer_id', 'ratings', ['customer_id'])
    op.create_index('ix_ratings_worker_id', 'ratings', ['worker_id'])
    op.create_index('ix_ratings_created_at', 'ratings', ['created_at'])


def downgrade() -> None:
    op.drop_table('ratings')
    op.drop_table('bookings')
    op.drop_table('transactions')
    op.drop_table('users')
    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        for name in (
            'bookingstatus', 'bookingpaymentmethod', 'workerarrival', 'preferredtime',
            'bookingurgency', 'walletpaymentmethod', 'transactionstatus', 'transactiontype',
            'accountstatus', 'userrole',
        ):
            sa.Enum(name=name).drop(bind, checkfirst=True)
