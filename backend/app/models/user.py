# backend/app/models/user.py

from sqlalchemy import CheckConstraint, Column, Float, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship
from .base import BaseModel
from .types import CaseInsensitiveEnum
import enum


class UserRole(str, enum.Enum):
    """Enumeration of all supported account roles."""

    CUSTOMER = "customer"
    WORKER = "worker"
    INDEPENDENT_WORKER = "independent_worker"
    CONTRACTOR = "contractor"
    ADMIN = "admin"


class AccountStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    BLOCKED = "blocked"


WORKER_ROLES = (UserRole.WORKER, UserRole.INDEPENDENT_WORKER)


class User(BaseModel):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("wallet_balance >= 0", name="ck_users_wallet_non_negative"),
    )

    id            = Column(Integer, primary_key=True, index=True)
    name          = Column(String, nullable=False)
    phone         = Column(String, unique=True, index=True, nullable=False)
    email         = Column(String, nullable=True, index=True)
    password      = Column(String, nullable=False)
    role          = Column(CaseInsensitiveEnum(UserRole, name="userrole"), nullable=False, index=True)
    status        = Column(
        CaseInsensitiveEnum(AccountStatus, name="accountstatus"),
        nullable=False,
        default=AccountStatus.PENDING,
    )
    skill_type    = Column(String, nullable=True)
    shop_name     = Column(String, nullable=True)

    # Contract workers point at the contractor managing them
    contractor_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    # Wallet. Only the ledger writes these two columns; wallet_version is
    # bumped on every posting and used as the compare-and-set guard.
    wallet_balance = Column(Numeric(12, 2), nullable=False, default=0)
    wallet_version = Column(Integer, nullable=False, default=0)

    # Derived from Rating rows; recomputed on every new rating
    average_rating = Column(Float, nullable=False, default=0)
    total_ratings  = Column(Integer, nullable=False, default=0)

    contractor = relationship(
        "User",
        remote_side=[id],
        foreign_keys=[contractor_id],
        back_populates="workers",
    )
    workers = relationship(
        "User",
        foreign_keys=[contractor_id],
        back_populates="contractor",
    )

    @property
    def is_worker(self) -> bool:
        return self.role in WORKER_ROLES

    @property
    def requires_contractor(self) -> bool:
        """Contract workers must be attached to a contractor; independents never are."""
        return self.role == UserRole.WORKER
