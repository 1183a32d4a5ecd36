from sqlalchemy.orm import Session
from typing import List, Optional

from .. import models
from ..models.user import AccountStatus, UserRole
from ..utils.auth import get_password_hash, normalize_phone

class CRUDUser:
    def get_user(self, db: Session, user_id: int) -> Optional[models.User]:
        return db.query(models.User).filter(models.User.id == user_id).first()

    def get_user_by_phone(self, db: Session, phone: str) -> Optional[models.User]:
        return db.query(models.User).filter(models.User.phone == normalize_phone(phone)).first()

    def create_user(
        self,
        db: Session,
        *,
        name: str,
        phone: str,
        password: str,
        role: UserRole,
        status: AccountStatus = AccountStatus.APPROVED,
        **extra,
    ) -> models.User:
        """Insert a user. Used by fixtures, scripts and admin bootstrap; there is no public signup."""
        db_user = models.User(
            name=name,
            phone=normalize_phone(phone),
            password=get_password_hash(password),
            role=role,
            status=status,
            **extra,
        )
        db.add(db_user)
        db.commit()
        db.refresh(db_user)
        return db_user

    def first_approved_contractor(self, db: Session) -> Optional[models.User]:
        return (
            db.query(models.User)
            .filter(
                models.User.role == UserRole.CONTRACTOR,
                models.User.status == AccountStatus.APPROVED,
            )
            .order_by(models.User.id.asc())
            .first()
        )

    def get_unassigned_workers(self, db: Session) -> List[models.User]:
        return (
            db.query(models.User)
            .filter(models.User.role == UserRole.WORKER, models.User.contractor_id.is_(None))
            .order_by(models.User.id.asc())
            .all()
        )

user = CRUDUser() # Create an instance for easy import
