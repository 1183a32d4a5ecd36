# backend/app/schemas/user.py

from decimal import Decimal
from pydantic import BaseModel
from typing import Optional

from ..models.user import UserRole, AccountStatus


class UserBase(BaseModel):
    name: str
    phone: str
    email: Optional[str] = None
    role: UserRole
    skill_type: Optional[str] = None
    shop_name: Optional[str] = None


class UserResponse(UserBase):
    id: int
    status: AccountStatus
    contractor_id: Optional[int] = None
    wallet_balance: Decimal
    average_rating: float
    total_ratings: int

    model_config = {
        "from_attributes": True
    }


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


# TokenData for extracting “sub” (user id) from JWT
class TokenData(BaseModel):
    user_id: Optional[int] = None


class ContractorAssign(BaseModel):
    contractor_id: int
