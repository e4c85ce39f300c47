from datetime import date, datetime
from typing import Annotated, List

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints

# passwords are hashed exactly as typed
Password = Annotated[str, StringConstraints(strip_whitespace=False, min_length=1)]


# ===== AUTH =====
class RegisterIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: Password


class LoginIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    # plain str: a malformed address must fail like an unknown one
    email: str = Field(..., min_length=1)
    password: Password


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    created_at: datetime


class AuthOut(BaseModel):
    user: UserOut
    token: str


# ===== TRANSACTIONS =====
class TransactionIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    description: str = Field(..., min_length=1, max_length=255)
    amount: float = Field(..., gt=0)
    category: str = Field(..., min_length=1, max_length=100)
    date: date


class TransactionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    description: str
    amount: float
    category: str
    date: date
    created_at: datetime
    updated_at: datetime


TransactionList = List[TransactionOut]
