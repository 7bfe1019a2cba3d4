# finance_api/schemas.py
"""
Request bodies and response DTOs.

Request fields default to their zero value so a missing field and an empty
one are rejected with the same message by the route. Request models are
strict: a bool, a numeric string or a float where an int belongs fails
validation instead of being coerced. Response DTOs are built from ORM rows
with ``Model.model_validate`` and carry only public columns.
"""
from pydantic import BaseModel, Field, field_validator

# ids and references live in 32-bit INTEGER columns
INT_MIN = -(2 ** 31)
INT_MAX = 2 ** 31 - 1

# NUMERIC(12, 2): ten integer digits
AMOUNT_LIMIT = 10 ** 10


class _StrictIn(BaseModel):
    class Config:
        strict = True
        allow_inf_nan = False


# ---------- Users ----------
class UserCreate(_StrictIn):
    username: str = ""
    email: str = ""
    password: str = ""
    password_confirmation: str = ""


class UserUpdate(_StrictIn):
    username: str = ""
    email: str = ""


class UserOut(BaseModel):
    # no password / password_confirmation fields, ever
    id: int
    username: str
    email: str

    class Config:
        from_attributes = True


# ---------- Categories ----------
class CategoryIn(_StrictIn):
    name: str = ""


class CategoryOut(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


# ---------- Transactions ----------
class TransactionIn(_StrictIn):
    user_id: int = Field(0, ge=INT_MIN, le=INT_MAX)
    amount: float = Field(0.0, gt=-AMOUNT_LIMIT, lt=AMOUNT_LIMIT)
    category_id: int = Field(0, ge=INT_MIN, le=INT_MAX)
    type: str = ""

    @field_validator("amount")
    @classmethod
    def _to_cents(cls, v: float) -> float:
        # what the column stores is what the caller sees, and 0.004 counts as zero
        return round(v, 2)

    def is_complete(self) -> bool:
        return bool(self.amount and self.category_id and self.user_id and self.type)


class TransactionOut(BaseModel):
    id: int
    user_id: int
    amount: float
    category_id: int
    type: str

    class Config:
        from_attributes = True
