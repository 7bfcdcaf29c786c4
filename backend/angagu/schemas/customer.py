"""
ANGAGU Backend — Customer Schemas
==================================

What:  Request and response models for the /customer routes.

Security: `CustomerOut` has no password field, so a serialized customer can
never carry the hash even when built straight from the ORM row.
"""

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Accounts
# ══════════════════════════════════════════════════════════════════════════


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class CustomerOut(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    phone_number: str
    created_at: datetime
    type: str = "customer"

    model_config = {"from_attributes": True}


class LoginData(BaseModel):
    user: CustomerOut
    token: str


class SignupRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None


class PhoneRequest(BaseModel):
    phone_number: Optional[str] = None


class VerifyCodeRequest(BaseModel):
    phone_number: Optional[str] = None
    code: Optional[Union[str, int]] = None


class EmailCheckRequest(BaseModel):
    email: Optional[str] = None


# ══════════════════════════════════════════════════════════════════════════
# Addresses
# ══════════════════════════════════════════════════════════════════════════


class AddressIn(BaseModel):
    """Exactly one of `road` / `land`; `recipient` and `detail` required."""
    road: Optional[str] = None
    land: Optional[str] = None
    recipient: Optional[str] = None
    detail: Optional[str] = None
    zip_code: Optional[str] = None
    phone_number: Optional[str] = None


class AddressOut(BaseModel):
    id: int
    customer_id: int
    road: Optional[str] = None
    land: Optional[str] = None
    recipient: str
    detail: str
    zip_code: Optional[str] = None
    phone_number: Optional[str] = None
    is_default: bool

    model_config = {"from_attributes": True}


# ══════════════════════════════════════════════════════════════════════════
# Orders & reviews
# ══════════════════════════════════════════════════════════════════════════


class OrderItemIn(BaseModel):
    product_id: int
    count: int


class OrderIn(BaseModel):
    address_id: Optional[int] = None
    items: Optional[List[OrderItemIn]] = None


class OrderDetailOut(BaseModel):
    id: int
    product_id: int
    count: int
    price: int
    delivery_number: Optional[str] = None
    status: str

    model_config = {"from_attributes": True}


class OrderOut(BaseModel):
    id: int
    customer_id: int
    address_id: Optional[int] = None
    created_at: datetime
    details: List[OrderDetailOut] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class ReviewIn(BaseModel):
    product_id: Optional[int] = None
    rating: Optional[int] = None
    content: Optional[str] = None


class ReviewOut(BaseModel):
    id: int
    order_id: int
    product_id: int
    customer_id: int
    rating: int
    content: str
    created_at: datetime

    model_config = {"from_attributes": True}
