"""
ANGAGU Backend — Company and Admin Schemas
===========================================

What:  Request and response models for the /company and /admin routes.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class CompanySignupRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None
    phone_number: Optional[str] = None
    business_number: Optional[str] = None
    account_number: Optional[str] = None
    account_holder: Optional[str] = None
    account_bank: Optional[str] = None


class CompanyOut(BaseModel):
    """Profile, including the settlement account; returned only to the company."""
    id: int
    email: str
    name: str
    phone_number: str
    business_number: str
    account_number: Optional[str] = None
    account_holder: Optional[str] = None
    account_bank: Optional[str] = None
    created_at: datetime
    type: str = "company"

    model_config = {"from_attributes": True}


class CompanyLoginData(BaseModel):
    user: CompanyOut
    token: str


class BusinessInfoIn(BaseModel):
    business_number: Optional[str] = None
    account_number: Optional[str] = None
    account_holder: Optional[str] = None
    account_bank: Optional[str] = None


class DeliveryIn(BaseModel):
    delivery_number: Optional[str] = None


class FindEmailIn(BaseModel):
    name: Optional[str] = None
    phone_number: Optional[str] = None


class FindEmailData(BaseModel):
    emails: List[str]


class FindPasswordIn(BaseModel):
    email: Optional[str] = None
    phone_number: Optional[str] = None
    password: Optional[str] = None


class SaleOut(BaseModel):
    product_id: int
    name: str
    quantity: int
    revenue: int


class CompanyOrderLineOut(BaseModel):
    detail_id: int
    order_id: int
    product_id: int
    product_name: str
    count: int
    price: int
    delivery_number: Optional[str] = None
    status: str
    address_id: Optional[int] = None
    ordered_at: datetime


class AdminOut(BaseModel):
    id: int
    email: str
    type: str = "admin"

    model_config = {"from_attributes": True}


class AdminLoginData(BaseModel):
    user: AdminOut
    token: str
