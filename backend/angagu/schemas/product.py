"""
ANGAGU Backend — Product Schemas
=================================

What:  Catalogue payloads shared by the customer, company and admin routes.

Request bodies declare every field Optional: a missing field must reach the
handler, which answers with the endpoint's own errCode instead of a generic
schema failure.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ProductImageOut(BaseModel):
    id: int
    url: str
    position: int

    model_config = {"from_attributes": True}


class ProductOut(BaseModel):
    """A product card; `images` are ordered by position."""
    id: int
    company_id: int
    name: str
    price: int
    description: Optional[str] = None
    category: Optional[str] = None
    approved: bool
    created_at: datetime
    images: List[ProductImageOut] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class ProductDetailOut(BaseModel):
    """Product detail: the base record with its image sequence attached."""
    id: int
    company_id: int
    name: str
    price: int
    description: Optional[str] = None
    category: Optional[str] = None
    model_url: Optional[str] = None
    created_at: datetime
    images: List[ProductImageOut]


class ModelUrlOut(BaseModel):
    model_url: Optional[str] = None


class ProductIn(BaseModel):
    name: Optional[str] = None
    price: Optional[int] = None
    description: Optional[str] = None
    category: Optional[str] = None
    model_url: Optional[str] = None
    images: Optional[List[str]] = Field(default=None, description="Image URLs in display order")


class BoardOut(BaseModel):
    id: int
    product_id: int
    customer_id: int
    content: str
    answer: Optional[str] = None
    answered_at: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class BoardIn(BaseModel):
    content: Optional[str] = None


class AnswerIn(BaseModel):
    answer: Optional[str] = None
