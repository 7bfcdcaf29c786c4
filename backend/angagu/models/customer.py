"""
ANGAGU Backend — Customer and Address Models
=============================================

What:  ORM models for the `customers` and `addresses` tables.
Who:   Used by CustomerService; Alembic reads them for migrations.

Table Design:
    - email and phone_number are both unique: one account per verified phone
    - password holds a bcrypt hash and is never serialized
    - an address has exactly one of road/land populated; the handlers
      enforce this before any insert or update
    - at most one address per customer carries is_default=True; the service
      clears the flag on the others when a new default is chosen
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, false, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from angagu.database import Base


class Customer(Base):
    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    phone_number: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    addresses: Mapped[List["Address"]] = relationship(
        back_populates="customer",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Customer(id={self.id}, email='{self.email}')>"


class Address(Base):
    __tablename__ = "addresses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    customer_id: Mapped[int] = mapped_column(
        ForeignKey("customers.id", ondelete="CASCADE"),
        nullable=False,
    )
    # Road-name address XOR land-lot address
    road: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    land: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    recipient: Mapped[str] = mapped_column(String(100), nullable=False)
    detail: Mapped[str] = mapped_column(String(255), nullable=False)
    zip_code: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    phone_number: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    is_default: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    customer: Mapped[Customer] = relationship(back_populates="addresses")

    __table_args__ = (
        Index("idx_addresses_customer_id", "customer_id"),
    )

    def __repr__(self) -> str:
        return f"<Address(id={self.id}, customer_id={self.customer_id}, default={self.is_default})>"
