"""
Pending SMS verification codes, one row per phone number.

A new code request overwrites the previous row; a successful check deletes
it, so each code is usable once. Too many wrong guesses delete it as well.
"""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from angagu.database import Base


class SmsVerification(Base):
    __tablename__ = "sms_verifications"

    phone_number: Mapped[str] = mapped_column(String(20), primary_key=True)
    code: Mapped[str] = mapped_column(String(6), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
