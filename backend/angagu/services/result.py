"""
ANGAGU Backend — Service Result Type
=====================================

What:  The value every database-service method returns.
How:   A status tag from a closed enumeration plus an optional payload,
       raw error text and errCode:

           ServiceResult(status=SUCCESS,   data=<payload>)
           ServiceResult(status=ERROR,     err="<db error>", err_code=<int?>)
           ServiceResult(status=DUPLICATE, err="<constraint>")

       Handlers branch on `status`; they never inspect `err` beyond passing
       it back to the client where the envelope allows raw error text.

Which statuses a method can return is documented on the method. Only the
insert methods guarded by unique constraints return DUPLICATE.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ResultStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    DUPLICATE = "duplicate"


@dataclass(frozen=True)
class ServiceResult(Generic[T]):
    status: ResultStatus
    data: Optional[T] = None
    err: Optional[str] = None
    err_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.status is ResultStatus.SUCCESS

    @classmethod
    def success(cls, data: Optional[T] = None) -> "ServiceResult[T]":
        return cls(status=ResultStatus.SUCCESS, data=data)

    @classmethod
    def error(cls, err: Optional[str] = None, err_code: Optional[int] = None) -> "ServiceResult[T]":
        return cls(status=ResultStatus.ERROR, err=err, err_code=err_code)

    @classmethod
    def duplicate(cls, err: Optional[str] = None) -> "ServiceResult[T]":
        return cls(status=ResultStatus.DUPLICATE, err=err)


async def db_failure(db: AsyncSession, operation: str, exc: SQLAlchemyError) -> ServiceResult:
    """
    Log a failed query, roll the session back and return an ERROR result.

    The rollback leaves the request's session usable, so the session
    dependency's final commit does not trip over the failed transaction.
    Only the exception class name travels back to the client.
    """
    logger.error("Database error in %s: %s", operation, str(exc), exc_info=True)
    await db.rollback()
    return ServiceResult.error(err=type(exc).__name__)
