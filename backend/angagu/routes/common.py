"""
Helpers shared by the customer, company and admin handlers.

`guarded` is the per-handler catch-all; `check_owner` is the existence then
ownership gate that runs before every resource-scoped write.
"""

import functools
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar

from angagu.error_codes import ErrCode
from angagu.exceptions import ApiError
from angagu.security import create_access_token, verify_password
from angagu.services.result import ServiceResult

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


def guarded(err_code: int = ErrCode.UNKNOWN) -> Callable[[F], F]:
    """
    Convert anything a handler did not anticipate into ApiError(500, err_code).

    ApiError passes through untouched. The traceback is logged; the client
    only sees the errCode.
    """

    def decorator(handler: F) -> F:
        @functools.wraps(handler)
        async def wrapper(*args, **kwargs):
            try:
                return await handler(*args, **kwargs)
            except ApiError:
                raise
            except Exception as e:
                logger.error("Unhandled error in %s: %s", handler.__name__, str(e), exc_info=True)
                raise ApiError(500, err_code, context={"handler": handler.__name__}) from e

        return wrapper  # type: ignore[return-value]

    return decorator


def check_owner(owners: ServiceResult[List[int]], principal_id: int) -> None:
    """
    Gate a write on a resource owned by `principal_id`.

        lookup failed        → 400 / 100
        not exactly one row  → 404 / 503
        owned by someone else → 403 / 502
    """
    if not owners.ok:
        raise ApiError(400, ErrCode.DATABASE)
    if len(owners.data) != 1:
        raise ApiError(404, ErrCode.AMBIGUOUS_RESOURCE)
    if owners.data[0] != principal_id:
        raise ApiError(403, ErrCode.NOT_OWNER)


def db_error_extra(result: ServiceResult) -> Optional[Dict[str, Any]]:
    """`{"err": ...}` for handlers that echo the raw failure next to errCode."""
    return {"err": result.err} if result.err else None


def authenticate(accounts: ServiceResult[List[Any]], password: Optional[str]) -> Any:
    """
    Shared login gate for customers, companies and admins.

        lookup failed          → 500 / 100 with the raw error
        not exactly one match  → 202 / 102
        password mismatch      → 405 / 405
    """
    if not accounts.ok:
        raise ApiError(500, ErrCode.DATABASE, db_error_extra(accounts))
    if len(accounts.data) != 1:
        raise ApiError(202, ErrCode.ACCOUNT_NOT_FOUND)
    account = accounts.data[0]
    if not verify_password(password, account.password):
        raise ApiError(405, ErrCode.WRONG_PASSWORD)
    return account


def issue_access_token(account: Any, principal_type: str) -> str:
    claims = {
        "id": account.id,
        "type": principal_type,
        "email": account.email,
        "name": getattr(account, "name", None),
    }
    return create_access_token(claims)
