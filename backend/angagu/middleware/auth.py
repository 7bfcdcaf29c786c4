"""
ANGAGU Backend — Bearer Token Authorization
============================================

What:  FastAPI dependencies that turn `Authorization: Bearer <jwt>` into a
       typed Principal passed to the handler as a parameter.
How:   Two gates, both raising ApiError(403) so the handler never runs:

           no header / bad signature / expired / no id+type  → errCode 201
           valid token but principal of another type          → errCode 200

Usage:
    @router.get("/address")
    async def get_address(principal: Principal = Depends(customer_principal), ...):
        ...
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from angagu.error_codes import ErrCode
from angagu.exceptions import ApiError
from angagu.security import decode_token

logger = logging.getLogger(__name__)

CUSTOMER = "customer"
COMPANY = "company"
ADMIN = "admin"
PRINCIPAL_TYPES = (CUSTOMER, COMPANY, ADMIN)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    id: int
    type: str


async def get_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Principal:
    """Any authenticated principal."""
    if credentials is None:
        raise ApiError(403, ErrCode.UNAUTHORIZED)

    payload = decode_token(credentials.credentials)
    if payload is None:
        raise ApiError(403, ErrCode.UNAUTHORIZED)

    principal_id = payload.get("id")
    principal_type = payload.get("type")
    if not isinstance(principal_id, int) or principal_type not in PRINCIPAL_TYPES:
        logger.warning("Token without a usable id/type rejected")
        raise ApiError(403, ErrCode.UNAUTHORIZED)

    return Principal(id=principal_id, type=principal_type)


def require_type(principal_type: str) -> Callable:
    async def dependency(principal: Principal = Depends(get_principal)) -> Principal:
        if principal.type != principal_type:
            raise ApiError(403, ErrCode.WRONG_PRINCIPAL)
        return principal

    dependency.__name__ = f"{principal_type}_principal"
    return dependency


customer_principal = require_type(CUSTOMER)
company_principal = require_type(COMPANY)
admin_principal = require_type(ADMIN)
