"""
ANGAGU Backend — Admin Route Handlers
======================================

What:  Admin login and the product approval queue.
How:   Products registered by companies start with approved=False and are
       invisible to customers; PUT /admin/approve/{id} publishes them.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from angagu.database import get_db_session
from angagu.error_codes import ErrCode
from angagu.exceptions import ApiError
from angagu.middleware.auth import ADMIN, Principal, admin_principal
from angagu.routes.common import authenticate, guarded, issue_access_token
from angagu.schemas.common import Envelope, ErrorEnvelope, IdData, ok
from angagu.schemas.company import AdminLoginData, AdminOut
from angagu.schemas.customer import LoginRequest
from angagu.schemas.product import ProductOut
from angagu.services.admin_service import admin_service
from angagu.validators import is_email

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    responses={403: {"model": ErrorEnvelope}, 500: {"model": ErrorEnvelope}},
)


@router.post("/login", response_model=Envelope[AdminLoginData], summary="Admin login")
@guarded()
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db_session)):
    if not is_email(body.email):
        raise ApiError(202, ErrCode.INVALID_EMAIL)

    accounts = await admin_service.get_admin_by_email(db, body.email)
    admin = authenticate(accounts, body.password)

    logger.info("Admin %s logged in", admin.id)
    return ok({
        "user": AdminOut.model_validate(admin),
        "token": issue_access_token(admin, ADMIN),
    })


@router.get("/approve", response_model=Envelope[List[ProductOut]])
@guarded()
async def unapproved_products(
    principal: Principal = Depends(admin_principal),
    db: AsyncSession = Depends(get_db_session),
):
    result = await admin_service.get_unapproved_products(db)
    if not result.ok:
        raise ApiError(400, ErrCode.DATABASE)
    return ok([ProductOut.model_validate(p) for p in result.data])


@router.put("/approve/{product_id}", response_model=Envelope[IdData])
@guarded()
async def approve_product(
    product_id: int,
    principal: Principal = Depends(admin_principal),
    db: AsyncSession = Depends(get_db_session),
):
    found = await admin_service.get_product(db, product_id)
    if not found.ok:
        raise ApiError(400, ErrCode.DATABASE)
    if found.data is None:
        raise ApiError(404, ErrCode.PRODUCT_NOT_FOUND)

    result = await admin_service.approve_product(db, product_id)
    if not result.ok:
        raise ApiError(400, ErrCode.APPROVE_FAILED)
    logger.info("Admin %s approved product %s", principal.id, product_id)
    return ok({"id": result.data})
