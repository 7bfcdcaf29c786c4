"""
ANGAGU Backend — Company Route Handlers
========================================

What:  The seller surface under /company: account signup and recovery,
       product registration, sales figures, order fulfilment (delivery
       numbers, refunds) and answers to customer questions.
Who:   Seller dashboard. Authenticated routes take the Principal from
       `company_principal`.

Ownership:
    A company may only touch its own products and the order lines and
    board posts attached to them. Every such write runs
    `check_owner(<owner lookup>, principal.id)` before validating the body.

Account recovery:
    POST /find/email     name + phone → masked emails ("ab***@shop.com")
    POST /find/password  `verification` header (SMS-proven phone, as in
                         customer signup) + email + phone + new password
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from angagu.database import get_db_session
from angagu.error_codes import ErrCode
from angagu.exceptions import ApiError
from angagu.middleware.auth import COMPANY, Principal, company_principal
from angagu.routes.common import (
    authenticate,
    check_owner,
    db_error_extra,
    guarded,
    issue_access_token,
)
from angagu.schemas.common import Envelope, ErrorEnvelope, IdData, ok
from angagu.schemas.company import (
    BusinessInfoIn,
    CompanyLoginData,
    CompanyOrderLineOut,
    CompanyOut,
    CompanySignupRequest,
    DeliveryIn,
    FindEmailData,
    FindEmailIn,
    FindPasswordIn,
    SaleOut,
)
from angagu.schemas.customer import LoginRequest
from angagu.schemas.product import AnswerIn, BoardOut, ProductIn, ProductOut
from angagu.security import hash_password, verified_phone_number
from angagu.services.company_service import BUSINESS_FIELDS, company_service
from angagu.services.result import ResultStatus
from angagu.validators import is_blank, is_email, is_password, is_phone

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/company",
    tags=["Company"],
    responses={403: {"model": ErrorEnvelope}, 500: {"model": ErrorEnvelope}},
)


def mask_email(email: str) -> str:
    """Keep the first two characters of the local part: "abcdef@x.com" → "ab****@x.com"."""
    local, _, domain = email.partition("@")
    visible = local[:2]
    return f"{visible}{'*' * max(len(local) - len(visible), 1)}@{domain}"


# ══════════════════════════════════════════════════════════════════════════
# Accounts
# ══════════════════════════════════════════════════════════════════════════


@router.post("/login", response_model=Envelope[CompanyLoginData], summary="Company login")
@guarded()
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db_session)):
    if not is_email(body.email):
        raise ApiError(202, ErrCode.INVALID_EMAIL)

    accounts = await company_service.get_company_by_email(db, body.email)
    company = authenticate(accounts, body.password)

    logger.info("Company %s logged in", company.id)
    return ok({
        "user": CompanyOut.model_validate(company),
        "token": issue_access_token(company, COMPANY),
    })


@router.post("/signup", response_model=Envelope[IdData], summary="Create a company account")
@guarded()
async def signup(body: CompanySignupRequest, db: AsyncSession = Depends(get_db_session)):
    """
    Register a seller. Every failure answers HTTP 404:
    email 101, password 103, phone 104, missing name or business/account
    fields 504, taken email or business number 306, other insert failure 307.
    """
    if not is_email(body.email):
        raise ApiError(404, ErrCode.INVALID_EMAIL)
    if not is_password(body.password):
        raise ApiError(404, ErrCode.INVALID_PASSWORD)
    if not is_phone(body.phone_number):
        raise ApiError(404, ErrCode.INVALID_PHONE)

    info = body.model_dump()
    if any(is_blank(info[field]) for field in ("name",) + BUSINESS_FIELDS):
        raise ApiError(404, ErrCode.INVALID_CONTENT)

    info["password"] = hash_password(body.password)
    result = await company_service.company_signup(db, info)
    if result.status is ResultStatus.DUPLICATE:
        raise ApiError(404, ErrCode.DUPLICATE_ACCOUNT)
    if result.status is ResultStatus.ERROR:
        raise ApiError(404, ErrCode.SIGNUP_FAILED)
    return ok({"id": result.data})


@router.get("/info", response_model=Envelope[CompanyOut])
@guarded()
async def get_info(
    principal: Principal = Depends(company_principal),
    db: AsyncSession = Depends(get_db_session),
):
    result = await company_service.get_info(db, principal.id)
    if not result.ok:
        raise ApiError(400, ErrCode.DATABASE)
    if result.data is None:
        raise ApiError(404, ErrCode.ACCOUNT_NOT_FOUND)
    return ok(CompanyOut.model_validate(result.data))


@router.post("/info/business", response_model=Envelope[IdData])
@guarded()
async def update_business_info(
    body: BusinessInfoIn,
    principal: Principal = Depends(company_principal),
    db: AsyncSession = Depends(get_db_session),
):
    info = body.model_dump()
    if any(is_blank(info[field]) for field in BUSINESS_FIELDS):
        raise ApiError(400, ErrCode.INVALID_CONTENT)

    result = await company_service.update_business_info(db, principal.id, info)
    if not result.ok:
        raise ApiError(400, ErrCode.BUSINESS_INFO_FAILED)
    return ok({"id": result.data})


@router.post("/find/email", response_model=Envelope[FindEmailData])
@guarded()
async def find_email(body: FindEmailIn, db: AsyncSession = Depends(get_db_session)):
    if not is_phone(body.phone_number):
        raise ApiError(404, ErrCode.INVALID_PHONE)
    if is_blank(body.name):
        raise ApiError(404, ErrCode.INVALID_CONTENT)

    result = await company_service.get_emails_by_name_and_phone(db, body.name, body.phone_number)
    if not result.ok:
        raise ApiError(400, ErrCode.DATABASE)
    if not result.data:
        raise ApiError(404, ErrCode.ACCOUNT_NOT_FOUND)
    return ok({"emails": [mask_email(email) for email in result.data]})


@router.post("/find/password", response_model=Envelope[IdData])
@guarded()
async def reset_password(
    body: FindPasswordIn,
    verification: Optional[str] = Header(default=None),
    db: AsyncSession = Depends(get_db_session),
):
    """Set a new password for the account whose phone the token proves."""
    phone_number = verified_phone_number(verification)
    if phone_number is None or phone_number != body.phone_number:
        raise ApiError(404, ErrCode.INVALID_VERIFICATION_TOKEN)
    if not is_password(body.password):
        raise ApiError(404, ErrCode.INVALID_PASSWORD)

    matches = await company_service.get_company_by_email_and_phone(db, body.email, phone_number)
    if not matches.ok:
        raise ApiError(400, ErrCode.DATABASE)
    if len(matches.data) != 1:
        raise ApiError(404, ErrCode.ACCOUNT_NOT_FOUND)

    result = await company_service.update_password(db, matches.data[0], hash_password(body.password))
    if not result.ok:
        raise ApiError(400, ErrCode.PASSWORD_RESET_FAILED)
    return ok({"id": result.data})


# ══════════════════════════════════════════════════════════════════════════
# Products
# ══════════════════════════════════════════════════════════════════════════


@router.get("/products", response_model=Envelope[List[ProductOut]])
@guarded()
async def products(
    principal: Principal = Depends(company_principal),
    db: AsyncSession = Depends(get_db_session),
):
    result = await company_service.get_products(db, principal.id)
    if not result.ok:
        raise ApiError(400, ErrCode.DATABASE)
    return ok([ProductOut.model_validate(p) for p in result.data])


@router.post("/products", response_model=Envelope[IdData])
@guarded()
async def post_product(
    body: ProductIn,
    principal: Principal = Depends(company_principal),
    db: AsyncSession = Depends(get_db_session),
):
    """New products start unapproved and stay hidden until an admin approves them."""
    if is_blank(body.name) or body.price is None or body.price < 0:
        raise ApiError(400, ErrCode.INVALID_CONTENT)
    image_urls = body.images or []
    if any(is_blank(url) for url in image_urls):
        raise ApiError(400, ErrCode.INVALID_CONTENT)

    result = await company_service.post_product(db, principal.id, body.model_dump(), image_urls)
    if not result.ok:
        raise ApiError(400, ErrCode.PRODUCT_POST_FAILED, db_error_extra(result))
    return ok({"id": result.data})


@router.delete("/products/{product_id}", response_model=Envelope[IdData])
@guarded()
async def delete_product(
    product_id: int,
    principal: Principal = Depends(company_principal),
    db: AsyncSession = Depends(get_db_session),
):
    check_owner(await company_service.get_company_by_product(db, product_id), principal.id)

    result = await company_service.delete_product(db, product_id)
    if not result.ok:
        raise ApiError(400, ErrCode.PRODUCT_DELETE_FAILED)
    return ok({"id": result.data})


# ══════════════════════════════════════════════════════════════════════════
# Sales & fulfilment
# ══════════════════════════════════════════════════════════════════════════


@router.get("/sale", response_model=Envelope[List[SaleOut]])
@guarded()
async def sale(
    principal: Principal = Depends(company_principal),
    db: AsyncSession = Depends(get_db_session),
):
    result = await company_service.get_sale(db, principal.id)
    if not result.ok:
        raise ApiError(400, ErrCode.DATABASE)
    return ok(result.data)


@router.get("/order", response_model=Envelope[List[CompanyOrderLineOut]])
@guarded()
async def orders(
    principal: Principal = Depends(company_principal),
    db: AsyncSession = Depends(get_db_session),
):
    result = await company_service.get_order(db, principal.id)
    if not result.ok:
        raise ApiError(400, ErrCode.DATABASE)
    return ok(result.data)


@router.put("/order/{detail_id}/delivery", response_model=Envelope[IdData])
@guarded()
async def add_delivery_number(
    detail_id: int,
    body: DeliveryIn,
    principal: Principal = Depends(company_principal),
    db: AsyncSession = Depends(get_db_session),
):
    check_owner(await company_service.get_company_by_order_detail(db, detail_id), principal.id)

    if is_blank(body.delivery_number):
        raise ApiError(400, ErrCode.INVALID_CONTENT)

    result = await company_service.add_delivery_number(db, detail_id, body.delivery_number)
    if not result.ok:
        raise ApiError(400, ErrCode.DELIVERY_NUMBER_FAILED)
    return ok({"id": result.data})


@router.put("/refund/{detail_id}", response_model=Envelope[IdData])
@guarded()
async def refund(
    detail_id: int,
    principal: Principal = Depends(company_principal),
    db: AsyncSession = Depends(get_db_session),
):
    check_owner(await company_service.get_company_by_order_detail(db, detail_id), principal.id)

    result = await company_service.refund(db, detail_id)
    if not result.ok:
        raise ApiError(400, ErrCode.REFUND_FAILED)
    return ok({"id": result.data})


# ══════════════════════════════════════════════════════════════════════════
# Product Q&A
# ══════════════════════════════════════════════════════════════════════════


@router.get("/board", response_model=Envelope[List[BoardOut]])
@guarded()
async def board(
    principal: Principal = Depends(company_principal),
    db: AsyncSession = Depends(get_db_session),
):
    result = await company_service.get_board(db, principal.id)
    if not result.ok:
        raise ApiError(400, ErrCode.DATABASE)
    return ok([BoardOut.model_validate(post) for post in result.data])


@router.post("/board/{board_id}/answer", response_model=Envelope[IdData])
@guarded()
async def answer_board(
    board_id: int,
    body: AnswerIn,
    principal: Principal = Depends(company_principal),
    db: AsyncSession = Depends(get_db_session),
):
    check_owner(await company_service.get_company_by_board(db, board_id), principal.id)

    if is_blank(body.answer):
        raise ApiError(400, ErrCode.INVALID_CONTENT)

    result = await company_service.answer_board(db, board_id, body.answer)
    if not result.ok:
        raise ApiError(400, ErrCode.BOARD_ANSWER_FAILED)
    return ok({"id": result.data})
