"""
ANGAGU Backend — Customer Route Handlers
=========================================

What:  Everything under /customer: login, the public catalogue, orders and
       reviews, product Q&A, the SMS signup flow and address book.
How:   Each handler validates, calls customer_service / sms_gateway, maps the
       ServiceResult to an HTTP status and errCode, and answers with the
       envelope. Authenticated routes take `Principal` from
       `customer_principal`, which has already rejected missing tokens (201)
       and non-customer principals (200).

Signup Flow:
    POST /signup/sms/code          phone → SMS with a 6-digit code
    POST /signup/sms/verification  phone + code → {token} (verified phone)
    POST /signup                   `verification: <token>` header + email/password → {id}

Resource-scoped writes follow one order, always:
    owner lookup (≠1 row → 404/503) → owner check (→ 403/502) → body check → write
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from angagu.database import get_db_session
from angagu.error_codes import ErrCode
from angagu.exceptions import ApiError, SmsGatewayError
from angagu.middleware.auth import CUSTOMER, Principal, customer_principal
from angagu.routes.common import (
    authenticate,
    check_owner,
    db_error_extra,
    guarded,
    issue_access_token,
)
from angagu.schemas.common import Envelope, ErrorEnvelope, IdData, TokenData, ok
from angagu.schemas.customer import (
    AddressIn,
    AddressOut,
    CustomerOut,
    EmailCheckRequest,
    LoginData,
    LoginRequest,
    OrderIn,
    OrderOut,
    PhoneRequest,
    ReviewIn,
    ReviewOut,
    SignupRequest,
    VerifyCodeRequest,
)
from angagu.schemas.product import (
    BoardIn,
    BoardOut,
    ModelUrlOut,
    ProductDetailOut,
    ProductImageOut,
    ProductOut,
)
from angagu.security import create_verification_token, hash_password, verified_phone_number
from angagu.services.customer_service import customer_service
from angagu.services.result import ResultStatus
from angagu.services.sms_gateway import sms_gateway
from angagu.validators import is_blank, is_email, is_password, is_phone

logger = logging.getLogger(__name__)

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(
    prefix="/customer",
    tags=["Customer"],
    responses={403: {"model": ErrorEnvelope}, 500: {"model": ErrorEnvelope}},
)

RATING_RANGE = range(1, 6)


def _address_is_valid(body: AddressIn) -> bool:
    """Exactly one of road/land, and both recipient and detail."""
    has_road = body.road is not None
    has_land = body.land is not None
    if has_road == has_land:
        return False
    return body.recipient is not None and body.detail is not None


def _review_is_valid(body: ReviewIn) -> bool:
    return body.rating in RATING_RANGE and not is_blank(body.content)


# ══════════════════════════════════════════════════════════════════════════
# Login
# ══════════════════════════════════════════════════════════════════════════


@router.post("/login", response_model=Envelope[LoginData], summary="Customer login")
@guarded()
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db_session)):
    """
    Exchange email + password for an access token.

    The returned user never carries the password hash; `type` is "customer".
    Bad email shape and unknown account answer HTTP 202 with an error
    envelope, which is what existing clients branch on.
    """
    if not is_email(body.email):
        raise ApiError(202, ErrCode.INVALID_EMAIL)

    accounts = await customer_service.get_customer_by_email(db, body.email)
    customer = authenticate(accounts, body.password)

    logger.info("Customer %s logged in", customer.id)
    return ok({
        "user": CustomerOut.model_validate(customer),
        "token": issue_access_token(customer, CUSTOMER),
    })


# ══════════════════════════════════════════════════════════════════════════
# Catalogue (public)
# ══════════════════════════════════════════════════════════════════════════


@router.get("/products", response_model=Envelope[List[ProductOut]])
@guarded()
async def products(db: AsyncSession = Depends(get_db_session)):
    result = await customer_service.get_products(db)
    if not result.ok:
        raise ApiError(202, ErrCode.DATABASE)
    return ok([ProductOut.model_validate(p) for p in result.data])


@router.get("/products/{product_id}", response_model=Envelope[ProductDetailOut])
@guarded(ErrCode.DATABASE)
async def product_detail(product_id: int, db: AsyncSession = Depends(get_db_session)):
    """The product record with its image sequence attached, in position order."""
    result = await customer_service.get_product_detail_by_id(db, product_id)
    if not result.ok:
        raise ApiError(404, ErrCode.DATABASE)

    product, images = result.data
    if product is None:
        raise ApiError(404, ErrCode.PRODUCT_NOT_FOUND)

    return ok(ProductDetailOut(
        id=product.id,
        company_id=product.company_id,
        name=product.name,
        price=product.price,
        description=product.description,
        category=product.category,
        model_url=product.model_url,
        created_at=product.created_at,
        images=[ProductImageOut.model_validate(image) for image in images],
    ))


@router.get("/products/{product_id}/ar", response_model=Envelope[ModelUrlOut])
@guarded()
async def model_url(product_id: int, db: AsyncSession = Depends(get_db_session)):
    result = await customer_service.get_model_url(db, product_id)
    if not result.ok:
        raise ApiError(404, result.err_code or ErrCode.DATABASE)
    return ok(ModelUrlOut(model_url=result.data))


@router.get("/products/{product_id}/board", response_model=Envelope[List[BoardOut]])
@guarded()
async def product_board(product_id: int, db: AsyncSession = Depends(get_db_session)):
    result = await customer_service.get_product_board(db, product_id)
    if not result.ok:
        raise ApiError(400, ErrCode.DATABASE)
    return ok([BoardOut.model_validate(post) for post in result.data])


@router.post("/products/{product_id}/board", response_model=Envelope[IdData])
@guarded()
async def post_product_board(
    product_id: int,
    body: BoardIn,
    principal: Principal = Depends(customer_principal),
    db: AsyncSession = Depends(get_db_session),
):
    if is_blank(body.content):
        raise ApiError(400, ErrCode.INVALID_CONTENT)

    result = await customer_service.post_product_board(db, principal.id, product_id, body.content)
    if not result.ok:
        if result.err_code == ErrCode.PRODUCT_NOT_FOUND:
            raise ApiError(404, ErrCode.PRODUCT_NOT_FOUND)
        raise ApiError(400, ErrCode.BOARD_POST_FAILED)
    return ok({"id": result.data})


# ══════════════════════════════════════════════════════════════════════════
# Orders & reviews
# ══════════════════════════════════════════════════════════════════════════


@router.get("/order", response_model=Envelope[List[OrderOut]])
@guarded()
async def order_list(
    principal: Principal = Depends(customer_principal),
    db: AsyncSession = Depends(get_db_session),
):
    result = await customer_service.get_order_list(db, principal.id)
    if not result.ok:
        raise ApiError(400, ErrCode.DATABASE)
    return ok([OrderOut.model_validate(order) for order in result.data])


@router.post("/order", response_model=Envelope[IdData])
@guarded()
async def post_order(
    body: OrderIn,
    principal: Principal = Depends(customer_principal),
    db: AsyncSession = Depends(get_db_session),
):
    """
    Place an order. Every item needs a positive count; prices come from
    the catalogue, never from the request.
    """
    if not body.items or any(item.count < 1 for item in body.items):
        raise ApiError(400, ErrCode.INVALID_ORDER)

    if body.address_id is not None:
        owners = await customer_service.get_customer_by_address(db, body.address_id)
        check_owner(owners, principal.id)

    items = [(item.product_id, item.count) for item in body.items]
    result = await customer_service.post_order(db, principal.id, body.address_id, items)
    if not result.ok:
        if result.err_code == ErrCode.PRODUCT_NOT_FOUND:
            raise ApiError(404, ErrCode.PRODUCT_NOT_FOUND)
        raise ApiError(400, ErrCode.ORDER_POST_FAILED, db_error_extra(result))
    return ok({"id": result.data})


@router.get("/order/{order_id}", response_model=Envelope[OrderOut])
@guarded()
async def order_detail(
    order_id: int,
    principal: Principal = Depends(customer_principal),
    db: AsyncSession = Depends(get_db_session),
):
    check_owner(await customer_service.get_customer_by_order(db, order_id), principal.id)

    result = await customer_service.get_order_detail(db, order_id)
    if not result.ok:
        raise ApiError(400, ErrCode.DATABASE)
    if result.data is None:
        raise ApiError(404, ErrCode.AMBIGUOUS_RESOURCE)
    return ok(OrderOut.model_validate(result.data))


@router.get("/order/{order_id}/review", response_model=Envelope[List[ReviewOut]])
@guarded()
async def get_reviews(
    order_id: int,
    principal: Principal = Depends(customer_principal),
    db: AsyncSession = Depends(get_db_session),
):
    check_owner(await customer_service.get_customer_by_order(db, order_id), principal.id)

    result = await customer_service.get_reviews(db, order_id)
    if not result.ok:
        raise ApiError(400, ErrCode.DATABASE)
    return ok([ReviewOut.model_validate(review) for review in result.data])


@router.post("/order/{order_id}/review", response_model=Envelope[IdData])
@guarded()
async def post_review(
    order_id: int,
    body: ReviewIn,
    principal: Principal = Depends(customer_principal),
    db: AsyncSession = Depends(get_db_session),
):
    check_owner(await customer_service.get_customer_by_order(db, order_id), principal.id)

    if body.product_id is None or not _review_is_valid(body):
        raise ApiError(400, ErrCode.INVALID_CONTENT)
    in_order = await customer_service.order_has_product(db, order_id, body.product_id)
    if not in_order.ok:
        raise ApiError(400, ErrCode.DATABASE)
    if not in_order.data:
        raise ApiError(400, ErrCode.INVALID_CONTENT)

    result = await customer_service.post_review(
        db, principal.id, order_id, body.product_id, body.rating, body.content
    )
    if not result.ok:
        raise ApiError(400, ErrCode.REVIEW_POST_FAILED)
    return ok({"id": result.data})


@router.put("/order/{order_id}/review/{review_id}", response_model=Envelope[IdData])
@guarded()
async def put_review(
    order_id: int,
    review_id: int,
    body: ReviewIn,
    principal: Principal = Depends(customer_principal),
    db: AsyncSession = Depends(get_db_session),
):
    owners = await customer_service.get_customer_by_review(db, order_id, review_id)
    check_owner(owners, principal.id)

    if not _review_is_valid(body):
        raise ApiError(400, ErrCode.INVALID_CONTENT)

    result = await customer_service.put_review(db, review_id, body.rating, body.content)
    if not result.ok:
        raise ApiError(400, ErrCode.REVIEW_PUT_FAILED)
    return ok({"id": result.data})


@router.delete("/order/{order_id}/review/{review_id}", response_model=Envelope[IdData])
@guarded()
async def delete_review(
    order_id: int,
    review_id: int,
    principal: Principal = Depends(customer_principal),
    db: AsyncSession = Depends(get_db_session),
):
    owners = await customer_service.get_customer_by_review(db, order_id, review_id)
    check_owner(owners, principal.id)

    result = await customer_service.delete_review(db, review_id)
    if not result.ok:
        raise ApiError(400, ErrCode.REVIEW_DELETE_FAILED)
    return ok({"id": result.data})


# ══════════════════════════════════════════════════════════════════════════
# Signup
# ══════════════════════════════════════════════════════════════════════════


@router.post("/signup", response_model=Envelope[IdData], summary="Create a customer account")
@guarded()
async def signup(
    body: SignupRequest,
    verification: Optional[str] = Header(default=None),
    db: AsyncSession = Depends(get_db_session),
):
    """
    Create a customer bound to the phone number proven by `verification`.

    Checks run in a fixed order: token (404), password policy (103), email
    shape (101). A taken email or phone number is 306; any other insert
    failure is 307. All failures answer HTTP 404.
    """
    phone_number = verified_phone_number(verification)
    if phone_number is None:
        raise ApiError(404, ErrCode.INVALID_VERIFICATION_TOKEN)
    if not is_password(body.password):
        raise ApiError(404, ErrCode.INVALID_PASSWORD)
    if not is_email(body.email):
        raise ApiError(404, ErrCode.INVALID_EMAIL)

    info = {"email": body.email, "password": hash_password(body.password), "name": body.name}
    result = await customer_service.customer_signup(db, info, phone_number)
    if result.status is ResultStatus.DUPLICATE:
        raise ApiError(404, ErrCode.DUPLICATE_ACCOUNT)
    if result.status is ResultStatus.ERROR:
        raise ApiError(404, ErrCode.SIGNUP_FAILED)
    return ok({"id": result.data})


@router.post("/signup/sms/code", response_model=Envelope[None])
@guarded(ErrCode.SEND_CODE_FAILED)
async def request_verify_code(body: PhoneRequest, db: AsyncSession = Depends(get_db_session)):
    if not is_phone(body.phone_number):
        raise ApiError(404, ErrCode.INVALID_PHONE)

    try:
        sent = await sms_gateway.send_code(db, body.phone_number)
    except SmsGatewayError as e:
        logger.warning("Verification code not sent: %s", e.message)
        raise ApiError(404, ErrCode.SEND_CODE_FAILED) from e

    if not sent.accepted:
        raise ApiError(404, ErrCode.SEND_CODE_FAILED)
    return ok()


@router.post("/signup/sms/verification", response_model=Envelope[TokenData])
@guarded()
async def confirm_verify_code(body: VerifyCodeRequest, db: AsyncSession = Depends(get_db_session)):
    """On a matching code, issue the short-lived token `signup` expects."""
    code = None if body.code is None else str(body.code)
    if not is_phone(body.phone_number) or is_blank(code):
        raise ApiError(404, ErrCode.VERIFY_FAILED)

    result = await sms_gateway.check_code(db, body.phone_number, code)
    if not result.ok:
        # Keep the attempt count and expired-row cleanup past the error response
        await db.commit()
        if result.err_code == ErrCode.WRONG_VERIFY_CODE:
            raise ApiError(404, ErrCode.WRONG_VERIFY_CODE)
        raise ApiError(404, ErrCode.VERIFY_FAILED)
    return ok({"token": create_verification_token(body.phone_number)})


@router.post("/signup/email", response_model=Envelope[None])
@guarded()
async def check_email(body: EmailCheckRequest, db: AsyncSession = Depends(get_db_session)):
    if not is_email(body.email):
        raise ApiError(404, ErrCode.INVALID_EMAIL)

    result = await customer_service.check_email_duplicate(db, body.email)
    if not result.ok:
        if result.err_code == ErrCode.DUPLICATE_EMAIL:
            raise ApiError(404, ErrCode.DUPLICATE_EMAIL)
        raise ApiError(404, ErrCode.DATABASE)
    return ok()


# ══════════════════════════════════════════════════════════════════════════
# Address book
# ══════════════════════════════════════════════════════════════════════════


@router.get("/address", response_model=Envelope[List[AddressOut]])
@guarded(ErrCode.DATABASE)
async def get_address(
    principal: Principal = Depends(customer_principal),
    db: AsyncSession = Depends(get_db_session),
):
    result = await customer_service.get_address(db, principal.id)
    if not result.ok:
        raise ApiError(400, ErrCode.DATABASE)
    return ok([AddressOut.model_validate(address) for address in result.data])


@router.post("/address", response_model=Envelope[IdData])
@guarded(ErrCode.DATABASE)
async def post_address(
    body: AddressIn,
    principal: Principal = Depends(customer_principal),
    db: AsyncSession = Depends(get_db_session),
):
    if not _address_is_valid(body):
        raise ApiError(400, ErrCode.INVALID_ADDRESS)

    result = await customer_service.post_address(db, principal.id, body.model_dump())
    if not result.ok:
        raise ApiError(400, ErrCode.ADDRESS_POST_FAILED, db_error_extra(result))
    return ok({"id": result.data})


# Registered before /address/{address_id} routes so "default" is not read as an id
@router.get("/address/default", response_model=Envelope[AddressOut])
@guarded(ErrCode.DATABASE)
async def get_default_address(
    principal: Principal = Depends(customer_principal),
    db: AsyncSession = Depends(get_db_session),
):
    result = await customer_service.get_default_address(db, principal.id)
    if not result.ok:
        raise ApiError(400, ErrCode.DATABASE)
    if not result.data:
        raise ApiError(404, ErrCode.AMBIGUOUS_RESOURCE)
    return ok(AddressOut.model_validate(result.data[0]))


@router.post("/address/default/{address_id}", response_model=Envelope[IdData])
@guarded(ErrCode.DATABASE)
async def set_default_address(
    address_id: int,
    principal: Principal = Depends(customer_principal),
    db: AsyncSession = Depends(get_db_session),
):
    check_owner(await customer_service.get_customer_by_address(db, address_id), principal.id)

    result = await customer_service.set_default_address(db, principal.id, address_id)
    if not result.ok:
        raise ApiError(400, ErrCode.ADDRESS_DEFAULT_FAILED)
    return ok({"id": result.data})


@router.put("/address/{address_id}", response_model=Envelope[IdData])
@guarded(ErrCode.DATABASE)
async def put_address(
    address_id: int,
    body: AddressIn,
    principal: Principal = Depends(customer_principal),
    db: AsyncSession = Depends(get_db_session),
):
    check_owner(await customer_service.get_customer_by_address(db, address_id), principal.id)

    if not _address_is_valid(body):
        raise ApiError(400, ErrCode.INVALID_ADDRESS)

    result = await customer_service.put_address(db, address_id, body.model_dump())
    if not result.ok:
        raise ApiError(400, ErrCode.ADDRESS_PUT_FAILED)
    return ok({"id": result.data})


@router.delete("/address/{address_id}", response_model=Envelope[IdData])
@guarded(ErrCode.DATABASE)
async def delete_address(
    address_id: int,
    principal: Principal = Depends(customer_principal),
    db: AsyncSession = Depends(get_db_session),
):
    check_owner(await customer_service.get_customer_by_address(db, address_id), principal.id)

    result = await customer_service.delete_address(db, address_id)
    if not result.ok:
        raise ApiError(400, ErrCode.ADDRESS_DELETE_FAILED)
    return ok({"id": result.data})
