"""
ANGAGU Backend — Customer Database Service
===========================================

What:  One async method per query/mutation used by the customer handlers.
How:   Each method runs its statements on the request's AsyncSession and
       returns a ServiceResult. SQLAlchemy failures are logged, rolled back
       and returned as ERROR; unique-constraint violations on signup are
       returned as DUPLICATE.
Who:   Called by angagu.routes.customer.

Owner lookups (`get_customer_by_address`, `get_customer_by_order`,
`get_customer_by_review`) return a list of owner ids rather than a single
value: the handlers require exactly one row and treat zero or several as
"not found or ambiguous".
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from angagu.error_codes import ErrCode
from angagu.models.customer import Address, Customer
from angagu.models.order import Order, OrderDetail, Review
from angagu.models.product import Board, Product, ProductImage
from angagu.services.result import ServiceResult, db_failure

logger = logging.getLogger(__name__)

ADDRESS_FIELDS = ("road", "land", "recipient", "detail", "zip_code", "phone_number")


class CustomerService:
    """
    Query layer for customers, their addresses, orders, reviews and board posts,
    plus the public product catalogue.

    Statuses:
        every method        SUCCESS | ERROR
        customer_signup     SUCCESS | DUPLICATE | ERROR
        check_email_duplicate  ERROR carries err_code=402 when the email is taken
        post_order, post_product_board, get_model_url
                            ERROR carries err_code=300 when a product is missing
    """

    # ── Accounts ──────────────────────────────────────────────────────────

    async def get_customer_by_email(
        self, db: AsyncSession, email: str
    ) -> ServiceResult[List[Customer]]:
        try:
            result = await db.execute(select(Customer).where(Customer.email == email))
            return ServiceResult.success(list(result.scalars().all()))
        except SQLAlchemyError as e:
            return await db_failure(db, "get_customer_by_email", e)

    async def customer_signup(
        self, db: AsyncSession, info: Dict[str, Any], phone_number: str
    ) -> ServiceResult[int]:
        """
        Insert a customer bound to a verified phone number.

        `info["password"]` must already be hashed. Returns the new id.
        """
        customer = Customer(
            email=info["email"],
            password=info["password"],
            name=info.get("name"),
            phone_number=phone_number,
        )
        try:
            db.add(customer)
            await db.flush()
            logger.info("Customer %s signed up", customer.id)
            return ServiceResult.success(customer.id)
        except IntegrityError as e:
            await db.rollback()
            logger.info("Duplicate customer signup rejected")
            return ServiceResult.duplicate(err=type(e).__name__)
        except SQLAlchemyError as e:
            return await db_failure(db, "customer_signup", e)

    async def check_email_duplicate(self, db: AsyncSession, email: str) -> ServiceResult[None]:
        try:
            result = await db.execute(select(Customer.id).where(Customer.email == email))
            if result.first() is not None:
                return ServiceResult.error(err="email in use", err_code=ErrCode.DUPLICATE_EMAIL)
            return ServiceResult.success()
        except SQLAlchemyError as e:
            return await db_failure(db, "check_email_duplicate", e)

    # ── Catalogue ─────────────────────────────────────────────────────────

    async def get_products(self, db: AsyncSession) -> ServiceResult[List[Product]]:
        """Approved products, newest first, images loaded."""
        try:
            result = await db.execute(
                select(Product)
                .where(Product.approved.is_(True))
                .options(selectinload(Product.images))
                .order_by(Product.id.desc())
            )
            return ServiceResult.success(list(result.scalars().all()))
        except SQLAlchemyError as e:
            return await db_failure(db, "get_products", e)

    async def get_product_detail_by_id(
        self, db: AsyncSession, product_id: int
    ) -> ServiceResult[Tuple[Optional[Product], List[ProductImage]]]:
        """
        The approved product and its images ordered by position.

        A missing or unapproved product is SUCCESS with `(None, [])`; the
        handler turns that into "product not found".
        """
        try:
            result = await db.execute(
                select(Product).where(Product.id == product_id, Product.approved.is_(True))
            )
            product = result.scalar_one_or_none()
            if product is None:
                return ServiceResult.success((None, []))
            images = await db.execute(
                select(ProductImage)
                .where(ProductImage.product_id == product_id)
                .order_by(ProductImage.position, ProductImage.id)
            )
            return ServiceResult.success((product, list(images.scalars().all())))
        except SQLAlchemyError as e:
            return await db_failure(db, "get_product_detail_by_id", e)

    async def get_model_url(self, db: AsyncSession, product_id: int) -> ServiceResult[Optional[str]]:
        try:
            result = await db.execute(
                select(Product.model_url).where(
                    Product.id == product_id, Product.approved.is_(True)
                )
            )
            row = result.first()
            if row is None:
                return ServiceResult.error(err="no such product", err_code=ErrCode.PRODUCT_NOT_FOUND)
            return ServiceResult.success(row[0])
        except SQLAlchemyError as e:
            return await db_failure(db, "get_model_url", e)

    # ── Product board ─────────────────────────────────────────────────────

    async def get_product_board(self, db: AsyncSession, product_id: int) -> ServiceResult[List[Board]]:
        try:
            result = await db.execute(
                select(Board).where(Board.product_id == product_id).order_by(Board.id.desc())
            )
            return ServiceResult.success(list(result.scalars().all()))
        except SQLAlchemyError as e:
            return await db_failure(db, "get_product_board", e)

    async def post_product_board(
        self, db: AsyncSession, customer_id: int, product_id: int, content: str
    ) -> ServiceResult[int]:
        try:
            product = await db.get(Product, product_id)
            if product is None or not product.approved:
                return ServiceResult.error(err="no such product", err_code=ErrCode.PRODUCT_NOT_FOUND)
            board = Board(product_id=product_id, customer_id=customer_id, content=content)
            db.add(board)
            await db.flush()
            return ServiceResult.success(board.id)
        except SQLAlchemyError as e:
            return await db_failure(db, "post_product_board", e)

    # ── Orders ────────────────────────────────────────────────────────────

    async def get_order_list(self, db: AsyncSession, customer_id: int) -> ServiceResult[List[Order]]:
        try:
            result = await db.execute(
                select(Order)
                .where(Order.customer_id == customer_id)
                .options(selectinload(Order.details))
                .order_by(Order.id.desc())
            )
            return ServiceResult.success(list(result.scalars().all()))
        except SQLAlchemyError as e:
            return await db_failure(db, "get_order_list", e)

    async def get_customer_by_order(self, db: AsyncSession, order_id: int) -> ServiceResult[List[int]]:
        try:
            result = await db.execute(select(Order.customer_id).where(Order.id == order_id))
            return ServiceResult.success(list(result.scalars().all()))
        except SQLAlchemyError as e:
            return await db_failure(db, "get_customer_by_order", e)

    async def get_order_detail(self, db: AsyncSession, order_id: int) -> ServiceResult[Optional[Order]]:
        try:
            result = await db.execute(
                select(Order).where(Order.id == order_id).options(selectinload(Order.details))
            )
            return ServiceResult.success(result.scalar_one_or_none())
        except SQLAlchemyError as e:
            return await db_failure(db, "get_order_detail", e)

    async def post_order(
        self,
        db: AsyncSession,
        customer_id: int,
        address_id: Optional[int],
        items: Sequence[Tuple[int, int]],
    ) -> ServiceResult[int]:
        """
        Place an order for `(product_id, count)` items.

        Every product must exist and be approved; the line price is the
        product's current price.
        """
        product_ids = {product_id for product_id, _ in items}
        try:
            result = await db.execute(
                select(Product.id, Product.price).where(
                    Product.id.in_(product_ids), Product.approved.is_(True)
                )
            )
            prices = {row.id: row.price for row in result}
            if set(prices) != product_ids:
                return ServiceResult.error(err="no such product", err_code=ErrCode.PRODUCT_NOT_FOUND)

            order = Order(
                customer_id=customer_id,
                address_id=address_id,
                details=[
                    OrderDetail(product_id=product_id, count=count, price=prices[product_id])
                    for product_id, count in items
                ],
            )
            db.add(order)
            await db.flush()
            logger.info("Order %s placed by customer %s (%d lines)", order.id, customer_id, len(items))
            return ServiceResult.success(order.id)
        except SQLAlchemyError as e:
            return await db_failure(db, "post_order", e)

    async def order_has_product(
        self, db: AsyncSession, order_id: int, product_id: int
    ) -> ServiceResult[bool]:
        try:
            result = await db.execute(
                select(OrderDetail.id).where(
                    OrderDetail.order_id == order_id, OrderDetail.product_id == product_id
                )
            )
            return ServiceResult.success(result.first() is not None)
        except SQLAlchemyError as e:
            return await db_failure(db, "order_has_product", e)

    # ── Reviews ───────────────────────────────────────────────────────────

    async def get_reviews(self, db: AsyncSession, order_id: int) -> ServiceResult[List[Review]]:
        try:
            result = await db.execute(
                select(Review).where(Review.order_id == order_id).order_by(Review.id)
            )
            return ServiceResult.success(list(result.scalars().all()))
        except SQLAlchemyError as e:
            return await db_failure(db, "get_reviews", e)

    async def get_customer_by_review(
        self, db: AsyncSession, order_id: int, review_id: int
    ) -> ServiceResult[List[int]]:
        try:
            result = await db.execute(
                select(Review.customer_id).where(
                    Review.id == review_id, Review.order_id == order_id
                )
            )
            return ServiceResult.success(list(result.scalars().all()))
        except SQLAlchemyError as e:
            return await db_failure(db, "get_customer_by_review", e)

    async def post_review(
        self,
        db: AsyncSession,
        customer_id: int,
        order_id: int,
        product_id: int,
        rating: int,
        content: str,
    ) -> ServiceResult[int]:
        review = Review(
            customer_id=customer_id,
            order_id=order_id,
            product_id=product_id,
            rating=rating,
            content=content,
        )
        try:
            db.add(review)
            await db.flush()
            return ServiceResult.success(review.id)
        except SQLAlchemyError as e:
            return await db_failure(db, "post_review", e)

    async def put_review(
        self, db: AsyncSession, review_id: int, rating: int, content: str
    ) -> ServiceResult[int]:
        try:
            result = await db.execute(
                update(Review)
                .where(Review.id == review_id)
                .values(rating=rating, content=content)
            )
            if result.rowcount != 1:
                return ServiceResult.error(err="review not updated")
            return ServiceResult.success(review_id)
        except SQLAlchemyError as e:
            return await db_failure(db, "put_review", e)

    async def delete_review(self, db: AsyncSession, review_id: int) -> ServiceResult[int]:
        try:
            result = await db.execute(delete(Review).where(Review.id == review_id))
            if result.rowcount != 1:
                return ServiceResult.error(err="review not deleted")
            return ServiceResult.success(review_id)
        except SQLAlchemyError as e:
            return await db_failure(db, "delete_review", e)

    # ── Addresses ─────────────────────────────────────────────────────────

    async def get_address(self, db: AsyncSession, customer_id: int) -> ServiceResult[List[Address]]:
        try:
            result = await db.execute(
                select(Address).where(Address.customer_id == customer_id).order_by(Address.id)
            )
            return ServiceResult.success(list(result.scalars().all()))
        except SQLAlchemyError as e:
            return await db_failure(db, "get_address", e)

    async def post_address(
        self, db: AsyncSession, customer_id: int, data: Dict[str, Any]
    ) -> ServiceResult[int]:
        address = Address(
            customer_id=customer_id,
            **{field: data.get(field) for field in ADDRESS_FIELDS},
        )
        try:
            db.add(address)
            await db.flush()
            return ServiceResult.success(address.id)
        except SQLAlchemyError as e:
            return await db_failure(db, "post_address", e)

    async def get_customer_by_address(
        self, db: AsyncSession, address_id: int
    ) -> ServiceResult[List[int]]:
        try:
            result = await db.execute(select(Address.customer_id).where(Address.id == address_id))
            return ServiceResult.success(list(result.scalars().all()))
        except SQLAlchemyError as e:
            return await db_failure(db, "get_customer_by_address", e)

    async def delete_address(self, db: AsyncSession, address_id: int) -> ServiceResult[int]:
        try:
            result = await db.execute(delete(Address).where(Address.id == address_id))
            if result.rowcount != 1:
                return ServiceResult.error(err="address not deleted")
            return ServiceResult.success(address_id)
        except SQLAlchemyError as e:
            return await db_failure(db, "delete_address", e)

    async def put_address(
        self, db: AsyncSession, address_id: int, data: Dict[str, Any]
    ) -> ServiceResult[int]:
        """Replace every address field; the road/land not supplied becomes NULL."""
        try:
            result = await db.execute(
                update(Address)
                .where(Address.id == address_id)
                .values(**{field: data.get(field) for field in ADDRESS_FIELDS})
            )
            if result.rowcount != 1:
                return ServiceResult.error(err="address not updated")
            return ServiceResult.success(address_id)
        except SQLAlchemyError as e:
            return await db_failure(db, "put_address", e)

    async def set_default_address(
        self, db: AsyncSession, customer_id: int, address_id: int
    ) -> ServiceResult[int]:
        try:
            await db.execute(
                update(Address)
                .where(Address.customer_id == customer_id, Address.id != address_id)
                .values(is_default=False)
            )
            result = await db.execute(
                update(Address)
                .where(Address.id == address_id, Address.customer_id == customer_id)
                .values(is_default=True)
            )
            if result.rowcount != 1:
                await db.rollback()
                return ServiceResult.error(err="default address not set")
            return ServiceResult.success(address_id)
        except SQLAlchemyError as e:
            return await db_failure(db, "set_default_address", e)

    async def get_default_address(
        self, db: AsyncSession, customer_id: int
    ) -> ServiceResult[List[Address]]:
        try:
            result = await db.execute(
                select(Address).where(
                    Address.customer_id == customer_id, Address.is_default.is_(True)
                )
            )
            return ServiceResult.success(list(result.scalars().all()))
        except SQLAlchemyError as e:
            return await db_failure(db, "get_default_address", e)


# ── Singleton Instance ────────────────────────────────────────────────────
customer_service = CustomerService()
