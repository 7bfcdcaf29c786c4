"""
ANGAGU Backend — Company Database Service
==========================================

What:  Queries and mutations behind the seller-facing /company routes.
How:   Same contract as CustomerService: every method returns a ServiceResult
       and never raises SQLAlchemy errors to the handler.
Who:   Called by angagu.routes.company.

Ownership lookups return every matching company id so the handler can tell
"no such resource" (0 rows) apart from "not yours" (1 row, other id).
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import case, delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from angagu.models.company import Company
from angagu.models.order import ORDERED, REFUNDED, Order, OrderDetail
from angagu.models.product import Board, Product, ProductImage
from angagu.services.result import ServiceResult, db_failure

logger = logging.getLogger(__name__)

BUSINESS_FIELDS = ("business_number", "account_number", "account_holder", "account_bank")


class CompanyService:
    """Seller accounts, product registration, sales, deliveries and Q&A answers."""

    # ── Accounts ──────────────────────────────────────────────────────────

    async def get_company_by_email(
        self, db: AsyncSession, email: str
    ) -> ServiceResult[List[Company]]:
        try:
            result = await db.execute(select(Company).where(Company.email == email))
            return ServiceResult.success(list(result.scalars().all()))
        except SQLAlchemyError as e:
            return await db_failure(db, "get_company_by_email", e)

    async def company_signup(self, db: AsyncSession, info: Dict[str, Any]) -> ServiceResult[int]:
        """
        Insert a company. `info["password"]` must already be hashed.

        Returns DUPLICATE when the email or business number is taken.
        """
        company = Company(
            email=info["email"],
            name=info["name"],
            password=info["password"],
            phone_number=info["phone_number"],
            **{field: info.get(field) for field in BUSINESS_FIELDS},
        )
        try:
            db.add(company)
            await db.flush()
            logger.info("Company %s signed up", company.id)
            return ServiceResult.success(company.id)
        except IntegrityError as e:
            await db.rollback()
            logger.info("Duplicate company signup rejected")
            return ServiceResult.duplicate(err=type(e).__name__)
        except SQLAlchemyError as e:
            return await db_failure(db, "company_signup", e)

    async def get_info(self, db: AsyncSession, company_id: int) -> ServiceResult[Optional[Company]]:
        try:
            return ServiceResult.success(await db.get(Company, company_id))
        except SQLAlchemyError as e:
            return await db_failure(db, "get_info", e)

    async def update_business_info(
        self, db: AsyncSession, company_id: int, info: Dict[str, Any]
    ) -> ServiceResult[int]:
        try:
            result = await db.execute(
                update(Company)
                .where(Company.id == company_id)
                .values(**{field: info[field] for field in BUSINESS_FIELDS})
            )
            if result.rowcount != 1:
                return ServiceResult.error(err="company not updated")
            return ServiceResult.success(company_id)
        except IntegrityError as e:
            await db.rollback()
            return ServiceResult.duplicate(err=type(e).__name__)
        except SQLAlchemyError as e:
            return await db_failure(db, "update_business_info", e)

    async def get_emails_by_name_and_phone(
        self, db: AsyncSession, name: str, phone_number: str
    ) -> ServiceResult[List[str]]:
        try:
            result = await db.execute(
                select(Company.email)
                .where(Company.name == name, Company.phone_number == phone_number)
                .order_by(Company.id)
            )
            return ServiceResult.success(list(result.scalars().all()))
        except SQLAlchemyError as e:
            return await db_failure(db, "get_emails_by_name_and_phone", e)

    async def get_company_by_email_and_phone(
        self, db: AsyncSession, email: str, phone_number: str
    ) -> ServiceResult[List[int]]:
        try:
            result = await db.execute(
                select(Company.id).where(
                    Company.email == email, Company.phone_number == phone_number
                )
            )
            return ServiceResult.success(list(result.scalars().all()))
        except SQLAlchemyError as e:
            return await db_failure(db, "get_company_by_email_and_phone", e)

    async def update_password(
        self, db: AsyncSession, company_id: int, hashed_password: str
    ) -> ServiceResult[int]:
        try:
            result = await db.execute(
                update(Company).where(Company.id == company_id).values(password=hashed_password)
            )
            if result.rowcount != 1:
                return ServiceResult.error(err="password not updated")
            logger.info("Password reset for company %s", company_id)
            return ServiceResult.success(company_id)
        except SQLAlchemyError as e:
            return await db_failure(db, "update_password", e)

    # ── Products ──────────────────────────────────────────────────────────

    async def get_products(self, db: AsyncSession, company_id: int) -> ServiceResult[List[Product]]:
        try:
            result = await db.execute(
                select(Product)
                .where(Product.company_id == company_id)
                .options(selectinload(Product.images))
                .order_by(Product.id.desc())
            )
            return ServiceResult.success(list(result.scalars().all()))
        except SQLAlchemyError as e:
            return await db_failure(db, "get_products", e)

    async def post_product(
        self,
        db: AsyncSession,
        company_id: int,
        data: Dict[str, Any],
        image_urls: Sequence[str] = (),
    ) -> ServiceResult[int]:
        """Register an unapproved product; image order follows `image_urls`."""
        product = Product(
            company_id=company_id,
            name=data["name"],
            price=data["price"],
            description=data.get("description"),
            category=data.get("category"),
            model_url=data.get("model_url"),
            images=[ProductImage(url=url, position=i) for i, url in enumerate(image_urls)],
        )
        try:
            db.add(product)
            await db.flush()
            logger.info("Company %s registered product %s", company_id, product.id)
            return ServiceResult.success(product.id)
        except SQLAlchemyError as e:
            return await db_failure(db, "post_product", e)

    async def get_company_by_product(
        self, db: AsyncSession, product_id: int
    ) -> ServiceResult[List[int]]:
        try:
            result = await db.execute(select(Product.company_id).where(Product.id == product_id))
            return ServiceResult.success(list(result.scalars().all()))
        except SQLAlchemyError as e:
            return await db_failure(db, "get_company_by_product", e)

    async def delete_product(self, db: AsyncSession, product_id: int) -> ServiceResult[int]:
        """
        Delete a product with its images and board posts.

        A product that appears in an order is kept for the order history; the
        foreign key from `order_details` makes the delete fail with ERROR.
        """
        try:
            await db.execute(delete(ProductImage).where(ProductImage.product_id == product_id))
            await db.execute(delete(Board).where(Board.product_id == product_id))
            result = await db.execute(delete(Product).where(Product.id == product_id))
            if result.rowcount != 1:
                await db.rollback()
                return ServiceResult.error(err="product not deleted")
            await db.flush()
            return ServiceResult.success(product_id)
        except SQLAlchemyError as e:
            return await db_failure(db, "delete_product", e)

    # ── Sales & orders ────────────────────────────────────────────────────

    async def get_sale(self, db: AsyncSession, company_id: int) -> ServiceResult[List[Dict[str, Any]]]:
        """Per-product sold quantity and revenue; refunded lines do not count."""
        sold = case((OrderDetail.status == ORDERED, OrderDetail.count), else_=0)
        revenue = case(
            (OrderDetail.status == ORDERED, OrderDetail.count * OrderDetail.price), else_=0
        )
        try:
            result = await db.execute(
                select(
                    Product.id,
                    Product.name,
                    func.coalesce(func.sum(sold), 0).label("quantity"),
                    func.coalesce(func.sum(revenue), 0).label("revenue"),
                )
                .outerjoin(OrderDetail, OrderDetail.product_id == Product.id)
                .where(Product.company_id == company_id)
                .group_by(Product.id, Product.name)
                .order_by(Product.id)
            )
            return ServiceResult.success(
                [
                    {
                        "product_id": row.id,
                        "name": row.name,
                        "quantity": int(row.quantity),
                        "revenue": int(row.revenue),
                    }
                    for row in result
                ]
            )
        except SQLAlchemyError as e:
            return await db_failure(db, "get_sale", e)

    async def get_order(self, db: AsyncSession, company_id: int) -> ServiceResult[List[Dict[str, Any]]]:
        """Order lines for the company's products, newest first."""
        try:
            result = await db.execute(
                select(
                    OrderDetail.id,
                    OrderDetail.order_id,
                    OrderDetail.product_id,
                    Product.name,
                    OrderDetail.count,
                    OrderDetail.price,
                    OrderDetail.delivery_number,
                    OrderDetail.status,
                    Order.address_id,
                    Order.created_at,
                )
                .join(Product, Product.id == OrderDetail.product_id)
                .join(Order, Order.id == OrderDetail.order_id)
                .where(Product.company_id == company_id)
                .order_by(OrderDetail.id.desc())
            )
            return ServiceResult.success(
                [
                    {
                        "detail_id": row.id,
                        "order_id": row.order_id,
                        "product_id": row.product_id,
                        "product_name": row.name,
                        "count": row.count,
                        "price": row.price,
                        "delivery_number": row.delivery_number,
                        "status": row.status,
                        "address_id": row.address_id,
                        "ordered_at": row.created_at,
                    }
                    for row in result
                ]
            )
        except SQLAlchemyError as e:
            return await db_failure(db, "get_order", e)

    async def get_company_by_order_detail(
        self, db: AsyncSession, detail_id: int
    ) -> ServiceResult[List[int]]:
        try:
            result = await db.execute(
                select(Product.company_id)
                .join(OrderDetail, OrderDetail.product_id == Product.id)
                .where(OrderDetail.id == detail_id)
            )
            return ServiceResult.success(list(result.scalars().all()))
        except SQLAlchemyError as e:
            return await db_failure(db, "get_company_by_order_detail", e)

    async def add_delivery_number(
        self, db: AsyncSession, detail_id: int, delivery_number: str
    ) -> ServiceResult[int]:
        try:
            result = await db.execute(
                update(OrderDetail)
                .where(OrderDetail.id == detail_id)
                .values(delivery_number=delivery_number)
            )
            if result.rowcount != 1:
                return ServiceResult.error(err="delivery number not set")
            return ServiceResult.success(detail_id)
        except SQLAlchemyError as e:
            return await db_failure(db, "add_delivery_number", e)

    async def refund(self, db: AsyncSession, detail_id: int) -> ServiceResult[int]:
        """Mark an order line refunded. Already-refunded lines are an ERROR."""
        try:
            result = await db.execute(
                update(OrderDetail)
                .where(OrderDetail.id == detail_id, OrderDetail.status == ORDERED)
                .values(status=REFUNDED)
            )
            if result.rowcount != 1:
                return ServiceResult.error(err="order line not refundable")
            logger.info("Order line %s refunded", detail_id)
            return ServiceResult.success(detail_id)
        except SQLAlchemyError as e:
            return await db_failure(db, "refund", e)

    # ── Product board ─────────────────────────────────────────────────────

    async def get_board(self, db: AsyncSession, company_id: int) -> ServiceResult[List[Board]]:
        try:
            result = await db.execute(
                select(Board)
                .join(Product, Product.id == Board.product_id)
                .where(Product.company_id == company_id)
                .order_by(Board.id.desc())
            )
            return ServiceResult.success(list(result.scalars().all()))
        except SQLAlchemyError as e:
            return await db_failure(db, "get_board", e)

    async def get_company_by_board(self, db: AsyncSession, board_id: int) -> ServiceResult[List[int]]:
        try:
            result = await db.execute(
                select(Product.company_id)
                .join(Board, Board.product_id == Product.id)
                .where(Board.id == board_id)
            )
            return ServiceResult.success(list(result.scalars().all()))
        except SQLAlchemyError as e:
            return await db_failure(db, "get_company_by_board", e)

    async def answer_board(self, db: AsyncSession, board_id: int, answer: str) -> ServiceResult[int]:
        try:
            result = await db.execute(
                update(Board)
                .where(Board.id == board_id)
                .values(answer=answer, answered_at=datetime.now(timezone.utc))
            )
            if result.rowcount != 1:
                return ServiceResult.error(err="answer not saved")
            return ServiceResult.success(board_id)
        except SQLAlchemyError as e:
            return await db_failure(db, "answer_board", e)


# ── Singleton Instance ────────────────────────────────────────────────────
company_service = CompanyService()
