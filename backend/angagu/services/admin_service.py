"""Admin lookups and the product approval queue."""

import logging
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from angagu.models.company import Admin
from angagu.models.product import Product
from angagu.services.result import ServiceResult, db_failure

logger = logging.getLogger(__name__)


class AdminService:

    async def get_admin_by_email(self, db: AsyncSession, email: str) -> ServiceResult[List[Admin]]:
        try:
            result = await db.execute(select(Admin).where(Admin.email == email))
            return ServiceResult.success(list(result.scalars().all()))
        except SQLAlchemyError as e:
            return await db_failure(db, "get_admin_by_email", e)

    async def get_unapproved_products(self, db: AsyncSession) -> ServiceResult[List[Product]]:
        """Oldest first, so the queue is worked in submission order."""
        try:
            result = await db.execute(
                select(Product)
                .where(Product.approved.is_(False))
                .options(selectinload(Product.images))
                .order_by(Product.id)
            )
            return ServiceResult.success(list(result.scalars().all()))
        except SQLAlchemyError as e:
            return await db_failure(db, "get_unapproved_products", e)

    async def get_product(self, db: AsyncSession, product_id: int) -> ServiceResult[Optional[Product]]:
        try:
            return ServiceResult.success(await db.get(Product, product_id))
        except SQLAlchemyError as e:
            return await db_failure(db, "get_product", e)

    async def approve_product(self, db: AsyncSession, product_id: int) -> ServiceResult[int]:
        try:
            result = await db.execute(
                update(Product).where(Product.id == product_id).values(approved=True)
            )
            if result.rowcount != 1:
                return ServiceResult.error(err="product not approved")
            logger.info("Product %s approved", product_id)
            return ServiceResult.success(product_id)
        except SQLAlchemyError as e:
            return await db_failure(db, "approve_product", e)


admin_service = AdminService()
