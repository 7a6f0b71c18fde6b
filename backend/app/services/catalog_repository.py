"""Category repository — ordered wizard categories for a product type."""
import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.config import CATEGORY_STATUS_ACTIVE
from app.models import orm_models
from app.models.configurator_schema import OptionCategory, OptionValue
from app.services.errors import CollaboratorError, ProductTypeNotFoundError

logger = logging.getLogger("configurator-catalog")


def _to_option(row: orm_models.OptionValue) -> OptionValue:
    return OptionValue(
        id=row.id,
        name=row.name,
        description=row.description,
        image_url=row.image_url,
        price_factor=float(row.price_factor) if row.price_factor is not None else 1.0,
        specifications=row.specifications or {},
        display_order=row.display_order or 0,
        is_available=row.is_available,
    )


def _to_category(row: orm_models.OptionCategory) -> OptionCategory:
    options = sorted(
        (o for o in row.options if o.is_available),
        key=lambda o: o.display_order or 0,
    )
    return OptionCategory(
        id=row.id,
        name=row.name,
        title=row.title,
        step_order=row.step_order,
        is_required=row.is_required,
        allows_multiple=row.allows_multiple,
        conditional_display=row.conditional_display,
        options=[_to_option(o) for o in options],
    )


class CategoryRepository:
    """Reads the active catalog for one product type."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_product_type(self, name: str) -> Optional[orm_models.ProductType]:
        result = await self.db.execute(
            select(orm_models.ProductType).where(orm_models.ProductType.name == name)
        )
        return result.scalar_one_or_none()

    async def get_active_product_type(self, name: str) -> orm_models.ProductType:
        try:
            product = await self.get_product_type(name)
        except SQLAlchemyError as e:
            logger.error(f"Product type lookup failed for {name}: {e}", exc_info=True)
            raise CollaboratorError("fetch product type", str(e), cause=e) from e
        if product is None or not product.is_active:
            raise ProductTypeNotFoundError(name)
        return product

    async def get_categories(self, product_type: str) -> List[OptionCategory]:
        """
        Active categories sorted by step order, each with its available
        options sorted by display order.
        """
        product = await self.get_active_product_type(product_type)
        try:
            result = await self.db.execute(
                select(orm_models.OptionCategory)
                .where(
                    orm_models.OptionCategory.product_type_id == product.id,
                    orm_models.OptionCategory.status == CATEGORY_STATUS_ACTIVE,
                )
                .options(selectinload(orm_models.OptionCategory.options))
                .order_by(orm_models.OptionCategory.step_order)
            )
            rows = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error(f"Category fetch failed for {product_type}: {e}", exc_info=True)
            raise CollaboratorError("fetch categories", str(e), cause=e) from e

        return [_to_category(row) for row in rows]
