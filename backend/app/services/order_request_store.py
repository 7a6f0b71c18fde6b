"""Order-request store — persists submitted configurations and reads them back."""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.config import ORDER_STATUS_SUBMITTED
from app.models.orm_models import OrderRequest, gen_uuid
from app.services.catalog_repository import CategoryRepository
from app.services.errors import CollaboratorError

logger = logging.getLogger("configurator-orders")


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class OrderRequestStore:
    def __init__(self, db: AsyncSession):
        self.db = db
        self._catalog = CategoryRepository(db)

    async def submit(
        self,
        product_type: str,
        selections: Dict[str, Any],
        client_contact: Dict[str, Any],
        notes: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Create an order request in SUBMITTED status. Returns ``{"id": ...}``."""
        product = await self._catalog.get_active_product_type(product_type)
        order = OrderRequest(
            id=gen_uuid(),
            product_type_id=product.id,
            status=ORDER_STATUS_SUBMITTED,
            client_data=client_contact,
            configuration_data={
                "productType": product_type,
                "selections": selections,
                "notes": notes,
            },
            notes=notes,
            submitted_date=datetime.now(timezone.utc),
        )
        try:
            self.db.add(order)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Order request insert failed: {e}", exc_info=True)
            raise CollaboratorError("submit configuration", str(e), cause=e) from e

        logger.info(
            f"Order request created for {product_type}",
            extra={"order_request_id": order.id},
        )
        return {"id": order.id}

    async def get_by_id(self, order_request_id: str) -> Optional[Dict[str, Any]]:
        try:
            result = await self.db.execute(
                select(OrderRequest)
                .where(OrderRequest.id == order_request_id)
                .options(selectinload(OrderRequest.product_type))
            )
            order = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Order request lookup failed for {order_request_id}: {e}", exc_info=True)
            raise CollaboratorError("fetch order request", str(e), cause=e) from e

        if order is None:
            return None
        return {
            "id": order.id,
            "productType": order.product_type.name,
            "productDisplayName": order.product_type.display_name,
            "status": order.status,
            "clientData": order.client_data,
            "configurationData": order.configuration_data,
            "notes": order.notes,
            "createdDate": _iso(order.created_date),
            "submittedDate": _iso(order.submitted_date),
        }
