"""
Order Manager.

Orders are ordinary owner-scoped list items with one side effect: a
successful order decrements the product's stock through the
``decrement_product_stock`` database function, and the product list (if
one is attached) is refreshed so the new stock shows up.
"""

from __future__ import annotations

from typing import Optional

from agriportal.auth import SessionManager
from agriportal.entities import EntityConfig
from agriportal.logger import StructuredLogger
from agriportal.models.records import Order, Product
from agriportal.repositories.base_repository import EntityRepository
from agriportal.repositories.catalog_repository import ProductRepository
from agriportal.services.list_manager import ListManager
from agriportal.services.realtime import RealtimeRelay
from agriportal.utils.general import error_message


class OrderManager(ListManager[Order]):
    """``ListManager`` for ``orders`` that keeps product stock in step."""

    def __init__(
        self,
        config: EntityConfig,
        repo: EntityRepository,
        session: SessionManager,
        logger: StructuredLogger,
        product_repo: ProductRepository,
        relay: Optional[RealtimeRelay] = None,
        page_size: int = 10,
    ) -> None:
        super().__init__(config, repo, session, logger, relay=relay, page_size=page_size)
        self._product_repo = product_repo
        self._products: Optional[ListManager[Product]] = None

    def attach_products(self, products: ListManager[Product]) -> None:
        """Refresh *products* after every order placed through this manager."""
        self._products = products

    async def _after_create(self, record: Order) -> None:
        try:
            await self._product_repo.decrement_stock(record.product_id, record.quantity)
        except Exception as exc:
            # The order stands even when the stock could not be adjusted.
            self._logger.warning(
                "Could not update product stock for product %s: %s",
                record.product_id,
                error_message(exc),
            )
        if self._products is not None:
            await self._products.fetch()
