"""
Catalog Repositories.

Table-specific queries that the generic ``EntityRepository`` does not
cover: the stock-decrement RPC for products, booking aggregates for the
dashboard's activity cards, and slide ordering for the carousel.
"""

from __future__ import annotations

from typing import Sequence

from agriportal.repositories.base_repository import EntityRepository, Row


class ProductRepository(EntityRepository):
    """Data access layer for ``products``."""

    TABLE = "products"

    async def decrement_stock(self, product_id: int, quantity: int) -> None:
        """Run the server-side ``decrement_product_stock`` function."""
        await self.call_rpc(
            "decrement_product_stock",
            {"product_id": product_id, "quantity": quantity},
        )


class ActivityRepository(EntityRepository):
    """Data access layer for ``activities``."""

    TABLE = "activities"

    async def fetch_recent_with_booking_counts(self, limit: int) -> list[Row]:
        """Newest activities, each carrying a ``bookings: [{count: n}]`` aggregate."""
        response = await (
            self.client.table(self.TABLE)
            .select("*, bookings:bookings(count)")
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return list(response.data or [])


class CarouselRepository(EntityRepository):
    """Data access layer for ``carousel_slides``."""

    TABLE = "carousel_slides"

    async def reorder(self, slide_ids: Sequence[int]) -> None:
        """Set each slide's ``order_index`` to its position in *slide_ids*."""
        for index, slide_id in enumerate(slide_ids):
            await (
                self.client.table(self.TABLE)
                .update({"order_index": index})
                .eq("id", slide_id)
                .execute()
            )
