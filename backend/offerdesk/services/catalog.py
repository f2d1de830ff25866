from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from offerdesk.models.catalog import Product


@dataclass(frozen=True)
class ProductSnapshot:
    id: UUID
    price: Decimal
    reference: str | None = None
    title: str | None = None
    currency: str = "EUR"


class ProductCatalog(Protocol):
    async def get_product(self, product_id: UUID) -> ProductSnapshot | None: ...


class SqlProductCatalog:
    """Read-only catalog lookups against the ``products`` table."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_product(self, product_id: UUID) -> ProductSnapshot | None:
        product = await self.session.get(Product, product_id)
        if product is None:
            return None
        return ProductSnapshot(
            id=product.id,
            price=Decimal(product.price),
            reference=product.reference,
            title=product.title,
            currency=product.currency,
        )
