import asyncio
from collections.abc import Callable, Generator
from decimal import Decimal
import uuid

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from offerdesk import models  # noqa: F401
from offerdesk.core import metrics
from offerdesk.db.base import Base
from offerdesk.models.catalog import Product


@pytest.fixture(autouse=True)
def _reset_metrics() -> Generator[None, None, None]:
    # Counters are process-global and would leak across tests.
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def session_factory() -> Generator[async_sessionmaker, None, None]:
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", future=True)
    SessionLocal = async_sessionmaker(engine, expire_on_commit=False)

    async def init_models() -> None:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(init_models())
    yield SessionLocal
    asyncio.run(engine.dispose())


@pytest.fixture
def seed_product(session_factory: async_sessionmaker) -> Callable[..., uuid.UUID]:
    def _seed(*, price: Decimal = Decimal("10000.00"), reference: str | None = "VH-001", title: str = "Test vehicle") -> uuid.UUID:
        async def _create() -> uuid.UUID:
            async with session_factory() as session:
                product = Product(title=title, reference=reference, price=price, currency="EUR")
                session.add(product)
                await session.commit()
                await session.refresh(product)
                return product.id

        return asyncio.run(_create())

    return _seed
