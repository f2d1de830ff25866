import argparse
import asyncio
import json

from offerdesk.db.base import Base
from offerdesk.db.session import SessionLocal, engine
from offerdesk import models  # noqa: F401
from offerdesk.services import offers as offers_service


async def create_tables() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()


async def print_offer_stats() -> None:
    async with SessionLocal() as session:
        stats = await offers_service.offer_stats(session)
    await engine.dispose()
    print(json.dumps(stats.model_dump(mode="json"), indent=2))


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="OfferDesk management commands")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("create-tables", help="Create database tables for local development")
    sub.add_parser("offer-stats", help="Print offer counts by status as JSON")

    args = parser.parse_args(argv)
    if args.command == "create-tables":
        asyncio.run(create_tables())
    elif args.command == "offer-stats":
        asyncio.run(print_offer_stats())


if __name__ == "__main__":
    main()
