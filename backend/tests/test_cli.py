import asyncio
import json

import pytest
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from offerdesk import cli


@pytest.fixture
def file_engine(tmp_path, monkeypatch):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}", future=True)
    monkeypatch.setattr(cli, "engine", engine)
    monkeypatch.setattr(cli, "SessionLocal", async_sessionmaker(engine, expire_on_commit=False))
    return engine


def test_create_tables_then_print_stats(file_engine, capsys) -> None:
    cli.main(["create-tables"])

    def _tables(sync_conn):
        return set(inspect(sync_conn).get_table_names())

    async def _list_tables():
        async with file_engine.connect() as conn:
            return await conn.run_sync(_tables)

    assert {"offers", "products"} <= asyncio.run(_list_tables())

    cli.main(["offer-stats"])
    out = json.loads(capsys.readouterr().out)
    assert out == {"total": 0, "within_margin": 0, "outside_margin": 0, "by_status": []}


def test_command_is_required() -> None:
    with pytest.raises(SystemExit):
        cli.main([])
