import importlib.util
from pathlib import Path

from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import create_engine, inspect

MIGRATION = Path(__file__).resolve().parents[1] / "alembic" / "versions" / "0001_add_offers.py"


def _load_migration():
    spec = importlib.util.spec_from_file_location("offerdesk_migration_0001", MIGRATION)
    module = importlib.util.module_from_spec(spec)
    assert spec.loader is not None
    spec.loader.exec_module(module)
    return module


def test_offers_migration_upgrade_and_downgrade() -> None:
    migration = _load_migration()
    engine = create_engine("sqlite://")

    with engine.begin() as conn:
        ctx = MigrationContext.configure(conn)
        with Operations.context(ctx):
            migration.upgrade()

        inspector = inspect(conn)
        assert {"products", "offers"} <= set(inspector.get_table_names())
        columns = {col["name"] for col in inspector.get_columns("offers")}
        assert {"status", "within_margin", "coupon_code", "coupon_used", "max_discount_allowed"} <= columns
        indexes = {idx["name"]: idx for idx in inspector.get_indexes("offers")}
        assert indexes["ix_offers_coupon_code"]["unique"]

        with Operations.context(ctx):
            migration.downgrade()
        assert "offers" not in inspect(conn).get_table_names()

    engine.dispose()
