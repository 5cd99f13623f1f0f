from pathlib import Path
from unittest.mock import patch

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect
from wallet_bridge.config import settings
from wallet_bridge.database import Base

ALEMBIC_DIR = Path(__file__).resolve().parents[1] / "alembic"


def test_migrations_build_model_tables(tmp_path):
    db_file = tmp_path / "migrated.db"
    cfg = Config()
    cfg.set_main_option("script_location", str(ALEMBIC_DIR))

    with patch.object(settings, "DATABASE_URL", f"sqlite+aiosqlite:///{db_file}"):
        command.upgrade(cfg, "head")

    engine = create_engine(f"sqlite:///{db_file}")
    try:
        schema = inspect(engine)
        assert {"accounts", "wallet_links"} <= set(schema.get_table_names())
        for table in ("accounts", "wallet_links"):
            migrated = {c["name"] for c in schema.get_columns(table)}
            assert migrated == set(Base.metadata.tables[table].columns.keys())

        unique_indexes = {
            ix["name"]: ix["column_names"]
            for table in ("accounts", "wallet_links")
            for ix in schema.get_indexes(table)
            if ix["unique"]
        }
        assert unique_indexes["ix_wallet_links_address"] == ["address"]
        assert unique_indexes["ix_accounts_login_identifier"] == ["login_identifier"]
    finally:
        engine.dispose()
