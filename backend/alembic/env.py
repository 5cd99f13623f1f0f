import asyncio
from logging.config import fileConfig
from sqlalchemy.ext.asyncio import create_async_engine
from alembic import context
from wallet_bridge.config import settings
from wallet_bridge.database import Base
import wallet_bridge.models  # noqa: F401 - registers accounts and wallet_links

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def apply_migrations(connection):
    context.configure(connection=connection, target_metadata=Base.metadata)
    with context.begin_transaction():
        context.run_migrations()


async def migrate():
    # the driver is already async here; Settings rewrites plain postgresql:// URLs
    engine = create_async_engine(settings.DATABASE_URL)
    async with engine.connect() as connection:
        await connection.run_sync(apply_migrations)
    await engine.dispose()


asyncio.run(migrate())
