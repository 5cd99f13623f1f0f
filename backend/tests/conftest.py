import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("NONCE_SECRET_KEY", "test-nonce-secret")
os.environ.setdefault("SESSION_SECRET_KEY", "test-session-secret")

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from eth_account.messages import encode_defunct
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from wallet_bridge.core.siwe import SiweMessage
from wallet_bridge.database import Base, get_db
from wallet_bridge.main import app
import wallet_bridge.models  # noqa: F401

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
SIWE_DOMAIN = "localhost:3000"


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine(
        TEST_DATABASE_URL, connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def test_db(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session
    app.dependency_overrides[get_db] = override_get_db
    yield session_factory
    app.dependency_overrides.clear()


@pytest.fixture
def siwe_payload():
    """Build a signed wallet-auth success payload for ``acct``."""
    def build(acct, nonce, now=None, expires_in=timedelta(days=7), valid_from=timedelta(days=-1),
              address=None, domain=SIWE_DOMAIN):
        now = now or datetime.now(timezone.utc)
        message = SiweMessage(
            domain=domain,
            address=acct.address,
            uri="http://localhost:3000",
            nonce=nonce,
            issued_at=now,
            statement="Authenticate (test).",
            chain_id=480,
            expiration_time=now + expires_in,
            not_before=now + valid_from,
        ).prepare()
        signed = acct.sign_message(encode_defunct(text=message))
        return {
            "status": "success",
            "message": message,
            "signature": "0x" + bytes(signed.signature).hex(),
            "address": address or acct.address,
            "version": 2,
        }
    return build
