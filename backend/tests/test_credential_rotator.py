from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError
from wallet_bridge.core.exceptions import AccountProvisioningFailure
from wallet_bridge.core.security import credential_matches
from wallet_bridge.models.account import Account
from wallet_bridge.services.account_resolver import AccountResolver
from wallet_bridge.services.account_store import AccountStore
from wallet_bridge.services.credential_rotator import CredentialRotator

ADDRESS = "0x742d35Cc6634C0532925a3b844Bc9e7595f2bD18"


@pytest.mark.asyncio
async def test_rotate_replaces_previous_credential(session_factory):
    async with session_factory() as db:
        store = AccountStore(db)
        account = await AccountResolver(store).resolve(ADDRESS)
        rotator = CredentialRotator(store)
        first = await rotator.rotate(account)
        second = await rotator.rotate(account)

    assert first.login_identifier == second.login_identifier == account.login_identifier
    assert first.login_credential != second.login_credential
    assert len(second.login_credential) == 32

    async with session_factory() as db:
        stored = await db.get(Account, account.id)
    assert credential_matches(second.login_credential, stored.credential_hash)
    assert not credential_matches(first.login_credential, stored.credential_hash)
    assert stored.credential_hash != second.login_credential
    assert stored.credential_issued_at is not None


def test_credential_not_in_repr():
    from wallet_bridge.schemas.auth import LoginCredentials
    creds = LoginCredentials(login_identifier="placeholder-x@example.com", login_credential="s3cret")
    assert "s3cret" not in repr(creds)


@pytest.mark.asyncio
async def test_store_failure_is_provisioning_failure():
    store = AsyncMock()
    store.set_credential.side_effect = OperationalError("update", {}, Exception("db down"))
    account = SimpleNamespace(id="acct-1", login_identifier="placeholder-1@example.com")
    with pytest.raises(AccountProvisioningFailure):
        await CredentialRotator(store).rotate(account)
