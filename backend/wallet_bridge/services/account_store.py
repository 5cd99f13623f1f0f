import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, NoResultFound, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from wallet_bridge.config import settings
from wallet_bridge.core.exceptions import LinkConflict
from wallet_bridge.core.security import hash_credential
from wallet_bridge.models.account import Account
from wallet_bridge.models.wallet_link import WalletLink


class AccountStore:
    """Account and wallet-link persistence used by the bridge and the session routes.

    Addresses are expected in canonical form; see ``canonical_address``.
    """

    def __init__(self, db: AsyncSession, placeholder_domain: Optional[str] = None):
        self.db = db
        self.placeholder_domain = placeholder_domain or settings.PLACEHOLDER_EMAIL_DOMAIN

    async def find_link_by_address(self, address: str) -> Optional[WalletLink]:
        return await self.db.scalar(select(WalletLink).where(WalletLink.address == address))

    async def get_account(self, account_id: str) -> Optional[Account]:
        return await self.db.get(Account, account_id)

    async def create_account_and_link(self, address: str) -> Account:
        """Insert the account and its wallet link in a single transaction.

        Raises LinkConflict when another request already linked ``address``;
        the account row is rolled back with it.
        """
        internal_uid = uuid.uuid4().hex
        account = Account(
            login_identifier=f"placeholder-{internal_uid}@{self.placeholder_domain}",
            internal_uid=internal_uid,
            user_metadata={"address": address},
        )
        try:
            self.db.add(account)
            await self.db.flush()
            self.db.add(WalletLink(address=address, account_id=account.id))
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise LinkConflict(address) from e
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        return account

    async def set_credential(self, account_id: str, credential: str) -> Account:
        account = await self.db.get(Account, account_id)
        if account is None:
            raise NoResultFound(f"account {account_id} not found")
        now = datetime.now(timezone.utc)
        account.credential_hash = hash_credential(credential)
        account.credential_issued_at = now
        account.last_login_at = now
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        return account

    async def consume_credential(self, login_identifier: str, credential: str, ttl_seconds: int) -> Optional[Account]:
        """Clear the credential slot if it holds ``credential`` and is still fresh.

        The conditional update makes the exchange single-use even when two
        requests race with the same credential.
        """
        cutoff = datetime.now(timezone.utc) - timedelta(seconds=ttl_seconds)
        result = await self.db.execute(
            update(Account)
            .where(
                Account.login_identifier == login_identifier,
                Account.credential_hash == hash_credential(credential),
                Account.credential_issued_at >= cutoff,
            )
            .values(credential_hash=None)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await self.db.rollback()
            return None
        await self.db.commit()
        return await self.db.scalar(select(Account).where(Account.login_identifier == login_identifier))
