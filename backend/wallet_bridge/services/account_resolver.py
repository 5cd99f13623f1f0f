import logging
from sqlalchemy.exc import SQLAlchemyError
from wallet_bridge.core.exceptions import AccountProvisioningFailure, LinkConflict
from wallet_bridge.core.siwe import canonical_address
from wallet_bridge.models.account import Account
from wallet_bridge.services.account_store import AccountStore

logger = logging.getLogger(__name__)


class AccountResolver:
    """Find-or-create the account bound to a wallet address."""

    def __init__(self, store: AccountStore):
        self.store = store

    async def resolve(self, address: str) -> Account:
        address = canonical_address(address)
        try:
            link = await self.store.find_link_by_address(address)
            if link is not None:
                return await self._linked_account(link.account_id, address)

            try:
                account = await self.store.create_account_and_link(address)
            except LinkConflict:
                # concurrent first login committed the link first; adopt it
                logger.info("Wallet link race for %s, re-reading existing link", address)
                link = await self.store.find_link_by_address(address)
                if link is None:
                    raise AccountProvisioningFailure(f"link for {address} vanished after conflict")
                return await self._linked_account(link.account_id, address)

            logger.info("Created account %s for wallet %s", account.id, address)
            return account
        except SQLAlchemyError as e:
            logger.error("Account resolution failed for %s", address, exc_info=True)
            raise AccountProvisioningFailure(str(e)) from e

    async def _linked_account(self, account_id: str, address: str) -> Account:
        account = await self.store.get_account(account_id)
        if account is None:
            raise AccountProvisioningFailure(f"wallet {address} linked to missing account {account_id}")
        return account
