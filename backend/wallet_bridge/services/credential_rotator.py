import logging
from sqlalchemy.exc import SQLAlchemyError
from wallet_bridge.core.exceptions import AccountProvisioningFailure
from wallet_bridge.core.security import generate_login_credential
from wallet_bridge.models.account import Account
from wallet_bridge.schemas.auth import LoginCredentials
from wallet_bridge.services.account_store import AccountStore

logger = logging.getLogger(__name__)


class CredentialRotator:
    def __init__(self, store: AccountStore):
        self.store = store

    async def rotate(self, account: Account) -> LoginCredentials:
        """Replace the account's login credential and return the new one.

        Every call invalidates the previous credential. The plaintext is only
        ever returned to the caller, never logged or stored.
        """
        credential = generate_login_credential()
        try:
            await self.store.set_credential(account.id, credential)
        except SQLAlchemyError as e:
            logger.error("Credential rotation failed for account %s", account.id, exc_info=True)
            raise AccountProvisioningFailure(str(e)) from e
        return LoginCredentials(login_identifier=account.login_identifier, login_credential=credential)
