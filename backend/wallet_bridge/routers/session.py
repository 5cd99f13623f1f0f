import logging
from fastapi import APIRouter, Depends
from wallet_bridge.config import settings
from wallet_bridge.core.deps import get_account_store, get_current_account
from wallet_bridge.core.exceptions import SessionExchangeFailure
from wallet_bridge.core.security import create_access_token
from wallet_bridge.models.account import Account
from wallet_bridge.schemas.auth import LoginCredentials, SessionIdentity, SessionTokenResponse
from wallet_bridge.services.account_store import AccountStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["session"])

@router.post("/session", response_model=SessionTokenResponse)
async def exchange_credential(body: LoginCredentials, store: AccountStore = Depends(get_account_store)):
    account = await store.consume_credential(
        body.login_identifier, body.login_credential, settings.LOGIN_CREDENTIAL_TTL_SECONDS
    )
    if account is None:
        logger.info("Rejected credential exchange for %s", body.login_identifier)
        raise SessionExchangeFailure()
    return SessionTokenResponse(
        access_token=create_access_token(account.id),
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )

@router.get("/me", response_model=SessionIdentity)
async def me(account: Account = Depends(get_current_account)):
    metadata = account.user_metadata or {}
    return SessionIdentity(
        id=account.id,
        login_identifier=account.login_identifier,
        address=metadata.get("address"),
        user_metadata=metadata,
    )
