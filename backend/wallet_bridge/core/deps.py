from functools import lru_cache
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from wallet_bridge.config import settings
from wallet_bridge.core.nonce import NonceAuthority
from wallet_bridge.core.security import decode_token
from wallet_bridge.core.siwe import SiweVerifier
from wallet_bridge.database import get_db
from wallet_bridge.models.account import Account
from wallet_bridge.services.account_resolver import AccountResolver
from wallet_bridge.services.account_store import AccountStore
from wallet_bridge.services.bridge import WalletSignInBridge
from wallet_bridge.services.credential_rotator import CredentialRotator
from wallet_bridge.services.message_verifier import MessageVerifier

bearer = HTTPBearer()

@lru_cache
def get_nonce_authority() -> NonceAuthority:
    return NonceAuthority(settings.NONCE_SECRET_KEY)

@lru_cache
def get_siwe_verifier() -> SiweVerifier:
    return SiweVerifier(
        expected_domain=settings.SIWE_DOMAIN,
        expected_chain_id=settings.SIWE_CHAIN_ID,
        max_window_seconds=settings.SIWE_MAX_WINDOW_SECONDS,
    )

def get_account_store(db: AsyncSession = Depends(get_db)) -> AccountStore:
    return AccountStore(db)

def get_bridge(
    store: AccountStore = Depends(get_account_store),
    nonce_authority: NonceAuthority = Depends(get_nonce_authority),
    siwe_verifier: SiweVerifier = Depends(get_siwe_verifier),
) -> WalletSignInBridge:
    return WalletSignInBridge(
        nonce_authority=nonce_authority,
        message_verifier=MessageVerifier(siwe_verifier),
        resolver=AccountResolver(store),
        rotator=CredentialRotator(store),
    )

async def get_current_account(
    credentials: HTTPAuthorizationCredentials = Depends(bearer),
    store: AccountStore = Depends(get_account_store),
) -> Account:
    account_id = decode_token(credentials.credentials)
    if not account_id:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token")
    account = await store.get_account(account_id)
    if not account:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Account not found")
    return account
