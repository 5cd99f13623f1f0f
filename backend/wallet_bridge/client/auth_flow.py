import json
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional
from wallet_bridge.client.bridge_client import BridgeClient
from wallet_bridge.client.config import ClientSettings
from wallet_bridge.client.session_client import SessionClient
from wallet_bridge.client.wallet import WalletSigner
from wallet_bridge.core.exceptions import SessionExchangeFailure, WalletAuthFailed
from wallet_bridge.schemas.auth import SessionIdentity

logger = logging.getLogger(__name__)


def auth_statement() -> str:
    # random per attempt so the wallet never shows the same text twice
    return f"Authenticate ({uuid.uuid4().hex})."


async def wallet_auth(
    bridge: BridgeClient,
    signer: WalletSigner,
    sessions: SessionClient,
    settings: Optional[ClientSettings] = None,
    now: Optional[datetime] = None,
) -> SessionIdentity:
    """Run the whole wallet sign-in and return the new session identity.

    Any failure along the way is reported as WalletAuthFailed; the cause is
    chained for logging but never distinguished for the caller.
    """
    settings = settings or ClientSettings()
    now = now or datetime.now(timezone.utc)
    exchanged = False
    try:
        nonce, signed_nonce = await bridge.get_nonce()
        try:
            payload = await signer.sign(
                nonce,
                auth_statement(),
                now - timedelta(seconds=settings.SIWE_NOT_BEFORE_SECONDS),
                now + timedelta(seconds=settings.SIWE_EXPIRATION_SECONDS),
            )
        except Exception as e:
            # any signer error counts as a decline
            logger.info("Wallet signer failed: %s", type(e).__name__)
            raise WalletAuthFailed() from e
        if not payload or payload.get("status") != "success":
            logger.info("Wallet declined to sign the authentication message")
            raise WalletAuthFailed()

        credentials = await bridge.sign_in_with_wallet(nonce, signed_nonce, json.dumps(payload))
        exchanged = True
        await sessions.exchange_credential(credentials.login_identifier, credentials.login_credential)
        identity = await sessions.get_current_session()
        if identity is None:
            raise SessionExchangeFailure("no session after credential exchange")
    except WalletAuthFailed:
        raise
    except Exception as e:
        logger.warning("Wallet authentication failed: %s", type(e).__name__)
        if exchanged:
            sessions.sign_out()
        raise WalletAuthFailed() from e
    return identity
