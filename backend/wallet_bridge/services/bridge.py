"""
Wallet sign-in bridge.

RECEIVED -> NONCE_VERIFIED -> MESSAGE_VERIFIED -> ACCOUNT_RESOLVED
         -> CREDENTIAL_ISSUED -> RESPONDED

Only the two verification stages can reject. The store is not touched until
both have passed, so a rejected request has no side effects.
"""

import enum
import logging
from datetime import datetime
from typing import Optional
from wallet_bridge.core.exceptions import InvalidNonceSignature, InvalidOrExpiredMessage
from wallet_bridge.core.nonce import NonceAuthority
from wallet_bridge.schemas.auth import LoginCredentials, WalletSignInRequest
from wallet_bridge.services.account_resolver import AccountResolver
from wallet_bridge.services.credential_rotator import CredentialRotator
from wallet_bridge.services.message_verifier import MessageVerifier

logger = logging.getLogger(__name__)


class BridgeStage(str, enum.Enum):
    received = "RECEIVED"
    nonce_verified = "NONCE_VERIFIED"
    message_verified = "MESSAGE_VERIFIED"
    account_resolved = "ACCOUNT_RESOLVED"
    credential_issued = "CREDENTIAL_ISSUED"
    responded = "RESPONDED"


class WalletSignInBridge:
    def __init__(
        self,
        nonce_authority: NonceAuthority,
        message_verifier: MessageVerifier,
        resolver: AccountResolver,
        rotator: CredentialRotator,
    ):
        self.nonce_authority = nonce_authority
        self.message_verifier = message_verifier
        self.resolver = resolver
        self.rotator = rotator
        self.stage: Optional[BridgeStage] = None

    def _advance(self, stage: BridgeStage):
        self.stage = stage
        logger.debug("sign-in stage %s", stage.value)

    async def sign_in(self, request: WalletSignInRequest, now: Optional[datetime] = None) -> LoginCredentials:
        self._advance(BridgeStage.received)

        if not self.nonce_authority.verify(request.nonce, request.signed_nonce):
            logger.info("Rejected sign-in: invalid signed nonce")
            raise InvalidNonceSignature()
        self._advance(BridgeStage.nonce_verified)

        try:
            address = self.message_verifier.verify(request.final_payload_json, request.nonce, now=now)
        except InvalidOrExpiredMessage as e:
            logger.info("Rejected sign-in: invalid final payload (%s)", e.reason)
            raise
        self._advance(BridgeStage.message_verified)

        account = await self.resolver.resolve(address)
        self._advance(BridgeStage.account_resolved)

        credentials = await self.rotator.rotate(account)
        self._advance(BridgeStage.credential_issued)

        logger.info("Issued login credential for account %s (wallet %s)", account.id, address)
        self._advance(BridgeStage.responded)
        return credentials
