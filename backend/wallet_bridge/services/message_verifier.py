import json
import logging
from datetime import datetime
from typing import Optional
from pydantic import ValidationError
from wallet_bridge.core.exceptions import InvalidOrExpiredMessage
from wallet_bridge.core.siwe import SiweVerifier, canonical_address
from wallet_bridge.schemas.auth import WalletAuthPayload

logger = logging.getLogger(__name__)


class MessageVerifier:
    """Check a serialized wallet-auth payload and return the signer's canonical address.

    Every failure is raised as InvalidOrExpiredMessage; its ``reason`` only
    goes to the log.
    """

    def __init__(self, verifier: SiweVerifier):
        self.verifier = verifier

    def verify(self, final_payload_json: str, expected_nonce: str, now: Optional[datetime] = None) -> str:
        try:
            payload = WalletAuthPayload.model_validate(json.loads(final_payload_json))
        except (TypeError, ValueError, RecursionError, ValidationError):
            raise InvalidOrExpiredMessage("malformed_payload")

        if payload.status != "success":
            raise InvalidOrExpiredMessage("declined_payload")

        result = self.verifier.verify(payload.model_dump(), expected_nonce, now=now)
        if not result.valid or not result.address:
            raise InvalidOrExpiredMessage(result.reason or "bad_signature")

        try:
            return canonical_address(result.address)
        except ValueError:
            raise InvalidOrExpiredMessage("malformed_payload")
