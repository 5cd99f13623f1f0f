"""
Wallet-signing capability.

A signer turns (nonce, statement, not_before, expiration) into the wallet's
success payload, or returns None when the user declines. LocalWalletSigner
holds an eth_account key and is what scripts and tests use; a real wallet
integration implements the same protocol.
"""

from datetime import datetime, timezone
from typing import Optional, Protocol
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount
from wallet_bridge.client.config import ClientSettings
from wallet_bridge.core.siwe import SiweMessage


class WalletSigner(Protocol):
    async def sign(
        self, nonce: str, statement: str, not_before: datetime, expiration: datetime
    ) -> Optional[dict]: ...


class LocalWalletSigner:
    def __init__(self, account: LocalAccount, domain: str, uri: str, chain_id: Optional[int] = None):
        self.account = account
        self.domain = domain
        self.uri = uri
        self.chain_id = chain_id

    @classmethod
    def from_settings(cls, account: LocalAccount, settings: Optional[ClientSettings] = None) -> "LocalWalletSigner":
        settings = settings or ClientSettings()
        return cls(account, settings.SIWE_DOMAIN, settings.SIWE_URI, settings.SIWE_CHAIN_ID)

    @property
    def address(self) -> str:
        return self.account.address

    async def sign(self, nonce: str, statement: str, not_before: datetime, expiration: datetime) -> Optional[dict]:
        message = SiweMessage(
            domain=self.domain,
            address=self.account.address,
            uri=self.uri,
            nonce=nonce,
            issued_at=datetime.now(timezone.utc),
            statement=statement,
            chain_id=self.chain_id,
            expiration_time=expiration,
            not_before=not_before,
        ).prepare()
        signed = self.account.sign_message(encode_defunct(text=message))
        return {
            "status": "success",
            "message": message,
            "signature": "0x" + bytes(signed.signature).hex(),
            "address": self.account.address,
            "version": 2,
        }
