from typing import Optional, Tuple
import httpx
from wallet_bridge.client.config import ClientSettings
from wallet_bridge.core.exceptions import (
    AccountProvisioningFailure,
    InvalidNonceSignature,
    InvalidOrExpiredMessage,
    WalletBridgeError,
)
from wallet_bridge.schemas.auth import LoginCredentials, NonceResponse

_REJECTIONS = {
    InvalidNonceSignature.public_reason: InvalidNonceSignature,
    InvalidOrExpiredMessage.public_reason: lambda: InvalidOrExpiredMessage("rejected_by_bridge"),
    AccountProvisioningFailure.public_reason: AccountProvisioningFailure,
}


class BridgeClient:
    """HTTP client for the nonce and sign-in-with-wallet endpoints.

    The ``httpx.AsyncClient`` is owned by the caller so one connection pool
    can be shared with SessionClient.
    """

    def __init__(self, http: httpx.AsyncClient, base_url: str = ""):
        self.http = http
        self.base_url = base_url.rstrip("/")

    async def get_nonce(self) -> Tuple[str, str]:
        resp = await self.http.get(f"{self.base_url}/api/auth/nonce")
        resp.raise_for_status()
        body = NonceResponse.model_validate(resp.json())
        return body.nonce, body.signed_nonce

    async def sign_in_with_wallet(self, nonce: str, signed_nonce: str, final_payload_json: str) -> LoginCredentials:
        resp = await self.http.post(
            f"{self.base_url}/api/sign-in-with-wallet",
            json={"nonce": nonce, "signedNonce": signed_nonce, "finalPayloadJson": final_payload_json},
        )
        if resp.status_code != 200:
            raise self._rejection(resp.headers.get("X-Auth-Error"), resp.status_code)
        return LoginCredentials.model_validate(resp.json())

    @staticmethod
    def _rejection(reason: Optional[str], status_code: int) -> WalletBridgeError:
        factory = _REJECTIONS.get(reason or "")
        if factory is None:
            return WalletBridgeError(f"sign-in failed with status {status_code}")
        return factory()


def create_http_client(settings: Optional[ClientSettings] = None) -> httpx.AsyncClient:
    """Build the shared HTTP client; the caller owns it and must close it."""
    settings = settings or ClientSettings()
    return httpx.AsyncClient(base_url=settings.BASE_URL, timeout=settings.TIMEOUT_SECONDS)
