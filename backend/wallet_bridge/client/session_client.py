import logging
from typing import Callable, List, Optional
import httpx
from wallet_bridge.core.exceptions import SessionExchangeFailure
from wallet_bridge.schemas.auth import SessionIdentity, SessionTokenResponse

logger = logging.getLogger(__name__)

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"

SessionListener = Callable[[str, Optional[SessionIdentity]], None]


class SessionClient:
    """Client for the session endpoints.

    Holds the access token in memory and notifies listeners when the session
    starts or ends.
    """

    def __init__(self, http: httpx.AsyncClient, base_url: str = ""):
        self.http = http
        self.base_url = base_url.rstrip("/")
        self._access_token: Optional[str] = None
        self._listeners: List[SessionListener] = []

    @property
    def has_token(self) -> bool:
        return self._access_token is not None

    async def exchange_credential(self, login_identifier: str, login_credential: str) -> SessionIdentity:
        resp = await self.http.post(
            f"{self.base_url}/api/auth/session",
            json={"loginIdentifier": login_identifier, "loginCredential": login_credential},
        )
        if resp.status_code != 200:
            raise SessionExchangeFailure(f"session exchange failed with status {resp.status_code}")
        token = SessionTokenResponse.model_validate(resp.json())
        self._access_token = token.access_token
        identity = await self._fetch_identity()
        if identity is None:
            raise SessionExchangeFailure("session token was not accepted")
        self._notify(SIGNED_IN, identity)
        return identity

    async def get_current_session(self) -> Optional[SessionIdentity]:
        if self._access_token is None:
            return None
        identity = await self._fetch_identity()
        if identity is None:
            self.sign_out()
        return identity

    def sign_out(self):
        had_token = self._access_token is not None
        self._access_token = None
        if had_token:
            self._notify(SIGNED_OUT, None)

    def on_session_change(self, callback: SessionListener) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    async def _fetch_identity(self) -> Optional[SessionIdentity]:
        resp = await self.http.get(
            f"{self.base_url}/api/auth/me",
            headers={"Authorization": f"Bearer {self._access_token}"},
        )
        if resp.status_code in (401, 403):
            return None
        resp.raise_for_status()
        return SessionIdentity.model_validate(resp.json())

    def _notify(self, event: str, identity: Optional[SessionIdentity]):
        for listener in list(self._listeners):
            try:
                listener(event, identity)
            except Exception:
                logger.exception("Session listener failed for %s", event)
