"""
Client-side session state.

    UNINITIALIZED -> AUTHENTICATED              (existing session adopted)
    UNINITIALIZED -> AUTHENTICATING -> AUTHENTICATED | UNAUTHENTICATED

Session-change notifications move the holder between AUTHENTICATED and
UNAUTHENTICATED for as long as it is open. Dependents render protected content
only when ``is_authenticated``; anything else is the waiting state.
"""

import asyncio
import enum
import functools
import logging
from typing import Awaitable, Callable, List, Optional
from wallet_bridge.client.auth_flow import wallet_auth
from wallet_bridge.client.bridge_client import BridgeClient
from wallet_bridge.client.config import ClientSettings
from wallet_bridge.client.session_client import SessionClient
from wallet_bridge.client.wallet import WalletSigner
from wallet_bridge.core.exceptions import CapabilityUnavailable, WalletAuthFailed
from wallet_bridge.schemas.auth import SessionIdentity

logger = logging.getLogger(__name__)

StateListener = Callable[["AuthState", Optional[SessionIdentity]], None]


class AuthState(str, enum.Enum):
    uninitialized = "UNINITIALIZED"
    authenticating = "AUTHENTICATING"
    authenticated = "AUTHENTICATED"
    unauthenticated = "UNAUTHENTICATED"


class SessionStateHolder:
    def __init__(
        self,
        sessions: SessionClient,
        authenticate: Optional[Callable[[], Awaitable[SessionIdentity]]] = None,
    ):
        self.sessions = sessions
        self.authenticate = authenticate
        self.last_error: Optional[Exception] = None
        self._state = AuthState.uninitialized
        self._identity: Optional[SessionIdentity] = None
        self._listeners: List[StateListener] = []
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._task: Optional[asyncio.Task] = None
        self._closed = False

    @classmethod
    def for_wallet(
        cls,
        bridge: BridgeClient,
        sessions: SessionClient,
        signer: Optional[WalletSigner],
        settings: Optional[ClientSettings] = None,
    ) -> "SessionStateHolder":
        authenticate = None
        if signer is not None:
            authenticate = functools.partial(wallet_auth, bridge, signer, sessions, settings)
        return cls(sessions, authenticate)

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def identity(self) -> Optional[SessionIdentity]:
        return self._identity

    @property
    def is_authenticated(self) -> bool:
        return self._state == AuthState.authenticated

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def start(self):
        if self._closed:
            raise RuntimeError("SessionStateHolder is closed")
        if self._task is not None:
            return
        self._unsubscribe = self.sessions.on_session_change(self._on_session_change)
        self._task = asyncio.ensure_future(self._initialize())

    async def wait(self) -> AuthState:
        """Wait for the initial check (and sign-in, if one was needed) to finish."""
        if self._task is not None:
            # shielded: a cancelled waiter must not abort the flow itself
            await asyncio.shield(self._task)
        return self._state

    def close(self):
        if self._closed:
            return
        self._closed = True
        if self._unsubscribe is not None:
            unsubscribe, self._unsubscribe = self._unsubscribe, None
            unsubscribe()
        self._listeners.clear()

    async def __aenter__(self) -> "SessionStateHolder":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.close()

    async def _initialize(self):
        try:
            identity = await self.sessions.get_current_session()
        except Exception as e:
            logger.warning("Could not check existing session: %s", type(e).__name__)
            self.last_error = e
            identity = None
        if self._closed:
            return
        if identity is not None:
            self._set(AuthState.authenticated, identity)
            return

        if self.authenticate is None:
            self.last_error = CapabilityUnavailable("wallet signer not available")
            self._set(AuthState.unauthenticated, None)
            return

        self._set(AuthState.authenticating, None)
        try:
            identity = await self.authenticate()
        except Exception as e:
            # authenticate may be any callable; whatever it raises ends in UNAUTHENTICATED
            if not isinstance(e, WalletAuthFailed):
                logger.warning("Authentication raised %s", type(e).__name__)
            if not self._closed:
                self.last_error = e
                self._set(AuthState.unauthenticated, None)
            return
        if self._closed:
            return
        self.last_error = None
        self._set(AuthState.authenticated, identity)

    def _on_session_change(self, event: str, identity: Optional[SessionIdentity]):
        if self._closed:
            return
        if identity is not None:
            self._set(AuthState.authenticated, identity)
        elif self._state != AuthState.authenticating:
            self._set(AuthState.unauthenticated, None)

    def _set(self, state: AuthState, identity: Optional[SessionIdentity]):
        if state == self._state and identity == self._identity:
            return
        self._state = state
        self._identity = identity
        for listener in list(self._listeners):
            try:
                listener(state, identity)
            except Exception:
                logger.exception("State listener failed for %s", state.value)
