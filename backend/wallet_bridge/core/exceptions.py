"""Error taxonomy for the wallet sign-in bridge.

Errors that carry a ``status_code`` are turned into HTTP responses by the
handler registered in ``wallet_bridge.main``. The ``public_reason`` is the only
thing a client ever sees; internal details stay in the logs.
"""
from typing import Optional


class WalletBridgeError(Exception):
    """Base class for bridge errors."""

    status_code: Optional[int] = None
    public_reason: str = "authentication failed"


class InvalidNonceSignature(WalletBridgeError):
    status_code = 400
    public_reason = "invalid signed nonce"


class InvalidOrExpiredMessage(WalletBridgeError):
    """Signed message rejected. ``reason`` is for logging only."""

    status_code = 400
    public_reason = "invalid final payload"

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class AccountProvisioningFailure(WalletBridgeError):
    """Store failure while resolving an account or rotating its credential."""

    status_code = 400
    public_reason = "failed to create account"


class LinkConflict(WalletBridgeError):
    """A wallet link for the address was committed by a concurrent request."""


class SessionExchangeFailure(WalletBridgeError):
    """The session endpoint rejected a login credential."""

    status_code = 401
    public_reason = "invalid login credential"


class CapabilityUnavailable(WalletBridgeError):
    """A client-side capability (e.g. the wallet signer) is not available."""


class WalletAuthFailed(WalletBridgeError):
    """Opaque failure reported by the client auth flow."""

    def __init__(self, message: str = "Wallet authentication failed"):
        super().__init__(message)
