"""
Stateless nonce authority.

signed_nonce = HMAC-SHA256(NONCE_SECRET_KEY, nonce).hexdigest()

Nothing is stored per nonce: the server checks that a returned pair was minted
with its own secret, and replay is bounded by the expiry window inside the
signed SIWE message.
"""

import hashlib
import hmac
import secrets
from typing import Tuple, Union

NONCE_NUM_BYTES = 16  # 128 bits -> 32 hex chars


class NonceAuthority:
    def __init__(self, secret_key: Union[str, bytes], num_bytes: int = NONCE_NUM_BYTES):
        if not secret_key:
            raise ValueError("NonceAuthority requires a non-empty secret key")
        if num_bytes < NONCE_NUM_BYTES:
            raise ValueError(f"nonce must carry at least {NONCE_NUM_BYTES * 8} bits of entropy")
        self._key = secret_key.encode("utf-8") if isinstance(secret_key, str) else secret_key
        self._num_bytes = num_bytes

    def sign(self, nonce: str) -> str:
        return hmac.new(self._key, nonce.encode("utf-8"), hashlib.sha256).hexdigest()

    def issue(self) -> Tuple[str, str]:
        """Return a fresh ``(nonce, signed_nonce)`` pair."""
        nonce = secrets.token_hex(self._num_bytes)
        return nonce, self.sign(nonce)

    def verify(self, nonce: str, signed_nonce: str) -> bool:
        """
        Constant-time check that ``signed_nonce`` was produced for ``nonce`` by
        this authority. Never raises.
        """
        if not isinstance(nonce, str) or not isinstance(signed_nonce, str):
            return False
        if not nonce or not signed_nonce:
            return False
        try:
            expected = self.sign(nonce)
            return hmac.compare_digest(expected.encode("ascii"), signed_nonce.encode("utf-8"))
        except (UnicodeError, ValueError):
            return False
