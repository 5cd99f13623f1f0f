"""
Sign-In with Ethereum (EIP-4361) message handling.

Wallets sign a structured, human-readable message with EIP-191 personal_sign:

    example.com wants you to sign in with your Ethereum account:
    0xAbC...

    Authenticate (3f2c...).

    URI: https://example.com
    Version: 1
    Chain ID: 480
    Nonce: 9b1d...
    Issued At: 2026-01-01T00:00:00.000Z
    Expiration Time: 2026-01-08T00:00:00.000Z
    Not Before: 2025-12-31T00:00:00.000Z

SiweVerifier is the wallet-verification capability used by the bridge: it
checks the embedded nonce and the validity window, then recovers the signer
with eth_account and compares it to the claimed address.
"""

import hmac
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from eth_account import Account
from eth_account.messages import encode_defunct

_HEADER_SUFFIX = " wants you to sign in with your Ethereum account:"
_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
_FIELD_RE = re.compile(
    r"^(URI|Version|Chain ID|Nonce|Issued At|Expiration Time|Not Before|Request ID): (.*)$"
)


class SiweParseError(ValueError):
    pass


def canonical_address(address: str) -> str:
    """Lower-case 0x form used for every lookup and link."""
    if not isinstance(address, str):
        raise ValueError("address must be a string")
    address = address.strip()
    if not _ADDRESS_RE.match(address):
        raise ValueError(f"not an Ethereum address: {address!r}")
    return address.lower()


def parse_timestamp(value: str) -> datetime:
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    ts = datetime.fromisoformat(value)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def format_timestamp(ts: datetime) -> str:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    ts = ts.astimezone(timezone.utc)
    return ts.strftime("%Y-%m-%dT%H:%M:%S.") + f"{ts.microsecond // 1000:03d}Z"


@dataclass
class SiweMessage:
    domain: str
    address: str
    uri: str
    nonce: str
    issued_at: datetime
    statement: Optional[str] = None
    version: str = "1"
    chain_id: Optional[int] = None
    expiration_time: Optional[datetime] = None
    not_before: Optional[datetime] = None
    request_id: Optional[str] = None

    @classmethod
    def parse(cls, text: str) -> "SiweMessage":
        if not isinstance(text, str) or not text:
            raise SiweParseError("empty message")
        lines = text.split("\n")
        if len(lines) < 2 or not lines[0].endswith(_HEADER_SUFFIX):
            raise SiweParseError("missing SIWE header")
        domain = lines[0][: -len(_HEADER_SUFFIX)].strip()
        address = lines[1].strip()
        if not domain or not _ADDRESS_RE.match(address):
            raise SiweParseError("missing domain or address")

        fields = {}
        statement = None
        for line in lines[2:]:
            m = _FIELD_RE.match(line)
            if m:
                fields.setdefault(m.group(1), m.group(2).strip())
            elif line.strip() and "URI" not in fields and statement is None:
                statement = line.strip()

        for required in ("URI", "Version", "Nonce", "Issued At"):
            if required not in fields:
                raise SiweParseError(f"missing field {required!r}")

        try:
            chain_id = int(fields["Chain ID"]) if "Chain ID" in fields else None
            issued_at = parse_timestamp(fields["Issued At"])
            expiration = parse_timestamp(fields["Expiration Time"]) if "Expiration Time" in fields else None
            not_before = parse_timestamp(fields["Not Before"]) if "Not Before" in fields else None
        except ValueError as e:
            raise SiweParseError(str(e)) from e

        return cls(
            domain=domain,
            address=address,
            uri=fields["URI"],
            nonce=fields["Nonce"],
            issued_at=issued_at,
            statement=statement,
            version=fields["Version"],
            chain_id=chain_id,
            expiration_time=expiration,
            not_before=not_before,
            request_id=fields.get("Request ID"),
        )

    def prepare(self) -> str:
        """Render the message text a wallet signs."""
        lines = [f"{self.domain}{_HEADER_SUFFIX}", self.address, ""]
        if self.statement:
            lines += [self.statement, ""]
        lines.append(f"URI: {self.uri}")
        lines.append(f"Version: {self.version}")
        if self.chain_id is not None:
            lines.append(f"Chain ID: {self.chain_id}")
        lines.append(f"Nonce: {self.nonce}")
        lines.append(f"Issued At: {format_timestamp(self.issued_at)}")
        if self.expiration_time is not None:
            lines.append(f"Expiration Time: {format_timestamp(self.expiration_time)}")
        if self.not_before is not None:
            lines.append(f"Not Before: {format_timestamp(self.not_before)}")
        if self.request_id is not None:
            lines.append(f"Request ID: {self.request_id}")
        return "\n".join(lines)


@dataclass
class SiweVerification:
    valid: bool
    address: Optional[str] = None
    reason: Optional[str] = None


def _reject(reason: str) -> SiweVerification:
    return SiweVerification(valid=False, reason=reason)


class SiweVerifier:
    """Verify a wallet-auth success payload against the nonce the server issued."""

    def __init__(
        self,
        expected_domain: str = "",
        expected_chain_id: Optional[int] = None,
        max_window_seconds: Optional[int] = None,
    ):
        self.expected_domain = expected_domain
        self.expected_chain_id = expected_chain_id
        self.max_window_seconds = max_window_seconds

    def verify(self, payload: dict, expected_nonce: str, now: Optional[datetime] = None) -> SiweVerification:
        now = now or datetime.now(timezone.utc)
        try:
            message = SiweMessage.parse(payload["message"])
            signature = bytes.fromhex(str(payload["signature"]).removeprefix("0x"))
        except (KeyError, TypeError, ValueError):
            return _reject("malformed_payload")

        if not hmac.compare_digest(message.nonce.encode("utf-8"), str(expected_nonce).encode("utf-8")):
            return _reject("nonce_mismatch")
        if self.expected_domain and message.domain != self.expected_domain:
            return _reject("malformed_payload")
        if self.expected_chain_id is not None and message.chain_id != self.expected_chain_id:
            return _reject("malformed_payload")

        # replay is only bounded by the window, so an open-ended message is refused
        if message.expiration_time is None:
            return _reject("malformed_payload")
        if now >= message.expiration_time:
            return _reject("expired")
        start = message.not_before or message.issued_at
        if message.not_before is not None and now < message.not_before:
            return _reject("not_yet_valid")
        if self.max_window_seconds is not None:
            if (message.expiration_time - start).total_seconds() > self.max_window_seconds:
                return _reject("window_too_long")

        try:
            recovered = Account.recover_message(encode_defunct(text=payload["message"]), signature=signature)
        except Exception:
            # eth_account raises a mix of ValueError / BadSignature / eth_keys errors
            return _reject("bad_signature")

        if recovered.lower() != message.address.lower():
            return _reject("bad_signature")
        claimed = payload.get("address")
        if claimed is not None and str(claimed).lower() != recovered.lower():
            return _reject("address_mismatch")

        return SiweVerification(valid=True, address=recovered)
