from datetime import datetime, timedelta, timezone

import pytest
from eth_account import Account
from wallet_bridge.core.siwe import SiweMessage, SiweParseError, SiweVerifier, canonical_address


def test_prepare_and_parse_agree():
    now = datetime(2026, 1, 1, 12, 0, 0, 123000, tzinfo=timezone.utc)
    msg = SiweMessage(
        domain="app.example",
        address="0x742d35Cc6634C0532925a3b844Bc9e7595f2bD18",
        uri="https://app.example",
        nonce="abc123",
        issued_at=now,
        statement="Authenticate (xyz).",
        chain_id=480,
        expiration_time=now + timedelta(days=7),
        not_before=now - timedelta(days=1),
    )
    text = msg.prepare()
    assert text.startswith("app.example wants you to sign in with your Ethereum account:\n0x742d")
    assert "Issued At: 2026-01-01T12:00:00.123Z" in text
    assert SiweMessage.parse(text) == msg


def test_parse_without_statement():
    text = (
        "app.example wants you to sign in with your Ethereum account:\n"
        "0x742d35Cc6634C0532925a3b844Bc9e7595f2bD18\n"
        "\n"
        "URI: https://app.example\n"
        "Version: 1\n"
        "Nonce: n1\n"
        "Issued At: 2026-01-01T00:00:00Z"
    )
    msg = SiweMessage.parse(text)
    assert msg.statement is None
    assert msg.nonce == "n1"
    assert msg.expiration_time is None


@pytest.mark.parametrize("text", [
    "",
    "hello",
    "app.example wants you to sign in with your Ethereum account:\nnot-an-address\n",
    "app.example wants you to sign in with your Ethereum account:\n"
    "0x742d35Cc6634C0532925a3b844Bc9e7595f2bD18\n\nURI: x\nVersion: 1\nIssued At: 2026-01-01T00:00:00Z",
    "app.example wants you to sign in with your Ethereum account:\n"
    "0x742d35Cc6634C0532925a3b844Bc9e7595f2bD18\n\nURI: x\nVersion: 1\nNonce: n\nIssued At: yesterday",
])
def test_parse_rejects_malformed(text):
    with pytest.raises(SiweParseError):
        SiweMessage.parse(text)


def test_canonical_address_lowercases():
    assert canonical_address(" 0xABCDEF0123456789abcdef0123456789ABCDEF01 ") == "0xabcdef0123456789abcdef0123456789abcdef01"
    with pytest.raises(ValueError):
        canonical_address("0x1234")
    with pytest.raises(ValueError):
        canonical_address(None)


def test_verify_valid_payload(siwe_payload):
    acct = Account.create()
    result = SiweVerifier().verify(siwe_payload(acct, "nonce-1"), "nonce-1")
    assert result.valid is True
    assert result.address.lower() == acct.address.lower()


def test_verify_nonce_mismatch_with_valid_signature(siwe_payload):
    acct = Account.create()
    payload = siwe_payload(acct, "nonce-other")
    result = SiweVerifier().verify(payload, "nonce-1")
    assert result.valid is False
    assert result.reason == "nonce_mismatch"


def test_verify_expired(siwe_payload):
    acct = Account.create()
    issued = datetime.now(timezone.utc) - timedelta(days=10)
    payload = siwe_payload(acct, "nonce-1", now=issued)
    result = SiweVerifier().verify(payload, "nonce-1")
    assert result.valid is False
    assert result.reason == "expired"


def test_verify_not_yet_valid(siwe_payload):
    acct = Account.create()
    payload = siwe_payload(acct, "nonce-1", valid_from=timedelta(hours=1))
    result = SiweVerifier().verify(payload, "nonce-1")
    assert result.reason == "not_yet_valid"


def test_verify_window_too_long(siwe_payload):
    acct = Account.create()
    payload = siwe_payload(acct, "nonce-1", expires_in=timedelta(days=30))
    result = SiweVerifier(max_window_seconds=8 * 24 * 3600).verify(payload, "nonce-1")
    assert result.reason == "window_too_long"


def test_verify_missing_expiration(siwe_payload):
    acct = Account.create()
    payload = siwe_payload(acct, "nonce-1")
    payload["message"] = "\n".join(
        line for line in payload["message"].split("\n") if not line.startswith("Expiration Time")
    )
    result = SiweVerifier().verify(payload, "nonce-1")
    assert result.reason == "malformed_payload"


def test_verify_tampered_message(siwe_payload):
    acct = Account.create()
    payload = siwe_payload(acct, "nonce-1")
    payload["message"] = payload["message"].replace("Authenticate (test).", "Authenticate (evil).")
    result = SiweVerifier().verify(payload, "nonce-1")
    assert result.valid is False
    assert result.reason == "bad_signature"


def test_verify_signature_by_other_key(siwe_payload):
    acct = Account.create()
    other = Account.create()
    payload = siwe_payload(acct, "nonce-1")
    payload["signature"] = siwe_payload(other, "nonce-1")["signature"]
    assert SiweVerifier().verify(payload, "nonce-1").reason == "bad_signature"


def test_verify_claimed_address_mismatch(siwe_payload):
    acct = Account.create()
    payload = siwe_payload(acct, "nonce-1", address=Account.create().address)
    assert SiweVerifier().verify(payload, "nonce-1").reason == "address_mismatch"


def test_verify_domain_and_chain(siwe_payload):
    acct = Account.create()
    payload = siwe_payload(acct, "nonce-1", domain="evil.example")
    assert SiweVerifier(expected_domain="localhost:3000").verify(payload, "nonce-1").valid is False
    payload = siwe_payload(acct, "nonce-1")
    assert SiweVerifier(expected_domain="localhost:3000", expected_chain_id=480).verify(payload, "nonce-1").valid
    assert SiweVerifier(expected_chain_id=1).verify(payload, "nonce-1").valid is False


@pytest.mark.parametrize("payload", [
    {},
    {"message": "x"},
    {"message": None, "signature": "0x00"},
    {"message": "x", "signature": "0xzz"},
])
def test_verify_malformed(payload):
    assert SiweVerifier().verify(payload, "nonce-1").reason == "malformed_payload"
