import hashlib
import hmac
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from wallet_bridge.config import settings

CREDENTIAL_NUM_BYTES = 16

def create_access_token(account_id: str) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return jwt.encode({"sub": account_id, "exp": expire}, settings.SESSION_SECRET_KEY, settings.ALGORITHM)

def decode_token(token: str) -> Optional[str]:
    try:
        payload = jwt.decode(token, settings.SESSION_SECRET_KEY, algorithms=[settings.ALGORITHM])
        return str(payload["sub"])
    except (JWTError, KeyError):
        return None

def generate_login_credential() -> str:
    return secrets.token_hex(CREDENTIAL_NUM_BYTES)

def hash_credential(credential: str) -> str:
    # credentials are 128-bit random, a plain digest is enough
    return hashlib.sha256(credential.encode("utf-8")).hexdigest()

def credential_matches(credential: str, credential_hash: Optional[str]) -> bool:
    if not credential or not credential_hash:
        return False
    return hmac.compare_digest(hash_credential(credential), credential_hash)
