from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class NonceResponse(CamelModel):
    nonce: str
    signed_nonce: str

# a SIWE success payload is well under this; the cap also bounds how deep json.loads can nest
MAX_FINAL_PAYLOAD_LENGTH = 8192

class WalletSignInRequest(CamelModel):
    nonce: str = Field(max_length=64)
    signed_nonce: str = Field(max_length=128)
    final_payload_json: str = Field(max_length=MAX_FINAL_PAYLOAD_LENGTH)

class LoginCredentials(CamelModel):
    login_identifier: str
    login_credential: str = Field(repr=False)

class WalletAuthPayload(BaseModel):
    """Success payload returned by the wallet after signing the SIWE message."""
    status: str
    message: str
    signature: str
    address: str
    version: Optional[int] = None

class SessionTokenResponse(CamelModel):
    access_token: str = Field(repr=False)
    token_type: str = "bearer"
    expires_in: int

class SessionIdentity(CamelModel):
    id: str
    login_identifier: str
    address: Optional[str] = None
    user_metadata: dict = {}
