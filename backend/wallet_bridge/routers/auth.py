from fastapi import APIRouter, Depends
from wallet_bridge.core.deps import get_bridge, get_nonce_authority
from wallet_bridge.core.nonce import NonceAuthority
from wallet_bridge.schemas.auth import LoginCredentials, NonceResponse, WalletSignInRequest
from wallet_bridge.services.bridge import WalletSignInBridge

router = APIRouter(tags=["auth"])

@router.get("/api/auth/nonce", response_model=NonceResponse)
async def get_nonce(nonce_authority: NonceAuthority = Depends(get_nonce_authority)):
    nonce, signed_nonce = nonce_authority.issue()
    return NonceResponse(nonce=nonce, signed_nonce=signed_nonce)

@router.post("/api/sign-in-with-wallet", response_model=LoginCredentials)
async def sign_in_with_wallet(body: WalletSignInRequest, bridge: WalletSignInBridge = Depends(get_bridge)):
    # rejections are raised as WalletBridgeError and rendered by the app-level handler
    return await bridge.sign_in(body)
