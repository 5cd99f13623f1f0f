import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from wallet_bridge.config import settings
from wallet_bridge.core.exceptions import WalletBridgeError
from wallet_bridge.database import engine
from wallet_bridge.routers import auth, session

logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Wallet bridge starting")
    yield
    await engine.dispose()

app = FastAPI(title="Wallet Sign-In Bridge", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Auth-Error"],
)

@app.exception_handler(WalletBridgeError)
async def wallet_bridge_error_handler(request: Request, exc: WalletBridgeError):
    return JSONResponse(None, status_code=exc.status_code or 500, headers={"X-Auth-Error": exc.public_reason})

app.include_router(auth.router)
app.include_router(session.router)

@app.get("/health")
async def health():
    return {"status": "ok"}
