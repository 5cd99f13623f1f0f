import uuid
from sqlalchemy import Column, String, DateTime, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from wallet_bridge.database import Base

def _new_id() -> str:
    return str(uuid.uuid4())

class Account(Base):
    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=_new_id)
    # placeholder-<uid>@<domain>; wallet-only users have no real contact identity
    login_identifier = Column(String, unique=True, nullable=False, index=True)
    internal_uid = Column(String(32), unique=True, nullable=False)
    user_metadata = Column(JSON, nullable=False, default=dict)
    # sha256 of the current login credential, single slot
    credential_hash = Column(String(64), nullable=True)
    credential_issued_at = Column(DateTime(timezone=True), nullable=True)
    last_login_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    wallet_link = relationship("WalletLink", back_populates="account", uselist=False)
