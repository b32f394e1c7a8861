"""CheckrAccount model - the Checkr authorization attached to an Account."""

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid


class CheckrAccountState(str, Enum):
    """Authorization states of a connected Checkr account."""

    uncredentialed = "uncredentialed"
    credentialed = "credentialed"
    disconnected = "disconnected"


class CheckrAccount(Base):
    """OAuth authorization between one partner Account and Checkr.

    ``uncredentialed`` and ``credentialed`` rows always carry both
    ``checkr_account_id`` and ``encrypted_access_token``.  A
    ``disconnected`` row has both cleared; only a new token exchange
    fills them again.
    """

    __tablename__ = "checkr_accounts"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    account_id = Column(
        String(36), ForeignKey("accounts.id"), unique=True, nullable=False
    )
    checkr_account_id = Column(String, unique=True, index=True, nullable=True)
    encrypted_access_token = Column(String, nullable=True)  # Fernet ciphertext
    state = Column(
        String, nullable=False, default=CheckrAccountState.uncredentialed.value
    )
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    account = relationship("Account", back_populates="checkr_account")
