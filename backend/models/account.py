"""Account model - a partner-owned customer account."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid


class Account(Base):
    """A customer account in the partner application.

    The ``id`` is what the Checkr connect link passes through as the OAuth
    ``state`` parameter, so the redirect callback can find the account the
    new access token belongs to.
    """

    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    checkr_account = relationship(
        "CheckrAccount", back_populates="account", uselist=False
    )
