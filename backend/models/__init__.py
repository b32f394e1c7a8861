"""SQLAlchemy ORM models."""

from .account import Account
from .checkr_account import CheckrAccount, CheckrAccountState
from .utils import generate_uuid

__all__ = ["Account", "CheckrAccount", "CheckrAccountState", "generate_uuid"]
