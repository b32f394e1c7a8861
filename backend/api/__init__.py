"""API route handlers."""
from . import accounts, checkr

__all__ = ["accounts", "checkr"]
