"""External API integrations.

This package contains:
- Checkr client: OAuth token exchange and deauthorization
- Provider exceptions: Typed errors shared by integrations
"""

from integrations.checkr_client import CheckrClient, CheckrTokenGrant

__all__ = [
    "CheckrClient",
    "CheckrTokenGrant",
]
