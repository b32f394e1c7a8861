"""Typed exception hierarchy for Checkr integration errors.

The route layer maps each type to a response: rejected requests become 422
with Checkr's own messages, unreachable or malformed responses become 502,
and a missing OAuth client configuration becomes 400.
"""


class ProviderError(Exception):
    """Base exception for all provider-related errors.

    Carries the provider name so callers can identify which provider failed.
    """

    def __init__(self, message: str, provider_name: str = ""):
        self.provider_name = provider_name
        super().__init__(message)


class ProviderAuthError(ProviderError):
    """OAuth client id or secret missing."""

    pass


class ProviderConnectionError(ProviderError):
    """Network failures: timeouts, DNS resolution, refused connections."""

    pass


class ProviderAPIError(ProviderError):
    """HTTP 4xx/5xx responses from the provider API.

    ``errors`` holds the provider's own error messages exactly as returned,
    so they can be passed through to the caller without translation.
    """

    def __init__(
        self,
        message: str,
        provider_name: str = "",
        status_code: int | None = None,
        errors: list | None = None,
    ):
        self.status_code = status_code
        self.errors = errors if errors is not None else []
        super().__init__(message, provider_name)


class CheckrAPIError(ProviderAPIError):
    """Checkr rejected a token exchange or deauthorization request."""

    def __init__(self, message: str, status_code: int | None = None, errors: list | None = None):
        super().__init__(message, provider_name="Checkr", status_code=status_code, errors=errors)


class ProviderDataError(ProviderError):
    """Malformed or incomplete success response from the provider."""

    pass
