"""Checkr OAuth API client.

Covers the two OAuth calls a Checkr partner integration makes on behalf of
its customers:

- ``POST /oauth/tokens`` exchanges the authorization code from the connect
  flow for a customer account-level access token.
- ``POST /oauth/deauthorize`` revokes that token.  The request
  authenticates with HTTP Basic auth, using the access token as the username
  and an empty password.

The client never touches the database; persisting (and encrypting) the token
is the caller's job.
"""

import logging
from dataclasses import dataclass

import httpx

from config import settings
from integrations.exceptions import (
    CheckrAPIError,
    ProviderAuthError,
    ProviderConnectionError,
    ProviderDataError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckrTokenGrant:
    """Result of a successful authorization code exchange."""

    access_token: str
    checkr_account_id: str

    def __repr__(self) -> str:
        return f"CheckrTokenGrant(checkr_account_id={self.checkr_account_id!r})"


def _non_empty_str(value) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _parse_errors(response: httpx.Response) -> list:
    """Return Checkr's ``errors`` array from an error response.

    Falls back to the raw response text when the body isn't JSON.
    """
    try:
        body = response.json()
    except ValueError:
        return [response.text] if response.text else []
    if isinstance(body, dict):
        errors = body.get("errors")
        if isinstance(errors, list):
            return errors
        if errors is not None:
            return [errors]
        if "error" in body:
            return [body["error"]]
    return []


class CheckrClient:
    """Thin wrapper around Checkr's OAuth endpoints."""

    def __init__(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        api_url: str | None = None,
        timeout: float | None = None,
    ):
        self._client_id = client_id or settings.CHECKR_OAUTH_CLIENT_ID
        self._client_secret = client_secret or settings.CHECKR_OAUTH_CLIENT_SECRET
        self._client = httpx.Client(
            base_url=api_url or settings.CHECKR_API_URL,
            headers={"Content-Type": "application/json"},
            timeout=timeout or settings.CHECKR_HTTP_TIMEOUT,
        )

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    @property
    def provider_name(self) -> str:
        return "Checkr"

    def is_configured(self) -> bool:
        """Check if the OAuth client id and secret are configured."""
        return bool(self._client_id) and bool(self._client_secret)

    def _post(self, path: str, **kwargs) -> httpx.Response:
        """POST to Checkr, translating network failures."""
        try:
            return self._client.post(path, **kwargs)
        except httpx.TimeoutException as exc:
            raise ProviderConnectionError(
                f"Checkr request to {path} timed out",
                provider_name="Checkr",
            ) from exc
        except httpx.TransportError as exc:
            raise ProviderConnectionError(
                f"Checkr connection failed: {exc}",
                provider_name="Checkr",
            ) from exc

    def exchange_authorization_code(self, code: str) -> CheckrTokenGrant:
        """Exchange an OAuth authorization code for an access token.

        Args:
            code: The ``code`` query parameter from Checkr's redirect.

        Returns:
            The plaintext access token and the Checkr account id.

        Raises:
            ProviderAuthError: OAuth client id/secret are not configured.
            CheckrAPIError: Checkr rejected the exchange; ``errors`` carries
                Checkr's error messages verbatim.
            ProviderConnectionError: Checkr could not be reached in time.
            ProviderDataError: A success response was missing fields.
        """
        if not self.is_configured():
            raise ProviderAuthError(
                "Checkr OAuth client is not configured. "
                "Run 'python scripts/setup_checkr.py' to set it up.",
                provider_name="Checkr",
            )

        response = self._post(
            "/oauth/tokens",
            json={
                "client_id": self._client_id,
                "client_secret": self._client_secret,
                "code": code,
            },
        )
        if not response.is_success:
            errors = _parse_errors(response)
            logger.warning(
                "Checkr token exchange rejected (HTTP %d): %s",
                response.status_code,
                errors,
            )
            raise CheckrAPIError(
                f"Checkr token exchange failed (HTTP {response.status_code})",
                status_code=response.status_code,
                errors=errors,
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise ProviderDataError(
                "Checkr token response is not JSON", provider_name="Checkr"
            ) from exc

        if not isinstance(body, dict):
            body = {}
        access_token = body.get("access_token")
        checkr_account_id = body.get("checkr_account_id")
        if not _non_empty_str(access_token) or not _non_empty_str(checkr_account_id):
            raise ProviderDataError(
                "Checkr token response is missing access_token or checkr_account_id",
                provider_name="Checkr",
            )
        grant = CheckrTokenGrant(
            access_token=access_token, checkr_account_id=checkr_account_id
        )

        logger.info("Checkr: exchanged authorization code for account %s", grant.checkr_account_id)
        return grant

    def deauthorize(self, access_token: str) -> None:
        """Ask Checkr to revoke an access token.

        Raises:
            CheckrAPIError: Checkr rejected the request.
            ProviderConnectionError: Checkr could not be reached in time.
        """
        response = self._post(
            "/oauth/deauthorize",
            auth=httpx.BasicAuth(access_token, ""),
        )
        if not response.is_success:
            errors = _parse_errors(response)
            logger.warning(
                "Checkr deauthorization rejected (HTTP %d): %s",
                response.status_code,
                errors,
            )
            raise CheckrAPIError(
                f"Checkr deauthorization failed (HTTP {response.status_code})",
                status_code=response.status_code,
                errors=errors,
            )
        logger.info("Checkr: deauthorization request accepted")
