"""Checkr OAuth API endpoints.

Provides the three server-side endpoints of a Checkr partner integration:

- the OAuth redirect URL, which exchanges the authorization code and stores
  the customer's access token,
- the webhook URL, which verifies and applies ``account.credentialed`` and
  ``token.deauthorized`` webhooks,
- customer-initiated deauthorization of a stored token.

Webhook status codes drive Checkr's retries: 2xx stops them, 404 asks for a
retry later.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from config import settings
from database import get_db
from integrations.checkr_client import CheckrClient
from integrations.exceptions import (
    ProviderAPIError,
    ProviderAuthError,
    ProviderConnectionError,
    ProviderDataError,
)
from schemas.checkr import DeauthorizeRequest, WebhookPayloadError, parse_webhook_event
from services.checkr_oauth_service import AccountNotFoundError, CheckrOAuthService
from services.checkr_webhook_service import CheckrWebhookService, WebhookOutcome
from services.token_cipher import TokenCipher, TokenDecryptionError, get_token_cipher
from services.webhook_signature import SIGNATURE_HEADER, verify_signature

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/checkr", tags=["checkr"])


def _get_checkr_client():
    """Dependency for injecting the Checkr client (overridable in tests)."""
    client = CheckrClient()
    try:
        yield client
    finally:
        client.close()


def _get_token_cipher() -> TokenCipher:
    """Dependency for injecting the token cipher (overridable in tests)."""
    return get_token_cipher()


def _get_webhook_secret() -> bytes:
    """Dependency for the webhook HMAC key (the OAuth client secret)."""
    return settings.CHECKR_OAUTH_CLIENT_SECRET.encode("utf-8")


def _checkr_error_response(exc: ProviderAPIError) -> JSONResponse:
    """422 carrying Checkr's own error messages."""
    return JSONResponse(
        status_code=422,
        content={"errors": {"checkrApiErrors": exc.errors}},
    )


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------


@router.get("/oauth")
def oauth_redirect(
    code: str = Query(..., min_length=1),
    state: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    client: CheckrClient = Depends(_get_checkr_client),
    cipher: TokenCipher = Depends(_get_token_cipher),
):
    """OAuth redirect URL: exchange the authorization code for an access token.

    ``state`` is the partner account id set on the Checkr connect link.
    """
    service = CheckrOAuthService(client, cipher)
    try:
        service.connect_account(db, state, code)
    except AccountNotFoundError:
        raise HTTPException(status_code=404, detail=f"Account not found: {state}")
    except ProviderAuthError as e:
        logger.error("Checkr OAuth is not configured: %s", e)
        raise HTTPException(status_code=400, detail="Checkr is not configured")
    except ProviderAPIError as e:
        return _checkr_error_response(e)
    except (ProviderConnectionError, ProviderDataError) as e:
        logger.error("Checkr token exchange failed: %s", e)
        raise HTTPException(status_code=502, detail="Checkr token exchange failed")

    # The account now waits for Checkr to credential it.
    return RedirectResponse(url=settings.APP_REDIRECT_URL, status_code=302)


@router.post("/webhooks")
async def receive_webhook(
    request: Request,
    db: Session = Depends(get_db),
    cipher: TokenCipher = Depends(_get_token_cipher),
    secret: bytes = Depends(_get_webhook_secret),
):
    """Webhook URL: verify the signature, then apply the event."""
    raw_body = await request.body()
    if not verify_signature(request.headers.get(SIGNATURE_HEADER), raw_body, secret):
        logger.warning("Rejected Checkr webhook with invalid %s", SIGNATURE_HEADER)
        return JSONResponse(
            status_code=400,
            content={"errors": [f"invalid {SIGNATURE_HEADER.lower()}"]},
        )

    try:
        event = parse_webhook_event(raw_body)
    except WebhookPayloadError as e:
        logger.warning("Rejected Checkr webhook: %s", e)
        return JSONResponse(status_code=400, content={"errors": [str(e)]})

    # Database work stays off the event loop
    outcome = await run_in_threadpool(CheckrWebhookService(cipher).handle, db, event)

    if outcome is WebhookOutcome.ACCOUNT_NOT_FOUND:
        return JSONResponse(
            status_code=404,
            content={"errors": [f"cannot find account with checkr account ID {event.checkr_account_id}"]},
        )
    if outcome is WebhookOutcome.DEAUTHORIZED:
        return Response(status_code=204)
    return Response(status_code=200)


@router.post("/deauthorize", status_code=204)
def deauthorize(
    body: DeauthorizeRequest,
    client: CheckrClient = Depends(_get_checkr_client),
    cipher: TokenCipher = Depends(_get_token_cipher),
):
    """Revoke a customer's Checkr access token.

    The stored token stays in place until the ``token.deauthorized``
    webhook confirms the revocation.
    """
    service = CheckrOAuthService(client, cipher)
    try:
        service.deauthorize(body.encrypted_token)
    except TokenDecryptionError:
        raise HTTPException(status_code=400, detail="Invalid encrypted token")
    except ProviderAPIError as e:
        return _checkr_error_response(e)
    except ProviderConnectionError as e:
        logger.error("Checkr deauthorization failed: %s", e)
        raise HTTPException(status_code=502, detail="Checkr deauthorization failed")
    return Response(status_code=204)
