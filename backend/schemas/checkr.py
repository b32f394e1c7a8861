"""Pydantic schemas for Checkr OAuth requests and webhook payloads.

Webhook bodies are decoded into one variant per event type before any
handler sees them:

- ``account.credentialed`` → :class:`AccountCredentialedEvent`
- ``token.deauthorized``   → :class:`TokenDeauthorizedEvent`
- anything else            → :class:`UnhandledEvent`
"""

import json
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

ACCOUNT_CREDENTIALED = "account.credentialed"
TOKEN_DEAUTHORIZED = "token.deauthorized"


class WebhookPayloadError(ValueError):
    """A signed webhook body could not be decoded into a known shape."""


class _EventBase(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    type: str
    created_at: Optional[str] = None


class CredentialedAccountObject(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None


class CredentialedAccountData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    object: CredentialedAccountObject = Field(default_factory=CredentialedAccountObject)


class AccountCredentialedEvent(_EventBase):
    """Checkr finished credentialing a customer account.

    ``account_id`` is the customer's Checkr account id, the same value
    returned as ``checkr_account_id`` by the token exchange.
    """

    type: Literal["account.credentialed"]
    account_id: Optional[str] = None
    data: CredentialedAccountData = Field(default_factory=CredentialedAccountData)

    @model_validator(mode="after")
    def require_checkr_account_id(self) -> "AccountCredentialedEvent":
        if not self.checkr_account_id:
            raise ValueError("account.credentialed webhook has no Checkr account id")
        return self

    @property
    def checkr_account_id(self) -> str | None:
        return self.account_id or self.data.object.id


class DeauthorizedTokenObject(BaseModel):
    model_config = ConfigDict(extra="ignore")

    access_code: str = Field(min_length=1)


class DeauthorizedTokenData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    object: DeauthorizedTokenObject


class TokenDeauthorizedEvent(_EventBase):
    """A customer access token is no longer valid.

    ``account_id`` on this event is the partner's own Checkr account, not
    the customer's; the token itself identifies the customer.
    """

    type: Literal["token.deauthorized"]
    account_id: Optional[str] = None
    data: DeauthorizedTokenData

    @property
    def access_code(self) -> str:
        return self.data.object.access_code


class UnhandledEvent(_EventBase):
    """Any event type this integration does not act on."""

    account_id: Optional[str] = None


WebhookEvent = Union[AccountCredentialedEvent, TokenDeauthorizedEvent, UnhandledEvent]

_EVENT_MODELS: dict[str, type[_EventBase]] = {
    ACCOUNT_CREDENTIALED: AccountCredentialedEvent,
    TOKEN_DEAUTHORIZED: TokenDeauthorizedEvent,
}


def parse_webhook_event(raw_body: bytes) -> WebhookEvent:
    """Decode a (verified) webhook body into its event variant.

    Raises:
        WebhookPayloadError: Body is not a JSON object, has no string
            ``type``, or doesn't match the schema for its type.
    """
    try:
        payload = json.loads(raw_body)
    except (ValueError, UnicodeDecodeError) as exc:
        raise WebhookPayloadError("webhook body is not valid JSON") from exc
    if not isinstance(payload, dict) or not isinstance(payload.get("type"), str):
        raise WebhookPayloadError("webhook body must be an object with a string type")

    model = _EVENT_MODELS.get(payload["type"], UnhandledEvent)
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise WebhookPayloadError(f"malformed {payload['type']} webhook: {exc.error_count()} error(s)") from exc


# ------------------------------------------------------------------
# Request / Response schemas
# ------------------------------------------------------------------


class DeauthorizeRequest(BaseModel):
    """Body of a customer's request to disconnect Checkr.

    Accepts the frontend's ``encryptedToken`` as well as ``encrypted_token``.
    """

    model_config = ConfigDict(populate_by_name=True)

    encrypted_token: str = Field(min_length=1, alias="encryptedToken")


class CheckrAccountResponse(BaseModel):
    """Checkr connection details shown to the partner frontend."""

    checkr_account_id: Optional[str] = None
    state: str
    encrypted_access_token: Optional[str] = None

    model_config = {"from_attributes": True}
