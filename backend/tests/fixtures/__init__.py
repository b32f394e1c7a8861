"""Test fixtures and sample data."""
import json

import pytest
from sqlalchemy.orm import Session

from models import Account, CheckrAccount, CheckrAccountState
from services.token_cipher import TokenCipher
from services.webhook_signature import compute_signature

WEBHOOK_SECRET = b"test-oauth-client-secret"


def create_connected_account(
    db: Session,
    cipher: TokenCipher,
    *,
    name: str = "Acme Staffing",
    access_token: str = "abc",
    checkr_account_id: str = "X1",
    state: CheckrAccountState = CheckrAccountState.uncredentialed,
) -> Account:
    """Create an Account with a CheckrAccount holding an encrypted token.

    Commits, so a later ``BEGIN IMMEDIATE`` can start cleanly.
    """
    account = Account(name=name)
    db.add(account)
    db.flush()
    db.add(
        CheckrAccount(
            account_id=account.id,
            checkr_account_id=checkr_account_id,
            encrypted_access_token=cipher.encrypt(access_token),
            state=state.value,
        )
    )
    db.commit()
    return account


def signed_webhook(payload: dict, secret: bytes = WEBHOOK_SECRET) -> tuple[bytes, dict]:
    """Serialize a webhook payload and sign it the way Checkr does.

    Returns:
        ``(body, headers)`` ready for ``client.post(content=..., headers=...)``.
    """
    body = json.dumps(payload).encode("utf-8")
    headers = {
        "Content-Type": "application/json",
        "X-Checkr-Signature": compute_signature(body, secret),
    }
    return body, headers


def credentialed_event(checkr_account_id: str) -> dict:
    """An ``account.credentialed`` webhook as Checkr sends it."""
    return {
        "id": "1002d6bca6acdfcbb8442178",
        "object": "event",
        "type": "account.credentialed",
        "created_at": "2018-08-17T01:12:43Z",
        "webhook_url": "https://notify.company.com/checkr",
        "data": {
            "object": {
                "id": checkr_account_id,
                "object": "account",
                "uri": f"/v1/accounts/{checkr_account_id}",
                "created_at": "2018-08-17T01:10:21Z",
                "completed_at": "2018-08-17T01:12:26Z",
            }
        },
        "account_id": checkr_account_id,
    }


def deauthorized_event(access_code: str, account_id: str = "61a01b40fb6dc8305c648784") -> dict:
    """A ``token.deauthorized`` webhook; ``account_id`` is the partner's own."""
    return {
        "id": "627d901159cacb00016149b2",
        "object": "event",
        "type": "token.deauthorized",
        "created_at": "2022-05-12T22:54:09Z",
        "data": {"object": {"access_code": access_code}},
        "account_id": account_id,
    }


@pytest.fixture
def account(db):
    """A partner account with no Checkr connection."""
    acct = Account(name="Acme Staffing")
    db.add(acct)
    db.commit()
    db.refresh(acct)
    return acct


@pytest.fixture
def connected_account(db, cipher):
    """A partner account connected as Checkr account X1 with token "abc"."""
    return create_connected_account(db, cipher)
