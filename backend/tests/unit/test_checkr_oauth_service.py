"""Unit tests for CheckrOAuthService."""

import httpx
import pytest

from integrations.checkr_client import CheckrClient
from integrations.exceptions import CheckrAPIError, ProviderConnectionError, ProviderDataError
from models import CheckrAccount, CheckrAccountState
from services.checkr_oauth_service import AccountNotFoundError, CheckrOAuthService
from services.token_cipher import TokenDecryptionError
from tests.fixtures.mocks import MockCheckrClient


class TestConnectAccount:
    def test_stores_encrypted_token(self, db, cipher, account, mock_checkr_client):
        service = CheckrOAuthService(mock_checkr_client, cipher)

        record = service.connect_account(db, account.id, "code-123")

        assert mock_checkr_client.exchanged_codes == ["code-123"]
        assert record.state == CheckrAccountState.uncredentialed.value
        assert record.checkr_account_id == "X1"
        assert record.encrypted_access_token != "abc"
        assert cipher.decrypt(record.encrypted_access_token) == "abc"

    def test_unknown_account_checked_before_exchange(self, db, cipher, mock_checkr_client):
        service = CheckrOAuthService(mock_checkr_client, cipher)

        with pytest.raises(AccountNotFoundError):
            service.connect_account(db, "no-such-account", "code-123")

        assert mock_checkr_client.exchanged_codes == []

    def test_rejected_exchange_stores_nothing(self, db, cipher, account):
        client = MockCheckrClient(should_fail=True, errors=["Authorization code is invalid"])
        service = CheckrOAuthService(client, cipher)

        with pytest.raises(CheckrAPIError) as exc_info:
            service.connect_account(db, account.id, "bad-code")

        assert exc_info.value.errors == ["Authorization code is invalid"]
        assert db.query(CheckrAccount).count() == 0

    def test_timeout_stores_nothing(self, db, cipher, account):
        client = MockCheckrClient(should_fail=True, failure_type="connection")
        service = CheckrOAuthService(client, cipher)

        with pytest.raises(ProviderConnectionError):
            service.connect_account(db, account.id, "code-123")

        assert db.query(CheckrAccount).count() == 0

    @pytest.mark.parametrize(
        "body",
        [
            {"access_token": None, "checkr_account_id": "X1"},
            {"access_token": "", "checkr_account_id": ""},
        ],
    )
    def test_incomplete_grant_stores_nothing(self, db, cipher, account, body):
        client = CheckrClient(client_id="client-id", client_secret="client-secret")
        client._client = httpx.Client(
            base_url="https://api.checkr-staging.com",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json=body)),
        )
        service = CheckrOAuthService(client, cipher)

        with pytest.raises(ProviderDataError):
            service.connect_account(db, account.id, "code-123")

        assert db.query(CheckrAccount).count() == 0


class TestDeauthorize:
    def test_sends_plaintext_token(self, cipher, mock_checkr_client):
        service = CheckrOAuthService(mock_checkr_client, cipher)

        service.deauthorize(cipher.encrypt("abc"))

        assert mock_checkr_client.deauthorized_tokens == ["abc"]

    def test_does_not_change_local_state(self, db, cipher, connected_account, mock_checkr_client):
        record = db.query(CheckrAccount).filter_by(account_id=connected_account.id).one()
        service = CheckrOAuthService(mock_checkr_client, cipher)

        service.deauthorize(record.encrypted_access_token)

        db.refresh(record)
        assert record.state == CheckrAccountState.uncredentialed.value
        assert record.checkr_account_id == "X1"
        assert cipher.decrypt(record.encrypted_access_token) == "abc"

    def test_undecryptable_token_never_reaches_checkr(self, cipher, mock_checkr_client):
        service = CheckrOAuthService(mock_checkr_client, cipher)

        with pytest.raises(TokenDecryptionError):
            service.deauthorize("garbage")

        assert mock_checkr_client.deauthorized_tokens == []

    def test_rejection_propagates(self, cipher):
        client = MockCheckrClient(should_fail=True, errors=["Token is invalid"])
        service = CheckrOAuthService(client, cipher)

        with pytest.raises(CheckrAPIError) as exc_info:
            service.deauthorize(cipher.encrypt("abc"))

        assert exc_info.value.errors == ["Token is invalid"]
