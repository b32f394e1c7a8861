"""Unit tests for CheckrWebhookService state transitions."""

import logging

import pytest

from models import CheckrAccount, CheckrAccountState
from schemas.checkr import (
    AccountCredentialedEvent,
    TokenDeauthorizedEvent,
    UnhandledEvent,
)
from services.checkr_webhook_service import CheckrWebhookService, WebhookOutcome
from tests.fixtures import create_connected_account, credentialed_event, deauthorized_event


@pytest.fixture
def service(cipher):
    return CheckrWebhookService(cipher)


def _credentialed(checkr_account_id: str) -> AccountCredentialedEvent:
    return AccountCredentialedEvent.model_validate(credentialed_event(checkr_account_id))


def _deauthorized(access_code: str, account_id: str = "partner-account") -> TokenDeauthorizedEvent:
    return TokenDeauthorizedEvent.model_validate(deauthorized_event(access_code, account_id))


def _record(db, account_id: str) -> CheckrAccount:
    return db.query(CheckrAccount).filter_by(account_id=account_id).one()


class TestAccountCredentialed:
    def test_uncredentialed_becomes_credentialed(self, db, service, connected_account):
        outcome = service.handle(db, _credentialed("X1"))

        assert outcome is WebhookOutcome.CREDENTIALED
        assert _record(db, connected_account.id).state == CheckrAccountState.credentialed.value

    def test_idempotent(self, db, service, connected_account):
        service.handle(db, _credentialed("X1"))
        outcome = service.handle(db, _credentialed("X1"))

        assert outcome is WebhookOutcome.CREDENTIALED
        record = _record(db, connected_account.id)
        assert record.state == CheckrAccountState.credentialed.value
        assert record.checkr_account_id == "X1"

    def test_unknown_account_is_retry_eligible(self, db, service, connected_account):
        outcome = service.handle(db, _credentialed("unknown"))

        assert outcome is WebhookOutcome.ACCOUNT_NOT_FOUND
        assert _record(db, connected_account.id).state == CheckrAccountState.uncredentialed.value

    def test_not_found_with_empty_store(self, db, service):
        assert service.handle(db, _credentialed("X1")) is WebhookOutcome.ACCOUNT_NOT_FOUND

    def test_only_matching_record_changes(self, db, service, cipher):
        a = create_connected_account(db, cipher, name="A", access_token="ta", checkr_account_id="XA")
        b = create_connected_account(db, cipher, name="B", access_token="tb", checkr_account_id="XB")

        service.handle(db, _credentialed("XB"))

        assert _record(db, a.id).state == CheckrAccountState.uncredentialed.value
        assert _record(db, b.id).state == CheckrAccountState.credentialed.value


class TestTokenDeauthorized:
    def test_matches_by_access_code_not_account_id(self, db, service, connected_account):
        """account_id on this event is the partner's; the token decides."""
        outcome = service.handle(db, _deauthorized("abc", account_id="unrelated"))

        assert outcome is WebhookOutcome.DEAUTHORIZED
        record = _record(db, connected_account.id)
        assert record.state == CheckrAccountState.disconnected.value
        assert record.checkr_account_id is None
        assert record.encrypted_access_token is None

    def test_account_id_matching_a_record_is_not_used(self, db, service, cipher):
        """A wrong token leaves the account named by account_id alone."""
        account = create_connected_account(db, cipher, access_token="abc", checkr_account_id="X1")

        outcome = service.handle(db, _deauthorized("different-token", account_id="X1"))

        assert outcome is WebhookOutcome.DEAUTHORIZED
        record = _record(db, account.id)
        assert record.state == CheckrAccountState.uncredentialed.value
        assert record.checkr_account_id == "X1"

    def test_credentialed_becomes_disconnected(self, db, service, cipher):
        account = create_connected_account(db, cipher, state=CheckrAccountState.credentialed)

        service.handle(db, _deauthorized("abc"))

        assert _record(db, account.id).state == CheckrAccountState.disconnected.value

    def test_unknown_token_is_a_no_op(self, db, service, connected_account):
        outcome = service.handle(db, _deauthorized("not-ours"))

        assert outcome is WebhookOutcome.DEAUTHORIZED
        assert _record(db, connected_account.id).state == CheckrAccountState.uncredentialed.value

    def test_duplicate_webhook_is_a_no_op(self, db, service, connected_account):
        service.handle(db, _deauthorized("abc"))
        outcome = service.handle(db, _deauthorized("abc"))

        assert outcome is WebhookOutcome.DEAUTHORIZED
        assert _record(db, connected_account.id).state == CheckrAccountState.disconnected.value

    def test_credentialed_after_disconnect_is_not_found(self, db, service, connected_account):
        service.handle(db, _deauthorized("abc"))

        outcome = service.handle(db, _credentialed("X1"))

        assert outcome is WebhookOutcome.ACCOUNT_NOT_FOUND
        assert _record(db, connected_account.id).state == CheckrAccountState.disconnected.value


class TestUnhandledEvents:
    def test_ignored_and_logged(self, db, service, connected_account, caplog):
        event = UnhandledEvent.model_validate({"type": "report.completed"})

        with caplog.at_level(logging.WARNING, logger="services.checkr_webhook_service"):
            outcome = service.handle(db, event)

        assert outcome is WebhookOutcome.IGNORED
        assert "report.completed" in caplog.text
        assert _record(db, connected_account.id).state == CheckrAccountState.uncredentialed.value
