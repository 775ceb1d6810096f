"""Resolver decisions on in-memory documents; no database needed."""
from mdfury.core.services.access_resolver import (
    ACCESS_DENIED_MESSAGE,
    AUTH_REQUIRED_MESSAGE,
    INCORRECT_PASSWORD_MESSAGE,
    AccessOutcome,
    resolve_access,
)
from mdfury.database.models.db_models import Document

OWNER_ID = 1
STRANGER_ID = 2


def make_document(is_public=True, password=None):
    return Document(id="doc-1", bin_id="demo", owner_id=OWNER_ID, title="Demo",
                    content="# Demo", tags=[], is_public=is_public, password=password)


class TestMissingDocument:
    def test_missing_document_is_not_found(self):
        result = resolve_access(None, None, None)
        assert result.outcome is AccessOutcome.NOT_FOUND
        assert not result.granted
        assert result.document is None

    def test_missing_document_ignores_requester_and_password(self):
        assert resolve_access(None, "secret", OWNER_ID).outcome is AccessOutcome.NOT_FOUND


class TestPublicDocument:
    def test_public_without_password_is_granted_to_anyone(self):
        document = make_document()
        for requester in (None, OWNER_ID, STRANGER_ID):
            result = resolve_access(document, None, requester)
            assert result.granted
            assert result.document is document

    def test_missing_password_has_empty_message(self):
        result = resolve_access(make_document(password="secret"), None, None)
        assert result.outcome is AccessOutcome.PASSWORD_REQUIRED
        assert result.message == ""

    def test_empty_password_counts_as_missing(self):
        result = resolve_access(make_document(password="secret"), "", STRANGER_ID)
        assert result.outcome is AccessOutcome.PASSWORD_REQUIRED
        assert result.message == ""

    def test_wrong_password(self):
        result = resolve_access(make_document(password="secret"), "wrong", None)
        assert result.outcome is AccessOutcome.PASSWORD_REQUIRED
        assert result.message == INCORRECT_PASSWORD_MESSAGE

    def test_correct_password_is_granted(self):
        result = resolve_access(make_document(password="secret"), "secret", None)
        assert result.granted

    def test_owner_skips_password(self):
        result = resolve_access(make_document(password="secret"), None, OWNER_ID)
        assert result.granted


class TestPrivateDocument:
    def test_anonymous_needs_to_log_in(self):
        result = resolve_access(make_document(is_public=False), None, None)
        assert result.outcome is AccessOutcome.AUTH_REQUIRED
        assert result.message == AUTH_REQUIRED_MESSAGE

    def test_stranger_is_denied(self):
        result = resolve_access(make_document(is_public=False), None, STRANGER_ID)
        assert result.outcome is AccessOutcome.ACCESS_DENIED
        assert result.message == ACCESS_DENIED_MESSAGE

    def test_owner_is_granted(self):
        assert resolve_access(make_document(is_public=False), None, OWNER_ID).granted

    def test_privacy_is_checked_before_password(self):
        # Legacy rows can be private and protected at once
        document = make_document(is_public=False, password="secret")

        assert resolve_access(document, "secret", None).outcome is AccessOutcome.AUTH_REQUIRED
        assert resolve_access(document, "secret", STRANGER_ID).outcome is AccessOutcome.ACCESS_DENIED
        assert resolve_access(document, None, OWNER_ID).granted
