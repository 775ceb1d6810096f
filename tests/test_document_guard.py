import pytest

from mdfury.core.exceptions import ValidationFailedError
from mdfury.core.services.document_guard import apply_visibility_rule, validate_bin_id
from mdfury.database.models.db_models import Document


def stored(is_public=True, password=None):
    return Document(id="doc-1", bin_id="demo", owner_id=1, is_public=is_public, password=password)


class TestValidateBinId:
    @pytest.mark.parametrize("bin_id", ["demo", "My-Notes-2024", "a", "x" * 128])
    def test_accepts_letters_digits_and_hyphens(self, bin_id):
        assert validate_bin_id(bin_id) == bin_id

    @pytest.mark.parametrize("bin_id,message", [
        (None, "Bin ID is required"),
        ("", "Bin ID is required"),
        ("x" * 129, "Bin ID must be 128 characters or less"),
        ("has space", "Bin ID can only contain letters, numbers, and hyphens"),
        ("under_score", "Bin ID can only contain letters, numbers, and hyphens"),
        ("ünïcode", "Bin ID can only contain letters, numbers, and hyphens"),
        ("demo\n", "Bin ID can only contain letters, numbers, and hyphens"),
    ])
    def test_rejects_invalid_ids(self, bin_id, message):
        with pytest.raises(ValidationFailedError) as exc_info:
            validate_bin_id(bin_id)
        assert exc_info.value.message == message


class TestVisibilityRule:
    def test_new_document_defaults_to_public(self):
        assert apply_visibility_rule(None, None) == (True, None)

    def test_private_without_password_stays_private(self):
        assert apply_visibility_rule(False, None) == (False, None)

    def test_password_forces_public(self):
        assert apply_visibility_rule(False, "secret") == (True, "secret")

    def test_empty_password_means_none(self):
        assert apply_visibility_rule(False, "") == (False, None)

    def test_update_keeps_stored_values_when_nothing_supplied(self):
        assert apply_visibility_rule(None, None, existing=stored(True, "secret")) == (True, "secret")
        assert apply_visibility_rule(None, None, existing=stored(False, None)) == (False, None)

    def test_going_private_with_stored_password_stays_public(self):
        assert apply_visibility_rule(False, None, existing=stored(True, "secret")) == (True, "secret")

    def test_clearing_password_allows_private(self):
        assert apply_visibility_rule(False, "", existing=stored(True, "secret")) == (False, None)

    def test_adding_password_to_private_document_makes_it_public(self):
        assert apply_visibility_rule(None, "secret", existing=stored(False, None)) == (True, "secret")

    def test_normalizes_legacy_private_protected_row(self):
        assert apply_visibility_rule(None, None, existing=stored(False, "secret")) == (True, "secret")
