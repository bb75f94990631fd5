"""Tests for entity models and error formatting."""

import pytest
from pydantic import ValidationError

from syspass_cli.errors import (
    ErrorCode,
    TransportError,
    missing_id,
    not_supported,
    server_responded,
)
from syspass_cli.schemas import Account, Category, ChangePassword, Client


class TestEntities:
    """Tests for entity models."""

    def test_new_entity(self):
        """Test None and 0 mark an entity as new."""
        assert Category(name="Ops").is_new
        assert Category(id=0, name="Ops").is_new
        assert not Category(id=3, name="Ops").is_new

    @pytest.mark.parametrize("model", [Account, Category, Client])
    def test_negative_id_rejected(self, model):
        """Test ids stay in the unsaved or positive range."""
        with pytest.raises(ValidationError):
            model(id=-1, name="Ops")

    def test_with_id(self):
        """Test the id is set on a copy."""
        category = Category(name="Ops")
        saved = category.with_id(9)

        assert saved.id == 9
        assert category.id is None
        assert saved.name == "Ops"

    def test_account_password_alias(self):
        """Test the password is read from the pass key."""
        account = Account.model_validate({"id": 1, "name": "db", "pass": "pw", "clientName": "Acme"})

        assert account.pass_ == "pw"
        assert account.client_name == "Acme"

    def test_change_password_by_name(self):
        """Test the field name is accepted besides the alias."""
        change = ChangePassword(id=4, pass_="new")

        assert change.pass_ == "new"
        assert change.expire_date == 0


class TestDisplay:
    """Tests for list rows."""

    def test_account_row(self, monkeypatch):
        """Test the ssh scheme is dropped and the client shown."""
        monkeypatch.setattr("syspass_cli.schemas.terminal_width", lambda: 120)
        account = Account(id=3, name="db", url="ssh://db.example.com", client_name="Acme")

        assert str(account) == "3. db - db.example.com (Acme)"

    def test_account_row_truncated(self, monkeypatch):
        """Test long rows are cut to the terminal width."""
        monkeypatch.setattr("syspass_cli.schemas.terminal_width", lambda: 50)
        account = Account(id=3, name="x" * 100)

        row = str(account)

        assert len(row) == 45 + 3
        assert row.endswith("...")

    def test_client_row(self):
        """Test global clients are marked."""
        assert str(Client(id=2, name="Acme", is_global=1)) == "2. Acme (*)"
        assert str(Client(id=2, name="Acme")) == "2. Acme"

    def test_category_row(self):
        """Test category rows."""
        assert str(Category(id=5, name="Web")) == "5. Web"


class TestErrors:
    """Tests for error messages."""

    def test_str_includes_code(self):
        """Test the string form carries the code."""
        error = server_responded(500, "account/search")

        assert str(error).startswith("[transport_http_status] Server responded with code 500")
        assert error.context == {"status_code": 500, "method": "account/search"}

    def test_to_dict(self):
        """Test serialisation for logging."""
        data = missing_id("category").to_dict()

        assert data["type"] == "InvariantViolation"
        assert data["code"] == ErrorCode.INVARIANT_VIOLATION.value
        assert data["message"] == "category id should be set after saving"

    def test_not_supported_message(self):
        """Test the legacy rejection message."""
        error = not_supported("change_password")

        assert error.message == "SyspassV2 does not support this"
        assert error.context["operation"] == "change_password"

    def test_is_exception(self):
        """Test errors can be raised and caught as exceptions."""
        try:
            raise TransportError(message="boom")
        except Exception as e:
            assert e.message == "boom"
