"""Tests for the command-line interface."""

from typing import Any

import httpx
import pytest
from typer.testing import CliRunner

from syspass_cli import __version__
from syspass_cli.api import SyspassV2, SyspassV3
from syspass_cli.cli import State, app, parse_expiration
from syspass_cli.config import SyspassConfig

runner = CliRunner()


def result(data: Any = None, item_id: int | None = None, result_code: int = 0) -> dict[str, Any]:
    """Successful sysPass 3 response body."""
    return {
        "jsonrpc": "2.0",
        "id": 1,
        "result": {"itemId": item_id, "result": data, "resultCode": result_code},
    }


def account_row(account_id: int, name: str, url: str = "https://example.com") -> dict[str, Any]:
    return {
        "id": account_id,
        "name": name,
        "login": "admin",
        "url": url,
        "categoryId": 1,
        "clientId": 2,
        "clientName": "Acme",
    }


@pytest.fixture
def clipboard(monkeypatch):
    """Record clipboard writes and scheduled clears instead of touching the system."""
    calls: dict[str, list] = {"copied": [], "scheduled": [], "shell": []}

    def copy(text: str) -> bool:
        calls["copied"].append(text)
        return True

    monkeypatch.setattr("syspass_cli.cli.copy_to_clipboard", copy)
    monkeypatch.setattr(
        "syspass_cli.cli.schedule_clipboard_clear",
        lambda config_path=None: calls["scheduled"].append(config_path),
    )
    monkeypatch.setattr(
        "syspass_cli.cli.open_shell",
        lambda login, url: calls["shell"].append((login, url)),
    )
    return calls


@pytest.fixture
def invoke(config, make_transport, usage_store):
    """Run the CLI against the fake server."""

    def run(*args: str, api_class: type = SyspassV3, cfg: SyspassConfig | None = None):
        cfg = cfg or config
        state = State(usage_store=usage_store, _config=cfg)
        state._client = api_class(cfg, make_transport(cfg), usage_store)
        return runner.invoke(app, list(args), obj=state)

    return run


class TestGlobalOptions:
    """Tests for top-level options."""

    def test_version(self):
        """Test --version prints the version."""
        result_ = runner.invoke(app, ["--version"])

        assert result_.exit_code == 0
        assert __version__ in result_.output

    def test_no_args_shows_help(self):
        """Test running without a command shows usage."""
        result_ = runner.invoke(app, [])

        assert "search" in result_.output


class TestSearch:
    """Tests for the search command."""

    def test_single_match_copies_password(self, invoke, server, clipboard):
        """Test the password goes to the clipboard and a clear is scheduled."""
        server.reply(result([account_row(4, "mail")]), result({"password": "s3cret"}))

        outcome = invoke("search", "mail")

        assert outcome.exit_code == 0, outcome.output
        assert server.methods == ["account/search", "account/viewPass"]
        assert clipboard["copied"] == ["s3cret"]
        assert clipboard["scheduled"] == [None]
        assert "Copied to clipboard" in outcome.output
        assert "s3cret" not in outcome.output

    def test_show_password(self, invoke, server, clipboard):
        """Test -p prints the password without using the clipboard."""
        server.reply(result([account_row(4, "mail")]), result({"password": "s3cret"}))

        outcome = invoke("search", "mail", "-p")

        assert outcome.exit_code == 0, outcome.output
        assert "s3cret" in outcome.output
        assert clipboard["copied"] == []
        assert clipboard["scheduled"] == []

    def test_no_clear_when_timeout_disabled(self, invoke, server, clipboard):
        """Test a zero timeout skips the clearing process."""
        cfg = SyspassConfig(host="https://vault/api.php", token="t", password="p", password_timeout=0)
        server.reply(result([account_row(4, "mail")]), result({"password": "s3cret"}))

        outcome = invoke("search", "mail", cfg=cfg)

        assert outcome.exit_code == 0, outcome.output
        assert clipboard["copied"] == ["s3cret"]
        assert clipboard["scheduled"] == []

    def test_category_filter(self, invoke, server, clipboard):
        """Test --category is sent as categoryId."""
        server.reply(result([account_row(4, "mail")]), result({"password": "x"}))

        invoke("search", "mail", "--category", "3")

        assert server.requests[0]["params"]["categoryId"] == "3"
        assert server.requests[0]["params"]["text"] == "mail"

    def test_by_id(self, invoke, server, clipboard):
        """Test --id views the account directly."""
        server.reply(result(account_row(4, "mail")), result({"password": "s3cret"}))

        outcome = invoke("search", "--id", "4")

        assert outcome.exit_code == 0, outcome.output
        assert server.methods == ["account/view", "account/viewPass"]

    def test_name_or_id_required(self, invoke, server, clipboard):
        """Test search without criteria fails."""
        outcome = invoke("search")

        assert outcome.exit_code == 1
        assert "Name or id is required" in outcome.output
        assert server.requests == []

    def test_no_match(self, invoke, server, clipboard):
        """Test an empty result set fails."""
        server.reply(result([]))

        outcome = invoke("search", "nothing")

        assert outcome.exit_code == 1
        assert "No account found" in outcome.output

    def test_quiet_with_several_matches(self, invoke, server, clipboard):
        """Test quiet mode cannot ask which account to use."""
        server.reply(result([account_row(4, "mail"), account_row(5, "mail2")]))

        outcome = invoke("-q", "search", "mail")

        assert outcome.exit_code == 1
        assert clipboard["copied"] == []

    def test_selection_records_usage(self, invoke, server, clipboard, usage_store, monkeypatch):
        """Test picking from several matches counts as usage."""
        monkeypatch.setattr("syspass_cli.cli.select", lambda text, items, allow_new=False: items[-1])
        server.reply(
            result([account_row(4, "mail"), account_row(5, "mail2")]),
            result({"password": "s3cret"}),
        )

        outcome = invoke("search", "mail")

        assert outcome.exit_code == 0, outcome.output
        assert usage_store.load() == {5: 1}
        assert server.requests[1]["params"]["id"] == "5"

    def test_disable_usage(self, invoke, server, clipboard, usage_store, monkeypatch):
        """Test -u neither ranks nor records."""
        monkeypatch.setattr("syspass_cli.cli.select", lambda text, items, allow_new=False: items[0])
        server.reply(
            result([account_row(4, "mail"), account_row(5, "mail2")]),
            result({"password": "s3cret"}),
        )

        invoke("search", "mail", "-u")

        assert usage_store.load() == {}

    def test_ssh_opens_shell(self, invoke, server, clipboard):
        """Test ssh:// accounts open a shell."""
        server.reply(result([account_row(4, "db", "ssh://db.example.com")]), result({"password": "x"}))

        invoke("search", "db")

        assert clipboard["shell"] == [("admin", "ssh://db.example.com")]

    def test_no_shell(self, invoke, server, clipboard):
        """Test -s suppresses the shell."""
        server.reply(result([account_row(4, "db", "ssh://db.example.com")]), result({"password": "x"}))

        invoke("search", "db", "-s")

        assert clipboard["shell"] == []

    def test_password_failure_leaves_clipboard(self, invoke, server, clipboard):
        """Test nothing is copied when the password cannot be fetched."""
        server.reply(result([account_row(4, "mail")]), httpx.Response(500))

        outcome = invoke("search", "mail")

        assert outcome.exit_code == 1
        assert "Server responded with code 500" in outcome.output
        assert clipboard["copied"] == []
        assert clipboard["scheduled"] == []


class TestNew:
    """Tests for the new command group."""

    def test_new_category(self, invoke, server):
        """Test a category is created from options."""
        server.reply(result({"id": 12, "name": "Ops", "description": "ops"}, item_id=12))

        outcome = invoke("new", "category", "-n", "Ops", "-e", "ops")

        assert outcome.exit_code == 0, outcome.output
        assert server.methods == ["category/create"]
        assert "Category Ops (12) saved!" in outcome.output

    def test_new_client(self, invoke, server):
        """Test a client is created with the global flag."""
        server.reply(result({"id": 3, "name": "Acme", "isGlobal": 1}, item_id=3))

        outcome = invoke("new", "client", "-n", "Acme", "-e", "d", "-g", "1")

        assert outcome.exit_code == 0, outcome.output
        assert server.last_params["global"] == "1"
        assert "Client Acme (3) saved!" in outcome.output

    def test_new_account(self, invoke, server):
        """Test an account is created from options."""
        server.reply(result(account_row(40, "db"), item_id=40))

        outcome = invoke(
            "new", "account",
            "-n", "db", "-l", "root", "-u", "https://db", "-o", "note",
            "-i", "2", "-a", "1", "-p", "pw",
        )

        assert outcome.exit_code == 0, outcome.output
        params = server.last_params
        assert server.methods == ["account/create"]
        assert params["pass"] == "pw"
        assert params["clientId"] == "2"
        assert params["categoryId"] == "1"
        assert "Account db (40) saved!" in outcome.output

    def test_new_account_legacy(self, invoke, server):
        """Test the legacy API creates and reloads the account."""
        server.reply(
            {"jsonrpc": "2.0", "result": {"itemId": "40", "resultCode": 0}},
            {
                "jsonrpc": "2.0",
                "result": {"account_id": "40", "account_name": "db", "customer_name": "Acme"},
            },
        )

        outcome = invoke(
            "new", "account",
            "-n", "db", "-l", "root", "-u", "https://db", "-o", "note",
            "-i", "2", "-a", "1", "-p", "pw",
            api_class=SyspassV2,
        )

        assert outcome.exit_code == 0, outcome.output
        assert server.methods == ["addAccount", "getAccountData"]
        assert "Account db (40) saved!" in outcome.output


class TestEdit:
    """Tests for the edit command group."""

    def test_edit_password(self, invoke, server):
        """Test the password and expiration are sent."""
        server.reply(result(account_row(4, "db")))

        outcome = invoke("edit", "password", "-i", "4", "-p", "n3w", "-e", "2030-01-01")

        assert outcome.exit_code == 0, outcome.output
        params = server.last_params
        assert server.methods == ["account/editPass"]
        assert params["pass"] == "n3w"
        assert params["expireDate"] == "1893542399"
        assert "Password changed" in outcome.output

    def test_edit_password_legacy(self, invoke, server):
        """Test the legacy API refuses password changes."""
        outcome = invoke("edit", "password", "-i", "4", "-p", "n3w", "-e", "2030-01-01", api_class=SyspassV2)

        assert outcome.exit_code == 1
        assert "SyspassV2 does not support this" in outcome.output
        assert server.requests == []

    def test_bad_expiration(self, invoke, server):
        """Test a malformed date is rejected."""
        outcome = invoke("edit", "password", "-i", "4", "-p", "n3w", "-e", "tomorrow")

        assert outcome.exit_code == 1
        assert server.requests == []

    def test_edit_category(self, invoke, server):
        """Test an existing category is loaded and edited."""
        server.reply(
            result({"id": 2, "name": "Web", "description": "old"}),
            result({"id": 2, "name": "Sites", "description": "old"}, item_id=2),
        )

        outcome = invoke("-q", "edit", "category", "-i", "2", "-n", "Sites")

        assert outcome.exit_code == 0, outcome.output
        assert server.methods == ["category/view", "category/edit"]
        assert server.last_params["name"] == "Sites"
        assert server.last_params["description"] == "old"
        assert server.last_params["id"] == "2"

    def test_parse_expiration(self):
        """Test expiration is the end of the day in UTC."""
        assert parse_expiration("2030-01-01") == 1893542399


class TestRemove:
    """Tests for the remove command group."""

    def test_remove_account(self, invoke, server):
        """Test a successful removal."""
        server.reply(result(result_code=0))

        outcome = invoke("remove", "account", "--id", "7")

        assert outcome.exit_code == 0, outcome.output
        assert server.methods == ["account/delete"]
        assert "Account removed" in outcome.output

    def test_remove_failure_reported(self, invoke, server):
        """Test a nonzero result code is reported."""
        server.reply(result(result_code=1))

        outcome = invoke("remove", "client", "--id", "7")

        assert "Failed to remove client" in outcome.output

    def test_remove_requires_id(self, invoke, server):
        """Test removal without a valid id fails locally."""
        outcome = invoke("remove", "category")

        assert outcome.exit_code == 1
        assert "Invalid id given" in outcome.output
        assert server.requests == []

    def test_remove_legacy(self, invoke, server):
        """Test legacy removal method names."""
        server.reply({"jsonrpc": "2.0", "result": {"resultCode": 0}})

        outcome = invoke("remove", "category", "--id", "3", api_class=SyspassV2)

        assert outcome.exit_code == 0, outcome.output
        assert server.methods == ["deleteCategory"]


class TestConfigCommand:
    """Tests for the config command."""

    def test_show_masks_secrets(self, invoke):
        """Test token and password are hidden."""
        outcome = invoke("config", "--show")

        assert outcome.exit_code == 0, outcome.output
        assert "secret-token" not in outcome.output
        assert "vault-pass" not in outcome.output
        assert "verifyHost" in outcome.output

    def test_init(self, temp_dir):
        """Test --init writes a default file."""
        path = temp_dir / "config.json"

        outcome = runner.invoke(app, ["config", "--init", "--path", str(path)])

        assert outcome.exit_code == 0, outcome.output
        assert path.exists()
