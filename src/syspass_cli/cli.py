"""
Command-line interface for syspass-cli.

Provides commands for:
- search: Find an account and copy its password to the clipboard
- new: Add an account, category or client
- edit: Change an account password, a category or a client
- remove: Delete an account, category or client
- config: Create or show the configuration file
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from pathlib import Path
from typing import Annotated, Iterator, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from syspass_cli import __version__
from syspass_cli.api import ApiClient, create_client
from syspass_cli.config import SyspassConfig, load_config, save_default_config
from syspass_cli.credentials import VaultSecret
from syspass_cli.errors import SyspassError
from syspass_cli.passwords import generate_passwords
from syspass_cli.prompt import (
    ask_confirm,
    ask_for_date,
    ask_for_password,
    ask_prompt,
    get_match_string,
    select,
)
from syspass_cli.schemas import Account, Category, ChangePassword, Client
from syspass_cli.terminal import (
    SSH_PREFIX,
    account_table,
    clear_clipboard,
    copy_to_clipboard,
    open_shell,
    schedule_clipboard_clear,
)
from syspass_cli.transport import JsonRpcTransport
from syspass_cli.usage import UsageStore

logger = logging.getLogger(__name__)

# CLI app
app = typer.Typer(
    name="syspass",
    help="A CLI client for sysPass",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
new_app = typer.Typer(help="Add a new entity", no_args_is_help=True)
edit_app = typer.Typer(help="Edit entity", no_args_is_help=True)
remove_app = typer.Typer(help="Remove entity", no_args_is_help=True)
app.add_typer(new_app, name="new")
app.add_typer(new_app, name="add", hidden=True)
app.add_typer(edit_app, name="edit")
app.add_typer(edit_app, name="change", hidden=True)
app.add_typer(remove_app, name="remove")
app.add_typer(remove_app, name="delete", hidden=True)

console = Console()
error_console = Console(stderr=True)

# Months added to today for the default password expiration
DEFAULT_EXPIRATION_MONTHS = 18


@dataclass
class State:
    """
    Per-invocation context shared by all commands.

    Owns the configuration, the vault password cache and the API client, all
    created on first use.
    """

    config_path: Path | None = None
    quiet: bool = False
    usage_store: UsageStore = field(default_factory=UsageStore)
    _config: SyspassConfig | None = None
    _client: ApiClient | None = None

    @property
    def config(self) -> SyspassConfig:
        if self._config is None:
            self._config = load_config(self.config_path)
        return self._config

    @property
    def client(self) -> ApiClient:
        if self._client is None:
            config = self.config
            secret = VaultSecret(config.password)
            transport = JsonRpcTransport(config, secret)
            self._client = create_client(config, transport, self.usage_store)
        return self._client

    def say(self, message: str) -> None:
        """Print a status message unless running quietly."""
        if not self.quiet:
            console.print(message)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()


def get_state(ctx: typer.Context) -> State:
    """State of the running invocation."""
    return ctx.ensure_object(State)


def fail(message: str) -> typer.Exit:
    """Report an error and build the exit to raise."""
    error_console.print(f"[bright_red]✖[/bright_red] Error: {message}")
    return typer.Exit(1)


@contextmanager
def reported_errors() -> Iterator[None]:
    """Turn client errors into an error message and exit code 1."""
    try:
        yield
    except SyspassError as e:
        logger.debug(f"Command failed: {e.to_dict()}")
        raise fail(e.message) from e


def setup_logging(quiet: bool, verbose: bool, debug: bool) -> None:
    """Configure the root logger from the verbosity flags."""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    elif quiet:
        level = logging.CRITICAL + 1
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_path=False, show_time=False)],
        force=True,
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]syspass[/bold] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Sets a custom config file"),
    ] = None,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Do not output any message")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Output more information")] = False,
    debug: Annotated[bool, typer.Option("--debug", "-d", help="Output debug information")] = False,
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show version and exit"),
    ] = None,
) -> None:
    """syspass - search and manage sysPass accounts."""
    setup_logging(quiet, verbose, debug)

    state = get_state(ctx)
    if config is not None:
        state.config_path = config
    state.quiet = state.quiet or quiet
    ctx.call_on_close(state.close)


# --- Selection helpers ---


def require_interactive(state: State, what: str) -> None:
    """Abort when input would be needed but prompts are disabled."""
    if state.quiet:
        raise fail(f"Could not ask for {what}")


def ask_for_category(state: State) -> int:
    """Pick a category, or create one when the user asks for a new one."""
    require_interactive(state, "category")
    categories = state.client.get_categories()
    choice = select("Select the right category", categories, allow_new=True)
    if choice is not None:
        return choice.id or 0

    category = Category(
        name=ask_prompt("Name", required=True),
        description=ask_prompt("Description"),
    )
    saved = state.client.save_category(category)
    state.say(f"[bright_green]✔[/bright_green] Category [green]{saved.name}[/green] ({saved.id}) saved!")
    return saved.id or 0


def ask_for_client(state: State, is_global: int | None = None) -> int:
    """Pick a client, or create one when the user asks for a new one."""
    require_interactive(state, "client")
    clients = state.client.get_clients()
    choice = select("Select the right client", clients, allow_new=True)
    if choice is not None:
        return choice.id or 0

    if is_global is None:
        is_global = int(ask_confirm("Global"))
    client = Client(
        name=ask_prompt("Name", required=True),
        description=ask_prompt("Description"),
        is_global=is_global,
    )
    saved = state.client.save_client(client)
    state.say(f"[bright_green]✔[/bright_green] Client [green]{saved.name}[/green] ({saved.id}) saved!")
    return saved.id or 0


def choose_password(prompt_text: str) -> str:
    """Offer generated passwords, or ask for one when "use own" is picked."""
    suggestions = generate_passwords(5)
    choice = select("Choose password", suggestions)
    if choice is None or not choice.password:
        return ask_for_password(prompt_text, confirm=True)
    return choice.password


# --- search ---


@app.command()
def search(
    ctx: typer.Context,
    name: Annotated[Optional[str], typer.Argument(help="Search for given account")] = None,
    account_id: Annotated[Optional[int], typer.Option("--id", "-i", help="Account id")] = None,
    category: Annotated[Optional[int], typer.Option("--category", "-a", help="Category id")] = None,
    show_password: Annotated[
        bool,
        typer.Option("--show-password", "-p", help="Show passwords as plain text. Do not copy to clipboard"),
    ] = False,
    no_shell: Annotated[
        bool,
        typer.Option("--no-shell", "-s", help="Do not open a shell if the url starts with ssh://"),
    ] = False,
    disable_usage: Annotated[
        bool,
        typer.Option(
            "--disable-usage", "-u",
            help="Do not sort account list by usage and do not track usage history",
        ),
    ] = False,
    clear: Annotated[bool, typer.Option("--clear", hidden=True, help="Clear clipboard")] = False,
) -> None:
    """
    Search for account password.

    Copies the password to the clipboard and clears it after the configured timeout.
    """
    state = get_state(ctx)

    with reported_errors():
        if clear:
            clear_clipboard(state.config.clipboard_timeout)
            return

        client = state.client

        if account_id:
            accounts = [client.view_account(account_id)]
        elif not name:
            raise fail("Name or id is required")
        else:
            search_args = [("text", name)]
            if category:
                search_args.append(("categoryId", str(category)))
            accounts = client.search_account(search_args, not disable_usage)

        if not accounts:
            raise fail("No account found")
        if len(accounts) > 1 and state.quiet:
            raise typer.Exit(1)

        if len(accounts) > 1:
            choice = select("Select the right account", accounts)
            if not disable_usage and choice.id:
                state.usage_store.record(choice.id)
        else:
            choice = accounts[0]

        revealed = client.get_password(choice)

    # The password call has returned; only now may the clipboard be touched
    if not show_password:
        copied = copy_to_clipboard(revealed.password)
        if copied and state.config.clipboard_timeout > 0:
            schedule_clipboard_clear(str(state.config_path) if state.config_path else None)

    if not state.quiet:
        console.print(account_table(revealed, show_password))

    url = revealed.account.url or ""
    if not no_shell and url.startswith(SSH_PREFIX):
        open_shell(revealed.account.login, url)


# --- new / edit ---


def save_category_from_input(
    state: State,
    category_id: int,
    name: str | None,
    description: str | None,
) -> Category:
    """Load or create a category, apply the new values and save it."""
    client = state.client
    if category_id == 0:
        logger.warning("Creating a new category")
        category = Category()
    else:
        category = client.get_category(category_id)

    category.name = get_match_string(name, state.quiet, "Name", category.name, required=True)
    category.description = get_match_string(
        description, state.quiet, "Description", category.description or ""
    )

    logger.info("Trying to save category")
    saved = client.save_category(category)
    state.say(f"[bright_green]✔[/bright_green] Category [green]{saved.name}[/green] ({saved.id}) saved!")
    return saved


def save_client_from_input(
    state: State,
    client_id: int,
    name: str | None,
    description: str | None,
    is_global: int | None,
) -> Client:
    """Load or create a client, apply the new values and save it."""
    api = state.client
    if client_id == 0:
        logger.warning("Creating a new client")
        entity = Client()
    else:
        entity = api.get_client(client_id)

    entity.name = get_match_string(name, state.quiet, "Name", entity.name, required=True)
    entity.description = get_match_string(
        description, state.quiet, "Description", entity.description or ""
    )
    if is_global is not None:
        entity.is_global = is_global

    logger.info("Trying to save client")
    saved = api.save_client(entity)
    state.say(f"[bright_green]✔[/bright_green] Client [green]{saved.name}[/green] ({saved.id}) saved!")
    return saved


@new_app.command("account")
@new_app.command("password", hidden=True)
@new_app.command("pass", hidden=True)
def new_account(
    ctx: typer.Context,
    name: Annotated[Optional[str], typer.Option("--name", "-n", help="Account name")] = None,
    url: Annotated[Optional[str], typer.Option("--url", "-u", help="Url for site")] = None,
    login: Annotated[Optional[str], typer.Option("--login", "-l", help="Username")] = None,
    note: Annotated[Optional[str], typer.Option("--note", "-o", help="Notes text")] = None,
    client_id: Annotated[Optional[int], typer.Option("--client", "-i", help="Client id")] = None,
    category_id: Annotated[Optional[int], typer.Option("--category", "-a", help="Category id")] = None,
    is_global: Annotated[
        Optional[int],
        typer.Option("--global", "-g", help="Should a new client be global or not"),
    ] = None,
    password: Annotated[Optional[str], typer.Option("--password", "-p", help="Password")] = None,
) -> None:
    """Add a new account."""
    state = get_state(ctx)
    quiet = state.quiet

    with reported_errors():
        account = Account(
            id=0,
            name=get_match_string(name, quiet, "Name", required=True),
            login=get_match_string(login, quiet, "Username"),
            url=get_match_string(url, quiet, "Url"),
            notes=get_match_string(note, quiet, "Notes"),
            category_id=category_id or ask_for_category(state),
            client_id=client_id or ask_for_client(state, is_global),
        )

        if not password:
            require_interactive(state, "password")
            password = choose_password("Password")
        account.pass_ = password

        logger.warning("Trying to save account")
        saved = state.client.save_account(account)

    state.say(f"[bright_green]✔[/bright_green] Account [green]{saved.name}[/green] ({saved.id}) saved!")


@new_app.command("category")
def new_category(
    ctx: typer.Context,
    name: Annotated[Optional[str], typer.Option("--name", "-n", help="New name")] = None,
    description: Annotated[Optional[str], typer.Option("--description", "-e", help="New description")] = None,
) -> None:
    """Add a new category."""
    state = get_state(ctx)
    with reported_errors():
        save_category_from_input(state, 0, name, description)


@new_app.command("client")
def new_client(
    ctx: typer.Context,
    name: Annotated[Optional[str], typer.Option("--name", "-n", help="New name")] = None,
    description: Annotated[Optional[str], typer.Option("--description", "-e", help="New description")] = None,
    is_global: Annotated[
        Optional[int],
        typer.Option("--global", "-g", help="Should the client be global or not"),
    ] = None,
) -> None:
    """Add a new client."""
    state = get_state(ctx)
    with reported_errors():
        save_client_from_input(state, 0, name, description, is_global)


@edit_app.command("category")
def edit_category(
    ctx: typer.Context,
    category_id: Annotated[Optional[int], typer.Option("--id", "-i", help="Category ID")] = None,
    name: Annotated[Optional[str], typer.Option("--name", "-n", help="New name")] = None,
    description: Annotated[Optional[str], typer.Option("--description", "-e", help="New description")] = None,
) -> None:
    """Edit category."""
    state = get_state(ctx)
    with reported_errors():
        save_category_from_input(state, category_id or ask_for_category(state), name, description)


@edit_app.command("client")
def edit_client(
    ctx: typer.Context,
    client_id: Annotated[Optional[int], typer.Option("--id", "-i", help="Client ID")] = None,
    name: Annotated[Optional[str], typer.Option("--name", "-n", help="New name")] = None,
    description: Annotated[Optional[str], typer.Option("--description", "-e", help="New description")] = None,
    is_global: Annotated[
        Optional[int],
        typer.Option("--global", "-g", help="Should the client be global or not"),
    ] = None,
) -> None:
    """Edit client."""
    state = get_state(ctx)
    with reported_errors():
        save_client_from_input(state, client_id or ask_for_client(state), name, description, is_global)


def add_months(day: date, months: int) -> date:
    """Shift a date by whole months, clamping to the last day of the month."""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    for last_day in (31, 30, 29, 28):
        try:
            return day.replace(year=year, month=month, day=min(day.day, last_day))
        except ValueError:
            continue
    raise ValueError(f"Cannot shift {day} by {months} months")


def parse_expiration(value: str) -> int:
    """End of the given YYYY-mm-dd day in UTC, as epoch seconds."""
    try:
        day = datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as e:
        raise fail(f"Failed to parse expiration date: {value}") from e
    return int(datetime.combine(day, time(23, 59, 59), tzinfo=timezone.utc).timestamp())


@edit_app.command("password")
@edit_app.command("account", hidden=True)
@edit_app.command("pass", hidden=True)
def edit_password(
    ctx: typer.Context,
    account_id: Annotated[int, typer.Option("--id", "-i", help="Account ID")],
    password: Annotated[Optional[str], typer.Option("--password", "-p", help="New password")] = None,
    expiration: Annotated[
        Optional[str],
        typer.Option("--expiration", "-e", help="Expiration YYYY-mm-dd"),
    ] = None,
) -> None:
    """Change account password. Requires permissions: [Edit Account Password]."""
    state = get_state(ctx)

    if not password and not state.quiet:
        password = choose_password("New password")
    if not password:
        raise fail("Password can't be empty")

    if expiration:
        expire_date = parse_expiration(expiration)
    elif state.quiet:
        expire_date = 0
    else:
        default = add_months(date.today(), DEFAULT_EXPIRATION_MONTHS)
        expire_date = ask_for_date("Expiration date", default)

    change = ChangePassword(id=account_id, pass_=password, expire_date=expire_date)

    logger.info("Trying to change password")
    with reported_errors():
        account = state.client.change_password(change)

    state.say(f"[bright_green]✔[/bright_green] Password changed for account [green]{account}[/green]")


# --- remove ---


def report_removal(state: State, label: str, removed: bool) -> None:
    if removed:
        state.say(f"[bright_green]✔[/bright_green] {label} removed")
    else:
        state.say(f"[bright_red]✖[/bright_red] Failed to remove {label.lower()}")


def require_id(entity_id: int) -> int:
    if entity_id <= 0:
        raise fail("Invalid id given")
    return entity_id


@remove_app.command("account")
@remove_app.command("password", hidden=True)
@remove_app.command("pass", hidden=True)
def remove_account(
    ctx: typer.Context,
    entity_id: Annotated[int, typer.Option("--id", "-i", help="Account id")] = 0,
) -> None:
    """Remove account."""
    state = get_state(ctx)
    with reported_errors():
        removed = state.client.delete_account(require_id(entity_id))
    report_removal(state, "Account", removed)


@remove_app.command("category")
def remove_category(
    ctx: typer.Context,
    entity_id: Annotated[int, typer.Option("--id", "-i", help="Category id")] = 0,
) -> None:
    """Remove category."""
    state = get_state(ctx)
    with reported_errors():
        removed = state.client.delete_category(require_id(entity_id))
    report_removal(state, "Category", removed)


@remove_app.command("client")
def remove_client(
    ctx: typer.Context,
    entity_id: Annotated[int, typer.Option("--id", "-i", help="Client id")] = 0,
) -> None:
    """Remove client."""
    state = get_state(ctx)
    with reported_errors():
        removed = state.client.delete_client(require_id(entity_id))
    report_removal(state, "Client", removed)


# --- config ---


@app.command("config")
def config_cmd(
    ctx: typer.Context,
    init_config: Annotated[bool, typer.Option("--init", help="Create default config file")] = False,
    show: Annotated[bool, typer.Option("--show", help="Show current configuration")] = False,
    path: Annotated[Optional[Path], typer.Option("--path", help="Config file path for --init")] = None,
) -> None:
    """
    Manage configuration.

    Create or view the configuration file.
    """
    state = get_state(ctx)

    if init_config:
        config_path = save_default_config(path)
        console.print(f"[green]✓[/green] Created config file: {config_path}")
        console.print("[dim]Edit this file to set host, token and password.[/dim]")
        return

    if show:
        with reported_errors():
            cfg = state.config
        shown = cfg.model_dump(by_alias=True)
        for secret_key in ("token", "password"):
            if shown.get(secret_key):
                shown[secret_key] = "********"
        console.print_json(data=shown)
        return

    console.print("Use --init to create a config file or --show to view current config.")
    console.print()
    console.print("Default config file location: ~/.syspass/config.json")


if __name__ == "__main__":
    app()
