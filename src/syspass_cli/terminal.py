"""
Terminal side effects of revealing a password: clipboard handling, the
account table and SSH shells.
"""

import logging
import os
import subprocess
import sys
import time

from rich.table import Table
from rich.text import Text

from syspass_cli.schemas import ViewPassword

logger = logging.getLogger(__name__)

SSH_PREFIX = "ssh://"


def clipboard_command() -> list[str] | None:
    """Pick the clipboard tool for this platform, None when unknown."""
    if os.path.exists("/proc/version"):
        with open("/proc/version") as f:
            version = f.read().lower()
        if "microsoft" in version or "wsl" in version:
            return ["clip.exe"]
        if os.environ.get("WAYLAND_DISPLAY"):
            return ["wl-copy"]
        return ["xclip", "-selection", "clipboard"]
    if sys.platform == "darwin":
        return ["pbcopy"]
    return None


def copy_to_clipboard(text: str) -> bool:
    """
    Put text on the clipboard.

    Returns:
        True when a clipboard tool accepted the text
    """
    cmd = clipboard_command()
    if cmd is None:
        logger.warning("No clipboard tool available")
        return False

    try:
        proc = subprocess.run(cmd, input=text.encode("utf-8"), capture_output=True)
    except FileNotFoundError:
        logger.warning(f"Clipboard tool not found: {cmd[0]}")
        return False

    if proc.returncode != 0:
        logger.warning(f"Clipboard tool {cmd[0]} failed with code {proc.returncode}")
        return False

    # KDE / Wayland need a moment before the owner process may exit
    time.sleep(0.01)
    return True


def clear_clipboard(timeout: int) -> bool:
    """
    Empty the clipboard after waiting timeout seconds.

    A timeout of 0 disables clearing.
    """
    if timeout <= 0:
        return True
    time.sleep(timeout)
    return copy_to_clipboard("")


def schedule_clipboard_clear(config_path: str | None = None) -> subprocess.Popen | None:
    """
    Start a detached process that clears the clipboard after the timeout.

    Must only be called once the password has been copied.
    """
    args = [sys.executable, "-m", "syspass_cli"]
    if config_path:
        args += ["--config", config_path]
    args += ["search", "--clear"]

    try:
        return subprocess.Popen(
            args,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError as e:
        logger.warning(f"Failed to schedule clipboard clearing: {e}")
        return None


def ssh_target(login: str, url: str) -> str:
    """user@host argument for an ssh:// account url."""
    return f"{login}@{url.replace(SSH_PREFIX, '')}"


def open_shell(login: str, url: str) -> int:
    """Run ssh for the account and wait for it to exit."""
    target = ssh_target(login, url)
    logger.info(f"Opening shell to {target}")
    return subprocess.call(["ssh", target])


def account_table(data: ViewPassword, show: bool) -> Table:
    """
    Render a revealed account.

    Args:
        data: Account and password
        show: Print the password instead of the clipboard notice

    Returns:
        Table ready for console.print
    """
    account = data.account
    title = account.name
    if account.client_name:
        title = f"{title}\n{account.client_name}"

    table = Table(title=Text(title, style="green"), show_lines=True)
    table.add_column("Id", style="green")
    table.add_column("Username", style="green")
    table.add_column("Password", style="green")
    table.add_column("Address", style="green")

    password = Text(data.password, style="bright_green") if show else Text(
        "✔ Copied to clipboard ✔", style="bright_green"
    )
    table.add_row(str(account.id or 0), account.login, password, account.url or "")

    return table
