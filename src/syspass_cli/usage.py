"""
Account usage tracking.

Counts how often each account was picked from a search so later searches can
list the most used accounts first. Counters are stored as a JSON object
mapping account id to count.
"""

import json
import logging
from pathlib import Path
from typing import Iterable

from syspass_cli.config import DEFAULT_CONFIG_DIR, USAGE_FILE_NAME
from syspass_cli.schemas import Account

logger = logging.getLogger(__name__)

UsageData = dict[int, int]


def ranking_key(account: Account, usage: UsageData) -> tuple[int, int, int]:
    """
    Sort key placing used accounts first.

    Accounts with a nonzero counter come first, highest counter first.
    Everything else follows in ascending id order.
    """
    account_id = account.id or 0
    count = usage.get(account_id, 0)
    if count > 0:
        return (0, -count, account_id)
    return (1, 0, account_id)


def sort_accounts(accounts: Iterable[Account], usage: UsageData | None = None) -> list[Account]:
    """
    Order accounts by usage, falling back to ascending id.

    Args:
        accounts: Accounts to order
        usage: Usage counters by account id; None or empty disables ranking

    Returns:
        New list in ranked order
    """
    usage = usage or {}
    return sorted(accounts, key=lambda account: ranking_key(account, usage))


class UsageStore:
    """Reads and updates the usage counter file."""

    def __init__(self, path: Path | None = None) -> None:
        """
        Initialize usage store.

        Args:
            path: Counter file. Defaults to ~/.syspass/usage.json
        """
        self.path = path or DEFAULT_CONFIG_DIR / USAGE_FILE_NAME

    def load(self) -> UsageData:
        """
        Load usage counters.

        A missing or unreadable file counts as no usage at all, so a broken
        counter file never blocks a search.
        """
        if not self.path.exists():
            return {}

        try:
            raw = json.loads(self.path.read_text())
            return {int(key): int(value) for key, value in raw.items()}
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Failed to load usage data: {e}")
            return {}

    def record(self, account_id: int) -> int:
        """
        Increment the counter of an account and persist it.

        Args:
            account_id: Account that was used

        Returns:
            New counter value
        """
        usage = self.load()
        usage[account_id] = usage.get(account_id, 0) + 1

        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {str(key): value for key, value in sorted(usage.items())}
        self.path.write_text(json.dumps(data) + "\n")
        logger.info(f"Recorded usage of account {account_id} ({usage[account_id]})")

        return usage[account_id]
