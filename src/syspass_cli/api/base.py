"""
Common interface of the sysPass API versions.

Each backend version implements ApiClient. Callers only use this interface, so
commands work the same against either server.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Sequence

from syspass_cli.config import SyspassConfig
from syspass_cli.schemas import Account, Category, ChangePassword, Client, ViewPassword
from syspass_cli.transport import JsonRpcTransport, RequestArguments
from syspass_cli.usage import UsageStore, sort_accounts

logger = logging.getLogger(__name__)

SearchArguments = Sequence[tuple[str, str]]


class ApiClient(ABC):
    """Operations offered by every supported sysPass API version."""

    version: ClassVar[str]

    def __init__(
        self,
        config: SyspassConfig,
        transport: JsonRpcTransport | None = None,
        usage_store: UsageStore | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            config: Loaded configuration
            transport: JSON-RPC transport (defaults to one built from config)
            usage_store: Usage counters for ranked searches
        """
        self.config = config
        self.transport = transport or JsonRpcTransport(config)
        self.usage_store = usage_store or UsageStore()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the transport."""
        self.transport.close()

    def call(
        self,
        method: str,
        args: RequestArguments | None = None,
        needs_password: bool = False,
    ) -> dict[str, Any]:
        """Send one request through the transport."""
        logger.info(f"{self.version}: calling {method}")
        return self.transport.call(method, args, needs_password)

    def rank(self, accounts: list[Account], usage: bool) -> list[Account]:
        """
        Order search results.

        Args:
            accounts: Accounts returned by the server
            usage: Rank by usage counters instead of plain id order

        Returns:
            Ordered accounts
        """
        usage_data = self.usage_store.load() if usage else {}
        return sort_accounts(accounts, usage_data)

    @abstractmethod
    def search_account(self, search: SearchArguments, usage: bool) -> list[Account]:
        """Search accounts. Results never carry passwords."""
        ...

    @abstractmethod
    def view_account(self, account_id: int) -> Account:
        """Fetch a single account."""
        ...

    @abstractmethod
    def get_password(self, account: Account) -> ViewPassword:
        """Reveal the password of an account."""
        ...

    @abstractmethod
    def get_clients(self) -> list[Client]:
        """List clients in ascending id order."""
        ...

    @abstractmethod
    def get_client(self, client_id: int) -> Client:
        """Fetch a single client."""
        ...

    @abstractmethod
    def save_client(self, client: Client) -> Client:
        """Create or update a client, returning it with its server id."""
        ...

    @abstractmethod
    def delete_client(self, client_id: int) -> bool:
        """Delete a client. True when the server reports success."""
        ...

    @abstractmethod
    def get_categories(self) -> list[Category]:
        """List categories in ascending id order."""
        ...

    @abstractmethod
    def get_category(self, category_id: int) -> Category:
        """Fetch a single category."""
        ...

    @abstractmethod
    def save_category(self, category: Category) -> Category:
        """Create or update a category, returning it with its server id."""
        ...

    @abstractmethod
    def delete_category(self, category_id: int) -> bool:
        """Delete a category. True when the server reports success."""
        ...

    @abstractmethod
    def save_account(self, account: Account) -> Account:
        """Create or update an account, returning it with its server id."""
        ...

    @abstractmethod
    def change_password(self, change: ChangePassword) -> Account:
        """Replace the password of an account."""
        ...

    @abstractmethod
    def delete_account(self, account_id: int) -> bool:
        """Delete an account. True when the server reports success."""
        ...
