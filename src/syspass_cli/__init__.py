"""
syspass-cli - command-line client for sysPass password vaults.

Talks to both the current (sysPass 3) and the legacy (sysPass 2) JSON-RPC APIs
through one interface:
1. Search accounts and reveal passwords to the clipboard
2. Create accounts, clients and categories
3. Edit passwords, clients and categories
4. Remove entities
"""

__version__ = "0.4.0"
__author__ = "syspass-cli Contributors"

from syspass_cli.schemas import (
    Account,
    Category,
    ChangePassword,
    Client,
    ViewPassword,
)

__all__ = [
    "__version__",
    "Account",
    "Category",
    "ChangePassword",
    "Client",
    "ViewPassword",
]
