"""
Pydantic schemas for syspass-cli data models.

The entity models are shared by both API versions. Field aliases follow the
camelCase names used by the sysPass 3 API; the legacy adapter converts its own
rows into these models explicitly.
"""

import shutil
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

JSONRPC_VERSION = "2.0"

# Rows shorter than this are never truncated
MIN_DISPLAY_WIDTH = 40


def truncate(text: str, max_chars: int) -> str:
    """
    Cut text to max_chars characters, appending an ellipsis when cut.

    Args:
        text: Text to shorten
        max_chars: Maximum characters kept (never less than MIN_DISPLAY_WIDTH)

    Returns:
        The original or the shortened text
    """
    max_chars = max(max_chars, MIN_DISPLAY_WIDTH)
    if len(text) <= max_chars:
        return text
    return f"{text[:max_chars]}..."


def terminal_width() -> int:
    """Current terminal width in columns."""
    return shutil.get_terminal_size((80, 24)).columns


class Entity(BaseModel):
    """Base for objects carrying a server-assigned identifier."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int | None = Field(default=None, ge=0, description="Server id; None or 0 before creation")

    @property
    def is_new(self) -> bool:
        """Whether saving this entity should create it."""
        return not self.id

    def with_id(self, new_id: int) -> "Entity":
        """Return a copy carrying the server-assigned identifier."""
        return self.model_copy(update={"id": new_id})


class Account(Entity):
    """A vault account."""

    name: str = ""
    login: str = ""
    url: str | None = None
    notes: str | None = None
    category_id: int = 0
    client_id: int = 0
    pass_: str | None = Field(default=None, alias="pass", description="Plain password, view/create only")
    client_name: str | None = None
    category_name: str | None = None

    def __str__(self) -> str:
        url = (self.url or "").replace("ssh://", "")
        row = f"{self.id or 0}. {self.name} - {url} ({self.client_name or ''})"
        row = " ".join(part for part in row.strip().split(" ") if part)
        return truncate(row, terminal_width() - 5)


class Category(Entity):
    """An account category."""

    name: str = ""
    description: str | None = None

    def __str__(self) -> str:
        return f"{self.id}. {self.name}"


class Client(Entity):
    """A client, called customer by the legacy API."""

    name: str = ""
    description: str | None = None
    is_global: int = 0

    def __str__(self) -> str:
        suffix = " (*)" if self.is_global > 0 else ""
        return f"{self.id}. {self.name}{suffix}"


class ViewPassword(BaseModel):
    """An account paired with its decrypted password."""

    account: Account
    password: str


class ChangePassword(BaseModel):
    """Request to replace the password of an account."""

    id: int
    pass_: str = Field(..., alias="pass")
    expire_date: int = Field(default=0, description="Expiration as epoch seconds")

    model_config = ConfigDict(populate_by_name=True)


class JsonRpcRequest(BaseModel):
    """Outgoing JSON-RPC 2.0 request."""

    jsonrpc: str = JSONRPC_VERSION
    method: str
    params: dict[str, str] = Field(default_factory=dict)
    id: int


class JsonRpcError(BaseModel):
    """Error object of a JSON-RPC response."""

    code: int = 0
    message: str
    data: Any = None
