"""
sysPass 2 API adapter.

The legacy API has its own method names, returns snake_case rows with string
identifiers and only supports creating entities. Operations it lacks are
rejected locally, before any request is sent.

The server answers in one of two unrelated shapes: a bare code response
({result: {itemId, resultCode}} or {error}) or an entity response
({result: <anything>}). Bodies are decoded by trying the code shape first and
the entity shape second. This mirrors an inconsistency of the server and is
not a pattern to reuse elsewhere.

API reference: https://syspass-doc.readthedocs.io/en/2.1/application/api.html
"""

import logging
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from syspass_cli.api.base import ApiClient, SearchArguments
from syspass_cli.errors import (
    ApplicationError,
    ErrorCode,
    invalid_response,
    missing_id,
    not_supported,
)
from syspass_cli.schemas import (
    Account,
    Category,
    ChangePassword,
    Client,
    JsonRpcError,
    ViewPassword,
)
from syspass_cli.transport import RequestArguments, decode

logger = logging.getLogger(__name__)


def parse_id(value: str, field_name: str, method: str | None = None) -> int:
    """
    Parse a legacy string identifier.

    Raises:
        TransportError: If the value is not a non-negative integer
    """
    if not (value.isascii() and value.isdigit()):
        raise invalid_response(f"{field_name} is not numeric: {value!r}", method)
    return int(value)


def numeric_entries(result: Any, method: str | None = None) -> list[Any]:
    """
    Extract the rows of a legacy list response.

    List responses are objects keyed by the row id, mixed with metadata keys
    such as "description". Only keys that are integers are kept.
    """
    if isinstance(result, list):
        return result
    if not isinstance(result, dict):
        raise invalid_response("expected an object keyed by id", method)
    return [value for key, value in result.items() if key.isascii() and key.isdigit()]


class CodeResult(BaseModel):
    """Result member of a code response."""

    model_config = ConfigDict(populate_by_name=True)

    item_id: str | None = Field(default=None, alias="itemId")
    result_code: int = Field(..., alias="resultCode")


class CodeResponse(BaseModel):
    """Response carrying only a result code, or only an error."""

    result: CodeResult | None = None
    error: JsonRpcError | None = None


class EntityResponse(BaseModel):
    """Response carrying arbitrary entity data."""

    id: int | None = None
    jsonrpc: str
    result: Any = None
    error: JsonRpcError | None = None


LegacyResponse = Union[CodeResponse, EntityResponse]


def decode_response(data: dict[str, Any], method: str) -> LegacyResponse:
    """Decode a body as a code response, falling back to an entity response."""
    try:
        return CodeResponse.model_validate(data)
    except ValidationError:
        logger.debug(f"{method}: not a code response, trying entity response")
    return decode(EntityResponse, data, method)


class LegacyCustomer(BaseModel):
    """Customer row."""

    customer_id: str
    customer_name: str
    customer_description: str = ""

    def to_entity(self, method: str | None = None) -> Client:
        return Client(
            id=parse_id(self.customer_id, "customer_id", method),
            name=self.customer_name,
            description=self.customer_description,
            is_global=0,
        )


class LegacyCategory(BaseModel):
    """Category row."""

    category_id: str
    category_name: str
    category_description: str = ""

    def to_entity(self, method: str | None = None) -> Category:
        return Category(
            id=parse_id(self.category_id, "category_id", method),
            name=self.category_name,
            description=self.category_description,
        )


class LegacyAccount(BaseModel):
    """Account row of getAccountSearch and getAccountData."""

    model_config = ConfigDict(populate_by_name=True)

    account_id: str
    account_name: str
    account_login: str = ""
    account_url: str = ""
    account_notes: str = ""
    account_category_id: str = Field(default="0", alias="account_categoryId")
    account_customer_id: str = Field(default="0", alias="account_customerId")
    customer_name: str | None = None
    category_name: str | None = None

    def to_entity(self, method: str | None = None) -> Account:
        return Account(
            id=parse_id(self.account_id, "account_id", method),
            name=self.account_name,
            login=self.account_login,
            url=self.account_url,
            notes=self.account_notes,
            category_id=parse_id(self.account_category_id, "account_categoryId", method),
            client_id=parse_id(self.account_customer_id, "account_customerId", method),
            client_name=self.customer_name,
            category_name=self.category_name,
        )


class SyspassV2(ApiClient):
    """Client for the legacy sysPass 2 JSON-RPC API."""

    version = "SyspassV2"

    def forge_and_send(
        self,
        method: str,
        args: RequestArguments | None = None,
        needs_password: bool = False,
    ) -> LegacyResponse:
        """
        Send a request and decode whichever response shape came back.

        Raises:
            TransportError: If the exchange or decoding failed
            ApplicationError: If the server returned an error object
        """
        response = decode_response(self.call(method, args, needs_password), method)

        if response.error is not None:
            raise ApplicationError(
                message=response.error.message,
                code=ErrorCode.APPLICATION_ERROR,
                rpc_code=response.error.code,
                method=method,
            )

        return response

    def entity_result(
        self,
        method: str,
        args: RequestArguments | None = None,
        needs_password: bool = False,
    ) -> Any:
        """Send a request that must be answered with entity data."""
        response = self.forge_and_send(method, args, needs_password)
        if not isinstance(response, EntityResponse):
            raise invalid_response(f"expected entity data, got {response!r}", method)
        return response.result

    def save(self, method: str, entity_id: int | None, args: list[tuple[str, str]]) -> int:
        """
        Create an entity and return its new id.

        Raises:
            UnsupportedOperationError: If the entity already exists (id > 0)
            InvariantViolation: If the server did not return an id
        """
        if entity_id and entity_id > 0:
            raise not_supported(method)

        response = self.forge_and_send(method, args, needs_password=True)

        if isinstance(response, CodeResponse):
            if response.result is None:
                raise invalid_response("no result in response", method)
            if response.result.item_id is None:
                raise missing_id(method)
            return parse_id(response.result.item_id, "itemId", method)

        item_id = response.result.get("itemId") if isinstance(response.result, dict) else None
        if item_id is None:
            raise missing_id(method)
        if isinstance(item_id, int) and not isinstance(item_id, bool):
            return item_id
        return parse_id(str(item_id), "itemId", method)

    def delete(self, method: str, entity_id: int) -> bool:
        """Delete an entity. True when the server result code is 0."""
        response = self.forge_and_send(method, [("id", str(entity_id))])

        if not isinstance(response, CodeResponse) or response.result is None:
            raise invalid_response(f"expected a result code, got {response!r}", method)

        return response.result.result_code == 0

    def search_account(self, search: SearchArguments, usage: bool) -> list[Account]:
        method = "getAccountSearch"
        result = self.entity_result(method, search)
        rows: list[LegacyAccount] = decode(
            list[LegacyAccount], numeric_entries(result or [], method), method
        )
        return self.rank([row.to_entity(method) for row in rows], usage)

    def view_account(self, account_id: int) -> Account:
        method = "getAccountData"
        result = self.entity_result(method, [("id", str(account_id))], needs_password=True)
        return decode(LegacyAccount, result, method).to_entity(method)

    def get_password(self, account: Account) -> ViewPassword:
        if not account.id:
            raise missing_id("account")

        method = "getAccountPassword"
        result = self.entity_result(method, [("id", str(account.id))], needs_password=True)

        password = result.get("pass") if isinstance(result, dict) else None
        if not isinstance(password, str):
            raise invalid_response("no password in response", method)

        return ViewPassword(account=account, password=password)

    def get_clients(self) -> list[Client]:
        method = "getCustomers"
        response = self.forge_and_send(method)
        if not isinstance(response, EntityResponse):
            return []

        rows: list[LegacyCustomer] = decode(
            list[LegacyCustomer], numeric_entries(response.result, method), method
        )
        clients = [row.to_entity(method) for row in rows]
        return sorted(clients, key=lambda client: client.id or 0)

    def get_client(self, client_id: int) -> Client:
        raise not_supported("get_client")

    def save_client(self, client: Client) -> Client:
        new_id = self.save(
            "addCustomer",
            client.id,
            [
                ("name", client.name),
                ("description", client.description or ""),
            ],
        )
        return Client(id=new_id, name=client.name, description=client.description, is_global=0)

    def delete_client(self, client_id: int) -> bool:
        return self.delete("deleteCustomer", client_id)

    def get_categories(self) -> list[Category]:
        method = "getCategories"
        response = self.forge_and_send(method)
        if not isinstance(response, EntityResponse):
            return []

        rows: list[LegacyCategory] = decode(
            list[LegacyCategory], numeric_entries(response.result, method), method
        )
        categories = [row.to_entity(method) for row in rows]
        return sorted(categories, key=lambda category: category.id or 0)

    def get_category(self, category_id: int) -> Category:
        raise not_supported("get_category")

    def save_category(self, category: Category) -> Category:
        new_id = self.save(
            "addCategory",
            category.id,
            [
                ("name", category.name),
                ("description", category.description or ""),
            ],
        )
        return Category(id=new_id, name=category.name, description=category.description)

    def delete_category(self, category_id: int) -> bool:
        return self.delete("deleteCategory", category_id)

    def save_account(self, account: Account) -> Account:
        new_id = self.save(
            "addAccount",
            account.id,
            [
                ("name", account.name),
                ("categoryId", str(account.category_id)),
                ("customerId", str(account.client_id)),
                ("pass", account.pass_ or ""),
                ("login", account.login),
                ("url", account.url or ""),
                ("notes", account.notes or ""),
            ],
        )
        return self.view_account(new_id)

    def change_password(self, change: ChangePassword) -> Account:
        raise not_supported("change_password")

    def delete_account(self, account_id: int) -> bool:
        return self.delete("deleteAccount", account_id)
