"""
sysPass 3 API adapter.

Methods are named <resource>/<verb>. Saving uses the entity id to choose
between create and edit: a missing id or 0 creates, anything else edits.

API reference: https://syspass-doc.readthedocs.io/en/3.1/application/api.html
"""

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from syspass_cli.api.base import ApiClient, SearchArguments
from syspass_cli.errors import ApplicationError, ErrorCode, invalid_response, missing_id
from syspass_cli.schemas import (
    Account,
    Category,
    ChangePassword,
    Client,
    Entity,
    JsonRpcError,
    ViewPassword,
)
from syspass_cli.transport import RequestArguments, decode

logger = logging.getLogger(__name__)

CREATE = "create"
EDIT = "edit"


class ApiResult(BaseModel):
    """The result member of a successful response."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    count: int | None = None
    item_id: int | None = None
    result: Any = None
    result_code: int
    result_message: str | None = None


class ApiResponse(BaseModel):
    """Response envelope."""

    id: int | None = None
    jsonrpc: str | None = None
    result: ApiResult | None = None
    error: JsonRpcError | None = None


class PasswordResult(BaseModel):
    """Payload of account/viewPass."""

    password: str


class SyspassV3(ApiClient):
    """Client for the current sysPass JSON-RPC API."""

    version = "SyspassV3"

    def forge_and_send(
        self,
        method: str,
        args: RequestArguments | None = None,
        needs_password: bool = False,
    ) -> ApiResult:
        """
        Send a request and unwrap the response envelope.

        Raises:
            TransportError: If the exchange or decoding failed
            ApplicationError: If the server returned an error object
        """
        response = decode(ApiResponse, self.call(method, args, needs_password), method)

        if response.error is not None:
            raise ApplicationError(
                message=response.error.message,
                code=ErrorCode.APPLICATION_ERROR,
                rpc_code=response.error.code,
                method=method,
            )
        if response.result is None:
            raise invalid_response("neither result nor error present", method)

        return response.result

    def save(self, resource: str, entity: Entity, args: list[tuple[str, str]]) -> Any:
        """
        Create or edit an entity.

        Args:
            resource: API resource name (account, client, category)
            entity: Entity being saved; its id picks create or edit
            args: Entity fields as request parameters

        Returns:
            The saved entity as returned by the server, with its id set
        """
        verb = CREATE if entity.is_new else EDIT
        method = f"{resource}/{verb}"

        if verb == EDIT:
            args = [*args, ("id", str(entity.id))]

        result = self.forge_and_send(method, args, needs_password=True)

        if result.item_id is None:
            raise missing_id(resource)

        saved = entity if result.result is None else decode(type(entity), result.result, method)
        return saved.with_id(result.item_id)

    def delete(self, resource: str, entity_id: int) -> bool:
        """Delete an entity. True when the server result code is 0."""
        result = self.forge_and_send(f"{resource}/delete", [("id", str(entity_id))])
        return result.result_code == 0

    def view(self, resource: str, schema: type[Entity], entity_id: int) -> Any:
        """Fetch one entity by id. A payload without id gets the requested one."""
        method = f"{resource}/view"
        result = self.forge_and_send(method, [("id", str(entity_id))], needs_password=True)
        entity = decode(schema, result.result, method)

        if entity.id:
            return entity
        if not entity_id:
            raise missing_id(resource)
        return entity.with_id(entity_id)

    def search_account(self, search: SearchArguments, usage: bool) -> list[Account]:
        method = "account/search"
        result = self.forge_and_send(method, search)
        accounts: list[Account] = decode(list[Account], result.result or [], method)
        accounts = [account.model_copy(update={"pass_": None}) for account in accounts]
        return self.rank(accounts, usage)

    def view_account(self, account_id: int) -> Account:
        return self.view("account", Account, account_id)

    def get_password(self, account: Account) -> ViewPassword:
        if not account.id:
            raise missing_id("account")

        method = "account/viewPass"
        result = self.forge_and_send(method, [("id", str(account.id))], needs_password=True)
        payload = decode(PasswordResult, result.result, method)

        return ViewPassword(account=account, password=payload.password)

    def get_clients(self) -> list[Client]:
        method = "client/search"
        result = self.forge_and_send(method)
        clients: list[Client] = decode(list[Client], result.result or [], method)
        return sorted(clients, key=lambda client: client.id or 0)

    def get_client(self, client_id: int) -> Client:
        return self.view("client", Client, client_id)

    def save_client(self, client: Client) -> Client:
        return self.save(
            "client",
            client,
            [
                ("name", client.name),
                ("description", client.description or ""),
                ("global", str(client.is_global)),
            ],
        )

    def delete_client(self, client_id: int) -> bool:
        return self.delete("client", client_id)

    def get_categories(self) -> list[Category]:
        method = "category/search"
        result = self.forge_and_send(method)
        categories: list[Category] = decode(list[Category], result.result or [], method)
        return sorted(categories, key=lambda category: category.id or 0)

    def get_category(self, category_id: int) -> Category:
        return self.view("category", Category, category_id)

    def save_category(self, category: Category) -> Category:
        return self.save(
            "category",
            category,
            [
                ("name", category.name),
                ("description", category.description or ""),
            ],
        )

    def delete_category(self, category_id: int) -> bool:
        return self.delete("category", category_id)

    def save_account(self, account: Account) -> Account:
        return self.save(
            "account",
            account,
            [
                ("name", account.name),
                ("categoryId", str(account.category_id)),
                ("clientId", str(account.client_id)),
                ("pass", account.pass_ or ""),
                ("login", account.login),
                ("url", account.url or ""),
                ("notes", account.notes or ""),
            ],
        )

    def change_password(self, change: ChangePassword) -> Account:
        method = "account/editPass"
        result = self.forge_and_send(
            method,
            [
                ("expireDate", str(change.expire_date)),
                ("pass", change.pass_),
                ("id", str(change.id)),
            ],
            needs_password=True,
        )
        account = decode(Account, result.result, method)
        return account.with_id(account.id or result.item_id or change.id)

    def delete_account(self, account_id: int) -> bool:
        return self.delete("account", account_id)
