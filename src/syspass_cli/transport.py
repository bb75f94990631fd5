"""
JSON-RPC transport.

Builds the request envelope, injects credentials, performs a single HTTP POST
and classifies the outcome. Every call is one attempt: failures are raised to
the caller immediately and never retried.
"""

import json
import logging
from typing import Any, Sequence

import httpx
from pydantic import TypeAdapter, ValidationError

from syspass_cli.config import SyspassConfig
from syspass_cli.credentials import VaultSecret
from syspass_cli.errors import (
    ErrorCode,
    TransportError,
    invalid_json,
    invalid_response,
    server_responded,
)
from syspass_cli.schemas import JsonRpcRequest

logger = logging.getLogger(__name__)

# Extra request parameters as (name, value) pairs
RequestArguments = Sequence[tuple[str, str]]

MASKED_PARAMS = ("authToken", "tokenPass")


def decode(schema: Any, data: Any, method: str | None = None) -> Any:
    """
    Validate decoded JSON against a schema.

    Args:
        schema: Pydantic model or type such as list[Account]
        data: Decoded JSON value
        method: RPC method, for error context

    Returns:
        Validated value

    Raises:
        TransportError: If the data does not match the schema
    """
    try:
        return TypeAdapter(schema).validate_python(data)
    except ValidationError as e:
        raise invalid_response(str(e), method) from e


def masked(request: JsonRpcRequest) -> dict[str, Any]:
    """Request as a dict with credentials hidden, for logging."""
    dumped = request.model_dump()
    for key in MASKED_PARAMS:
        if key in dumped["params"]:
            dumped["params"][key] = "********"
    return dumped


class JsonRpcTransport:
    """
    Synchronous JSON-RPC 2.0 client for one sysPass endpoint.

    Requests are numbered sequentially per transport. The number is only
    used to correlate an exchange on the server side and wraps around.
    """

    FIRST_REQUEST_ID = 1
    MAX_REQUEST_ID = 255

    def __init__(
        self,
        config: SyspassConfig,
        secret: VaultSecret | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        """
        Initialize the transport.

        Args:
            config: Loaded configuration (host, token, TLS verification)
            secret: Vault password cache (defaults to one built from config)
            http_client: Preconfigured httpx client, mainly for tests
        """
        self.config = config
        self.secret = secret or VaultSecret(config.password)
        # No timeout: a stalled server blocks the command
        self.client = http_client or httpx.Client(
            verify=config.verify_host, timeout=None, follow_redirects=True
        )
        self.request_number = self.FIRST_REQUEST_ID

    def __enter__(self) -> "JsonRpcTransport":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Release the underlying HTTP connection pool."""
        self.client.close()

    def build_params(self, args: RequestArguments | None, needs_password: bool) -> dict[str, str]:
        """
        Build the params object of a request.

        Args:
            args: Extra (name, value) pairs; pairs with an empty name or value are dropped
            needs_password: Whether the vault password must be sent

        Returns:
            Parameter mapping including authToken and, when needed, tokenPass
        """
        params = {"authToken": self.config.token}

        if needs_password:
            params["tokenPass"] = self.secret.get()

        for name, value in args or ():
            if name and value:
                params[name] = value

        return params

    def build_request(
        self,
        method: str,
        args: RequestArguments | None = None,
        needs_password: bool = False,
    ) -> JsonRpcRequest:
        """Build the request envelope using the current request number."""
        return JsonRpcRequest(
            method=method,
            params=self.build_params(args, needs_password),
            id=self.request_number,
        )

    def _advance(self) -> None:
        if self.request_number >= self.MAX_REQUEST_ID:
            self.request_number = self.FIRST_REQUEST_ID
        else:
            self.request_number += 1

    def call(
        self,
        method: str,
        args: RequestArguments | None = None,
        needs_password: bool = False,
    ) -> dict[str, Any]:
        """
        Send one JSON-RPC request and return the decoded response object.

        Args:
            method: RPC method name
            args: Extra parameters
            needs_password: Whether the vault password must be sent

        Returns:
            The response body as a dict, not yet interpreted

        Raises:
            TransportError: On network failure, non-2xx status or non-JSON body
        """
        request = self.build_request(method, args, needs_password)
        try:
            return self._send(request)
        finally:
            self._advance()

    def _send(self, request: JsonRpcRequest) -> dict[str, Any]:
        logger.debug(
            f"Sending request to {self.config.host}:\n{json.dumps(masked(request), indent=2)}"
        )

        try:
            response = self.client.post(self.config.host, json=request.model_dump())
        except httpx.HTTPError as e:
            raise TransportError(
                message=str(e) or e.__class__.__name__,
                code=ErrorCode.TRANSPORT_NETWORK,
                method=request.method,
                suggestion="Check the host setting and that the server is reachable.",
            ) from e

        if not response.is_success:
            raise server_responded(response.status_code, request.method)

        try:
            data = response.json()
        except ValueError as e:
            raise invalid_json(str(e), request.method) from e

        logger.debug(f"Received response:\n{json.dumps(data, indent=2)}")

        if not isinstance(data, dict):
            raise invalid_response("expected a JSON object", request.method)

        return data
