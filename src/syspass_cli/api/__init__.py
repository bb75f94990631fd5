"""
sysPass API clients.

The API version is chosen once from configuration and stays fixed for the
lifetime of the process.
"""

from enum import Enum

from syspass_cli.api.base import ApiClient
from syspass_cli.api.v2 import SyspassV2
from syspass_cli.api.v3 import SyspassV3
from syspass_cli.config import SyspassConfig
from syspass_cli.errors import unknown_api
from syspass_cli.transport import JsonRpcTransport
from syspass_cli.usage import UsageStore


class ApiVersion(str, Enum):
    """Supported sysPass API versions."""

    SYSPASS_V3 = "SyspassV3"
    SYSPASS_V2 = "SyspassV2"

    @classmethod
    def from_config(cls, value: str | None) -> "ApiVersion":
        """
        Resolve the apiVersion setting.

        An empty or missing value selects the current API.

        Raises:
            ConfigError: If the value names no supported version
        """
        if not value:
            return cls.SYSPASS_V3
        try:
            return cls(value)
        except ValueError as e:
            raise unknown_api(value) from e

    def create(
        self,
        config: SyspassConfig,
        transport: JsonRpcTransport | None = None,
        usage_store: UsageStore | None = None,
    ) -> ApiClient:
        """Build the client implementing this version."""
        if self is ApiVersion.SYSPASS_V2:
            return SyspassV2(config, transport, usage_store)
        return SyspassV3(config, transport, usage_store)


def create_client(
    config: SyspassConfig,
    transport: JsonRpcTransport | None = None,
    usage_store: UsageStore | None = None,
) -> ApiClient:
    """Build the API client selected by config.api_version."""
    return ApiVersion.from_config(config.api_version).create(config, transport, usage_store)


__all__ = [
    "ApiClient",
    "ApiVersion",
    "SyspassV2",
    "SyspassV3",
    "create_client",
]
