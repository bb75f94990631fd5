"""
Exception hierarchy for syspass-cli.

Both API versions raise the same error classes, so callers never need to know
which backend produced a failure. The message is the caller-facing surface;
the class and code exist for logging and tests.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for categorizing failures."""

    # Transport errors
    TRANSPORT_NETWORK = "transport_network"
    TRANSPORT_HTTP_STATUS = "transport_http_status"
    TRANSPORT_INVALID_JSON = "transport_invalid_json"
    TRANSPORT_INVALID_RESPONSE = "transport_invalid_response"

    # Errors reported by the server inside a JSON-RPC envelope
    APPLICATION_ERROR = "application_error"

    # Local rejections
    UNSUPPORTED_OPERATION = "unsupported_operation"

    # Internal consistency failures
    INVARIANT_VIOLATION = "invariant_violation"

    # Configuration errors
    CONFIG_INVALID = "config_invalid"
    CONFIG_FILE_NOT_FOUND = "config_file_not_found"
    CONFIG_UNKNOWN_API = "config_unknown_api"

    # General errors
    UNKNOWN = "unknown"


@dataclass
class SyspassError(Exception):
    """
    Base exception for all syspass-cli errors.

    Attributes:
        message: Human-readable error message
        code: Error code for programmatic handling
        context: Additional context for debugging
        suggestion: Suggested action to resolve the error
    """

    message: str
    code: ErrorCode = ErrorCode.UNKNOWN
    context: dict[str, Any] = field(default_factory=dict)
    suggestion: str | None = None

    def __str__(self) -> str:
        parts = [f"[{self.code.value}] {self.message}"]
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code.value!r}"
            f")"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "code": self.code.value,
            "context": self.context,
            "suggestion": self.suggestion,
        }


@dataclass
class TransportError(SyspassError):
    """The HTTP exchange failed or its body could not be decoded."""

    status_code: int | None = None
    method: str | None = None

    def __post_init__(self) -> None:
        if self.status_code:
            self.context["status_code"] = self.status_code
        if self.method:
            self.context["method"] = self.method


@dataclass
class ApplicationError(SyspassError):
    """The server answered with a well-formed JSON-RPC error object."""

    rpc_code: int | None = None
    method: str | None = None

    def __post_init__(self) -> None:
        if self.rpc_code is not None:
            self.context["rpc_code"] = self.rpc_code
        if self.method:
            self.context["method"] = self.method


@dataclass
class UnsupportedOperationError(SyspassError):
    """The selected API version cannot perform the operation."""

    operation: str | None = None

    def __post_init__(self) -> None:
        if self.operation:
            self.context["operation"] = self.operation


@dataclass
class InvariantViolation(SyspassError):
    """An internal consistency check failed. Treated as a bug, never recovered."""


@dataclass
class ConfigError(SyspassError):
    """Configuration error."""

    config_path: str | None = None
    key: str | None = None

    def __post_init__(self) -> None:
        if self.config_path:
            self.context["config_path"] = self.config_path
        if self.key:
            self.context["key"] = self.key


NOT_SUPPORTED = "SyspassV2 does not support this"


# Factory functions for common errors
def server_responded(status_code: int, method: str | None = None) -> TransportError:
    """Create error for a non-success HTTP status."""
    return TransportError(
        message=f"Server responded with code {status_code}",
        code=ErrorCode.TRANSPORT_HTTP_STATUS,
        status_code=status_code,
        method=method,
    )


def invalid_json(reason: str, method: str | None = None) -> TransportError:
    """Create error for a body that is not JSON."""
    return TransportError(
        message=f"Server response did not contain JSON: {reason}",
        code=ErrorCode.TRANSPORT_INVALID_JSON,
        method=method,
    )


def invalid_response(reason: str, method: str | None = None) -> TransportError:
    """Create error for JSON that does not match the expected shape."""
    return TransportError(
        message=f"Invalid response: {reason}",
        code=ErrorCode.TRANSPORT_INVALID_RESPONSE,
        method=method,
    )


def not_supported(operation: str) -> UnsupportedOperationError:
    """Create error for an operation the legacy API cannot perform."""
    return UnsupportedOperationError(
        message=NOT_SUPPORTED,
        code=ErrorCode.UNSUPPORTED_OPERATION,
        operation=operation,
        suggestion="Upgrade the server to sysPass 3 and set apiVersion to SyspassV3.",
    )


def missing_id(entity: str) -> InvariantViolation:
    """Create error for an entity that came back from a save without identifier."""
    return InvariantViolation(
        message=f"{entity} id should be set after saving",
        code=ErrorCode.INVARIANT_VIOLATION,
        context={"entity": entity},
    )


def unknown_api(version: str) -> ConfigError:
    """Create error for an unrecognised apiVersion value."""
    return ConfigError(
        message=f"No such API is supported ({version})",
        code=ErrorCode.CONFIG_UNKNOWN_API,
        key="apiVersion",
        suggestion="Use SyspassV3 or SyspassV2.",
    )


def invalid_config(path: str, reason: str) -> ConfigError:
    """Create error for invalid configuration."""
    return ConfigError(
        message=f"Invalid configuration: {reason}",
        code=ErrorCode.CONFIG_INVALID,
        config_path=path,
        suggestion="Check the configuration file format and values.",
    )
