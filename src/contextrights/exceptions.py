"""Unified exception hierarchy for contextrights.

All errors raised by the package inherit from RightsError. This module provides:
- Base exception hierarchy with stable error codes
- ErrorRegistry for protocol mapping
- gRPC error handler decorator for servicers that host guarded actions

Type and authorization boundaries raise. Unknown capability names and
unrecognised flag values degrade to no-ops and never reach this module.

Usage in services:
    from contextrights.exceptions import ForbiddenAccess, grpc_error_handler

    class PostServicer(GuardedService):
        @grpc_error_handler
        @guarded
        async def Delete(self, request, context):
            ...
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, TypeVar, cast

__all__ = [
    # Base hierarchy
    "RightsError",
    "ConfigurationError",
    "TypeMismatchError",
    "ForbiddenAccess",
    "ResetNotFoundError",
    "UnknownCapabilityError",
    # Registry
    "ErrorRegistry",
    "error_registry",
    "register_error",
    # gRPC helpers
    "get_grpc_status_code",
    "grpc_error_handler",
]

logger = logging.getLogger(__name__)


# ---- Exception Hierarchy ----------------------------------------------------


class RightsError(Exception):
    """Base exception for contextrights.

    Attributes:
        code: Stable error code string for protocol mapping (e.g. "FORBIDDEN").
        message: Human-readable error description.
        details: Additional context as keyword arguments.
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"

    def __init__(self, message: str | None = None, code: str | None = None, **kwargs: Any) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = kwargs
        super().__init__(self.message)


class ConfigurationError(RightsError):
    """Invalid or missing configuration."""

    code: str = "CONFIGURATION_ERROR"


class TypeMismatchError(RightsError, TypeError):
    """A family setter was handed an object of the wrong capability family.

    ``details`` carries ``expected`` and ``actual`` type names.
    """

    code: str = "TYPE_MISMATCH"
    message: str = "Capability set type mismatch"


class ForbiddenAccess(RightsError):
    """Guard denial. Raised before the guarded action runs."""

    code: str = "FORBIDDEN"
    message: str = "Access Denied"


class ResetNotFoundError(RightsError, LookupError):
    """No declared family matches the resource handed to reset_defaults_for."""

    code: str = "NOT_FOUND"
    message: str = "Reset operation not found"


class UnknownCapabilityError(RightsError, AttributeError):
    """Attribute-style lookup of a name outside a family's vocabulary."""

    code: str = "UNKNOWN_MEMBER"
    message: str = "Unknown capability"


# ---- Error Registry for Protocol Mapping ------------------------------------

_E = TypeVar("_E", bound=type[RightsError])


class ErrorRegistry:
    """Registry for mapping internal errors to external protocol codes."""

    def __init__(self) -> None:
        self._errors: dict[str, type[RightsError]] = {}

    def register(self, code: str, error_cls: type[RightsError]) -> None:
        self._errors[code] = error_cls

    def get(self, code: str) -> type[RightsError] | None:
        return self._errors.get(code)

    def all(self) -> dict[str, type[RightsError]]:
        return dict(self._errors)


error_registry = ErrorRegistry()


def register_error(code: str) -> Callable[[_E], _E]:
    """Decorator to register a custom error type.

    Usage:
        @register_error("QUOTA_EXCEEDED")
        class QuotaExceeded(RightsError):
            code = "QUOTA_EXCEEDED"
    """

    def decorator(cls: _E) -> _E:
        error_registry.register(code, cls)
        return cls

    return cast(Callable[[_E], _E], decorator)


# Register base errors
error_registry.register("INTERNAL_ERROR", RightsError)
error_registry.register("CONFIGURATION_ERROR", ConfigurationError)
error_registry.register("TYPE_MISMATCH", TypeMismatchError)
error_registry.register("FORBIDDEN", ForbiddenAccess)
error_registry.register("NOT_FOUND", ResetNotFoundError)
error_registry.register("UNKNOWN_MEMBER", UnknownCapabilityError)


# ---- gRPC Error Handling Utilities ------------------------------------------


def get_grpc_status_code(error: RightsError) -> Any:
    """Map RightsError to gRPC status code.

    Returns grpc.StatusCode value for the given error type.
    Import grpc locally to avoid hard dependency at module level.
    """
    import grpc

    error_to_status = {
        "FORBIDDEN": grpc.StatusCode.PERMISSION_DENIED,
        "TYPE_MISMATCH": grpc.StatusCode.INVALID_ARGUMENT,
        "UNKNOWN_MEMBER": grpc.StatusCode.INVALID_ARGUMENT,
        "NOT_FOUND": grpc.StatusCode.NOT_FOUND,
        "CONFIGURATION_ERROR": grpc.StatusCode.FAILED_PRECONDITION,
    }
    return error_to_status.get(error.code, grpc.StatusCode.INTERNAL)


def grpc_error_handler(method):
    """Decorator for unary gRPC service methods with proper error handling.

    Catches RightsError and sets appropriate gRPC status codes, so a
    ForbiddenAccess raised by a guard reaches the client as PERMISSION_DENIED.

    Usage:
        @grpc_error_handler
        @guarded
        async def MyMethod(self, request, context):
            ...
    """

    @functools.wraps(method)
    async def wrapper(self, request, context):
        try:
            return await method(self, request, context)
        except RightsError as e:
            status_code = get_grpc_status_code(e)
            error_message = f"[{e.code}] {e.message}"

            logger.error(
                "%s failed: %s",
                method.__name__,
                error_message,
                extra={
                    "error_code": e.code,
                    "error_details": e.details,
                },
            )

            context.set_trailing_metadata([("error-code", e.code)])
            await context.abort(status_code, error_message)
            return

        except Exception as e:
            import grpc

            logger.exception("%s unexpected error: %s", method.__name__, e)
            await context.abort(
                grpc.StatusCode.INTERNAL,
                f"Unexpected {type(e)}: {e}",
            )
            return

    return wrapper
