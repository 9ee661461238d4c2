"""Tests for the exception hierarchy and gRPC error mapping."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import grpc
import pytest

from contextrights.exceptions import (
    ConfigurationError,
    ForbiddenAccess,
    ResetNotFoundError,
    RightsError,
    TypeMismatchError,
    UnknownCapabilityError,
    error_registry,
    get_grpc_status_code,
    grpc_error_handler,
    register_error,
)


class TestHierarchy:
    """Error codes and base classes."""

    def test_codes(self) -> None:
        assert TypeMismatchError().code == "TYPE_MISMATCH"
        assert ForbiddenAccess().code == "FORBIDDEN"
        assert ResetNotFoundError().code == "NOT_FOUND"
        assert UnknownCapabilityError().code == "UNKNOWN_MEMBER"
        assert ConfigurationError().code == "CONFIGURATION_ERROR"

    def test_builtin_bases(self) -> None:
        """Errors stay catchable by the matching builtin kind."""
        assert issubclass(TypeMismatchError, TypeError)
        assert issubclass(UnknownCapabilityError, AttributeError)
        assert issubclass(ResetNotFoundError, LookupError)
        assert not issubclass(ForbiddenAccess, (TypeError, AttributeError, LookupError))

    def test_forbidden_default_message(self) -> None:
        assert str(ForbiddenAccess()) == "Access Denied"
        assert ForbiddenAccess("Nope").message == "Nope"

    def test_details(self) -> None:
        err = TypeMismatchError("PostPermission expected, got list", expected="PostPermission", actual="list")
        assert err.details == {"expected": "PostPermission", "actual": "list"}
        assert str(err) == "PostPermission expected, got list"


class TestErrorRegistry:
    def test_base_errors_registered(self) -> None:
        assert error_registry.get("FORBIDDEN") is ForbiddenAccess
        assert error_registry.get("TYPE_MISMATCH") is TypeMismatchError
        assert error_registry.get("NOT_FOUND") is ResetNotFoundError
        assert error_registry.get("UNKNOWN_MEMBER") is UnknownCapabilityError
        assert error_registry.get("MISSING") is None

    def test_register_custom_error(self) -> None:
        @register_error("QUOTA_EXCEEDED")
        class QuotaExceeded(RightsError):
            code = "QUOTA_EXCEEDED"

        assert error_registry.get("QUOTA_EXCEEDED") is QuotaExceeded
        assert "QUOTA_EXCEEDED" in error_registry.all()


class TestGrpcStatusMapping:
    def test_forbidden_is_permission_denied(self) -> None:
        assert get_grpc_status_code(ForbiddenAccess()) == grpc.StatusCode.PERMISSION_DENIED

    def test_mapping(self) -> None:
        assert get_grpc_status_code(TypeMismatchError()) == grpc.StatusCode.INVALID_ARGUMENT
        assert get_grpc_status_code(UnknownCapabilityError()) == grpc.StatusCode.INVALID_ARGUMENT
        assert get_grpc_status_code(ResetNotFoundError()) == grpc.StatusCode.NOT_FOUND
        assert get_grpc_status_code(ConfigurationError()) == grpc.StatusCode.FAILED_PRECONDITION
        assert get_grpc_status_code(RightsError()) == grpc.StatusCode.INTERNAL


def _grpc_context() -> MagicMock:
    context = MagicMock()
    context.abort = AsyncMock()
    return context


class TestGrpcErrorHandler:
    @pytest.mark.asyncio
    async def test_passes_result_through(self) -> None:
        class Servicer:
            @grpc_error_handler
            async def Get(self, request, context):
                return "ok"

        context = _grpc_context()
        assert await Servicer().Get(None, context) == "ok"
        context.abort.assert_not_called()

    @pytest.mark.asyncio
    async def test_forbidden_aborts_permission_denied(self) -> None:
        class Servicer:
            @grpc_error_handler
            async def Delete(self, request, context):
                raise ForbiddenAccess("Cannot delete posts")

        context = _grpc_context()
        result = await Servicer().Delete(None, context)

        assert result is None
        context.set_trailing_metadata.assert_called_once_with([("error-code", "FORBIDDEN")])
        context.abort.assert_awaited_once_with(
            grpc.StatusCode.PERMISSION_DENIED,
            "[FORBIDDEN] Cannot delete posts",
        )

    @pytest.mark.asyncio
    async def test_unexpected_error_is_internal(self) -> None:
        class Servicer:
            @grpc_error_handler
            async def Delete(self, request, context):
                raise RuntimeError("boom")

        context = _grpc_context()
        await Servicer().Delete(None, context)

        status, message = context.abort.await_args.args
        assert status == grpc.StatusCode.INTERNAL
        assert "boom" in message
