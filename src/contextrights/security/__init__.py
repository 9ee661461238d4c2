"""Authorization gate for contextrights.

This package provides the request-time half of the model:
1. **AuthorizationContext** — named CapabilitySets granted for one request
2. **authorization_scope / current_authorization** — per-request binding
3. **GuardedService / verify_access / guarded** — before-action guards that
   raise ForbiddenAccess ahead of the guarded action

Usage (gRPC servicer)::

    from contextrights.exceptions import grpc_error_handler
    from contextrights.security import GuardedService, authorization_scope, guarded

    class PostServicer(GuardedService):
        @grpc_error_handler
        @guarded
        async def Delete(self, request, context):
            ...

    PostServicer.verify_access(can={"post": "delete"}, deny="Cannot delete posts", only="Delete")

    with authorization_scope({"post": author.post_permission}):
        await servicer.Delete(request, context)
"""

from __future__ import annotations

from .gate import (
    AuthorizationContext,
    authorization_scope,
    current_authorization,
)
from .guard import (
    BeforeFilter,
    GuardedService,
    guarded,
)

__all__ = [
    "AuthorizationContext",
    "BeforeFilter",
    "GuardedService",
    "authorization_scope",
    "current_authorization",
    "guarded",
]
