"""Guard host — before-action filters and ``verify_access``.

Provides:
- ``BeforeFilter`` — a callback plus its ``only`` / ``except`` action scoping.
- ``GuardedService`` — base for servicers/controllers: filter registry,
  ``verify_access`` and the request's authorization helpers.
- ``guarded`` — decorator running the applicable filters before an action.

A denied guard raises ForbiddenAccess before the action body runs; gRPC
servicers stack ``grpc_error_handler`` on top to answer PERMISSION_DENIED.

Usage::

    class PostServicer(GuardedService):
        @grpc_error_handler
        @guarded
        async def Delete(self, request, context):
            ...

    PostServicer.verify_access(can={"post": "delete"}, deny="Cannot delete posts", only="Delete")
"""

from __future__ import annotations

import functools
import inspect
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Mapping, Optional

from ..config import RightsConfig
from ..exceptions import ForbiddenAccess
from ..logging import safe_preview
from .gate import AuthorizationContext, current_authorization

logger = logging.getLogger(__name__)


def _action_names(value: Any) -> Optional[frozenset[str]]:
    if value is None:
        return None
    if isinstance(value, str):
        return frozenset({value})
    if isinstance(value, Iterable):
        return frozenset(str(v) for v in value)
    return frozenset({str(value)})


# ── Before filters ───────────────────────────────────────────────


@dataclass(frozen=True)
class BeforeFilter:
    """A check run before matching actions.

    Attributes:
        callback: Called with the service instance; raising stops the action.
        only: Action names the filter is limited to (None = every action).
        skip: Action names the filter never runs for (``except`` option).
        options: Every option as given, for hosts that read their own keys.
    """

    callback: Callable[[Any], Any]
    only: Optional[frozenset[str]] = None
    skip: frozenset[str] = frozenset()
    options: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def build(cls, callback: Callable[[Any], Any], options: Mapping[str, Any]) -> BeforeFilter:
        opts = dict(options)
        skip = opts.get("except", opts.get("except_"))
        return cls(
            callback=callback,
            only=_action_names(opts.get("only")),
            skip=_action_names(skip) or frozenset(),
            options=opts,
        )

    def applies_to(self, action: str) -> bool:
        if self.only is not None and action not in self.only:
            return False
        return action not in self.skip


# ── Guarded service ──────────────────────────────────────────────


class GuardedService:
    """Base class for request handlers that guard actions with capability checks.

    Filters are class-level and inherited; registering on a subclass never
    changes its parent. Authorization state is per request and lives in the
    context bound by :func:`authorization_scope`.
    """

    _before_filters: ClassVar[tuple[BeforeFilter, ...]] = ()
    config: ClassVar[Optional[RightsConfig]] = None

    # ── Filter registration ─────────────────────────

    @classmethod
    def before_action(cls, callback: Callable[[Any], Any], **options: Any) -> BeforeFilter:
        """Register ``callback`` to run before actions.

        Scoping options: ``only=`` and ``except_=`` (or ``**{"except": ...}``),
        each an action name or an iterable of names. Other options are kept on
        the filter untouched.
        """
        before = BeforeFilter.build(callback, options)
        cls._before_filters = (*cls._before_filters, before)
        return before

    @classmethod
    def verify_access(cls, can: Any = None, deny: Optional[str] = None, **options: Any) -> BeforeFilter:
        """Deny matching actions unless ``authorized_by(can)`` holds.

        Args:
            can: Authorization spec, see :meth:`AuthorizationContext.authorized_by`.
            deny: ForbiddenAccess message; defaults to ``config.deny_message``.
            **options: Forwarded unchanged to :meth:`before_action`.
        """
        spec = can
        message = deny

        def verify(service: GuardedService) -> None:
            if not service.authorized_by(spec):
                raise ForbiddenAccess(message or service.rights_config().deny_message, spec=safe_preview(spec))

        verify.__name__ = "verify_access"
        return cls.before_action(verify, **options)

    # ── Per-request helpers ─────────────────────────

    @classmethod
    def rights_config(cls) -> RightsConfig:
        return cls.config or RightsConfig()

    @property
    def authorization(self) -> AuthorizationContext:
        return current_authorization()

    def authorized_by(self, spec: Any) -> bool:
        return self.authorization.authorized_by(spec)

    def rights_for(self, name: Any) -> Any:
        return self.authorization.rights_for(name)

    def grant_rights_for(self, rights: Optional[Mapping[Any, Any]] = None, /, **named: Any) -> None:
        self.authorization.grant(rights, **named)

    @property
    def rights(self) -> Any:
        return self.authorization.rights

    @rights.setter
    def rights(self, capability_set: Any) -> None:
        self.authorization.rights = capability_set

    def run_before_filters(self, action: str) -> None:
        """Run every filter that applies to ``action``, in registration order."""
        for before in type(self)._before_filters:
            if not before.applies_to(action):
                continue
            try:
                before.callback(self)
            except ForbiddenAccess as e:
                logger.info("%s.%s denied: %s", type(self).__name__, action, e.message)
                raise


def guarded(method: Optional[Callable] = None, *, action: Optional[str] = None):
    """Run the service's applicable before-filters ahead of the method.

    The action name is the method name unless ``action=`` is given. Works on
    plain and ``async`` methods.
    """

    def decorate(func: Callable) -> Callable:
        name = action or func.__name__

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(self: GuardedService, *args: Any, **kwargs: Any) -> Any:
                self.run_before_filters(name)
                return await func(self, *args, **kwargs)

            return async_wrapper

        @functools.wraps(func)
        def wrapper(self: GuardedService, *args: Any, **kwargs: Any) -> Any:
            self.run_before_filters(name)
            return func(self, *args, **kwargs)

        return wrapper

    if method is not None:
        return decorate(method)
    return decorate


__all__ = [
    "BeforeFilter",
    "GuardedService",
    "guarded",
]
