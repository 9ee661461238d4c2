"""Authorization gate — request-scoped named capability sets.

Provides:
- ``AuthorizationContext`` — name → CapabilitySet mapping for one request,
  answering ``authorized_by(spec)``.
- ``authorization_scope()`` — binds a fresh context for the duration of a
  request (``contextvars``, so every asyncio task / thread sees its own).
- ``current_authorization()`` — the context bound to the running request.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional
from uuid import UUID, uuid4

from ..config import RightsConfig
from ..exceptions import ConfigurationError
from ..logging import get_rights_logger, safe_preview
from ..permissions.capability_set import CapabilitySet
from ..permissions.naming import normalize_name

logger = logging.getLogger(__name__)

_current_authorization: ContextVar[Optional[AuthorizationContext]] = ContextVar(
    "contextrights_authorization", default=None
)


def _right_key(name: Any) -> str:
    """``"Post"``, ``"post"`` and a ``str`` Enum member valued ``"post"`` are one key."""
    return normalize_name(name).lower()


class AuthorizationContext:
    """Named capability sets granted for one authorization context.

    A name nothing was granted to resolves to an empty CapabilitySet, so
    "no rights configured" and "all rights revoked" answer the same.

    Example::

        ctx = AuthorizationContext()
        ctx.grant(post=user.post_permission, copy_edit=user.copy_edit_permission)

        ctx.authorized_by({"post": "delete"})                    # one check
        ctx.authorized_by({"post": "delete", "copy_edit": "edit"})  # any wins
        ctx.authorized_by([("post", "review"), ("post", "update")])  # same name twice
        ctx.authorized_by("review")                              # "default" entry
    """

    def __init__(
        self,
        rights: Optional[Mapping[Any, Any]] = None,
        *,
        default_right: str = "default",
        context_id: Optional[UUID | str] = None,
    ) -> None:
        self.context_id = context_id or uuid4()
        self.default_right = _right_key(default_right)
        self._rights: dict[str, Any] = {}
        self._logger = get_rights_logger(__name__, context_id=self.context_id)
        if rights:
            self.grant(rights)

    @classmethod
    def from_config(
        cls,
        config: Optional[RightsConfig] = None,
        *,
        rights: Optional[Mapping[Any, Any]] = None,
        context_id: Optional[UUID | str] = None,
    ) -> AuthorizationContext:
        cfg = config or RightsConfig()
        return cls(rights, default_right=cfg.default_right, context_id=context_id)

    @property
    def current_rights(self) -> Mapping[str, Any]:
        """Read-only view of every granted name."""
        return MappingProxyType(self._rights)

    def grant(self, rights: Optional[Mapping[Any, Any]] = None, /, **named: Any) -> None:
        """Merge named capability sets; a later grant for a name replaces the earlier one."""
        merged = dict(rights or {})
        merged.update(named)
        for name, capability_set in merged.items():
            self._rights[_right_key(name)] = capability_set
        if merged:
            self._logger.debug("Granted rights for %s", sorted(_right_key(name) for name in merged))

    def rights_for(self, name: Any) -> Any:
        """The set granted under ``name``, or an empty CapabilitySet."""
        granted = self._rights.get(_right_key(name))
        if granted is None:
            return CapabilitySet.create_default()
        return granted

    @property
    def rights(self) -> Any:
        """Shortcut for the default entry when a request carries one set."""
        return self.rights_for(self.default_right)

    @rights.setter
    def rights(self, capability_set: Any) -> None:
        self.grant({self.default_right: capability_set})

    def authorized_by(self, spec: Any) -> bool:
        """Whether any requested (name, capability) pair is granted.

        ``spec`` forms:

        - ``None`` / ``False`` / empty → ``False``
        - ``"delete"`` → checked on the default entry
        - ``{"post": "delete", "copy_edit": "edit"}`` → any entry suffices
        - ``[("post", "review"), ("post", "update"), "delete"]`` → any item
          suffices; bare names check the default entry. This is the form for
          several capabilities on one name, which a mapping cannot hold.
        """
        if not spec:
            return False

        if isinstance(spec, Mapping):
            pairs = list(spec.items())
        elif isinstance(spec, (list, tuple, set, frozenset)):
            pairs = [
                item if isinstance(item, tuple) and len(item) == 2 else (self.default_right, item)
                for item in spec
            ]
        else:
            pairs = [(self.default_right, spec)]

        allowed = any(self.rights_for(name).can(capability) for name, capability in pairs)
        if not allowed:
            self._logger.info("Not authorized by %s", safe_preview(spec))
        return allowed

    def __repr__(self) -> str:
        return f"<AuthorizationContext {self.context_id} rights={sorted(self._rights)}>"


def current_authorization() -> AuthorizationContext:
    """The context bound to the running request.

    Raises:
        ConfigurationError: Outside :func:`authorization_scope`.
    """
    ctx = _current_authorization.get()
    if ctx is None:
        logger.warning("No authorization scope bound for the running request")
        raise ConfigurationError(
            "No authorization scope is bound; wrap the request in authorization_scope()"
        )
    return ctx


@contextmanager
def authorization_scope(
    rights: Optional[Mapping[Any, Any]] = None,
    *,
    config: Optional[RightsConfig] = None,
    context_id: Optional[UUID | str] = None,
) -> Iterator[AuthorizationContext]:
    """Bind a fresh AuthorizationContext until the block exits.

    Usage::

        with authorization_scope({"post": user.post_permission}) as ctx:
            servicer.Delete(request, context)
    """
    ctx = AuthorizationContext.from_config(config, rights=rights, context_id=context_id)
    token = _current_authorization.set(ctx)
    try:
        yield ctx
    finally:
        _current_authorization.reset(token)


__all__ = [
    "AuthorizationContext",
    "authorization_scope",
    "current_authorization",
]
