"""Bitmask-backed capability sets.

A family is a CapabilitySet subclass carrying an ordered vocabulary. The
position of a name in the vocabulary decides its bit (``1 << index``), so a
vocabulary is append-only for as long as any stored mask exists:

    # These values cannot be reordered. Only add new capabilities to the end.
    class PostPermission(CapabilitySet):
        vocabulary = ("create", "review", "update", "delete")

Families are normally produced by :func:`contextrights.permissions.declare_family`.
Instances are short-lived views over an owner's stored integer; the owner's
field stays the system of record.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator, Optional

from ..exceptions import UnknownCapabilityError
from .coercion import parse_flag
from .naming import normalize_name

logger = logging.getLogger(__name__)

_FACTORY = object()


def _owner_sticky(owner: Any) -> bool:
    if owner is None:
        return False
    sticky = getattr(owner, "sticky", False)
    if callable(sticky):
        sticky = sticky()
    return bool(sticky)


class CapabilitySet:
    """A packed set of granted capabilities for one family.

    Built only through the factories:

    - :meth:`for_capabilities` — from capability names
    - :meth:`create_default` — from the family default
    - :meth:`bind` — from a stored mask plus the owning record

    The base class is the empty family: no vocabulary, default mask 0. It is
    what an authorization context hands out for names nothing was granted to.

    Example::

        perm = PostPermission.for_capabilities("create", "delete")
        perm.mask                # 9
        perm.can("delete")       # True
        perm.delete              # True
        perm["review"] = "1"
        perm.capabilities()      # ("create", "review", "delete")
    """

    vocabulary: tuple[str, ...] = ()
    default_mask: int = 0
    storage_field: str = "rights"
    accessor: str = "permission"

    def __init__(self, mask: Optional[int] = 0, owner: Any = None, *, _factory: object = None) -> None:
        if _factory is not _FACTORY:
            raise TypeError(
                f"{type(self).__name__} is built with for_capabilities(), create_default() or bind()"
            )
        self._mask = int(mask or 0)
        self._owner = owner
        self._sticky = _owner_sticky(owner)

    # ── Factories ───────────────────────────────────────

    @classmethod
    def for_capabilities(cls, *names: Any) -> CapabilitySet:
        """Build a set granting ``names``. Unknown names are ignored."""
        return cls(cls.bitmask_for(*names), _factory=_FACTORY)

    @classmethod
    def create_default(cls) -> CapabilitySet:
        """Build a set holding the family default mask."""
        return cls(cls.default_mask, _factory=_FACTORY)

    @classmethod
    def bind(cls, mask: Optional[int], owner: Any = None) -> CapabilitySet:
        """Wrap a stored mask. ``sticky`` is read from ``owner`` once, here."""
        return cls(mask, owner, _factory=_FACTORY)

    @classmethod
    def default_capabilities(cls) -> tuple[str, ...]:
        return cls.create_default().capabilities()

    # ── Bit arithmetic ──────────────────────────────────

    @classmethod
    def bit_for(cls, name: Any) -> int:
        """``1 << index`` of ``name`` in the vocabulary, 0 when absent."""
        try:
            return 1 << cls.vocabulary.index(normalize_name(name))
        except ValueError:
            return 0

    @classmethod
    def bitmask_for(cls, *names: Any) -> int:
        mask = 0
        for name in names:
            mask |= cls.bit_for(name)
        return mask

    # ── State ───────────────────────────────────────────

    @property
    def mask(self) -> int:
        return self._mask

    @property
    def sticky(self) -> bool:
        return self._sticky

    @property
    def owner(self) -> Any:
        return self._owner

    # ── Queries ─────────────────────────────────────────

    def has_capability(self, name: Any) -> bool:
        return normalize_name(name) in self.vocabulary

    def can(self, name: Any) -> bool:
        """True when sticky, else when ``name`` is known and its bit is set."""
        if self._sticky:
            return True
        bit = self.bit_for(name)
        return bit != 0 and self._mask & bit != 0

    def capabilities(self) -> tuple[str, ...]:
        """Granted names in vocabulary order; the whole vocabulary when sticky."""
        if self._sticky:
            return self.vocabulary
        return tuple(name for name in self.vocabulary if self.can(name))

    def as_dict(self) -> dict[str, bool]:
        return {name: self.can(name) for name in self.vocabulary}

    # ── Mutation ────────────────────────────────────────

    def set(self, name: Any, value: Any) -> None:
        """Grant or revoke ``name``.

        ``value`` goes through :func:`parse_flag`; unrecognised values and
        unknown names leave the set untouched. A change is written back to
        the owner immediately. On a sticky set every name already reads as
        granted, so granting is a no-op while revoking flips the stored bit.
        """
        flag = parse_flag(value)
        if flag is None or not self.has_capability(name):
            return

        if self.can(name) == flag:
            return

        self._mask ^= self.bit_for(name)
        self._propagate()

    def _propagate(self) -> None:
        if self._owner is None:
            return
        logger.debug(
            "%s changed to %d, writing back to %s.%s",
            type(self).__name__,
            self._mask,
            type(self._owner).__name__,
            self.accessor,
        )
        setattr(self._owner, self.accessor, self)

    # ── Protocol glue ───────────────────────────────────

    def __getitem__(self, name: Any) -> bool:
        return self.can(name)

    def __setitem__(self, name: Any, value: Any) -> None:
        self.set(name, value)

    def __contains__(self, name: Any) -> bool:
        return self.can(name)

    def __iter__(self) -> Iterator[str]:
        return iter(self.capabilities())

    def __getattr__(self, name: str) -> bool:
        # Only reached when normal lookup fails, so methods always win.
        if name.startswith("_"):
            raise AttributeError(name)
        if name in type(self).vocabulary:
            return self.can(name)
        raise UnknownCapabilityError(
            f"{type(self).__name__} has no capability '{name}'",
            capability=name,
            family=type(self).__name__,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CapabilitySet):
            return NotImplemented
        return type(self) is type(other) and self._mask == other._mask

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        sticky = " sticky" if self._sticky else ""
        return f"<{type(self).__name__} {list(self.capabilities())} mask={self._mask}{sticky}>"


__all__ = ["CapabilitySet"]
