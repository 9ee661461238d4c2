"""Declaration of capability families on owner record types.

``declare_family(Article, "create", "review", "update", "delete", on="post")``
produces ``Article.PostPermission`` and installs on ``Article``:

- ``post_permission`` — read: a PostPermission bound to the record;
  write: stores the mask of a PostPermission into ``post_rights``
- ``set_post_permissions(*names)`` — store a set built from names
- ``post_permission_attributes`` — ``{name: bool}``; assigning a mapping
  applies each pair with the permissive flag parser
- ``reset_post_permissions()`` — store the family default mask

The owner only needs a readable/writable integer attribute named after the
storage field (``post_rights``, or ``rights`` for the unnamed family) and,
optionally, a ``sticky`` flag.

Vocabulary order is part of the stored data. Re-declaring a family with a
different order for an existing storage field changes what stored masks mean.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional, TypeVar

from ..exceptions import ConfigurationError, ResetNotFoundError, TypeMismatchError
from .capability_set import CapabilitySet
from .naming import FamilyNames, normalize_name, reset_operation_for

logger = logging.getLogger(__name__)

_FAMILIES_ATTR = "_rights_families"

_T = TypeVar("_T", bound=type)


class CapabilityAccessor:
    """Data descriptor reading and writing one family's storage field."""

    def __init__(self, family: type[CapabilitySet]) -> None:
        self.family = family

    def __get__(self, instance: Any, owner_type: Optional[type] = None) -> Any:
        if instance is None:
            return self
        return self.family.bind(getattr(instance, self.family.storage_field, 0), instance)

    def __set__(self, instance: Any, value: Any) -> None:
        family = self.family
        if type(value) is not family:
            expected = family.__qualname__
            actual = type(value).__qualname__
            logger.warning(
                "Rejected %s for %s.%s: %s expected",
                actual,
                type(instance).__name__,
                family.accessor,
                expected,
            )
            raise TypeMismatchError(
                f"{expected} expected, got {actual}",
                expected=expected,
                actual=actual,
            )
        setattr(instance, family.storage_field, value.mask)


def families_of(owner_type: type) -> dict[str, type[CapabilitySet]]:
    """Declared families keyed by accessor name, inherited ones included."""
    families: dict[str, type[CapabilitySet]] = {}
    for klass in reversed(owner_type.__mro__):
        families.update(klass.__dict__.get(_FAMILIES_ATTR, {}))
    return families


def declare_family(
    owner_type: type,
    *names: Any,
    on: Any = None,
    default: Optional[Iterable[Any]] = None,
) -> type[CapabilitySet]:
    """Declare a capability family on ``owner_type``.

    Args:
        owner_type: Record class that stores the mask.
        *names: Ordered vocabulary. Append-only once masks are stored.
        on: Sub-resource name; ``None`` declares the unnamed family.
        default: Names forming the default mask (``create_default()``).

    Returns:
        The generated CapabilitySet subclass, also set on ``owner_type``.

    Raises:
        ConfigurationError: If a name appears twice in the vocabulary.
    """
    generated = FamilyNames.for_resource(on)
    vocabulary = tuple(normalize_name(name) for name in names)

    duplicates = sorted({name for name in vocabulary if vocabulary.count(name) > 1})
    if duplicates:
        raise ConfigurationError(
            f"Duplicate capabilities in {generated.class_name}: {', '.join(duplicates)}",
            duplicates=duplicates,
        )

    previous = families_of(owner_type).get(generated.accessor)
    if previous is not None and previous.vocabulary != vocabulary:
        logger.warning(
            "%s.%s re-declared with a different vocabulary %s (was %s); stored %s masks change meaning",
            owner_type.__name__,
            generated.class_name,
            list(vocabulary),
            list(previous.vocabulary),
            generated.storage_field,
        )

    family: type[CapabilitySet] = type(
        generated.class_name,
        (CapabilitySet,),
        {
            "__module__": owner_type.__module__,
            "__qualname__": f"{owner_type.__qualname__}.{generated.class_name}",
            "__doc__": f"Capabilities {list(vocabulary)} stored in {generated.storage_field}.",
            "vocabulary": vocabulary,
            "storage_field": generated.storage_field,
            "accessor": generated.accessor,
        },
    )
    family.default_mask = family.bitmask_for(*(default or ()))

    setattr(owner_type, generated.class_name, family)
    _install_accessors(owner_type, family, generated)

    own = owner_type.__dict__.get(_FAMILIES_ATTR)
    if own is None:
        own = {}
        setattr(owner_type, _FAMILIES_ATTR, own)
    own[generated.accessor] = family

    logger.debug(
        "Declared %s on %s: %s default=%d",
        generated.class_name,
        owner_type.__name__,
        list(vocabulary),
        family.default_mask,
    )
    return family


def _install_accessors(owner_type: type, family: type[CapabilitySet], generated: FamilyNames) -> None:
    accessor = generated.accessor

    def bulk_setter(self: Any, *names: Any) -> None:
        setattr(self, accessor, family.for_capabilities(*names))

    def read_attributes(self: Any) -> dict[str, bool]:
        return getattr(self, accessor).as_dict()

    def write_attributes(self: Any, mapping: Mapping[Any, Any]) -> None:
        # A fresh bound set per key; each set() writes back before the next.
        for name, value in dict(mapping).items():
            getattr(self, accessor).set(name, value)

    def reset(self: Any) -> None:
        setattr(self, family.storage_field, family.default_mask)

    bulk_setter.__doc__ = f"Store a {family.__name__} granting exactly ``names``."
    reset.__doc__ = f"Store the {family.__name__} default mask in ``{family.storage_field}``."

    for name, func in ((generated.bulk_setter, bulk_setter), (generated.reset, reset)):
        func.__name__ = name
        func.__qualname__ = f"{owner_type.__qualname__}.{name}"
        setattr(owner_type, name, func)

    setattr(owner_type, accessor, CapabilityAccessor(family))
    setattr(
        owner_type,
        generated.attributes,
        property(read_attributes, write_attributes, doc=f"{family.__name__} as a name → bool mapping."),
    )


def reset_defaults_for(owner: Any, *resources: Any) -> None:
    """Reset several families to their defaults by resource name.

    ``reset_defaults_for(article, "posts", "copy_edits")`` calls
    ``reset_post_permissions()`` then ``reset_copy_edit_permissions()``.

    Raises:
        ResetNotFoundError: Before any reset runs, if a resource has no family.
    """
    operations = []
    for resource in resources:
        operation = reset_operation_for(resource)
        reset = getattr(owner, operation, None)
        if not callable(reset):
            raise ResetNotFoundError(
                f"{type(owner).__name__} has no {operation}()",
                operation=operation,
                resource=normalize_name(resource),
            )
        operations.append(reset)

    for reset in operations:
        reset()


def with_capabilities(*names: Any, on: Any = None, default: Optional[Iterable[Any]] = None):
    """Class decorator form of :func:`declare_family`.

    Example::

        @with_capabilities("create", "review", "update", "delete", on="post", default=["create", "update"])
        @with_capabilities("adjust", "edit", "suggest", "correct", on="copy_edit")
        class Article(RightsOwner):
            def __init__(self):
                self.post_rights = 0
                self.copy_edit_rights = 0
    """

    def decorator(cls: _T) -> _T:
        declare_family(cls, *names, on=on, default=default)
        return cls

    return decorator


class RightsOwner:
    """Mixin for records that carry capability families."""

    @classmethod
    def permissions(
        cls,
        *names: Any,
        on: Any = None,
        default: Optional[Iterable[Any]] = None,
    ) -> type[CapabilitySet]:
        """Declare a family on this class. See :func:`declare_family`."""
        return declare_family(cls, *names, on=on, default=default)

    def reset_defaults_for(self, *resources: Any) -> None:
        reset_defaults_for(self, *resources)


__all__ = [
    "CapabilityAccessor",
    "RightsOwner",
    "declare_family",
    "families_of",
    "reset_defaults_for",
    "with_capabilities",
]
