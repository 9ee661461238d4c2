"""Name derivation for declared capability families.

``on="copy_edit"`` → class ``CopyEditPermission``, accessor
``copy_edit_permission``, storage field ``copy_edit_rights``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def normalize_name(name: Any) -> str:
    """Capability and permission names compare as plain strings.

    A ``str``-valued Enum member and its value are the same name.
    """
    if isinstance(name, Enum):
        name = name.value
    return str(name)


def camelize(name: str) -> str:
    """``copy_edit`` → ``CopyEdit``; already-camel input is kept."""
    return "".join(part[:1].upper() + part[1:] for part in re.split(r"[_\-\s]+", name) if part)


def underscore(name: str) -> str:
    """``CopyEditPermission`` → ``copy_edit_permission``."""
    return _CAMEL_BOUNDARY.sub("_", name).replace("-", "_").lower()


def singularize(name: str) -> str:
    """Singular form of a resource name for reset lookups.

    Covers the regular English plurals resource names use: ``posts``,
    ``categories``, ``boxes``, ``copy_edits``. Singular input is returned as-is.
    """
    if name.endswith("ies") and len(name) > 3:
        return name[:-3] + "y"
    if re.search(r"(ss|x|z|ch|sh)es$", name):
        return name[:-2]
    if name.endswith("s") and not name.endswith("ss"):
        return name[:-1]
    return name


@dataclass(frozen=True)
class FamilyNames:
    """Every generated name for one family."""

    class_name: str
    accessor: str
    storage_field: str

    @property
    def bulk_setter(self) -> str:
        return f"set_{self.accessor}s"

    @property
    def attributes(self) -> str:
        return f"{self.accessor}_attributes"

    @property
    def reset(self) -> str:
        return f"reset_{self.accessor}s"

    @classmethod
    def for_resource(cls, on: Any = None) -> FamilyNames:
        """``on="files"`` and ``on="file"`` both name the ``FilePermission`` family."""
        resource = camelize(singularize(underscore(normalize_name(on)))) if on else ""
        class_name = f"{resource}Permission"
        return cls(
            class_name=class_name,
            accessor=underscore(class_name),
            storage_field=underscore(f"{resource}Rights"),
        )


def reset_operation_for(resource: Any) -> str:
    """``"posts"`` → ``reset_post_permissions``."""
    return FamilyNames.for_resource(resource).reset


__all__ = [
    "FamilyNames",
    "camelize",
    "normalize_name",
    "reset_operation_for",
    "singularize",
    "underscore",
]
