"""Capability model for contextrights.

Defines:
- CapabilitySet: ordered vocabulary + packed bitmask + sticky override
- declare_family() / with_capabilities / RightsOwner: per-resource families
  with generated accessors on owner records
- parse_flag(): the permissive boolean parser used by CapabilitySet.set()
"""

from .capability_set import CapabilitySet
from .coercion import parse_flag
from .naming import FamilyNames, normalize_name, singularize
from .registry import (
    CapabilityAccessor,
    RightsOwner,
    declare_family,
    families_of,
    reset_defaults_for,
    with_capabilities,
)

__all__ = [
    "CapabilityAccessor",
    "CapabilitySet",
    "FamilyNames",
    "RightsOwner",
    "declare_family",
    "families_of",
    "normalize_name",
    "parse_flag",
    "reset_defaults_for",
    "singularize",
    "with_capabilities",
]
