"""Permission states and request normalisation."""
from __future__ import annotations

from enum import Enum
from typing import Iterable, List, Union

PermissionInput = Union[str, Iterable[str]]


class PermissionState(str, Enum):
    """State of a permission name within a single role."""

    GRANTED = "granted"
    REVOKED = "revoked"
    UNSET = "unset"

    @classmethod
    def from_stored(cls, value: bool) -> "PermissionState":
        return cls.GRANTED if value else cls.REVOKED


def as_list(permissions: PermissionInput) -> List[str]:
    # A bare string is one permission, not a sequence of characters.
    if isinstance(permissions, str):
        return [permissions]
    return list(permissions)
