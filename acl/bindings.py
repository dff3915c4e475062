"""Role bindings held by a user: resolved references or name placeholders."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from .role import ROLE_TYPE


@dataclass(frozen=True)
class ResolvedRole:
    role: Any

    @property
    def machine_name(self) -> str:
        return self.role.machine_name

    @property
    def is_role(self) -> bool:
        return getattr(self.role, "entity_type", None) == ROLE_TYPE

    def to_reference(self):
        from .schemas import RoleReference

        return RoleReference(
            type=getattr(self.role, "entity_type", ROLE_TYPE),
            subtype=getattr(self.role, "subtype", None),
            machineName=self.machine_name,
        )


@dataclass(frozen=True)
class UnresolvedRole:
    """Placeholder recorded when a role is granted by bare name."""

    machine_name: str
    type: str = ROLE_TYPE
    subtype: Any = None

    def to_reference(self):
        from .schemas import RoleReference

        return RoleReference(
            type=self.type, subtype=self.subtype, machineName=self.machine_name
        )


RoleBinding = Union[ResolvedRole, UnresolvedRole]
