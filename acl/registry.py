"""In-memory role registry used as the by-name role lookup."""
from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional

from .role import Role
from .user import User


class RoleRegistry:
    def __init__(self, roles: Optional[Iterable[Role]] = None):
        self._roles: Dict[str, Role] = {}
        for role in roles or ():
            self.add(role)

    def add(self, role: Role) -> Role:
        """Register ``role`` and wire its inherit lookup to this registry."""
        self._roles[role.machine_name] = role
        if role.lookup is None:
            role.lookup = self.get
        return role

    def create(self, machine_name: str, **kwargs) -> Role:
        return self.add(Role(machine_name, lookup=self.get, **kwargs))

    def get(self, machine_name: str) -> Optional[Role]:
        return self._roles.get(machine_name)

    def remove(self, machine_name: str) -> None:
        self._roles.pop(machine_name, None)

    def resolve(self, user: User) -> List[str]:
        return user.resolve_roles(self.get)

    def __contains__(self, machine_name: object) -> bool:
        return machine_name in self._roles

    def __iter__(self) -> Iterator[Role]:
        return iter(list(self._roles.values()))

    def __len__(self) -> int:
        return len(self._roles)
