"""The Role entity and role-level permission resolution.

A role keeps a map of permission name -> ``PermissionState``. Only GRANTED
and REVOKED are stored; a missing name is UNSET, and only UNSET names fall
back to the inherited role. The inherited role is referenced by machine name
and looked up at query time through the injected ``lookup`` callable.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional, Union

from loguru import logger

from .config import get_settings
from .permissions import PermissionInput, PermissionState, as_list
from .sanitizers import sanitize_text

ROLE_TYPE = "acl-role"

RoleLookup = Callable[[str], Optional["Role"]]
Saver = Callable[[Any], None]


class Role:
    """A named set of permission grants with an optional inherited role."""

    entity_type = ROLE_TYPE

    def __init__(
        self,
        machine_name: str,
        title: str = "",
        description: Optional[str] = None,
        is_super: bool = False,
        permissions: Optional[Mapping[str, Union[bool, PermissionState]]] = None,
        inherit: Union["Role", str, None] = None,
        lookup: Optional[RoleLookup] = None,
        saver: Optional[Saver] = None,
        max_inherit_depth: Optional[int] = None,
    ):
        self.machine_name = machine_name
        self.title = sanitize_text(title)
        self.description = sanitize_text(description)
        self.is_super = is_super
        self.permissions: Dict[str, PermissionState] = {}
        for name, value in (permissions or {}).items():
            if isinstance(value, PermissionState):
                if value is not PermissionState.UNSET:
                    self.permissions[name] = value
            else:
                self.permissions[name] = PermissionState.from_stored(bool(value))
        self._inherit: Optional[str] = None
        self._inherit_role: Optional["Role"] = None
        self.inherit = inherit
        self.lookup = lookup
        self.saver = saver
        self.max_inherit_depth = max_inherit_depth

    @property
    def inherit(self) -> Optional[str]:
        """Machine name of the inherited role, if any."""
        return self._inherit

    @inherit.setter
    def inherit(self, value: Union["Role", str, None]) -> None:
        if isinstance(value, Role):
            self._inherit_role = value
            value = value.machine_name
        else:
            self._inherit_role = None
        self._inherit = value or None

    def parent(self) -> Optional["Role"]:
        """Resolve the inherited role, preferring the lookup when one is wired."""
        if self._inherit is None:
            return None
        if self.lookup is not None:
            role = self.lookup(self._inherit)
            if role is not None:
                return role
        # A role object handed to `inherit` stays usable without a lookup.
        if self._inherit_role is not None and self._inherit_role.machine_name == self._inherit:
            return self._inherit_role
        return None

    def state(self, permission: str) -> PermissionState:
        return self.permissions.get(permission, PermissionState.UNSET)

    # -------------------------
    # MUTATION
    # -------------------------
    def grant(self, permissions: PermissionInput) -> None:
        for permission in as_list(permissions):
            self.permissions[permission] = PermissionState.GRANTED
        logger.debug(f"Role {self.machine_name}: granted {permissions}")
        self._save()

    def revoke(self, permissions: PermissionInput) -> None:
        for permission in as_list(permissions):
            self.permissions[permission] = PermissionState.REVOKED
        logger.debug(f"Role {self.machine_name}: revoked {permissions}")
        self._save()

    def reset(self, permissions: PermissionInput) -> None:
        for permission in as_list(permissions):
            self.permissions.pop(permission, None)
        logger.debug(f"Role {self.machine_name}: reset {permissions}")
        self._save()

    def _save(self) -> None:
        # The in-memory map is already updated; failures are not rolled back.
        if self.saver is not None:
            self.saver(self)

    # -------------------------
    # RESOLUTION
    # -------------------------
    def granted(self, permissions: PermissionInput) -> bool:
        """Return True if every requested permission is granted to this role.

        A super role grants everything, including revoked names. An empty
        request is vacuously granted.
        """
        if self.is_super:
            return True

        limit = self._depth_limit()
        return all(
            self._granted_one(permission, 0, limit)
            for permission in as_list(permissions)
        )

    def _depth_limit(self) -> int:
        if self.max_inherit_depth is not None:
            return self.max_inherit_depth
        return get_settings().max_inherit_depth

    def _granted_one(self, permission: str, depth: int, limit: int) -> bool:
        if self.is_super:
            return True

        state = self.state(permission)
        if state is not PermissionState.UNSET:
            return state is PermissionState.GRANTED

        parent = self.parent()
        if parent is None:
            return False

        if depth >= limit:
            logger.warning(
                f"Role {self.machine_name}: inherit chain deeper than {limit} "
                f"while resolving '{permission}' (cycle?), denying"
            )
            return False

        return parent._granted_one(permission, depth + 1, limit)

    def to_document(self):
        from .schemas import RoleDocument

        return RoleDocument(
            machineName=self.machine_name,
            title=self.title,
            description=self.description,
            isSuper=self.is_super,
            permissions={
                name: state is PermissionState.GRANTED
                for name, state in self.permissions.items()
            },
            inherit=self._inherit,
        )

    def __repr__(self):
        suffix = " super" if self.is_super else ""
        return f"<Role {self.machine_name}{suffix}>"
