"""The User entity: role bindings, access checks and password matching."""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Union

from loguru import logger

from .bindings import ResolvedRole, RoleBinding, UnresolvedRole
from .hashing import PasswordHasher
from .permissions import PermissionInput, as_list
from .role import ROLE_TYPE, RoleLookup, Saver
from .sanitizers import sanitize_password, sanitize_text

USER_TYPE = "acl-user"

RoleArg = Union[str, Any]


def _role_name(role: RoleArg) -> str:
    return role if isinstance(role, str) else role.machine_name


class User:
    """A principal holding role bindings and a password hash.

    Granting by bare name records an ``UnresolvedRole`` placeholder, which
    confers no access until it is replaced by a resolved role (see
    ``resolve_roles``). Granting a role object records it resolved.
    """

    entity_type = USER_TYPE

    def __init__(
        self,
        email: str,
        display_name: Optional[str] = None,
        password_hash: str = "",
        roles: Optional[Mapping[str, RoleBinding]] = None,
        hasher: Optional[PasswordHasher] = None,
        saver: Optional[Saver] = None,
    ):
        self.email = sanitize_text(email)
        self.display_name = sanitize_text(display_name)
        self.password_hash = password_hash
        self.roles: Dict[str, RoleBinding] = dict(roles or {})
        self._hasher = hasher
        self.saver = saver

    @property
    def hasher(self):
        if self._hasher is None:
            from .hashing import get_hasher

            self._hasher = get_hasher()
        return self._hasher

    # -------------------------
    # ROLE BINDINGS
    # -------------------------
    def grant(self, role: RoleArg) -> None:
        name = _role_name(role)
        if name in self.roles:
            # Existing bindings are kept as-is, placeholders included.
            return

        if isinstance(role, str):
            self.roles[name] = UnresolvedRole(name)
        else:
            self.roles[name] = ResolvedRole(role)
        logger.debug(f"User {self.email}: granted role {name}")
        self._save()

    def revoke(self, role: RoleArg) -> None:
        name = _role_name(role)
        self.roles.pop(name, None)
        logger.debug(f"User {self.email}: revoked role {name}")
        self._save()

    def granted(self, role: RoleArg) -> bool:
        """Return True if the role is bound and resolved."""
        return isinstance(self.roles.get(_role_name(role)), ResolvedRole)

    def resolve_roles(self, lookup: RoleLookup) -> List[str]:
        """Replace role placeholders with roles found by ``lookup``.

        Placeholders are looked up by their machine name; references to other
        entity types are left unresolved.

        Returns:
            Names of the placeholders that could not be resolved.
        """
        missing = []
        for name, binding in list(self.roles.items()):
            if not isinstance(binding, UnresolvedRole) or binding.type != ROLE_TYPE:
                continue
            role = lookup(binding.machine_name)
            if role is None:
                missing.append(name)
                continue
            self.roles[name] = ResolvedRole(role)

        if missing:
            logger.warning(f"User {self.email}: unresolved roles {missing}")
        return missing

    # -------------------------
    # ACCESS
    # -------------------------
    def access(self, permissions: PermissionInput) -> bool:
        """Return True if every permission is granted by at least one role."""
        roles = [
            binding.role
            for binding in self.roles.values()
            if isinstance(binding, ResolvedRole) and binding.is_role
        ]
        return all(
            any(role.granted(permission) for role in roles)
            for permission in as_list(permissions)
        )

    # -------------------------
    # CREDENTIALS
    # -------------------------
    def set_password(self, plaintext: Any) -> None:
        self.password_hash = sanitize_password(plaintext, self.hasher)
        self._save()

    def password_match(self, candidate: str) -> bool:
        return self.hasher.verify(candidate, self.password_hash)

    def _save(self) -> None:
        if self.saver is not None:
            self.saver(self)

    def to_document(self):
        from .schemas import UserDocument

        return UserDocument(
            email=self.email,
            displayName=self.display_name,
            password=self.password_hash,
            roles={
                name: binding.to_reference() for name, binding in self.roles.items()
            },
        )

    def __repr__(self):
        return f"<User {self.email} roles={sorted(self.roles)}>"
