"""Role and user access control with single-parent role inheritance."""
from .bindings import ResolvedRole, RoleBinding, UnresolvedRole
from .errors import AccessDenied, AclError, InvalidValueError, RoleNotFound
from .permissions import PermissionState
from .registry import RoleRegistry
from .role import ROLE_TYPE, Role
from .user import USER_TYPE, User

__all__ = [
    "AccessDenied",
    "AclError",
    "InvalidValueError",
    "PermissionState",
    "ROLE_TYPE",
    "ResolvedRole",
    "Role",
    "RoleBinding",
    "RoleNotFound",
    "RoleRegistry",
    "USER_TYPE",
    "UnresolvedRole",
    "User",
]
