"""Exception types raised by the ACL package."""
from __future__ import annotations

from typing import Any, Iterable


class AclError(Exception):
    """Base class for ACL errors."""


class InvalidValueError(AclError, ValueError):
    """Raised by sanitizers when a field value cannot be accepted."""

    def __init__(self, value: Any, message: str = "Invalid value"):
        super().__init__(message)
        self.value = value


class AccessDenied(AclError, PermissionError):
    def __init__(self, permissions: Iterable[str]):
        self.permissions = list(permissions)
        super().__init__(f"Access denied: {', '.join(self.permissions)}")


class RoleNotFound(AclError, LookupError):
    def __init__(self, machine_name: str):
        super().__init__(f"Role not found: {machine_name}")
        self.machine_name = machine_name
