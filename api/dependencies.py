"""FastAPI dependency helpers enforcing ACL permissions on routes.

``require_access`` wraps a host-supplied dependency that returns the current
user (or None) and rejects the request with 403 unless the user has access.
"""
from __future__ import annotations

from typing import Any, Callable

from fastapi import Depends, HTTPException

from acl.errors import AccessDenied
from acl.guard import check_access
from acl.permissions import PermissionInput, as_list


def require_access(permissions: PermissionInput, get_user: Callable[..., Any]) -> Callable:
    requested = as_list(permissions)

    def dependency(user: Any = Depends(get_user)) -> Any:
        try:
            check_access(user, requested)
        except AccessDenied as e:
            raise HTTPException(status_code=403, detail=str(e))
        return user

    return dependency
