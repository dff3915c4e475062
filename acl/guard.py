"""Decorator guarding callables with a user's permission check."""
from __future__ import annotations

import functools
from typing import Any, Callable

from loguru import logger

from .errors import AccessDenied
from .metrics import ACCESS_DENIED_COUNTER, ACCESS_GRANTED_COUNTER
from .permissions import PermissionInput, as_list


def check_access(user: Any, permissions: PermissionInput) -> None:
    """Raise ``AccessDenied`` unless ``user`` has every permission."""
    requested = as_list(permissions)
    if user is None or not user.access(requested):
        ACCESS_DENIED_COUNTER.inc()
        who = getattr(user, "email", None) or "anonymous"
        logger.warning(f"Access denied for {who}: {requested}")
        raise AccessDenied(requested)
    ACCESS_GRANTED_COUNTER.inc()


def require_access(
    user_getter: Callable[..., Any], permissions: PermissionInput
) -> Callable:
    """Guard a function with ``check_access``.

    ``user_getter`` receives the wrapped function's arguments and returns the
    acting user (or None).
    """
    requested = as_list(permissions)

    def wrapper(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def inner(*args, **kwargs):
            check_access(user_getter(*args, **kwargs), requested)
            return fn(*args, **kwargs)

        return inner

    return wrapper
