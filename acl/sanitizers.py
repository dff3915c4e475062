"""Field sanitizers for role and user values."""
from __future__ import annotations

from typing import Any, Optional

from .errors import InvalidValueError


def sanitize_text(value: Any) -> Any:
    """Trim surrounding whitespace from strings; other values pass through."""
    if isinstance(value, str):
        return value.strip()
    return value


def sanitize_password(value: Any, hasher: Optional[Any] = None) -> str:
    """Trim and hash a plaintext password.

    Raises:
        InvalidValueError: If ``value`` is not a string.
    """
    if not isinstance(value, str):
        raise InvalidValueError(value, "Password must be a string")

    if hasher is None:
        from .hashing import get_hasher

        hasher = get_hasher()
    return hasher.hash(value.strip())
