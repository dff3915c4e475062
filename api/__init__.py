# api/__init__.py
from .dependencies import require_access

__all__ = ["require_access"]
