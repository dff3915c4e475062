# tests/conftest.py
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import acl.config  # noqa: E402
from acl.config import get_settings  # noqa: E402
from acl.hashing import BcryptHasher  # noqa: E402
from acl.models import AclStore  # noqa: E402
from acl.registry import RoleRegistry  # noqa: E402


# ---------------------------------------------------------------------------
# Settings: isolate every test from the host environment
# ---------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    for name in ("ACL_MAX_INHERIT_DEPTH", "ACL_BCRYPT_ROUNDS", "DATABASE_URL"):
        monkeypatch.delenv(name, raising=False)
    get_settings(reset=True)
    yield
    # Drop the cache without re-reading variables the test may have broken.
    acl.config._settings = None


@pytest.fixture
def hasher():
    """Cheapest bcrypt cost so hashing stays fast in tests."""
    return BcryptHasher(rounds=4)


@pytest.fixture
def registry():
    return RoleRegistry()


@pytest.fixture
def store():
    """In-memory ACL store with tables created."""
    manager = AclStore("sqlite:///:memory:")
    manager.create_tables()
    yield manager
    manager.drop_tables()
    manager.dispose()
