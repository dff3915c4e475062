import pytest

from acl.errors import InvalidValueError
from acl.sanitizers import sanitize_password, sanitize_text


def test_password_must_be_string(hasher):
    with pytest.raises(InvalidValueError) as exc:
        sanitize_password(False, hasher)
    assert exc.value.value is False
    assert isinstance(exc.value, ValueError)


def test_password_is_hashed(hasher):
    value = sanitize_password("password", hasher)
    assert value != "password"
    assert hasher.verify("password", value) is True


def test_password_uses_default_hasher(monkeypatch):
    calls = []

    class FakeHasher:
        def hash(self, plaintext):
            calls.append(plaintext)
            return f"hashed:{plaintext}"

    monkeypatch.setattr("acl.hashing.get_hasher", lambda: FakeHasher())
    assert sanitize_password(" pw ") == "hashed:pw"
    assert calls == ["pw"]


@pytest.mark.parametrize(
    "value, expected",
    [("  Title ", "Title"), ("", ""), (None, None), (3, 3)],
)
def test_sanitize_text(value, expected):
    assert sanitize_text(value) == expected
