"""Password hashing collaborator backed by bcrypt."""
from __future__ import annotations

from typing import Optional, Protocol

import bcrypt
from loguru import logger

from .config import get_settings

# bcrypt only considers the first 72 bytes of the secret.
BCRYPT_MAX_BYTES = 72


class PasswordHasher(Protocol):
    def hash(self, plaintext: str) -> str:
        ...

    def verify(self, plaintext: str, password_hash: str) -> bool:
        ...


class BcryptHasher:
    def __init__(self, rounds: Optional[int] = None):
        self.rounds = rounds if rounds is not None else get_settings().bcrypt_rounds

    def hash(self, plaintext: str) -> str:
        password_bytes = plaintext.encode("utf-8")[:BCRYPT_MAX_BYTES]
        hashed = bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=self.rounds))
        return hashed.decode("utf-8")

    def verify(self, plaintext: str, password_hash: str) -> bool:
        """Return True if ``plaintext`` matches ``password_hash``.

        Empty or malformed hashes never match.
        """
        if not password_hash or not isinstance(plaintext, str):
            return False
        try:
            return bcrypt.checkpw(
                plaintext.encode("utf-8")[:BCRYPT_MAX_BYTES],
                password_hash.encode("utf-8"),
            )
        except ValueError as e:
            logger.warning(f"Password verification failed on malformed hash: {e}")
            return False


_default_hasher: Optional[BcryptHasher] = None


def get_hasher() -> BcryptHasher:
    global _default_hasher
    if _default_hasher is None:
        _default_hasher = BcryptHasher()
    return _default_hasher
