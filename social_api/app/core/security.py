"""
Password hashing.

Services only see the ``Hasher`` protocol.  ``PBKDF2Hasher`` implements
it with PBKDF2-HMAC-SHA256, a fresh 16-byte random salt per password and
a fixed iteration count.  The stored string is
``<iterations>$<salt hex>$<hash hex>`` so hashes stay verifiable if the
configured work factor changes later.
"""

import hashlib
import hmac
import os
from typing import Protocol

DEFAULT_ITERATIONS = 100_000
SALT_BYTES = 16


class Hasher(Protocol):
    """One-way password transform used by ``UserService``."""

    def hash(self, password: str) -> str:
        ...

    def verify(self, password: str, hashed: str) -> bool:
        ...


def _derive(password: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)


class PBKDF2Hasher:
    """PBKDF2-HMAC-SHA256 implementation of ``Hasher``."""

    def __init__(self, iterations: int = DEFAULT_ITERATIONS) -> None:
        if iterations < 1:
            raise ValueError("iterations must be positive")
        self.iterations = iterations

    def hash(self, password: str) -> str:
        """Hash ``password`` with a new random salt.

        Parameters
        ----------
        password : str
            The plain text password.

        Returns
        -------
        str
            Iteration count, salt and digest joined with ``$``.
        """
        salt = os.urandom(SALT_BYTES)
        digest = _derive(password, salt, self.iterations)
        return f"{self.iterations}${salt.hex()}${digest.hex()}"

    def verify(self, password: str, hashed: str) -> bool:
        """Check ``password`` against a string produced by ``hash``.

        The digests are compared in constant time.  A malformed stored
        value never matches.
        """
        try:
            iterations, salt_hex, digest_hex = hashed.split("$", 2)
            salt = bytes.fromhex(salt_hex)
            expected = bytes.fromhex(digest_hex)
            actual = _derive(password, salt, int(iterations))
        except (AttributeError, ValueError):
            return False
        return hmac.compare_digest(actual, expected)
