"""Credential hashing primitive.

PBKDF2-HMAC-SHA256 with a per-credential random salt. Encoded form::

    pbkdf2_sha256$<iterations>$<salt_b64>$<digest_b64>

The encoded string is what ``Account.password_hash`` and
``WaitlistEntry.password_hash`` hold. Hash exactly once, at the point the
plaintext enters the system; everything downstream moves the encoded
string verbatim.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
import secrets

logger = logging.getLogger(__name__)

ALGORITHM = "pbkdf2_sha256"
DEFAULT_ITERATIONS = 260_000
SALT_BYTES = 16


def _b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii").rstrip("=")


def _unb64(text: str) -> bytes:
    padding = "=" * (-len(text) % 4)
    return base64.b64decode(text + padding)


class Pbkdf2Hasher:
    """Default :class:`campusgate.interfaces.CredentialHasher`."""

    algorithm = ALGORITHM

    def __init__(self, iterations: int = DEFAULT_ITERATIONS) -> None:
        if iterations < 1:
            raise ValueError("iterations must be positive")
        self._iterations = iterations

    def hash(self, password: str) -> str:
        salt = secrets.token_bytes(SALT_BYTES)
        digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, self._iterations)
        return f"{ALGORITHM}${self._iterations}${_b64(salt)}${_b64(digest)}"

    def verify(self, password: str, password_hash: str) -> bool:
        """Constant-time comparison; malformed hashes never verify."""
        try:
            algorithm, iterations, salt, expected = password_hash.split("$")
            if algorithm != ALGORITHM:
                return False
            digest = hashlib.pbkdf2_hmac(
                "sha256",
                password.encode("utf-8"),
                _unb64(salt),
                int(iterations),
            )
            return hmac.compare_digest(digest, _unb64(expected))
        except (ValueError, TypeError):
            logger.warning("Malformed credential hash encountered")
            return False

    @staticmethod
    def looks_hashed(value: str) -> bool:
        """Whether ``value`` already has the encoded-hash shape."""
        return isinstance(value, str) and value.startswith(f"{ALGORITHM}$") and value.count("$") == 3


__all__ = [
    "ALGORITHM",
    "DEFAULT_ITERATIONS",
    "Pbkdf2Hasher",
]
