"""Password hashing for stored credentials.

Hashes are stored as ``pbkdf2_sha256$<iterations>$<salt>$<digest>`` so the
work factor can be raised later without invalidating existing accounts.
"""

import base64
import hashlib
import hmac
import os

_ALGORITHM = "pbkdf2_sha256"
_ITERATIONS = 120_000


def _b64(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii")


def _derive(password: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)


def hash_password(password: str, iterations: int = _ITERATIONS) -> str:
    salt = os.urandom(16)
    return f"{_ALGORITHM}${iterations}${_b64(salt)}${_b64(_derive(password, salt, iterations))}"


def verify_password(password: str, stored: str) -> bool:
    """Check ``password`` against a value produced by hash_password.

    Malformed stored values never verify.
    """
    try:
        algorithm, iterations, salt_b64, dk_b64 = stored.split("$", 3)
        salt = base64.urlsafe_b64decode(salt_b64.encode("ascii"))
        dk_expected = base64.urlsafe_b64decode(dk_b64.encode("ascii"))
        rounds = int(iterations)
    except (ValueError, TypeError, AttributeError):
        return False
    if algorithm != _ALGORITHM or rounds <= 0:
        return False

    return hmac.compare_digest(_derive(password, salt, rounds), dk_expected)
