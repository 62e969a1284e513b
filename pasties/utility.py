"""
Small helpers shared by the paste manager: clock, hashing and token generation.
"""
import hashlib
import re
import secrets
import time

_URL_SAFE = re.compile(r"[A-Za-z0-9_-]+")


def unix_timestamp() -> int:
    """Current time as integer Unix seconds."""
    return int(time.time())


def hash_string(value: str) -> str:
    """Hex-encoded SHA-256 digest of a string."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def pseudoid() -> int:
    """Random positive 63-bit identifier."""
    return secrets.randbits(63) or 1


def random_string() -> str:
    """
    Digest of a random 32-bit value.

    The value is rendered as zero-padded uppercase hex before hashing, so
    every token is 64 hex characters.
    """
    return hash_string(f"{secrets.randbits(32):08X}")


def random_token(length: int = 10) -> str:
    """Short random token used for default URLs and passwords."""
    return random_string()[:length]


def is_url_safe(value: str) -> bool:
    """True when every character is ASCII alphanumeric, '-' or '_'."""
    return _URL_SAFE.fullmatch(value) is not None


def byte_length(value: str) -> int:
    return len(value.encode("utf-8"))
