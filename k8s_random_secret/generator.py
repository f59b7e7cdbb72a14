"""Cryptographically secure random value generation."""
import base64
import enum
import os
import secrets
import string

ALPHABET = string.digits + string.ascii_uppercase + string.ascii_lowercase + "-"


class EntropyUnavailable(Exception):
    """The operating system's secure random source failed to produce bytes."""


class Encoding(enum.Enum):
    """How generated values are rendered."""
    URL_SAFE = "url-safe"
    ALPHABET = "alphabet"


def assert_available_prng() -> None:
    """Read a single byte from the OS CSPRNG, raising if it cannot be read."""
    try:
        buf = os.urandom(1)
    except (OSError, NotImplementedError) as e:
        raise EntropyUnavailable(f"os.urandom is unavailable: read failed with {e!r}") from e
    if len(buf) != 1:
        raise EntropyUnavailable("os.urandom returned a short read")


def generate_random_bytes(n: int) -> bytes:
    """
    Return n securely generated random bytes.

    Raises EntropyUnavailable if the system's secure random number
    generator fails, in which case the caller should not continue.
    """
    try:
        return secrets.token_bytes(n)
    except (OSError, NotImplementedError) as e:
        raise EntropyUnavailable(f"Unable to read {n} random bytes: {e}") from e


def generate_random_string(n: int) -> str:
    """Return n characters drawn uniformly from ALPHABET."""
    try:
        return "".join(secrets.choice(ALPHABET) for _ in range(n))
    except (OSError, NotImplementedError) as e:
        raise EntropyUnavailable(f"Unable to draw {n} random characters: {e}") from e


def generate_random_string_url_safe(n: int) -> str:
    """Return n random bytes as padded URL-safe base64."""
    return base64.urlsafe_b64encode(generate_random_bytes(n)).decode("ascii")


def generate(length: int, encoding: Encoding) -> str:
    """
    Return a new secret value of the given length and encoding.

    ALPHABET yields ``length`` characters; URL_SAFE yields ``length`` random
    bytes as padded base64. Raises ValueError for a non-positive length and
    EntropyUnavailable if the random source fails.
    """
    if length <= 0:
        raise ValueError(f"Secret length must be positive, got {length}")
    if encoding is Encoding.ALPHABET:
        return generate_random_string(length)
    return generate_random_string_url_safe(length)
