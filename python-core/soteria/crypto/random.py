"""
Cryptographically secure random byte generation.

All randomness used by the engine (key salts and IVs) comes from the
operating system CSPRNG via ``os.urandom``. Failures of the entropy source
are not retried; the ``OSError`` reaches the caller unchanged.
"""

import os
import logging

from .errors import InvalidLength

logger = logging.getLogger(__name__)


def generate_random_bytes(length: int) -> bytes:
    """
    Return ``length`` bytes from the OS random source.

    Args:
        length: Number of bytes to generate, at least 1

    Returns:
        Random bytes of exactly ``length`` bytes

    Raises:
        InvalidLength: If length is not an integer or is smaller than 1
    """
    if isinstance(length, bool) or not isinstance(length, int):
        raise InvalidLength(
            f"Random length must be an integer, {type(length).__name__} given",
            details={"length": repr(length)},
        )
    if length < 1:
        raise InvalidLength(
            f"Random length must be greater than 0, got {length}",
            details={"length": length},
        )
    return os.urandom(length)


class SecureRandom:
    """
    Injectable random source.

    The engine only calls ``generate_random_bytes``; tests substitute an
    object with the same method to obtain deterministic envelopes.
    """

    def generate_random_bytes(self, length: int) -> bytes:
        """Return ``length`` bytes from the OS random source."""
        return generate_random_bytes(length)
