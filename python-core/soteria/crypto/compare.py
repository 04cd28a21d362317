"""
Constant-time comparison of authentication tags.

Neither function reveals, through its running time, where the first
differing byte of the two inputs is.
"""

from cryptography.hazmat.primitives import constant_time

from .errors import require_bytes


def compare(expected: bytes, actual: bytes) -> bool:
    """
    Compare two byte strings in constant time.

    Uses the native primitive shipped with ``cryptography``.

    Raises:
        ConfigurationError: If either input is not a byte string
    """
    expected = require_bytes(expected, "Expected value")
    actual = require_bytes(actual, "Actual value")
    return constant_time.bytes_eq(expected, actual)


def compare_portable(expected: bytes, actual: bytes) -> bool:
    """
    Pure Python constant-time comparison.

    A NUL sentinel is appended to both inputs so neither is empty. The loop
    walks every byte of the longer input, indexing the shorter one modulo its
    length, and folds the XORs and the length difference into one value. The
    step count depends only on the lengths.

    Raises:
        ConfigurationError: If either input is not a byte string
    """
    expected = require_bytes(expected, "Expected value") + b"\x00"
    actual = require_bytes(actual, "Actual value") + b"\x00"

    longer, shorter = (expected, actual) if len(expected) >= len(actual) else (actual, expected)
    diff = len(expected) - len(actual)
    for i in range(len(longer)):
        diff |= longer[i] ^ shorter[i % len(shorter)]

    return diff == 0
