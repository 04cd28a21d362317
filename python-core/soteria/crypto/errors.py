"""
Soteria Error Hierarchy.

Every failure raised by the encryption engine derives from ``CryptoError``
and carries a numeric code for programmatic handling.

Error Code Categories:
    - 1xxx: Configuration errors (unknown cipher, bad input types)
    - 2xxx: Random source errors
    - 3xxx: Encryption errors
    - 4xxx: Decryption and verification errors
    - 5xxx: Secret acquisition errors

Example:
    >>> try:
    ...     plaintext = cipher.decrypt(envelope, secret)
    ... except AuthenticationFailure as e:
    ...     log_error(f"Crypto error {e.code}: {e.message}")
"""

from typing import Any, Dict, Optional


class CryptoError(Exception):
    """
    Base exception for cryptographic errors.

    Attributes:
        message: Human-readable description of the error
        code: Numeric code identifying the error type
        details: Extra non-secret context
    """

    default_code = 1000

    def __init__(self, message: str, code: Optional[int] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.code = code if code is not None else self.default_code
        self.details = details or {}

    def __str__(self) -> str:
        return f"{self.message} (Code: {self.code})"


class ConfigurationError(CryptoError, TypeError):
    """Unsupported cipher variant, wrong input type or missing capability."""

    default_code = 1001


class InvalidLength(CryptoError, ValueError):
    """Requested random byte length is smaller than one."""

    default_code = 2001


class EncryptionFailure(CryptoError):
    """The block cipher primitive rejected the encryption inputs."""

    default_code = 3001


class AuthenticationFailure(CryptoError):
    """
    The envelope tag did not verify.

    Raised both for a wrong secret and for a tampered envelope; the two
    cases are deliberately indistinguishable.
    """

    default_code = 4001


class DecryptionFailure(CryptoError):
    """The block cipher primitive failed on an authenticated body."""

    default_code = 4002


class InvalidFormat(CryptoError, ValueError):
    """Envelope is too short or its text transport encoding is corrupt."""

    default_code = 4003


class KeyResolutionError(CryptoError):
    """A secret provider could not produce the raw secret bytes."""

    default_code = 5001


def require_bytes(value, name: str) -> bytes:
    """
    Return ``value`` as ``bytes``, accepting bytes or bytearray only.

    Raises:
        ConfigurationError: For any other type, including ``str``
    """
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    raise ConfigurationError(
        f"{name} must be bytes, {type(value).__name__} given"
    )
