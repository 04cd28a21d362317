"""
Soteria Key Derivation Module.

HKDF (RFC 5869) expansion of a secret into fixed-length subkeys, built on
the ``cryptography`` HKDF implementation.

Two derivations are used by the engine and must never be interchanged:

- Encryption key: input is the caller's secret, salt is the random
  per-envelope key salt, info is empty.
- Authentication key: input is the derived encryption key, no salt, info
  is ``AUTH_KEY_INFO``. The MAC key therefore depends on both the secret
  and the salt and is never the same value as the cipher key.

Example Usage:
    >>> from soteria.crypto.kdf import derive_encryption_key, derive_authentication_key
    >>> key = derive_encryption_key(b"secret", key_salt, 16)
    >>> auth_key = derive_authentication_key(key, 16)
"""

from enum import Enum
from typing import Optional

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from .errors import ConfigurationError, require_bytes

# Context label separating the MAC key from the cipher key
AUTH_KEY_INFO = b"AuthorizationKey"


class HashAlgorithm(Enum):
    """
    Hash functions usable for HKDF and HMAC.

    Usage:
        >>> HashAlgorithm.from_name("sha256").digest_size
        32
    """

    SHA256 = "sha256"
    SHA384 = "sha384"
    SHA512 = "sha512"

    @classmethod
    def from_name(cls, name) -> "HashAlgorithm":
        """Resolve a hash by name, e.g. ``"sha256"`` or ``"SHA-256"``."""
        if isinstance(name, cls):
            return name
        if not isinstance(name, str):
            raise ConfigurationError(
                f"Hash algorithm must be a string, {type(name).__name__} given"
            )
        normalized = name.strip().lower().replace("-", "")
        for member in cls:
            if member.value == normalized:
                return member
        raise ConfigurationError(
            f"Unsupported hash algorithm: {name}",
            details={"supported": [member.value for member in cls]},
        )

    def new(self) -> hashes.HashAlgorithm:
        """Return a fresh ``cryptography`` hash instance."""
        return {
            HashAlgorithm.SHA256: hashes.SHA256,
            HashAlgorithm.SHA384: hashes.SHA384,
            HashAlgorithm.SHA512: hashes.SHA512,
        }[self]()

    @property
    def digest_size(self) -> int:
        """Output length in bytes."""
        return self.new().digest_size


def hkdf(
    hash_algorithm: HashAlgorithm,
    input_key_material: bytes,
    salt: Optional[bytes],
    info: bytes,
    length: int,
) -> bytes:
    """
    Derive ``length`` bytes with HKDF.

    Deterministic: the same inputs always produce the same output. A salt of
    ``None`` means "absent" (RFC 5869 zero-filled salt).

    Args:
        hash_algorithm: Hash used by the HMAC inside HKDF
        input_key_material: Secret input keying material
        salt: Optional salt
        info: Context label for domain separation
        length: Desired output length in bytes

    Returns:
        Derived key bytes

    Raises:
        ConfigurationError: On non-bytes inputs or an impossible length
    """
    hash_algorithm = HashAlgorithm.from_name(hash_algorithm)
    input_key_material = require_bytes(input_key_material, "Input key material")
    info = require_bytes(info, "Context info")
    if salt is not None:
        salt = require_bytes(salt, "Salt")

    try:
        kdf = HKDF(
            algorithm=hash_algorithm.new(),
            length=length,
            salt=salt,
            info=info,
        )
        return kdf.derive(input_key_material)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(
            f"Invalid HKDF parameters: {exc}",
            details={"length": length, "hash": hash_algorithm.value},
        ) from exc


def derive_encryption_key(
    secret: bytes,
    key_salt: bytes,
    length: int,
    hash_algorithm: HashAlgorithm = HashAlgorithm.SHA256,
) -> bytes:
    """Derive the block cipher key from the caller's secret and the envelope salt."""
    return hkdf(hash_algorithm, secret, key_salt, b"", length)


def derive_authentication_key(
    encryption_key: bytes,
    length: int,
    hash_algorithm: HashAlgorithm = HashAlgorithm.SHA256,
) -> bytes:
    """Derive the MAC key from the already derived encryption key."""
    return hkdf(hash_algorithm, encryption_key, None, AUTH_KEY_INFO, length)
