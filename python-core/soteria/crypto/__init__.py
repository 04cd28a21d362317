"""
Soteria Cryptographic Core.

Field-level authenticated symmetric encryption: a secret and a plaintext
become a self-describing, tamper-evident envelope.

Modules:
    engine: AuthenticatedCipher orchestrating the operations below
    kdf: HKDF key derivation with domain separation
    compare: Constant-time tag comparison
    envelope: Envelope binary layout and base64 text transport
    random: Cryptographically secure random bytes
    errors: Error hierarchy

Usage:
    >>> from soteria.crypto import AuthenticatedCipher, CipherSpec
    >>> cipher = AuthenticatedCipher(CipherSpec.AES_128_CBC)
    >>> envelope = cipher.encrypt(b"text", b"key")
    >>> len(envelope)
    80
    >>> cipher.decrypt(envelope, b"key")
    b'text'
"""

from .engine import AuthenticatedCipher, CipherSpec
from .kdf import (
    AUTH_KEY_INFO,
    HashAlgorithm,
    hkdf,
    derive_encryption_key,
    derive_authentication_key,
)
from .compare import compare, compare_portable
from .envelope import Envelope, serialize, parse, minimum_length, encode_text, decode_text
from .random import SecureRandom, generate_random_bytes
from .errors import (
    CryptoError,
    ConfigurationError,
    InvalidLength,
    EncryptionFailure,
    AuthenticationFailure,
    DecryptionFailure,
    InvalidFormat,
    KeyResolutionError,
)

__all__ = [
    # Core engine
    "AuthenticatedCipher",
    "CipherSpec",
    # Key derivation
    "AUTH_KEY_INFO",
    "HashAlgorithm",
    "hkdf",
    "derive_encryption_key",
    "derive_authentication_key",
    # Comparison
    "compare",
    "compare_portable",
    # Envelope codec
    "Envelope",
    "serialize",
    "parse",
    "minimum_length",
    "encode_text",
    "decode_text",
    # Randomness
    "SecureRandom",
    "generate_random_bytes",
    # Errors
    "CryptoError",
    "ConfigurationError",
    "InvalidLength",
    "EncryptionFailure",
    "AuthenticationFailure",
    "DecryptionFailure",
    "InvalidFormat",
    "KeyResolutionError",
]
