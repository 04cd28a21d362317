"""
Soteria Authenticated Encryption Engine.

This module turns a caller-supplied secret and a plaintext byte string into
a self-describing, tamper-evident envelope, and reverses that transformation
only when both the secret and the envelope are intact.

Construction:
    - AES in CBC mode with PKCS#7 padding (128, 192 or 256-bit keys)
    - Per-envelope random key salt and IV from the OS random source
    - Encryption key: HKDF(secret, salt=key_salt, info="")
    - Authentication key: HKDF(encryption_key, no salt, info="AuthorizationKey")
    - Tag: HMAC over ``iv + ciphertext`` (encrypt-then-MAC)

Envelope layout::

    key_salt (key_size) | mac (mac_length) | iv (block_size) | ciphertext

Decryption verifies the tag in constant time before the cipher ever sees
the ciphertext.

Example Usage:
    >>> from soteria.crypto import AuthenticatedCipher, CipherSpec
    >>> cipher = AuthenticatedCipher(CipherSpec.AES_256_CBC)
    >>> envelope = cipher.encrypt(b"Secret message", b"my secret")
    >>> cipher.decrypt(envelope, b"my secret")
    b'Secret message'
"""

import logging
from enum import Enum
from typing import Optional, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hmac, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .compare import compare
from .envelope import minimum_length, parse, serialize
from .errors import (
    AuthenticationFailure,
    ConfigurationError,
    DecryptionFailure,
    EncryptionFailure,
    InvalidFormat,
    require_bytes,
)
from .kdf import HashAlgorithm, derive_authentication_key, derive_encryption_key
from .random import SecureRandom

logger = logging.getLogger(__name__)


class CipherSpec(Enum):
    """
    Supported block cipher variants.

    Each member carries its canonical name, block size and key size in bytes.

    Usage:
        >>> CipherSpec.from_name("AES-192-CBC").key_size
        24
    """

    AES_128_CBC = ("AES-128-CBC", 16, 16)
    AES_192_CBC = ("AES-192-CBC", 16, 24)
    AES_256_CBC = ("AES-256-CBC", 16, 32)

    def __init__(self, cipher_name: str, block_size: int, key_size: int):
        self.cipher_name = cipher_name
        self.block_size = block_size
        self.key_size = key_size

    def __str__(self) -> str:
        return self.cipher_name

    @classmethod
    def from_name(cls, name: Union[str, "CipherSpec"]) -> "CipherSpec":
        """
        Resolve a cipher by its canonical name (case-insensitive).

        Raises:
            ConfigurationError: If the name is not one of the supported variants
        """
        if isinstance(name, cls):
            return name
        if not isinstance(name, str):
            raise ConfigurationError(
                f"Cipher name must be a string, {type(name).__name__} given"
            )
        for member in cls:
            if member.cipher_name == name.strip().upper():
                return member
        raise ConfigurationError(
            f"Unsupported cipher: {name}",
            details={"supported": [member.cipher_name for member in cls]},
        )


class AuthenticatedCipher:
    """
    Encrypt-then-MAC engine over AES-CBC and HMAC.

    Instances hold only immutable configuration and may be shared between
    threads. Every call is self-contained.

    Attributes:
        cipher: The configured CipherSpec
        kdf_hash: Hash used by both HKDF derivations
        mac_hash: Hash used by the HMAC tag
    """

    def __init__(
        self,
        cipher: Union[CipherSpec, str] = CipherSpec.AES_128_CBC,
        kdf_hash: Union[HashAlgorithm, str] = HashAlgorithm.SHA256,
        mac_hash: Union[HashAlgorithm, str] = HashAlgorithm.SHA256,
        random_source: Optional[SecureRandom] = None,
    ):
        """
        Initialize the engine.

        Args:
            cipher: Cipher variant or its name
            kdf_hash: Hash for key derivation
            mac_hash: Hash for the authentication tag
            random_source: Object providing ``generate_random_bytes(length)``

        Raises:
            ConfigurationError: If the cipher or a hash is unsupported, or the
                runtime backend cannot provide the cipher
        """
        self._cipher = CipherSpec.from_name(cipher)
        self._kdf_hash = HashAlgorithm.from_name(kdf_hash)
        self._mac_hash = HashAlgorithm.from_name(mac_hash)
        self._random = random_source if random_source is not None else SecureRandom()

        self._check_backend()
        logger.debug(
            "Authenticated cipher initialized: %s, kdf=%s, mac=%s",
            self._cipher.cipher_name, self._kdf_hash.value, self._mac_hash.value,
        )

    def _check_backend(self) -> None:
        """Probe the runtime for the configured cipher."""
        spec = self._cipher
        try:
            Cipher(
                algorithms.AES(bytes(spec.key_size)),
                modes.CBC(bytes(spec.block_size)),
            ).encryptor()
        except UnsupportedAlgorithm as exc:
            logger.error("Cipher %s not available in crypto backend", spec.cipher_name)
            raise ConfigurationError(
                f"Cipher {spec.cipher_name} is not supported by the crypto backend",
                details={"cipher": spec.cipher_name},
            ) from exc

    @property
    def cipher(self) -> CipherSpec:
        return self._cipher

    @property
    def kdf_hash(self) -> HashAlgorithm:
        return self._kdf_hash

    @property
    def mac_hash(self) -> HashAlgorithm:
        return self._mac_hash

    @property
    def mac_length(self) -> int:
        """Tag length in bytes (32 for HMAC-SHA-256)."""
        return self._mac_hash.digest_size

    @property
    def minimum_envelope_length(self) -> int:
        spec = self._require_cipher()
        return minimum_length(spec.key_size, self.mac_length, spec.block_size)

    def envelope_length(self, plaintext_length: int) -> int:
        """Exact envelope size for a plaintext of the given length."""
        block_size = self._require_cipher().block_size
        padded = (plaintext_length // block_size + 1) * block_size
        return self.minimum_envelope_length + padded

    def _require_cipher(self) -> CipherSpec:
        if not isinstance(self._cipher, CipherSpec):
            raise ConfigurationError(f"Unsupported cipher: {self._cipher!r}")
        return self._cipher

    def encrypt(self, plaintext: bytes, secret: bytes) -> bytes:
        """
        Encrypt plaintext under a secret.

        Args:
            plaintext: Data to encrypt
            secret: Opaque secret bytes, used only as HKDF input

        Returns:
            Envelope bytes: ``key_salt | mac | iv | ciphertext``

        Raises:
            ConfigurationError: On non-bytes inputs
            EncryptionFailure: If the block cipher rejects the inputs
        """
        spec = self._require_cipher()
        plaintext = require_bytes(plaintext, "Plaintext")
        secret = require_bytes(secret, "Secret")

        key_salt = self._random.generate_random_bytes(spec.key_size)
        key = derive_encryption_key(secret, key_salt, spec.key_size, self._kdf_hash)

        iv = self._random.generate_random_bytes(spec.block_size)
        ciphertext = self._encrypt_block(plaintext, key, iv)

        auth_key = derive_authentication_key(key, spec.key_size, self._kdf_hash)
        mac = self._compute_mac(iv + ciphertext, auth_key)

        logger.debug("Encrypted %d bytes with %s", len(plaintext), spec.cipher_name)
        return serialize(key_salt, mac, iv, ciphertext)

    def decrypt(self, envelope: bytes, secret: bytes) -> bytes:
        """
        Authenticate and decrypt an envelope.

        Args:
            envelope: Bytes produced by ``encrypt``
            secret: The secret used for encryption

        Returns:
            The original plaintext

        Raises:
            ConfigurationError: On non-bytes inputs
            InvalidFormat: If the envelope is shorter than the minimum length
            AuthenticationFailure: If the tag does not verify (wrong secret
                or tampered envelope, not distinguished)
            DecryptionFailure: If the block cipher fails after authentication
        """
        spec = self._require_cipher()
        secret = require_bytes(secret, "Secret")
        try:
            parts = parse(envelope, spec.key_size, self.mac_length, spec.block_size)
        except InvalidFormat:
            logger.warning("Rejected malformed envelope for %s", spec.cipher_name)
            raise

        key = derive_encryption_key(secret, parts.key_salt, spec.key_size, self._kdf_hash)
        auth_key = derive_authentication_key(key, spec.key_size, self._kdf_hash)

        expected_mac = self._compute_mac(parts.body, auth_key)
        if not compare(parts.mac, expected_mac):
            logger.warning("Envelope authentication failed for %s", spec.cipher_name)
            raise AuthenticationFailure("Envelope authentication failed")

        plaintext = self._decrypt_block(parts.ciphertext, key, parts.iv)
        logger.debug("Decrypted %d bytes with %s", len(plaintext), spec.cipher_name)
        return plaintext

    def _compute_mac(self, message: bytes, key: bytes) -> bytes:
        h = hmac.HMAC(key, self._mac_hash.new())
        h.update(message)
        return h.finalize()

    def _encrypt_block(self, plaintext: bytes, key: bytes, iv: bytes) -> bytes:
        """AES-CBC encrypt with PKCS#7 padding."""
        try:
            padder = padding.PKCS7(algorithms.AES.block_size).padder()
            padded = padder.update(plaintext) + padder.finalize()

            encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
            return encryptor.update(padded) + encryptor.finalize()
        except (ValueError, TypeError) as exc:
            logger.error("Block cipher encryption failed: %s", exc)
            raise EncryptionFailure(
                f"{self._cipher.cipher_name} encryption failed: {exc}",
                details={"cipher": self._cipher.cipher_name},
            ) from exc

    def _decrypt_block(self, ciphertext: bytes, key: bytes, iv: bytes) -> bytes:
        """AES-CBC decrypt and strip PKCS#7 padding."""
        try:
            decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
            padded = decryptor.update(ciphertext) + decryptor.finalize()

            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            return unpadder.update(padded) + unpadder.finalize()
        except (ValueError, TypeError) as exc:
            logger.error("Block cipher decryption failed: %s", exc)
            raise DecryptionFailure(
                f"{self._cipher.cipher_name} decryption failed",
                details={"cipher": self._cipher.cipher_name},
            ) from exc
