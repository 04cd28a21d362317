"""
Secret acquisition.

The engine accepts only raw secret bytes. Providers are the boundary that
produces them, either from a static configured value or by unwrapping a
key blob through a KMS-style client.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Optional, Union

from ..crypto.envelope import decode_text
from ..crypto.errors import ConfigurationError, InvalidFormat, KeyResolutionError
from .config import KEY_SOURCE_KMS, KEY_SOURCE_STATIC, EncryptorConfig

logger = logging.getLogger(__name__)


class SecretProvider(ABC):
    """Abstract source of raw secret bytes."""

    @abstractmethod
    def get_secret(self) -> bytes:
        """Return the secret; raise KeyResolutionError on failure."""
        pass


class StaticSecretProvider(SecretProvider):
    """Secret supplied directly, as bytes or UTF-8 text."""

    def __init__(self, secret: Union[str, bytes]):
        if isinstance(secret, str):
            secret = secret.encode('utf-8')
        elif isinstance(secret, bytearray):
            secret = bytes(secret)
        elif not isinstance(secret, bytes):
            raise ConfigurationError(
                f"Secret must be str or bytes, {type(secret).__name__} given"
            )
        self._secret = secret

    def __repr__(self) -> str:
        return "StaticSecretProvider(<redacted>)"

    def get_secret(self) -> bytes:
        return self._secret


class KmsSecretProvider(SecretProvider):
    """
    Secret unwrapped by a key management service.

    The client is any object exposing ``decrypt(CiphertextBlob=...)`` and
    returning a mapping with a ``"Plaintext"`` entry, such as a boto3 KMS
    client. The wrapped key is base64 text by default.

    Attributes:
        cache: Whether the unwrapped secret is kept after the first call
    """

    def __init__(
        self,
        client: Any,
        wrapped_key: Union[str, bytes],
        base64_decode: bool = True,
        cache: bool = True,
    ):
        if client is None or not callable(getattr(client, "decrypt", None)):
            raise ConfigurationError("KMS client must provide a decrypt() method")
        self._client = client
        self._wrapped_key = wrapped_key
        self._base64_decode = base64_decode
        self.cache = cache
        self._cached: Optional[bytes] = None
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"KmsSecretProvider(cache={self.cache!r})"

    def _ciphertext_blob(self) -> bytes:
        if self._base64_decode:
            try:
                return decode_text(self._wrapped_key)
            except InvalidFormat as exc:
                raise KeyResolutionError("Wrapped key is not valid base64") from exc
        if isinstance(self._wrapped_key, str):
            return self._wrapped_key.encode('latin-1')
        return bytes(self._wrapped_key)

    def _unwrap(self) -> bytes:
        blob = self._ciphertext_blob()
        try:
            result = self._client.decrypt(CiphertextBlob=blob)
        except Exception as exc:
            logger.error("KMS key unwrap failed: %s", type(exc).__name__)
            raise KeyResolutionError(f"Invalid KMS decrypt key: {exc}") from exc

        try:
            plaintext = result["Plaintext"]
        except (KeyError, TypeError) as exc:
            raise KeyResolutionError("KMS response did not contain a plaintext key") from exc

        if isinstance(plaintext, str):
            plaintext = plaintext.encode('utf-8')
        if not isinstance(plaintext, (bytes, bytearray)) or not plaintext:
            raise KeyResolutionError("KMS response did not contain a plaintext key")

        logger.debug("Unwrapped secret through KMS client")
        return bytes(plaintext)

    def get_secret(self) -> bytes:
        if not self.cache:
            return self._unwrap()
        with self._lock:
            if self._cached is None:
                self._cached = self._unwrap()
            return self._cached

    def clear(self) -> None:
        """Drop the cached secret so the next call unwraps again."""
        with self._lock:
            self._cached = None


def provider_from_config(config: EncryptorConfig, kms_client: Any = None) -> SecretProvider:
    """
    Build the provider selected by ``config.key_source``.

    Raises:
        ConfigurationError: If the configuration is invalid or a KMS client
            is needed but missing
    """
    config.validate()
    if config.key_source == KEY_SOURCE_STATIC:
        return StaticSecretProvider(config.key)
    if config.key_source == KEY_SOURCE_KMS:
        if kms_client is None:
            raise ConfigurationError("key_source 'kms' requires a KMS client")
        return KmsSecretProvider(kms_client, config.wrapped_key)
    raise ConfigurationError(f"Unsupported key source: {config.key_source}")
