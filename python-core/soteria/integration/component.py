"""
Encryptor facade.

Binds an engine to a secret provider and handles the text transport, so
record and file collaborators only deal with ``encrypt``/``decrypt``.
"""

import logging
from typing import Any, Optional, Union

from ..crypto.engine import AuthenticatedCipher
from ..crypto.envelope import decode_text, encode_text
from ..crypto.errors import ConfigurationError, DecryptionFailure
from .config import EncryptorConfig
from .key_provider import SecretProvider, provider_from_config

logger = logging.getLogger(__name__)


class Encryptor:
    """
    Encrypts and decrypts values with a provided secret.

    Example:
        >>> encryptor = Encryptor.from_config(EncryptorConfig(key="key"))
        >>> token = encryptor.encrypt("text")
        >>> encryptor.decrypt_text(token)
        'text'
    """

    def __init__(
        self,
        engine: AuthenticatedCipher,
        secret_provider: SecretProvider,
        base64_transport: bool = True,
    ):
        self._engine = engine
        self._secret_provider = secret_provider
        self.base64_transport = base64_transport

    @classmethod
    def from_config(cls, config: EncryptorConfig, kms_client: Any = None) -> 'Encryptor':
        """Build engine and secret provider from configuration."""
        config.validate()
        engine = AuthenticatedCipher(
            cipher=config.cipher,
            kdf_hash=config.kdf_hash,
            mac_hash=config.mac_hash,
        )
        provider = provider_from_config(config, kms_client=kms_client)
        logger.info(f"Encryptor configured with {engine.cipher} ({config.key_source} key)")
        return cls(engine, provider, base64_transport=config.base64_transport)

    @property
    def engine(self) -> AuthenticatedCipher:
        return self._engine

    def encrypt(self, value: Union[str, bytes], base64_encode: Optional[bool] = None) -> Union[str, bytes]:
        """
        Encrypt a value.

        Args:
            value: Plaintext bytes, or text encoded as UTF-8
            base64_encode: Override the configured text transport

        Returns:
            Base64 text when the transport is enabled, raw envelope bytes otherwise
        """
        if isinstance(value, str):
            value = value.encode('utf-8')
        elif not isinstance(value, (bytes, bytearray)):
            raise ConfigurationError(
                f"Value to encrypt must be str or bytes, {type(value).__name__} given"
            )

        envelope = self._engine.encrypt(bytes(value), self._secret_provider.get_secret())

        use_base64 = self.base64_transport if base64_encode is None else base64_encode
        return encode_text(envelope) if use_base64 else envelope

    def decrypt(self, value: Union[str, bytes], base64_decode: Optional[bool] = None) -> bytes:
        """
        Decrypt a value produced by ``encrypt``.

        Raises:
            InvalidFormat: On corrupt base64 or a truncated envelope
            AuthenticationFailure: On a wrong secret or tampered value
        """
        use_base64 = self.base64_transport if base64_decode is None else base64_decode
        if use_base64:
            envelope = decode_text(value)
        elif isinstance(value, (bytes, bytearray)):
            envelope = bytes(value)
        else:
            raise ConfigurationError(
                f"Raw envelope must be bytes, {type(value).__name__} given"
            )

        return self._engine.decrypt(envelope, self._secret_provider.get_secret())

    def decrypt_text(self, value: Union[str, bytes], base64_decode: Optional[bool] = None) -> str:
        """
        Decrypt and decode the plaintext as UTF-8.

        Raises:
            DecryptionFailure: If the authenticated plaintext is not UTF-8 text
        """
        plaintext = self.decrypt(value, base64_decode)
        try:
            return plaintext.decode('utf-8')
        except UnicodeDecodeError as exc:
            raise DecryptionFailure("Decrypted value is not UTF-8 text; use decrypt() for binary data") from exc
