"""
Soteria integration layer.

Everything around the engine: configuration, secret acquisition, the
Encryptor facade, record hooks and file helpers.
"""

from .config import EncryptorConfig, KEY_SOURCE_STATIC, KEY_SOURCE_KMS
from .key_provider import (
    SecretProvider,
    StaticSecretProvider,
    KmsSecretProvider,
    provider_from_config,
)
from .component import Encryptor
from .fields import FieldEncryptor
from .files import encrypt_file, decrypt_file

__all__ = [
    'EncryptorConfig',
    'KEY_SOURCE_STATIC',
    'KEY_SOURCE_KMS',
    'SecretProvider',
    'StaticSecretProvider',
    'KmsSecretProvider',
    'provider_from_config',
    'Encryptor',
    'FieldEncryptor',
    'encrypt_file',
    'decrypt_file',
]
