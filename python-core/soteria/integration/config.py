"""
Encryptor configuration.

Configuration is resolved once at the application boundary and handed to
the engine as explicit values; nothing below this layer reads global
state.

Sources:
    - Defaults (``EncryptorConfig.default()``)
    - A JSON settings file (``EncryptorConfig.from_json_file``)
    - Environment variables (``EncryptorConfig.from_env``), e.g.
      ``SOTERIA_CIPHER``, ``SOTERIA_KEY``, ``SOTERIA_KEY_SOURCE``,
      ``SOTERIA_WRAPPED_KEY``, ``SOTERIA_BASE64_TRANSPORT``
"""

import os
import json
import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from ..crypto.engine import CipherSpec
from ..crypto.errors import ConfigurationError
from ..crypto.kdf import HashAlgorithm

logger = logging.getLogger(__name__)

KEY_SOURCE_STATIC = "static"
KEY_SOURCE_KMS = "kms"
KEY_SOURCES = (KEY_SOURCE_STATIC, KEY_SOURCE_KMS)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class EncryptorConfig:
    """Configuration for an Encryptor."""
    cipher: str = "AES-128-CBC"
    kdf_hash: str = "sha256"
    mac_hash: str = "sha256"
    key_source: str = KEY_SOURCE_STATIC
    key: Optional[str] = None
    wrapped_key: Optional[str] = None
    base64_transport: bool = True

    def __repr__(self) -> str:
        # Secrets stay out of logs and tracebacks
        return (
            f"EncryptorConfig(cipher={self.cipher!r}, kdf_hash={self.kdf_hash!r}, "
            f"mac_hash={self.mac_hash!r}, key_source={self.key_source!r}, "
            f"base64_transport={self.base64_transport!r})"
        )

    @classmethod
    def default(cls) -> 'EncryptorConfig':
        """Get default configuration."""
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'EncryptorConfig':
        """
        Create configuration from a dictionary.

        Raises:
            ConfigurationError: On unknown keys
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration keys: {', '.join(unknown)}",
                details={"unknown": unknown},
            )
        values = dict(data)
        if "base64_transport" in values:
            values["base64_transport"] = _parse_bool(values["base64_transport"], "base64_transport")
        return cls(**values)

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> 'EncryptorConfig':
        """Load configuration from a JSON settings file."""
        path = Path(path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(
                f"Invalid JSON in configuration file {path}: {exc}"
            ) from exc

        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file {path} must contain a JSON object")

        logger.debug("Loaded encryptor configuration from %s", path)
        return cls.from_dict(data)

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        prefix: str = "SOTERIA_",
    ) -> 'EncryptorConfig':
        """Build configuration from ``PREFIX_<FIELD>`` environment variables."""
        environ = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        for f in fields(cls):
            name = prefix + f.name.upper()
            if name in environ:
                values[f.name] = environ[name]
        return cls.from_dict(values)

    def validate(self) -> 'EncryptorConfig':
        """
        Check that every value is supported.

        Returns:
            self, for chaining

        Raises:
            ConfigurationError: On the first invalid value
        """
        CipherSpec.from_name(self.cipher)
        HashAlgorithm.from_name(self.kdf_hash)
        HashAlgorithm.from_name(self.mac_hash)

        if self.key_source not in KEY_SOURCES:
            raise ConfigurationError(
                f"Unsupported key source: {self.key_source}",
                details={"supported": list(KEY_SOURCES)},
            )
        if self.key_source == KEY_SOURCE_STATIC and not self.key:
            raise ConfigurationError("A static key is required when key_source is 'static'")
        if self.key_source == KEY_SOURCE_KMS and not self.wrapped_key:
            raise ConfigurationError("A wrapped key is required when key_source is 'kms'")
        return self


def _parse_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
    raise ConfigurationError(f"Invalid boolean for {name}: {value!r}")
