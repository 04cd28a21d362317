"""
Record field encryption hooks.

Encrypts configured attributes of a record before it is saved and
decrypts them after it is loaded. Records may be mappings (keys) or plain
objects (attributes).
"""

import logging
import threading
from collections.abc import MutableMapping
from typing import Any, Iterable, Optional

from ..crypto.errors import ConfigurationError
from .component import Encryptor

logger = logging.getLogger(__name__)

EVENT_AFTER_FIND = "after_find"
EVENT_BEFORE_INSERT = "before_insert"
EVENT_BEFORE_UPDATE = "before_update"
EVENT_AFTER_INSERT = "after_insert"
EVENT_AFTER_UPDATE = "after_update"


class FieldEncryptor:
    """
    Lifecycle hooks for encrypted record attributes.

    ``encrypted_attributes`` are encrypted before every insert or update.
    Only attributes listed in both ``encrypted_attributes`` and
    ``decrypted_attributes`` are decrypted after find, insert or update;
    the rest stay as ciphertext until a caller decrypts them explicitly.
    ``None`` values are left untouched.

    Decrypted values are ``str`` unless the attribute is binary. An
    attribute is binary when listed in ``binary_attributes`` or once a
    ``bytes`` value has been encrypted for it through this instance.
    Records loaded in another process need ``binary_attributes``.
    """

    def __init__(
        self,
        encryptor: Encryptor,
        encrypted_attributes: Iterable[str],
        decrypted_attributes: Optional[Iterable[str]] = None,
        binary_attributes: Optional[Iterable[str]] = None,
    ):
        self._encryptor = encryptor
        self.encrypted_attributes = tuple(encrypted_attributes)
        self.decrypted_attributes = tuple(decrypted_attributes or ())
        self._binary_attributes = set(binary_attributes or ())
        self._lock = threading.Lock()
        self._handlers = {
            EVENT_AFTER_FIND: self.decrypt_record,
            EVENT_BEFORE_INSERT: self.encrypt_record,
            EVENT_BEFORE_UPDATE: self.encrypt_record,
            EVENT_AFTER_INSERT: self.decrypt_record,
            EVENT_AFTER_UPDATE: self.decrypt_record,
        }

    @property
    def binary_attributes(self) -> frozenset:
        with self._lock:
            return frozenset(self._binary_attributes)

    def handle_event(self, event: str, record: Any) -> Any:
        """
        Dispatch a lifecycle event to the matching hook.

        Raises:
            ConfigurationError: For an unknown event name
        """
        try:
            handler = self._handlers[event]
        except KeyError:
            raise ConfigurationError(
                f"Unknown record event: {event}",
                details={"supported": sorted(self._handlers)},
            )
        return handler(record)

    def encrypt_record(self, record: Any) -> Any:
        """Encrypt every configured attribute in place."""
        for attribute in self.encrypted_attributes:
            value = _get(record, attribute)
            if value is None:
                continue
            if isinstance(value, (bytes, bytearray)):
                with self._lock:
                    self._binary_attributes.add(attribute)
            _set(record, attribute, self._encryptor.encrypt(value))
        logger.debug("Encrypted %d attributes", len(self.encrypted_attributes))
        return record

    def decrypt_record(self, record: Any) -> Any:
        """
        Decrypt configured attributes that are also marked for decryption.

        Raises:
            DecryptionFailure: If a text attribute decrypts to non-UTF-8 data
        """
        binary = self.binary_attributes
        for attribute in self.encrypted_attributes:
            if attribute not in self.decrypted_attributes:
                continue
            value = _get(record, attribute)
            if value is None:
                continue
            if attribute in binary:
                _set(record, attribute, self._encryptor.decrypt(value))
            else:
                _set(record, attribute, self._encryptor.decrypt_text(value))
        return record


def _get(record: Any, attribute: str) -> Any:
    if isinstance(record, MutableMapping):
        return record.get(attribute)
    return getattr(record, attribute, None)


def _set(record: Any, attribute: str, value: Any) -> None:
    if isinstance(record, MutableMapping):
        record[attribute] = value
    else:
        setattr(record, attribute, value)
