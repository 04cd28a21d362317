"""
Envelope binary layout.

An envelope is the concatenation, in fixed order, of::

    key_salt (key_size) | mac (mac_length) | iv (block_size) | ciphertext

Parsing is fixed-offset slicing on raw bytes. The optional base64 text
transport wraps a whole envelope for text columns or JSON documents.
"""

import base64
import binascii
from dataclasses import dataclass
from typing import Union

from .errors import ConfigurationError, InvalidFormat, require_bytes

_ASCII_WHITESPACE = b" \t\n\r\x0b\x0c"


@dataclass(frozen=True)
class Envelope:
    """
    Parsed envelope components.

    Attributes:
        key_salt: Random salt fed to the encryption key derivation
        mac: HMAC tag over ``iv + ciphertext``
        iv: CBC initialization vector
        ciphertext: Padded block cipher output
    """

    key_salt: bytes
    mac: bytes
    iv: bytes
    ciphertext: bytes

    @property
    def body(self) -> bytes:
        """The authenticated region, ``iv + ciphertext``."""
        return self.iv + self.ciphertext

    def to_bytes(self) -> bytes:
        return serialize(self.key_salt, self.mac, self.iv, self.ciphertext)

    @classmethod
    def from_bytes(cls, data: bytes, key_size: int, mac_length: int, block_size: int) -> "Envelope":
        return parse(data, key_size, mac_length, block_size)


def minimum_length(key_size: int, mac_length: int, block_size: int) -> int:
    """Smallest byte length a parseable envelope can have."""
    return key_size + mac_length + block_size


def serialize(key_salt: bytes, mac: bytes, iv: bytes, ciphertext: bytes) -> bytes:
    """Concatenate the envelope components in layout order."""
    return bytes(key_salt) + bytes(mac) + bytes(iv) + bytes(ciphertext)


def parse(data: bytes, key_size: int, mac_length: int, block_size: int) -> Envelope:
    """
    Split raw envelope bytes at fixed offsets.

    Raises:
        ConfigurationError: If ``data`` is not a byte string
        InvalidFormat: If ``data`` is shorter than the minimum length
    """
    data = require_bytes(data, "Envelope")

    required = minimum_length(key_size, mac_length, block_size)
    if len(data) < required:
        raise InvalidFormat(
            f"Envelope too short: {len(data)} bytes, at least {required} required",
            details={"length": len(data), "minimum": required},
        )

    mac_end = key_size + mac_length
    iv_end = mac_end + block_size
    return Envelope(
        key_salt=data[:key_size],
        mac=data[key_size:mac_end],
        iv=data[mac_end:iv_end],
        ciphertext=data[iv_end:],
    )


def encode_text(envelope: bytes) -> str:
    """Wrap raw envelope bytes in standard base64 text."""
    return base64.b64encode(require_bytes(envelope, "Envelope")).decode("ascii")


def decode_text(text: Union[str, bytes]) -> bytes:
    """
    Reverse ``encode_text``.

    ASCII whitespace anywhere in the text (trailing newlines, wrapped
    lines) is ignored. Any other non-alphabet character is rejected.

    Raises:
        InvalidFormat: If the text is not valid base64
    """
    if isinstance(text, str):
        try:
            text = text.encode("ascii")
        except UnicodeEncodeError as exc:
            raise InvalidFormat("Envelope text is not valid base64") from exc
    elif not isinstance(text, (bytes, bytearray)):
        raise ConfigurationError(
            f"Envelope text must be str or bytes, {type(text).__name__} given"
        )

    text = bytes(text).translate(None, _ASCII_WHITESPACE)
    try:
        return base64.b64decode(text, validate=True)
    except binascii.Error as exc:
        raise InvalidFormat("Envelope text is not valid base64") from exc
