"""
Whole-file encryption helpers.

Files on disk hold raw envelope bytes; the text transport is never applied
here.
"""

import logging
from pathlib import Path
from typing import Union

from .component import Encryptor

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _write(destination: Path, data: bytes) -> Path:
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_bytes(data)
    return destination


def encrypt_file(encryptor: Encryptor, source: PathLike, destination: PathLike) -> Path:
    """Encrypt ``source`` into ``destination`` and return the destination path."""
    source, destination = Path(source), Path(destination)
    envelope = encryptor.encrypt(source.read_bytes(), base64_encode=False)
    logger.info(f"Encrypted {source} -> {destination}")
    return _write(destination, envelope)


def decrypt_file(encryptor: Encryptor, source: PathLike, destination: PathLike) -> Path:
    """
    Decrypt ``source`` into ``destination``.

    Nothing is written if authentication fails.
    """
    source, destination = Path(source), Path(destination)
    plaintext = encryptor.decrypt(source.read_bytes(), base64_decode=False)
    logger.info(f"Decrypted {source} -> {destination}")
    return _write(destination, plaintext)
