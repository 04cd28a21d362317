"""
Unit Tests for the Soteria Authenticated Cipher

This module contains unit tests for envelope encryption and decryption,
covering round trips, tamper detection, wrong secrets and a known-answer
envelope rebuilt from independent primitives.
"""

import pytest
import sys
from pathlib import Path

from cryptography.hazmat.primitives import hashes, hmac, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

# Add source root to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent / 'python-core'))

from soteria.crypto import (
    AuthenticatedCipher,
    AuthenticationFailure,
    CipherSpec,
    ConfigurationError,
    CryptoError,
    DecryptionFailure,
    HashAlgorithm,
    InvalidFormat,
    serialize,
)


def _reference_envelope(spec, secret, plaintext, key_salt, iv):
    """Build an envelope step by step with raw cryptography primitives."""
    key = HKDF(algorithm=hashes.SHA256(), length=spec.key_size, salt=key_salt, info=b"").derive(secret)
    auth_key = HKDF(algorithm=hashes.SHA256(), length=spec.key_size, salt=None,
                    info=b"AuthorizationKey").derive(key)

    padder = padding.PKCS7(128).padder()
    padded = padder.update(plaintext) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()

    h = hmac.HMAC(auth_key, hashes.SHA256())
    h.update(iv + ciphertext)
    return key_salt + h.finalize() + iv + ciphertext


class TestCipherSpec:
    """Test cases for cipher variant lookup."""

    @pytest.mark.parametrize("name,block_size,key_size", [
        ("AES-128-CBC", 16, 16),
        ("AES-192-CBC", 16, 24),
        ("AES-256-CBC", 16, 32),
    ])
    def test_supported_variants(self, name, block_size, key_size):
        spec = CipherSpec.from_name(name)
        assert spec.cipher_name == name
        assert spec.block_size == block_size
        assert spec.key_size == key_size
        assert str(spec) == name

    def test_lookup_is_case_insensitive(self):
        assert CipherSpec.from_name("aes-256-cbc") is CipherSpec.AES_256_CBC

    @pytest.mark.parametrize("name", ["AES-256-GCM", "DES-CBC", "", "AES-512-CBC"])
    def test_unknown_variant_rejected(self, name):
        with pytest.raises(ConfigurationError) as exc_info:
            CipherSpec.from_name(name)
        assert exc_info.value.code == 1001

    def test_non_string_rejected(self):
        with pytest.raises(ConfigurationError):
            CipherSpec.from_name(128)

    def test_engine_rejects_unknown_variant(self):
        with pytest.raises(ConfigurationError):
            AuthenticatedCipher("AES-128-ECB")


class TestAuthenticatedCipher:
    """Test cases run against every supported cipher variant."""

    def test_round_trip(self, engine, secret):
        plaintext = b"Secret message for envelope encryption"
        envelope = engine.encrypt(plaintext, secret)
        assert engine.decrypt(envelope, secret) == plaintext

    def test_empty_plaintext(self, engine, secret):
        envelope = engine.encrypt(b"", secret)
        assert len(envelope) == engine.minimum_envelope_length + 16
        assert engine.decrypt(envelope, secret) == b""

    def test_block_aligned_plaintext_gets_full_padding_block(self, engine, secret):
        envelope = engine.encrypt(b"x" * 32, secret)
        assert len(envelope) == engine.envelope_length(32)
        assert len(envelope) == engine.cipher.key_size + 32 + 16 + 48

    def test_envelope_layout_sizes(self, engine, secret):
        envelope = engine.encrypt(b"hello", secret)
        spec = engine.cipher
        ciphertext_length = len(envelope) - spec.key_size - engine.mac_length - spec.block_size
        assert ciphertext_length > 0
        assert ciphertext_length % spec.block_size == 0

    def test_non_deterministic(self, engine, secret):
        plaintext = b"Same plaintext"
        first = engine.encrypt(plaintext, secret)
        second = engine.encrypt(plaintext, secret)
        assert first != second
        assert engine.decrypt(first, secret) == plaintext
        assert engine.decrypt(second, secret) == plaintext

    def test_wrong_secret(self, engine, secret):
        envelope = engine.encrypt(b"payload", secret)
        with pytest.raises(AuthenticationFailure):
            engine.decrypt(envelope, b"another secret")

    @pytest.mark.parametrize("region", ["mac", "iv", "ciphertext"])
    def test_tamper_detected(self, engine, secret, region):
        envelope = bytearray(engine.encrypt(b"payload to protect", secret))
        key_size = engine.cipher.key_size
        offsets = {
            "mac": key_size,
            "iv": key_size + engine.mac_length,
            "ciphertext": key_size + engine.mac_length + engine.cipher.block_size,
        }
        envelope[offsets[region]] ^= 0x01
        with pytest.raises(AuthenticationFailure):
            engine.decrypt(bytes(envelope), secret)

    def test_tampered_salt_fails_authentication(self, engine, secret):
        envelope = bytearray(engine.encrypt(b"payload", secret))
        envelope[0] ^= 0x80
        with pytest.raises(AuthenticationFailure):
            engine.decrypt(bytes(envelope), secret)

    def test_truncated_ciphertext_fails_authentication(self, engine, secret):
        envelope = engine.encrypt(b"x" * 40, secret)
        with pytest.raises(AuthenticationFailure):
            engine.decrypt(envelope[:-16], secret)

    def test_short_envelope(self, engine, secret):
        minimum = engine.minimum_envelope_length
        assert minimum == engine.cipher.key_size + 32 + 16
        for length in (0, 1, minimum - 1):
            with pytest.raises(InvalidFormat):
                engine.decrypt(b"\x00" * length, secret)

    def test_minimum_length_envelope_fails_authentication(self, engine, secret):
        with pytest.raises(AuthenticationFailure):
            engine.decrypt(b"\x00" * engine.minimum_envelope_length, secret)

    @pytest.mark.parametrize("bad", ["text", 42, None])
    def test_non_bytes_plaintext_rejected(self, engine, secret, bad):
        with pytest.raises(ConfigurationError):
            engine.encrypt(bad, secret)

    @pytest.mark.parametrize("bad", ["key", 42, None])
    def test_non_bytes_secret_rejected(self, engine, bad):
        with pytest.raises(ConfigurationError):
            engine.encrypt(b"data", bad)
        with pytest.raises(TypeError):
            engine.decrypt(b"\x00" * 100, bad)

    def test_non_bytes_envelope_rejected(self, engine, secret):
        with pytest.raises(ConfigurationError):
            engine.decrypt("not bytes", secret)

    def test_empty_secret_round_trip(self, engine):
        envelope = engine.encrypt(b"data", b"")
        assert engine.decrypt(envelope, b"") == b"data"

    def test_errors_share_base_class(self, engine, secret):
        envelope = engine.encrypt(b"data", secret)
        with pytest.raises(CryptoError):
            engine.decrypt(envelope, b"wrong")


class TestKnownAnswer:
    """Deterministic envelopes compared with an independent construction."""

    def test_concrete_scenario(self):
        """secret "key", plaintext "text" under AES-128-CBC/HMAC-SHA-256."""
        engine = AuthenticatedCipher(CipherSpec.AES_128_CBC)
        envelope = engine.encrypt(b"text", b"key")

        assert len(envelope) == 80
        assert envelope != b"text"
        assert b"text" not in envelope[16 + 32 + 16:]
        assert engine.decrypt(envelope, b"key") == b"text"

    def test_matches_reference_construction(self, cipher_spec, fixed_random):
        key_salt = bytes(range(cipher_spec.key_size))
        iv = bytes(range(100, 100 + cipher_spec.block_size))
        source = fixed_random(key_salt, iv)
        engine = AuthenticatedCipher(cipher_spec, random_source=source)

        envelope = engine.encrypt(b"text", b"key")

        assert source.requests == [cipher_spec.key_size, cipher_spec.block_size]
        assert envelope == _reference_envelope(cipher_spec, b"key", b"text", key_salt, iv)
        assert envelope[:cipher_spec.key_size] == key_salt

    def test_decrypts_reference_envelope(self, cipher_spec):
        key_salt = b"\x11" * cipher_spec.key_size
        iv = b"\x22" * cipher_spec.block_size
        reference = _reference_envelope(cipher_spec, b"shared secret", b"field value", key_salt, iv)
        engine = AuthenticatedCipher(cipher_spec)
        assert engine.decrypt(reference, b"shared secret") == b"field value"

    def test_authenticated_but_unpaddable_body(self, fixed_random):
        """A body that authenticates but fails unpadding is a DecryptionFailure."""
        spec = CipherSpec.AES_128_CBC
        key_salt = b"\x01" * 16
        iv = b"\x02" * 16
        key = HKDF(algorithm=hashes.SHA256(), length=16, salt=key_salt, info=b"").derive(b"key")
        auth_key = HKDF(algorithm=hashes.SHA256(), length=16, salt=None,
                        info=b"AuthorizationKey").derive(key)

        # Encrypt a block whose final byte is not valid PKCS#7 padding
        encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(b"\x00" * 16) + encryptor.finalize()
        h = hmac.HMAC(auth_key, hashes.SHA256())
        h.update(iv + ciphertext)
        envelope = serialize(key_salt, h.finalize(), iv, ciphertext)

        with pytest.raises(DecryptionFailure):
            AuthenticatedCipher(spec).decrypt(envelope, b"key")


class TestHashConfiguration:
    """Test cases for non-default KDF and MAC hashes."""

    def test_sha512_mac_length(self, secret):
        engine = AuthenticatedCipher(CipherSpec.AES_256_CBC, mac_hash="sha512")
        assert engine.mac_length == 64
        envelope = engine.encrypt(b"data", secret)
        assert len(envelope) == 32 + 64 + 16 + 16
        assert engine.decrypt(envelope, secret) == b"data"

    def test_mismatched_configuration_fails(self, secret):
        sha256_engine = AuthenticatedCipher(CipherSpec.AES_128_CBC)
        sha384_kdf = AuthenticatedCipher(CipherSpec.AES_128_CBC, kdf_hash=HashAlgorithm.SHA384)
        envelope = sha256_engine.encrypt(b"data", secret)
        with pytest.raises(AuthenticationFailure):
            sha384_kdf.decrypt(envelope, secret)

    def test_unknown_hash_rejected(self):
        with pytest.raises(ConfigurationError):
            AuthenticatedCipher(mac_hash="md5")
