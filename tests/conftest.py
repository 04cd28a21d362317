# Soteria Test Configuration
# This file contains test settings and fixtures

import pytest
import sys
import os

# Add source root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'python-core'))

from soteria.crypto import AuthenticatedCipher, CipherSpec


class FixedRandom:
    """Random source replaying predetermined bytes, for known-answer tests."""

    def __init__(self, *chunks):
        self.chunks = list(chunks)
        self.requests = []

    def generate_random_bytes(self, length):
        self.requests.append(length)
        chunk = self.chunks.pop(0)
        assert len(chunk) == length
        return chunk


@pytest.fixture
def fixed_random():
    """Factory for deterministic random sources."""
    return FixedRandom


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


@pytest.fixture(scope="session")
def python_cli_path(project_root):
    """Return path to python-cli directory."""
    return os.path.join(project_root, 'python-cli')


@pytest.fixture(params=list(CipherSpec), ids=lambda spec: spec.cipher_name)
def cipher_spec(request):
    """Every supported cipher variant."""
    return request.param


@pytest.fixture
def engine(cipher_spec):
    """Engine for each supported cipher variant."""
    return AuthenticatedCipher(cipher_spec)


@pytest.fixture
def secret():
    return b"correct horse battery staple"


@pytest.fixture
def sample_data(tmp_path):
    """Provide a sample plaintext file."""
    data_file = tmp_path / "sample.txt"
    data_file.write_text("Hello, World! This is test data for Soteria encryption.")
    return data_file


@pytest.fixture
def sample_binary_data(tmp_path):
    """Provide sample binary data for testing."""
    binary_file = tmp_path / "sample.bin"
    binary_file.write_bytes(b'\x00\x01\x02\x03\x04\x05\xff\xfe\xfd')
    return binary_file
