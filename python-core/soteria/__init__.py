"""
Soteria - field-level authenticated encryption.

Subpackages:
    crypto: Authenticated encryption engine and primitives
    integration: Configuration, secret providers, record and file helpers

Version: 1.0.0
"""

from . import crypto
from . import integration

__all__ = ['crypto', 'integration']

__version__ = "1.0.0"
