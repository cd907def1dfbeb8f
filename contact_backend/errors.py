"""
Exception types raised by the contact backend.
"""

from __future__ import annotations


class ContactBackendError(Exception):
    """Base class for errors raised by this package."""


class ConfigurationError(ContactBackendError):
    """Raised when required settings are missing or unsafe."""


class DecryptionError(ContactBackendError):
    """Raised when the submission store cannot be authenticated or decoded."""
