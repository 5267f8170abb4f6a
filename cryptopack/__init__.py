"""
Cryptopack.

Small cryptographic toolkit for applications that need to:
- Store passwords irreversibly and verify them later
- Sign data with RSA and verify signatures
- Encrypt text with a password

Basic Usage:
    >>> from cryptopack import StoredPassword, symmetric, signatures
    >>>
    >>> stored = str(StoredPassword.from_plain_text("123"))
    >>> StoredPassword.try_from_string(stored).check("123")
    True
    >>>
    >>> private_key = signatures.generate_private_key()
    >>> public_key = signatures.public_key_from_private_key(private_key)
    >>> signature = signatures.sign_data("hello", private_key)
    >>> signatures.verify_data("hello", signature, public_key)
    True
    >>>
    >>> encrypted = symmetric.encrypt("secret text", "password")
    >>> symmetric.decrypt(encrypted, "password")
    'secret text'
"""

import logging

__version__ = "1.0.0"
__author__ = "Cryptopack Team"

from . import hashing, passwords, signatures, symmetric

# Password storage
from .passwords import (
    StoredPassword,
    MalformedCredentialError,
    DEFAULT_ITERATIONS,
)

# Digital signatures
from .signatures import (
    PrivateKey,
    PublicKey,
    KeyFormatError,
    generate_private_key,
    public_key_from_private_key,
    sign_data,
    verify_data,
)

# Symmetric encryption
from .symmetric import DecryptionError, password_from_public_key

# Configuration
from .config import CryptopackConfig, ConfigError

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    '__version__',

    # Modules
    'hashing',
    'passwords',
    'signatures',
    'symmetric',

    # Password storage
    'StoredPassword',
    'MalformedCredentialError',
    'DEFAULT_ITERATIONS',

    # Digital signatures
    'PrivateKey',
    'PublicKey',
    'KeyFormatError',
    'generate_private_key',
    'public_key_from_private_key',
    'sign_data',
    'verify_data',

    # Symmetric encryption
    'DecryptionError',
    'password_from_public_key',

    # Configuration
    'CryptopackConfig',
    'ConfigError',
]
