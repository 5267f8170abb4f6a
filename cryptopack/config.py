"""
Configuration management for Cryptopack.

Keeps a signing key pair in a configuration directory so applications and
the keygen tool can share it. Key file parsing and writing are delegated to
the signatures module.
"""

import logging
import os
from typing import Optional

from .signatures import (
    DEFAULT_KEY_SIZE,
    KeyFormatError,
    PrivateKey,
    generate_private_key,
    load_key_file,
    public_key_from_private_key,
    save_key_file,
)


logger = logging.getLogger(__name__)

PRIVATE_KEY_FILE = "private_key.json"
PUBLIC_KEY_FILE = "public_key.json"


class ConfigError(Exception):
    """Raised when configuration operations fail."""
    pass


class CryptopackConfig:
    """
    Simple configuration manager for Cryptopack.

    Handles storing and loading the private signing key and its public key.
    """

    def __init__(self, config_dir: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_dir: Directory for configuration files. Defaults to ~/.cryptopack/
        """
        if config_dir is None:
            config_dir = os.path.expanduser("~/.cryptopack")

        self.config_dir = config_dir
        self.private_key_path = os.path.join(config_dir, PRIVATE_KEY_FILE)
        self.public_key_path = os.path.join(config_dir, PUBLIC_KEY_FILE)

        os.makedirs(config_dir, exist_ok=True)

    def get_private_key(self) -> str:
        """
        Load the stored private key.

        Returns:
            JSON serialized private key

        Raises:
            ConfigError: If the key cannot be loaded
        """
        if not os.path.exists(self.private_key_path):
            raise ConfigError(f"Private key file not found: {self.private_key_path}")

        try:
            key = load_key_file(self.private_key_path)
            PrivateKey.from_json(key)
            return key
        except KeyFormatError as e:
            raise ConfigError(f"Invalid private key format: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to load private key: {e}") from e

    def get_public_key(self) -> str:
        """
        Load the public key, deriving it from the private key if needed.

        Raises:
            ConfigError: If neither key can be loaded
        """
        if os.path.exists(self.public_key_path):
            try:
                return load_key_file(self.public_key_path)
            except KeyFormatError as e:
                raise ConfigError(f"Invalid public key format: {e}") from e
            except OSError as e:
                raise ConfigError(f"Failed to load public key: {e}") from e

        return public_key_from_private_key(self.get_private_key())

    def set_private_key(self, private_key: str) -> None:
        """
        Store a private key and its public key.

        Args:
            private_key: JSON serialized private key

        Raises:
            ConfigError: If the key is invalid or cannot be saved
        """
        try:
            PrivateKey.from_json(private_key).to_cryptography()
        except KeyFormatError as e:
            raise ConfigError(f"Invalid private key: {e}") from e

        try:
            save_key_file(self.private_key_path, private_key, private=True)
            save_key_file(self.public_key_path,
                          public_key_from_private_key(private_key), private=False)
        except OSError as e:
            raise ConfigError(f"Failed to save private key: {e}") from e

        logger.info("Private key saved to: %s", self.private_key_path)

    def set_private_key_from_file(self, source_file: str) -> None:
        """
        Copy a private key from another file.

        Raises:
            ConfigError: If the source file cannot be read or the key is invalid
        """
        try:
            private_key = load_key_file(source_file)
        except FileNotFoundError as e:
            raise ConfigError(f"Source key file not found: {source_file}") from e
        except KeyFormatError as e:
            raise ConfigError(f"Invalid source key format: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to read source key: {e}") from e

        self.set_private_key(private_key)

    def create_new_private_key(self, key_size: int = DEFAULT_KEY_SIZE) -> str:
        """
        Generate and store a new private key.

        Returns:
            The generated JSON serialized private key
        """
        try:
            private_key = generate_private_key(key_size)
        except ValueError as e:
            raise ConfigError(f"Failed to create private key: {e}") from e

        self.set_private_key(private_key)
        return private_key

    def key_exists(self) -> bool:
        """Check if a private key file exists."""
        return os.path.exists(self.private_key_path)
