"""
Key Derivation Function and Key Management Package

This package derives cipher keys from passwords (MD5 digest or Argon2id)
or random data, and reads and writes key files.
"""

from .key_management import (genkey, generate_key, generate_salt, derive_key,
                             write_key_file, read_key_file,
                             DEFAULT_KEY_BYTES, KDF_DEFAULT_PARAMS)

__all__ = ['genkey', 'generate_key', 'generate_salt', 'derive_key',
           'write_key_file', 'read_key_file', 'DEFAULT_KEY_BYTES', 'KDF_DEFAULT_PARAMS']
