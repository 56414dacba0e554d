"""
Key Derivation and Key Files

This module derives cipher keys from passwords or random data and stores
them in key files. The default derivation takes the first bytes of an MD5
digest; Argon2id is available for a slower, salted derivation.
"""

import hashlib
import logging
import os
import secrets
from typing import Union

import argon2
from argon2.low_level import Type

logger = logging.getLogger(__name__)

# Key width of DES in bytes
DEFAULT_KEY_BYTES = 8

# Default parameters for Argon2id
KDF_DEFAULT_PARAMS = {
    'time_cost': 4,       # Number of iterations
    'memory_cost': 65536, # 64 MB
    'parallelism': 4,     # Number of threads
    'hash_len': DEFAULT_KEY_BYTES,  # Output size in bytes
    'salt_len': 16        # Salt size in bytes
}


def _encode(password: Union[str, bytes, bytearray]) -> bytearray:
    if password is None:
        raise ValueError("Password cannot be None")
    if isinstance(password, str):
        return bytearray(password.encode('utf-8'))
    return bytearray(password)


def _wipe(buffer: bytearray) -> None:
    buffer[:] = b'\x00' * len(buffer)


def genkey(password: Union[str, bytes, bytearray], key_bytes: int = DEFAULT_KEY_BYTES) -> bytearray:
    """
    Derive a key from the MD5 digest of a password.

    Args:
        password: Password (text is encoded as UTF-8)
        key_bytes: Key length in bytes, at most 16

    Returns:
        The first key_bytes bytes of the digest
    """
    if not 0 < key_bytes <= hashlib.md5().digest_size:
        raise ValueError(f"MD5 keys must be between 1 and 16 bytes, not {key_bytes}")

    secret = _encode(password)
    try:
        digest = bytearray(hashlib.md5(secret).digest())
    finally:
        _wipe(secret)

    key = digest[:key_bytes]
    _wipe(digest)
    return key


def generate_key(key_bytes: int = DEFAULT_KEY_BYTES) -> bytearray:
    """
    Generate a random key.

    Random bytes are run through the same digest as password keys.

    Args:
        key_bytes: Key length in bytes, at most 16

    Returns:
        A random key
    """
    seed = bytearray(secrets.token_bytes(DEFAULT_KEY_BYTES))
    try:
        return genkey(seed, key_bytes)
    finally:
        _wipe(seed)


def generate_salt(length: int = KDF_DEFAULT_PARAMS['salt_len']) -> bytes:
    """
    Generate a cryptographically secure random salt.

    Args:
        length: Length of the salt in bytes

    Returns:
        Random salt as bytes
    """
    return secrets.token_bytes(length)


def derive_key(password: Union[str, bytes, bytearray],
               salt: bytes,
               time_cost: int = KDF_DEFAULT_PARAMS['time_cost'],
               memory_cost: int = KDF_DEFAULT_PARAMS['memory_cost'],
               parallelism: int = KDF_DEFAULT_PARAMS['parallelism'],
               hash_len: int = KDF_DEFAULT_PARAMS['hash_len']) -> bytearray:
    """
    Stretch a password into a cipher key with Argon2id.

    Slower than genkey() and salted, so the same password yields unrelated
    keys under different salts. The salt must be kept to derive the key again.

    Args:
        password: Password (text is encoded as UTF-8); the encoded copy is wiped
        salt: Random bytes from generate_salt(), 8 or more
        time_cost: Passes over the Argon2 memory
        memory_cost: Argon2 memory in KiB
        parallelism: Argon2 lanes
        hash_len: Key length in bytes, 8 for DES (Argon2 needs at least 4)

    Returns:
        The key, as a bytearray the caller can wipe
    """
    secret = _encode(password)
    try:
        derived_key = argon2.low_level.hash_secret_raw(
            secret=bytes(secret),
            salt=salt,
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            hash_len=hash_len,
            type=Type.ID  # Argon2id variant
        )
    finally:
        _wipe(secret)

    logger.info(f"Derived a {hash_len}-byte key with Argon2id")
    return bytearray(derived_key)


def write_key_file(path: Union[str, os.PathLike], key: Union[bytes, bytearray]) -> None:
    """
    Write raw key bytes to a file.

    Args:
        path: Destination file
        key: Key material
    """
    if key is None:
        raise ValueError("Key cannot be None")
    with open(path, 'wb') as f:
        f.write(key)
    logger.info(f"Wrote {len(key)}-byte key to {os.fspath(path)}")


def read_key_file(path: Union[str, os.PathLike], key_bytes: int = DEFAULT_KEY_BYTES) -> bytearray:
    """
    Read a key written by write_key_file().

    Only the first key_bytes bytes are used.

    Args:
        path: Key file
        key_bytes: Expected key length in bytes

    Returns:
        The key

    Raises:
        ValueError: If the file holds fewer than key_bytes bytes
    """
    key = bytearray(key_bytes)
    with open(path, 'rb') as f:
        n_read = f.readinto(key)

    if n_read != key_bytes:
        _wipe(key)
        raise ValueError(f"Key file {os.fspath(path)} must hold {key_bytes} bytes, found {n_read}")
    return key
