import hashlib

import pytest

from feistelcipher.kdf_km import (derive_key, generate_key, generate_salt, genkey,
                                  read_key_file, write_key_file)

# Small Argon2id parameters to keep the tests fast
FAST_KDF = {'time_cost': 1, 'memory_cost': 8, 'parallelism': 1}


def test_genkey_is_md5_prefix():
    key = genkey("password")

    assert isinstance(key, bytearray)
    assert key == hashlib.md5(b"password").digest()[:8]
    assert genkey(b"password") == key, "Text and UTF-8 bytes should give the same key"
    assert genkey("password", 16) == hashlib.md5(b"password").digest()


def test_genkey_validation():
    with pytest.raises(ValueError):
        genkey(None)
    with pytest.raises(ValueError):
        genkey("password", 17)
    with pytest.raises(ValueError):
        genkey("password", 0)


def test_generate_key():
    first, second = generate_key(), generate_key()

    assert len(first) == 8
    assert first != second, "Random keys should differ"


def test_generate_salt():
    assert len(generate_salt()) == 16
    assert len(generate_salt(32)) == 32


def test_derive_key():
    salt = b'\x00' * 16

    key = derive_key("password", salt, **FAST_KDF)

    assert len(key) == 8
    assert derive_key("password", salt, **FAST_KDF) == key, "Derivation should be deterministic"
    assert derive_key("password", b'\x01' * 16, **FAST_KDF) != key, "Salt should change the key"
    assert derive_key("Password", salt, **FAST_KDF) != key
    assert len(derive_key("password", salt, hash_len=32, **FAST_KDF)) == 32


def test_key_file_round_trip(tmp_path):
    path = tmp_path / 'key.bin'
    key = genkey("password")

    write_key_file(path, key)

    assert path.read_bytes() == key
    assert read_key_file(path) == key


def test_key_file_reads_prefix(tmp_path):
    path = tmp_path / 'key.bin'
    path.write_bytes(bytes(range(16)))

    assert read_key_file(path) == bytes(range(8))


def test_short_key_file(tmp_path):
    path = tmp_path / 'key.bin'
    path.write_bytes(b'\x01\x02\x03')

    with pytest.raises(ValueError):
        read_key_file(path)


def test_missing_key_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_key_file(tmp_path / 'missing.bin')
