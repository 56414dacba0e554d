import pytest

from feistelcipher.des import DES
from feistelcipher.kdf_km import genkey

# Classic DES worked example
KAT_KEY = bytes.fromhex('133457799BBCDFF1')
KAT_PLAINTEXT = bytes.fromhex('0123456789ABCDEF')
KAT_CIPHERTEXT = bytes.fromhex('85E813540F0AB405')


@pytest.fixture
def des():
    return DES()


@pytest.fixture
def password_key():
    """8-byte MD5 key of "password"."""
    return bytes(genkey("password"))


def readable(n):
    """n bytes of printable text; no byte can be mistaken for padding."""
    return bytes(ord('a') + i % 26 for i in range(n))
