"""
RSA Key Pair

Textbook RSA over arbitrary precision integers, used to exchange small
secrets such as a DES key. There is no padding scheme: a message must be
smaller than the modulus.
"""

import logging
import secrets
from typing import Tuple, Union

from Cryptodome.Util.number import GCD, getPrime, inverse

logger = logging.getLogger(__name__)

PublicKeyPair = Tuple[int, int]
Message = Union[int, bytes, bytearray, str]


class RSA:
    """
    RSA key pair generated from two random primes.
    """

    def __init__(self, num_bits: int):
        """
        Generate a key pair.

        Args:
            num_bits: Size of each prime p and q in bits

        Raises:
            ValueError: If num_bits is too small to yield a usable modulus
        """
        if num_bits < 16:
            raise ValueError(f"Primes must be at least 16 bits, not {num_bits}")

        p = getPrime(num_bits, randfunc=secrets.token_bytes)
        q = getPrime(num_bits, randfunc=secrets.token_bytes)
        while q == p:
            q = getPrime(num_bits, randfunc=secrets.token_bytes)

        self._n = p * q
        phi = (p - 1) * (q - 1)

        # Public exponent: random, below phi and coprime with it
        e = secrets.randbelow(phi)
        while e < 3 or GCD(e, phi) != 1:
            e = secrets.randbelow(phi)

        self._e = e
        self._d = inverse(e, phi)
        logger.debug(f"Generated RSA key pair with a {self._n.bit_length()}-bit modulus")

    @property
    def n(self) -> int:
        """Modulus, n = p * q."""
        return self._n

    @property
    def e(self) -> int:
        """Public exponent."""
        return self._e

    @property
    def public_key_pair(self) -> PublicKeyPair:
        """The public key as an (n, e) pair."""
        return self._n, self._e

    @staticmethod
    def encrypt(public_key_pair: PublicKeyPair, msg: Message) -> int:
        """
        Encrypt a message with someone's public key.

        Args:
            public_key_pair: Recipient's (n, e)
            msg: Integer, bytes (big-endian) or text (UTF-8)

        Returns:
            The ciphertext as an integer

        Raises:
            ValueError: If the message does not fit below the modulus
        """
        n, e = public_key_pair
        if isinstance(msg, str):
            msg = string_to_int(msg)
        elif isinstance(msg, (bytes, bytearray)):
            msg = int.from_bytes(msg, 'big')

        if not 0 <= msg < n:
            raise ValueError("Message must be a non-negative integer smaller than the modulus")
        return pow(msg, e, n)

    def decrypt(self, msg: int) -> int:
        """Decrypt a ciphertext produced with this instance's public key."""
        return pow(msg, self._d, self._n)

    def __repr__(self) -> str:
        return f"RSA(modulus_bits={self._n.bit_length()})"


def string_to_int(msg: str) -> int:
    """Integer holding the UTF-8 bytes of a string, big-endian."""
    return int.from_bytes(msg.encode('utf-8'), 'big')


def int_to_bytes(msg: int) -> bytes:
    """Minimal big-endian rendering of a non-negative integer."""
    return msg.to_bytes((msg.bit_length() + 7) // 8, 'big')


def int_to_string(msg: int) -> str:
    """Decode an integer produced by string_to_int()."""
    return int_to_bytes(msg).decode('utf-8')
