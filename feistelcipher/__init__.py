"""
feistelcipher - Feistel Network Block Cipher Library

This library implements a generic Feistel network engine and instantiates
it as the Data Encryption Standard, streamed in CBC mode.

Key Features:
- Bit-addressable buffers that scrub themselves when released
- Permutation and substitution tables as immutable objects
- Abstract Feistel engine with pluggable permutations, key schedule and
  round function
- DES with the FIPS 46-3 tables and rotating key schedule
- CBC stream encryption with a random IV and block padding
- MD5 and Argon2id key derivation, key files
- Textbook RSA for key exchange
- S-box differential and linear analysis

"""

from .cipher_core import Cipher, FeistelCipher
from .des import DES
from .util import BitBuffer, Key

__version__ = '0.1.0'
__author__ = 'feistelcipher Team'

__all__ = ['Cipher', 'FeistelCipher', 'DES', 'BitBuffer', 'Key']
