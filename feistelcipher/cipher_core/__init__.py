"""
Cipher Core Package

This package implements the core of the block cipher: the stream cipher
contract and the generic Feistel network with its round loop, key schedule
protocol, CBC-style chaining and padding.
"""

from .cipher import Cipher, KeyLike
from .feistel_cipher import FeistelCipher

__all__ = ['Cipher', 'KeyLike', 'FeistelCipher']
