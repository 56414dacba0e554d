"""
DES Package

This package instantiates the Feistel engine as the Data Encryption
Standard, with its permutation tables, S-boxes and key rotation schedule.
"""

from .des_cipher import DES
from .des_tables import DESTables
from .sbox import SBox

__all__ = ['DES', 'DESTables', 'SBox']
