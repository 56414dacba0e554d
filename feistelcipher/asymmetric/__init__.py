"""
Asymmetric Cipher Package

This package provides textbook RSA, used to exchange symmetric keys.
"""

from .rsa import RSA, string_to_int, int_to_string, int_to_bytes

__all__ = ['RSA', 'string_to_int', 'int_to_string', 'int_to_bytes']
