"""
Bit Utilities Package

This package implements the bit-addressable buffer every cipher component
operates on, and the closeable key capability built on top of it.
"""

from .bit_buffer import BitBuffer
from .key import Key

__all__ = ['BitBuffer', 'Key']
