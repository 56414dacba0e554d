"""
Key Schedule Package

This package implements the incremental key schedule that turns a key into
per-round keys, forward for encryption and backward for decryption.
"""

from .rotation_schedule import RotatingKeySchedule, DES_ROTATIONS

__all__ = ['RotatingKeySchedule', 'DES_ROTATIONS']
