"""
S-box Analysis

This module scores substitution functions for their resistance to
differential and linear cryptanalysis. An S-box is given as a flat lookup
table (entry v is the output for input value v) or as an S-box object
whose lookup_table() method produces one.
"""

import logging
from typing import Dict, Optional, Sequence, Union

import numpy as np

from .substitution import SubstitutionTable

logger = logging.getLogger(__name__)

# A flat lookup table, or an S-box that can produce one
SBoxLike = Union[Sequence[int], SubstitutionTable]


def _as_lookup_table(sbox: SBoxLike, output_bits: Optional[int]):
    if isinstance(sbox, SubstitutionTable):
        lookup_table = getattr(sbox, 'lookup_table', None)
        if lookup_table is None:
            raise ValueError(f"{type(sbox).__name__} has no input coordinate function to analyse")
        if output_bits is None:
            output_bits = sbox.width
        sbox = lookup_table()

    table = np.asarray(sbox, dtype=np.int64)
    if table.ndim != 1 or table.size == 0 or table.size & (table.size - 1):
        raise ValueError("S-box lookup table must have a power of two number of entries")
    if table.min() < 0:
        raise ValueError("S-box outputs must be non-negative")

    if output_bits is None:
        output_bits = max(int(table.max()).bit_length(), 1)
    if table.max() >= 1 << output_bits:
        raise ValueError(f"S-box outputs must fit in {output_bits} bits")
    return table, 1 << output_bits


def _parity(values: np.ndarray) -> np.ndarray:
    parity = np.zeros_like(values)
    remaining = values.copy()
    while remaining.any():
        parity ^= remaining & 1
        remaining >>= 1
    return parity


def difference_distribution_table(sbox: SBoxLike,
                                  output_bits: Optional[int] = None) -> np.ndarray:
    """
    Calculate the difference distribution table (DDT) of an S-box.

    ddt[dx, dy] counts the inputs x for which S(x) ^ S(x ^ dx) == dy.

    Args:
        sbox: Flat lookup table, or an S-box with a lookup_table() method
        output_bits: Output width (default: inferred from the largest entry)

    Returns:
        Integer matrix of shape (inputs, 2 ** output_bits)
    """
    table, n_out = _as_lookup_table(sbox, output_bits)
    x = np.arange(table.size)

    ddt = np.zeros((table.size, n_out), dtype=np.int32)
    for dx in range(table.size):
        dy = table ^ table[x ^ dx]
        ddt[dx] = np.bincount(dy, minlength=n_out)

    return ddt


def differential_uniformity(sbox: SBoxLike, output_bits: Optional[int] = None) -> int:
    """
    Largest DDT entry for a non-zero input difference.

    Lower values indicate better resistance to differential cryptanalysis.
    """
    ddt = difference_distribution_table(sbox, output_bits)
    return int(np.max(ddt[1:, :]))


def linear_approximation_table(sbox: SBoxLike,
                               output_bits: Optional[int] = None) -> np.ndarray:
    """
    Calculate the linear approximation table (LAT) of an S-box.

    lat[a, b] is the number of inputs x for which the parity of x & a
    equals the parity of S(x) & b, minus half the number of inputs.

    Args:
        sbox: Flat lookup table, or an S-box with a lookup_table() method
        output_bits: Output width (default: inferred from the largest entry)

    Returns:
        Integer matrix of shape (inputs, 2 ** output_bits)
    """
    table, n_out = _as_lookup_table(sbox, output_bits)
    x = np.arange(table.size)

    input_parity = np.stack([_parity(x & a) for a in range(table.size)])
    output_parity = np.stack([_parity(table & b) for b in range(n_out)])

    matches = (input_parity[:, np.newaxis, :] == output_parity[np.newaxis, :, :]).sum(axis=-1)
    return (matches - table.size // 2).astype(np.int32)


def linear_bias(sbox: SBoxLike, output_bits: Optional[int] = None) -> float:
    """
    Largest absolute LAT entry for non-zero masks, normalised to [0, 1].

    Lower values indicate better resistance to linear cryptanalysis.
    """
    lat = linear_approximation_table(sbox, output_bits)
    return float(np.max(np.abs(lat[1:, 1:]))) / (lat.shape[0] // 2)


def evaluate_sbox(sbox: SBoxLike, output_bits: Optional[int] = None) -> Dict[str, float]:
    """
    Evaluate an S-box for cryptographic properties.

    Args:
        sbox: Flat lookup table, or an S-box with a lookup_table() method
        output_bits: Output width (default: inferred from the largest entry)

    Returns:
        A dictionary of scores (lower is better)
    """
    diff_score = differential_uniformity(sbox, output_bits)
    linear_score = linear_bias(sbox, output_bits)
    logger.debug(f"S-box scores: differential={diff_score}, linear={linear_score:.3f}")

    return {
        'differential': diff_score,
        'linear': linear_score,
    }
