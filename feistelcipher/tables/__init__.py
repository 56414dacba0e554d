"""
Tables Package

This package implements the fixed lookup structures of a block cipher:
permutation tables that rewire bits and substitution tables behind S-boxes,
along with tools to score S-boxes.
"""

from .permutation import PermutationTable
from .substitution import SubstitutionTable
from .analysis import (difference_distribution_table, differential_uniformity,
                       linear_approximation_table, linear_bias, evaluate_sbox)

__all__ = [
    'PermutationTable', 'SubstitutionTable',
    'difference_distribution_table', 'differential_uniformity',
    'linear_approximation_table', 'linear_bias', 'evaluate_sbox',
]
