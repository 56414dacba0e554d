"""
Permutation Tables

A permutation table describes fixed wiring between bits: applying it to a
buffer makes output bit i the input bit at table[i]. Tables may select
(PC-1), compress (PC-2), expand (E) or reorder (IP, P) bits.
"""

from typing import Iterator, Sequence

import numpy as np

from ..util.bit_buffer import BitBuffer


class PermutationTable:
    """
    Immutable bit selection table.
    """

    def __init__(self, indices: Sequence[int]):
        """
        Build a table from 0-based source bit indices.

        Args:
            indices: Source bit for each output bit

        Raises:
            ValueError: If the table is not flat or holds negative indices
        """
        table = np.array(indices, dtype=np.intp)
        if table.ndim != 1:
            raise ValueError("Permutation table must be a flat sequence of bit indices")
        if table.size and table.min() < 0:
            raise ValueError("Permutation table indices must be non-negative")

        table.setflags(write=False)
        self._table = table

    @classmethod
    def from_one_based(cls, positions: Sequence[int]) -> 'PermutationTable':
        """
        Build a table from 1-based positions, as published in FIPS 46-3.

        Args:
            positions: 1-based source bit for each output bit

        Returns:
            The equivalent 0-based table
        """
        return cls([position - 1 for position in positions])

    def permute(self, buffer: BitBuffer) -> None:
        """
        Rearrange the buffer in place according to this table.

        The buffer should be at least input_width bits wide; missing bits
        read as zero.

        Args:
            buffer: Buffer to permute
        """
        buffer.rearrange(self._table)

    @property
    def input_width(self) -> int:
        """Smallest buffer width the table reads from."""
        return int(self._table.max()) + 1 if self._table.size else 0

    def is_bijective(self) -> bool:
        """True when the table reorders bits without dropping or repeating any."""
        return np.array_equal(np.sort(self._table), np.arange(self._table.size))

    def inverse(self) -> 'PermutationTable':
        """
        Table undoing this one.

        Raises:
            ValueError: If the table is not a bijection
        """
        if not self.is_bijective():
            raise ValueError("Only a bijective permutation table can be inverted")

        inverse = np.empty_like(self._table)
        inverse[self._table] = np.arange(self._table.size)
        return PermutationTable(inverse)

    def __len__(self) -> int:
        return int(self._table.size)

    def __getitem__(self, i: int) -> int:
        return int(self._table[i])

    def __iter__(self) -> Iterator[int]:
        return (int(i) for i in self._table)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PermutationTable):
            return NotImplemented
        return np.array_equal(self._table, other._table)

    __hash__ = None

    def __repr__(self) -> str:
        return f"PermutationTable({self._table.tolist()})"
