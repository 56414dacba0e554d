"""
Substitution Tables

A substitution table maps a (column, row) coordinate pair to a fixed-width
bit pattern. It is the generic mechanism underneath cipher S-boxes; how the
coordinates are extracted from the input bits is left to subclasses.
"""

from typing import List, Sequence

import numpy as np

from ..util.bit_buffer import BitBuffer


class SubstitutionTable:
    """
    Immutable 2-D table of bit patterns.

    Lookups always hand out copies, so a caller can never alter the table.
    """

    def __init__(self, rows: Sequence[Sequence[int]], width: int):
        """
        Build a table from integer entries.

        Args:
            rows: Table rows; every row must have the same number of columns
            width: Width of each entry in bits (entries are stored most
                   significant bit first)

        Raises:
            ValueError: If the table is ragged or an entry does not fit width
        """
        if width <= 0:
            raise ValueError(f"Entry width must be positive: {width}")

        try:
            table = np.array(rows, dtype=np.int64)
        except ValueError as e:
            raise ValueError(f"Substitution table must be rectangular: {e}") from e
        if table.ndim != 2:
            raise ValueError("Substitution table must be rectangular")
        if table.size and (table.min() < 0 or table.max() >= 1 << width):
            raise ValueError(f"Substitution table entries must fit in {width} bits")

        shifts = np.arange(width - 1, -1, -1)
        entries = ((table[..., np.newaxis] >> shifts) & 1).astype(np.uint8)

        table.setflags(write=False)
        entries.setflags(write=False)
        self._values = table
        self._entries = entries
        self._width = width

    @property
    def rows(self) -> int:
        return int(self._values.shape[0])

    @property
    def columns(self) -> int:
        return int(self._values.shape[1])

    @property
    def width(self) -> int:
        return self._width

    def _check_bounds(self, x: int, y: int) -> None:
        if not (0 <= x < self.columns and 0 <= y < self.rows):
            raise IndexError(f"Coordinates ({x}, {y}) outside a {self.columns}x{self.rows} table")

    def value(self, x: int, y: int) -> int:
        """Entry on column x, row y as an integer."""
        self._check_bounds(x, y)
        return int(self._values[y, x])

    def get_element(self, x: int, y: int) -> BitBuffer:
        """
        Copy of the entry on column x, row y.

        Args:
            x: Column
            y: Row

        Returns:
            A new BitBuffer owned by the caller
        """
        self._check_bounds(x, y)
        return BitBuffer.from_bits(self._entries[y, x])

    def replace(self, bits: BitBuffer, x: int, y: int) -> None:
        """
        Overwrite bits with the entry on column x, row y.

        Args:
            bits: Buffer to replace
            x: Column
            y: Row
        """
        with self.get_element(x, y) as element:
            bits.replace(element)

    def to_list(self) -> List[List[int]]:
        """Table entries as nested lists of integers."""
        return self._values.tolist()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.rows}x{self.columns}, width={self._width})"
