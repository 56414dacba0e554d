"""
DES S-box

A DES S-box maps 6 input bits to 4 output bits. The outer bits (0 and 5)
select the row and the inner bits (1 to 4) select the column of a 4x16
table.
"""

from typing import List, Sequence

from ..tables.substitution import SubstitutionTable
from ..util.bit_buffer import BitBuffer


class SBox(SubstitutionTable):
    """
    DES substitution box.
    """

    INPUT_SIZE = 6
    OUTPUT_SIZE = 4
    ROWS = 4
    COLUMNS = 16

    def __init__(self, rows: Sequence[Sequence[int]]):
        super().__init__(rows, self.OUTPUT_SIZE)
        if (self.rows, self.columns) != (self.ROWS, self.COLUMNS):
            raise ValueError(f"DES S-box must be {self.ROWS}x{self.COLUMNS}, not {self.rows}x{self.columns}")

    @staticmethod
    def row(bits: BitBuffer) -> int:
        """Row coordinate: bit 0 is the high bit, bit 5 the low bit."""
        return (bits.get(0) << 1) | bits.get(5)

    @staticmethod
    def column(bits: BitBuffer) -> int:
        """Column coordinate: bits 1 to 4, bit 1 being the high bit."""
        return (bits.get(1) << 3) | (bits.get(2) << 2) | (bits.get(3) << 1) | bits.get(4)

    def substitute(self, bits: BitBuffer) -> None:
        """
        Replace a 6-bit group with its 4-bit S-box output, in place.

        Args:
            bits: Group to substitute
        """
        self.replace(bits, self.column(bits), self.row(bits))

    def lookup(self, value: int) -> int:
        """S-box output for a 6-bit input given as an integer (bit 0 first)."""
        row = ((value >> 4) & 0b10) | (value & 0b1)
        column = (value >> 1) & 0b1111
        return self.value(column, row)

    def lookup_table(self) -> List[int]:
        """Outputs for all 64 inputs, as used by the S-box analysis."""
        return [self.lookup(value) for value in range(1 << self.INPUT_SIZE)]
