"""
DES Implementation

This module binds the Feistel engine to the Data Encryption Standard:
64-bit blocks, 16 rounds and a 56-bit key carried in 8 bytes (the parity
bits are ignored by PC-1).

    Cleartext (64) + Key (56) = Ciphertext (64)
"""

from typing import Optional

from ..cipher_core.feistel_cipher import FeistelCipher
from ..key_schedule.rotation_schedule import RotatingKeySchedule, DES_ROTATIONS
from ..util.bit_buffer import BitBuffer
from .des_tables import DESTables
from .sbox import SBox


class DES(FeistelCipher):
    """
    DES block cipher, streamed in CBC mode by the Feistel engine.
    """

    N_ROUNDS = 16
    BLOCK_SIZE = 64
    KEY_SIZE = 56
    KEY_WIDTH = 64

    def __init__(self, tables: Optional[DESTables] = None):
        """
        Initialize the cipher.

        Args:
            tables: DES tables to use (default: freshly built FIPS 46-3 tables)
        """
        super().__init__(self.N_ROUNDS, self.BLOCK_SIZE, self.KEY_WIDTH)

        self._tables = tables if tables is not None else DESTables.standard()
        self._key_schedule = RotatingKeySchedule(
            self._tables.pc1, self._tables.pc2, DES_ROTATIONS, self.KEY_SIZE)

    @property
    def tables(self) -> DESTables:
        return self._tables

    @property
    def key_schedule(self) -> RotatingKeySchedule:
        return self._key_schedule

    def initial_permutation(self, block: BitBuffer) -> None:
        self._tables.initial.permute(block)

    def round_key(self, key_state: BitBuffer, round_index: int) -> BitBuffer:
        return self._key_schedule.round_key(key_state, round_index)

    def round_key_decrypt(self, key_state: BitBuffer, round_index: int) -> BitBuffer:
        return self._key_schedule.round_key_decrypt(key_state, round_index)

    def f_function(self, right: BitBuffer, round_key: BitBuffer) -> BitBuffer:
        """
        DES round function.

        The right half is expanded to 48 bits and mixed with the round key;
        each 6-bit group goes through its S-box and the 32-bit result is
        permuted by P.

        Args:
            right: Right half of the block (left unchanged)
            round_key: 48-bit round key

        Returns:
            A new 32-bit buffer
        """
        output = BitBuffer(self.BLOCK_SIZE // 2)
        try:
            with right.clone() as expanded:
                self._tables.expansion.permute(expanded)
                expanded.xor(round_key)

                for i, sbox in enumerate(self._tables.sboxes):
                    start = i * SBox.INPUT_SIZE
                    with expanded.get_range(start, start + SBox.INPUT_SIZE) as group:
                        sbox.substitute(group)
                        output.overwrite(i * SBox.OUTPUT_SIZE, group, 0, SBox.OUTPUT_SIZE)

            self._tables.round_permutation.permute(output)
        except Exception:
            output.close()
            raise
        return output

    def final_permutation(self, block: BitBuffer) -> None:
        self._tables.final.permute(block)
