"""
Rotating-Halves Key Schedule

This module implements the key schedule used by DES: the key is compressed
once (PC-1), then before each round both halves of the state are rotated
left and a selection permutation (PC-2) picks the round key.

Decryption runs the same state machine backward. After all forward rounds
each half has turned a whole number of times, so the unrotated state is the
last forward state; rotating right by the mirrored amounts then yields the
round keys in reverse order without recomputing the schedule.
"""

from typing import List, Sequence

from ..tables.permutation import PermutationTable
from ..util.bit_buffer import BitBuffer

# Left rotation of each key half before each DES round
DES_ROTATIONS = (1, 1, 2, 2, 2, 2, 2, 2, 1, 2, 2, 2, 2, 2, 2, 1)


class RotatingKeySchedule:
    """
    Incremental key schedule over a state of two rotating halves.
    """

    def __init__(self,
                 compression: PermutationTable,
                 selection: PermutationTable,
                 rotations: Sequence[int] = DES_ROTATIONS,
                 state_size: int = 56):
        """
        Initialize the key schedule.

        Args:
            compression: Permutation applied to the key before round 0 (PC-1)
            selection: Permutation picking each round key from the state (PC-2)
            rotations: Left rotation of each half, one entry per round
            state_size: Width of the key schedule state in bits

        Raises:
            ValueError: If the tables and rotations do not fit together
        """
        if state_size <= 0 or state_size % 2:
            raise ValueError(f"Key schedule state must split into two halves: {state_size}")
        if len(compression) != state_size:
            raise ValueError(f"Compression table must produce {state_size} bits, not {len(compression)}")
        if not rotations:
            raise ValueError("Key schedule needs at least one round")

        half = state_size // 2
        if any(not 0 <= r <= half for r in rotations):
            raise ValueError(f"Rotations must be between 0 and {half} bits")
        if sum(rotations) % half:
            raise ValueError("Rotations must add up to whole turns of each half to be reversible")

        self._compression = compression
        self._selection = selection
        self._rotations = tuple(rotations)
        self._state_size = state_size
        self._half = half

    @property
    def n_rounds(self) -> int:
        return len(self._rotations)

    @property
    def rotations(self) -> Sequence[int]:
        return self._rotations

    def round_key(self, state: BitBuffer, round_index: int) -> BitBuffer:
        """
        Advance the state and return the key for an encryption round.

        Args:
            state: Key schedule state; holds the raw key before round 0
            round_index: Round number, starting at 0

        Returns:
            A new buffer holding the round key
        """
        if round_index == 0:
            self._compression.permute(state)

        self._rotate(state, self._rotations[round_index], backward=False)
        return self._select(state)

    def round_key_decrypt(self, state: BitBuffer, round_index: int) -> BitBuffer:
        """
        Move the state backward and return the key for a decryption round.

        Round r of decryption returns the key of encryption round
        n_rounds - 1 - r.

        Args:
            state: Key schedule state; holds the raw key before round 0
            round_index: Round number, starting at 0

        Returns:
            A new buffer holding the round key
        """
        if round_index == 0:
            self._compression.permute(state)
        else:
            self._rotate(state, self._rotations[self.n_rounds - round_index], backward=True)
        return self._select(state)

    def round_keys(self, key: BitBuffer, decrypt: bool = False) -> List[BitBuffer]:
        """
        Compute every round key for a key, in the order they are used.

        Args:
            key: Raw key bits (left unchanged)
            decrypt: Produce the decryption order

        Returns:
            A list of new buffers; the caller must close them
        """
        next_key = self.round_key_decrypt if decrypt else self.round_key
        with key.clone() as state:
            return [next_key(state, round_index) for round_index in range(self.n_rounds)]

    def _rotate(self, state: BitBuffer, n_bits: int, backward: bool) -> None:
        with state.get_range(0, self._half) as left, \
                state.get_range(self._half, self._state_size) as right:
            if backward:
                left.shift_cyclical_right(n_bits, self._half)
                right.shift_cyclical_right(n_bits, self._half)
            else:
                left.shift_cyclical_left(n_bits, self._half)
                right.shift_cyclical_left(n_bits, self._half)

            state.overwrite(0, left, 0, self._half)
            state.overwrite(self._half, right, 0, self._half)

    def _select(self, state: BitBuffer) -> BitBuffer:
        # The state keeps evolving, so the round key is taken from a copy
        round_key = state.clone()
        self._selection.permute(round_key)
        return round_key
