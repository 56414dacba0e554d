"""
Bit Buffer Implementation

This module provides BitBuffer, a resizable bit-addressable container used
for cipher blocks, keys and every intermediate value of the Feistel network.

Bit i of a buffer built from bytes is bit (7 - i % 8) of byte i // 8, so bit 0
is the first bit of the stream. Buffers carry key material, so any storage
they release is overwritten with zeros first.
"""

from typing import Optional, Sequence, Union

import numpy as np

# Storage allocated for a new buffer, in bits
DEFAULT_CAPACITY = 64

Scrubbable = Union[bytearray, memoryview, np.ndarray]


class BitBuffer:
    """
    Bit container with logical operations, sub-range extraction, cyclic
    shifts and secure clearing.

    A BitBuffer stores no length of its own: length() is the index of the
    highest set bit plus one. It is a context manager, leaving a ``with``
    block always scrubs it.
    """

    def __init__(self, nbits: int = 0):
        """
        Create an empty buffer.

        Args:
            nbits: Number of bits to reserve storage for

        Raises:
            ValueError: If nbits is negative
        """
        if nbits < 0:
            raise ValueError(f"Number of bits cannot be negative: {nbits}")

        self._bits: Optional[np.ndarray] = np.zeros(max(nbits, DEFAULT_CAPACITY), dtype=np.uint8)
        self._closed = False

    @classmethod
    def from_bytes(cls, data: Union[bytes, bytearray, memoryview]) -> 'BitBuffer':
        """
        Create a buffer holding the bits of a byte sequence.

        Args:
            data: Bytes to load (most significant bit of each byte first)

        Returns:
            A new BitBuffer
        """
        buffer = cls(len(data) * 8)
        if len(data):
            bits = np.unpackbits(np.frombuffer(data, dtype=np.uint8), bitorder='big')
            buffer._bits[:bits.size] = bits
            bits.fill(0)
        return buffer

    @classmethod
    def from_bits(cls, bits: Sequence[int]) -> 'BitBuffer':
        """Create a buffer from a sequence of 0/1 values, bit 0 first."""
        values = np.asarray(bits, dtype=np.uint8)
        buffer = cls(values.size)
        buffer._bits[:values.size] = values != 0
        return buffer

    @classmethod
    def from_text(cls, text: str) -> 'BitBuffer':
        """
        Create a buffer holding the UTF-8 encoding of a string.

        Args:
            text: Text to encode

        Returns:
            A new BitBuffer
        """
        encoded = bytearray(text.encode('utf-8'))
        try:
            return cls.from_bytes(encoded)
        finally:
            cls.clear_key_buffer(encoded)

    @staticmethod
    def clear_key_buffer(buffer: Scrubbable) -> None:
        """
        Overwrite a mutable buffer with zeros.

        Args:
            buffer: bytearray, writable memoryview or numpy array to clean
        """
        if isinstance(buffer, np.ndarray):
            buffer.fill(0)
        else:
            buffer[:] = b'\x00' * len(buffer)

    @property
    def _data(self) -> np.ndarray:
        if self._closed:
            raise ValueError("Operation on a closed BitBuffer")
        return self._bits

    def _ensure_capacity(self, nbits: int) -> np.ndarray:
        data = self._data
        if nbits <= data.size:
            return data

        grown = np.zeros(max(nbits, data.size * 2), dtype=np.uint8)
        grown[:data.size] = data
        data.fill(0)
        self._bits = grown
        return grown

    def _load(self, bits: np.ndarray) -> None:
        # Replace the whole content with the given bit array
        data = self._ensure_capacity(bits.size)
        data[:bits.size] = bits
        data[bits.size:] = 0

    @staticmethod
    def _check_range(from_index: int, to_index: int) -> None:
        if from_index < 0:
            raise IndexError(f"from_index < 0: {from_index}")
        if to_index < from_index:
            raise IndexError(f"from_index: {from_index} > to_index: {to_index}")

    # -- single bits and ranges ---------------------------------------------

    def get(self, index: int) -> bool:
        """Return the value of the bit at index."""
        if index < 0:
            raise IndexError(f"Bit index < 0: {index}")
        data = self._data
        return index < data.size and bool(data[index])

    def get_range(self, from_index: int, to_index: int) -> 'BitBuffer':
        """
        Extract the bits in [from_index, to_index) into a new buffer.

        The returned buffer is independently owned: bit from_index of this
        buffer becomes bit 0 of the result.

        Args:
            from_index: First bit to copy (inclusive)
            to_index: Last bit to copy (exclusive)

        Returns:
            A new BitBuffer
        """
        self._check_range(from_index, to_index)
        data = self._data
        result = BitBuffer(to_index - from_index)

        available = min(to_index, data.size) - from_index
        if available > 0:
            result._bits[:available] = data[from_index:from_index + available]
        return result

    def set(self, index: int, value: bool = True) -> None:
        """Set the bit at index to value, growing the buffer when needed."""
        if index < 0:
            raise IndexError(f"Bit index < 0: {index}")
        data = self._ensure_capacity(index + 1)
        data[index] = 1 if value else 0

    def set_range(self, from_index: int, to_index: int, value: bool = True) -> None:
        """Set the bits in [from_index, to_index) to value."""
        self._check_range(from_index, to_index)
        if from_index == to_index:
            return
        data = self._ensure_capacity(to_index)
        data[from_index:to_index] = 1 if value else 0

    def clear(self, index: Optional[int] = None) -> None:
        """
        Clear a single bit, or every bit when no index is given.

        Args:
            index: Bit to clear, or None to clear the whole buffer
        """
        data = self._data
        if index is None:
            data.fill(0)
            return
        if index < 0:
            raise IndexError(f"Bit index < 0: {index}")
        if index < data.size:
            data[index] = 0

    def clear_range(self, from_index: int, to_index: int) -> None:
        """Clear the bits in [from_index, to_index)."""
        self._check_range(from_index, to_index)
        data = self._data
        data[from_index:min(to_index, data.size)] = 0

    def flip(self, index: int) -> None:
        """Complement the bit at index."""
        if index < 0:
            raise IndexError(f"Bit index < 0: {index}")
        data = self._ensure_capacity(index + 1)
        data[index] ^= 1

    def flip_range(self, from_index: int, to_index: int) -> None:
        """Complement the bits in [from_index, to_index)."""
        self._check_range(from_index, to_index)
        if from_index == to_index:
            return
        data = self._ensure_capacity(to_index)
        data[from_index:to_index] ^= 1

    # -- logical operations ---------------------------------------------------

    def and_(self, other: 'BitBuffer') -> None:
        """Logical AND with other, storing the result in this buffer."""
        data = self._data
        operand = other._data
        n = min(data.size, operand.size)
        data[:n] &= operand[:n]
        data[n:] = 0

    def or_(self, other: 'BitBuffer') -> None:
        """Logical OR with other, storing the result in this buffer."""
        n = other.length()
        operand = other._data
        data = self._ensure_capacity(n)
        data[:n] |= operand[:n]

    def xor(self, other: 'BitBuffer') -> None:
        """Logical XOR with other, storing the result in this buffer."""
        n = other.length()
        operand = other._data
        data = self._ensure_capacity(n)
        data[:n] ^= operand[:n]

    def and_not(self, other: 'BitBuffer') -> None:
        """Clear every bit of this buffer that is set in other."""
        data = self._data
        operand = other._data
        n = min(data.size, operand.size)
        mask = operand[:n] ^ 1
        data[:n] &= mask
        mask.fill(0)

    def __iand__(self, other: 'BitBuffer') -> 'BitBuffer':
        self.and_(other)
        return self

    def __ior__(self, other: 'BitBuffer') -> 'BitBuffer':
        self.or_(other)
        return self

    def __ixor__(self, other: 'BitBuffer') -> 'BitBuffer':
        self.xor(other)
        return self

    # -- bulk copies ---------------------------------------------------------

    def copy_from(self, origin: 'BitBuffer') -> None:
        """
        Copy origin's bits into this buffer.

        This does not overwrite: it clears every bit and then ORs origin in.
        """
        self.clear()
        self.or_(origin)

    def overwrite(self, pos: int, source: 'BitBuffer',
                  source_from: int = 0, n_bits: Optional[int] = None) -> None:
        """
        Copy bits from source over this buffer, without clearing it first.

        Args:
            pos: Position in this buffer to start writing at
            source: Buffer to copy bits from
            source_from: Position in source to start reading at
            n_bits: Number of bits to copy (default: up to source.length())
        """
        if pos < 0 or source_from < 0:
            raise IndexError(f"Negative position: pos={pos}, source_from={source_from}")
        if n_bits is None:
            n_bits = max(source.length() - source_from, 0)
        if n_bits < 0:
            raise ValueError(f"Number of bits cannot be negative: {n_bits}")
        if n_bits == 0:
            return

        # Snapshot first: source may be this very buffer
        src = source._data
        chunk = np.zeros(n_bits, dtype=np.uint8)
        available = min(src.size - source_from, n_bits)
        if available > 0:
            chunk[:available] = src[source_from:source_from + available]

        data = self._ensure_capacity(pos + n_bits)
        data[pos:pos + n_bits] = chunk
        chunk.fill(0)

    def replace(self, origin: 'BitBuffer') -> None:
        """Replace every bit with a private copy of origin's bits."""
        self._load(origin._data[:origin.length()])

    def rearrange(self, indices: Sequence[int]) -> None:
        """
        Replace the content with a selection of its own bits.

        Output bit i becomes the current bit at indices[i]. Bits past
        len(indices) are cleared.

        Args:
            indices: Source bit index for each output bit
        """
        indices = np.asarray(indices, dtype=np.intp)
        if indices.size == 0:
            self.clear()
            return

        data = self._ensure_capacity(int(indices.max()) + 1)
        selected = data[indices]
        self._load(selected)
        selected.fill(0)

    def refresh(self, nbits: int = 0) -> None:
        """
        Scrub the buffer and start over with fresh storage.

        Args:
            nbits: Number of bits to reserve storage for
        """
        data = self._data
        data.fill(0)
        self._bits = np.zeros(max(nbits, DEFAULT_CAPACITY), dtype=np.uint8)

    # -- cyclic shifts ---------------------------------------------------------

    def _check_ring(self, n_bits: int, ring_size: int) -> None:
        if ring_size < 0 or not 0 <= n_bits <= ring_size:
            raise ValueError(f"Invalid cyclic shift of {n_bits} bits on a ring of {ring_size} bits")

    def shift_cyclical_left(self, n_bits: int, ring_size: int) -> None:
        """
        Rotate the first ring_size bits left by n_bits.

        The buffer has no notion of its own width, so the ring size must be
        given; bit i receives the previous bit (i + n_bits) % ring_size.

        Args:
            n_bits: Number of positions to rotate by
            ring_size: Number of leading bits forming the ring
        """
        self._check_ring(n_bits, ring_size)
        with self.get_range(0, n_bits) as left, self.get_range(n_bits, ring_size) as right:
            self.overwrite(0, right, 0, ring_size - n_bits)
            self.overwrite(ring_size - n_bits, left, 0, n_bits)

    def shift_cyclical_right(self, n_bits: int, ring_size: int) -> None:
        """
        Rotate the first ring_size bits right by n_bits.

        Exact inverse of shift_cyclical_left with the same arguments.

        Args:
            n_bits: Number of positions to rotate by
            ring_size: Number of leading bits forming the ring
        """
        self._check_ring(n_bits, ring_size)
        with self.get_range(0, ring_size - n_bits) as left, \
                self.get_range(ring_size - n_bits, ring_size) as right:
            self.overwrite(0, right, 0, n_bits)
            self.overwrite(n_bits, left, 0, ring_size - n_bits)

    # -- queries ---------------------------------------------------------------

    def length(self) -> int:
        """Index of the highest set bit plus one (0 when no bit is set)."""
        set_bits = np.flatnonzero(self._data)
        return int(set_bits[-1]) + 1 if set_bits.size else 0

    def cardinality(self) -> int:
        """Number of set bits."""
        return int(np.count_nonzero(self._data))

    def is_empty(self) -> bool:
        """True when no bit is set or the buffer was closed."""
        if self._closed:
            return True
        return not self._data.any()

    def is_closed(self) -> bool:
        return self._closed

    def intersects(self, other: 'BitBuffer') -> bool:
        """True when both buffers have a set bit in common."""
        data = self._data
        operand = other._data
        n = min(data.size, operand.size)
        return bool(np.any(data[:n] & operand[:n]))

    def next_set_bit(self, from_index: int) -> int:
        """First set bit at or after from_index, or -1."""
        if from_index < 0:
            raise IndexError(f"from_index < 0: {from_index}")
        found = np.flatnonzero(self._data[from_index:])
        return from_index + int(found[0]) if found.size else -1

    def next_clear_bit(self, from_index: int) -> int:
        """First clear bit at or after from_index."""
        if from_index < 0:
            raise IndexError(f"from_index < 0: {from_index}")
        data = self._data
        found = np.flatnonzero(data[from_index:] == 0)
        if found.size:
            return from_index + int(found[0])
        return max(from_index, data.size)

    def previous_set_bit(self, from_index: int) -> int:
        """Last set bit at or before from_index, or -1."""
        if from_index < 0:
            return -1
        found = np.flatnonzero(self._data[:from_index + 1])
        return int(found[-1]) if found.size else -1

    # -- conversions -----------------------------------------------------------

    def to_bytes(self, n: Optional[int] = None) -> bytearray:
        """
        Render the bits as bytes.

        Args:
            n: Exact number of bytes wanted. Content is zero padded or
               silently truncated to fit. Defaults to the minimal rendering
               of length() bits.

        Returns:
            A bytearray, so callers can scrub it after use
        """
        data = self._data
        if n is None:
            n = (self.length() + 7) // 8
        if n < 0:
            raise ValueError(f"Number of bytes cannot be negative: {n}")

        bits = np.zeros(n * 8, dtype=np.uint8)
        available = min(bits.size, data.size)
        bits[:available] = data[:available]

        packed = np.packbits(bits, bitorder='big')
        result = bytearray(packed)
        bits.fill(0)
        packed.fill(0)
        return result

    def write(self, dest: bytearray) -> None:
        """Copy the byte rendering of this buffer into dest."""
        data = self.to_bytes()
        n = min(len(dest), len(data))
        dest[:n] = data[:n]
        self.clear_key_buffer(data)

    def clone(self) -> 'BitBuffer':
        """Deep copy of this buffer."""
        data = self._data
        result = BitBuffer(data.size)
        result._bits[:data.size] = data
        return result

    def __copy__(self) -> 'BitBuffer':
        return self.clone()

    def __deepcopy__(self, memo) -> 'BitBuffer':
        return self.clone()

    # -- lifecycle -------------------------------------------------------------

    def close(self) -> None:
        """Overwrite the storage with zeros and release it."""
        if self._closed:
            return
        self._bits.fill(0)
        self._bits = None
        self._closed = True

    def __enter__(self) -> 'BitBuffer':
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def __del__(self):
        if not getattr(self, '_closed', True):
            self.close()

    # -- comparison and display ------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BitBuffer):
            return NotImplemented
        if self is other:
            return True
        if self._closed or other._closed:
            return self.is_empty() and other.is_empty()

        n = self.length()
        return n == other.length() and np.array_equal(self._data[:n], other._data[:n])

    __hash__ = None

    def __str__(self) -> str:
        if self._closed:
            return '{}'
        return '{' + ', '.join(str(i) for i in np.flatnonzero(self._data)) + '}'

    def __repr__(self) -> str:
        if self._closed:
            return 'BitBuffer(closed)'
        return f"BitBuffer({self})"
