"""
Key Capability

A Key wraps fixed-width key material in a BitBuffer and scrubs it when
closed. Each clone owns its own copy and must be closed on its own.
"""

from typing import Optional, Union

from .bit_buffer import BitBuffer

KeyMaterial = Union[bytes, bytearray, memoryview, str, BitBuffer]


class Key:
    """
    Closeable key material.

    Use it in a ``with`` block so the key is cleaned when the block exits,
    or call close() from a ``finally`` clause.
    """

    def __init__(self, material: KeyMaterial, size: Optional[int] = None):
        """
        Create a key from raw material.

        The key keeps a private copy; the caller's material is left alone.

        Args:
            material: Key bytes, text (encoded as UTF-8) or a BitBuffer
            size: Key width in bytes. Defaults to the width of the bytes or
                  of the encoded text; required for a BitBuffer, which does
                  not record its own width

        Raises:
            ValueError: If material is None, size is negative, or a
                        BitBuffer is given without a size
        """
        if material is None:
            raise ValueError("Key material cannot be None")
        if size is not None and size < 0:
            raise ValueError(f"Key size cannot be negative: {size}")

        if isinstance(material, BitBuffer):
            if size is None:
                raise ValueError("Key size is required for BitBuffer material")
            self._bits = material.clone()
            natural_size = size
        elif isinstance(material, str):
            encoded = bytearray(material.encode('utf-8'))
            try:
                self._bits = BitBuffer.from_bytes(encoded)
                natural_size = len(encoded)
            finally:
                BitBuffer.clear_key_buffer(encoded)
        else:
            self._bits = BitBuffer.from_bytes(material)
            natural_size = len(material)

        self._size = natural_size if size is None else size
        self._closed = False

    @property
    def bits(self) -> BitBuffer:
        """The key's bit buffer (changes to it change the key)."""
        if self._closed:
            raise ValueError("Operation on a closed Key")
        return self._bits

    @property
    def size(self) -> int:
        """Key width in bytes."""
        return self._size

    def __len__(self) -> int:
        return self._size

    def to_bytes(self) -> bytearray:
        """Key material as exactly size bytes."""
        return self.bits.to_bytes(self._size)

    def clone(self) -> 'Key':
        """New key holding a copy of this key's material."""
        return Key(self.bits, self._size)

    def is_closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Clean the key material."""
        if self._closed:
            return
        self._bits.close()
        self._closed = True

    def __enter__(self) -> 'Key':
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def __del__(self):
        if not getattr(self, '_closed', True):
            self.close()

    def __repr__(self) -> str:
        state = 'closed' if self._closed else 'open'
        return f"Key(size={self._size}, {state})"
