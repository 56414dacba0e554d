"""
Feistel Cipher Implementation

This module provides the FeistelCipher engine: the generic round loop, the
key schedule protocol and CBC-style stream encryption with padding.

A block goes through an initial permutation, is split into halves L0 and
R0, and runs through rounds of

    L(i+1) = R(i)
    R(i+1) = L(i) XOR f(R(i), K(i))

before the halves are swapped back and the final permutation (the inverse of
the initial one) is applied. Concrete ciphers supply the permutations, the
key schedule and the f-function.
"""

import logging
import secrets
from abc import abstractmethod
from typing import BinaryIO, Callable

from ..util.bit_buffer import BitBuffer
from ..util.key import Key
from .cipher import Cipher, KeyLike

logger = logging.getLogger(__name__)

RoundKeyHook = Callable[[BitBuffer, int], BitBuffer]


class FeistelCipher(Cipher):
    """
    Abstract Feistel network with CBC-style streaming.
    """

    def __init__(self, n_rounds: int, block_size: int, key_width: int):
        """
        Initialize the cipher skeleton.

        Args:
            n_rounds: Number of rounds in the Feistel network
            block_size: Block size in bits
            key_width: Width of the key material in bits

        Raises:
            ValueError: If a size is not positive, the key is not a whole
                        number of bytes or the block does not split into
                        two whole-byte halves
        """
        if n_rounds <= 0:
            raise ValueError("Number of rounds must be greater than 0")
        if block_size <= 0:
            raise ValueError("Block size must be greater than 0")
        if block_size % 16:
            raise ValueError(f"Block size must split into two whole-byte halves: {block_size}")
        if key_width <= 0 or key_width % 8:
            raise ValueError(f"Key width must be a positive whole number of bytes: {key_width}")

        self._n_rounds = n_rounds
        self._block_size = block_size
        self._key_width = key_width

    @property
    def n_rounds(self) -> int:
        return self._n_rounds

    @property
    def block_size(self) -> int:
        """Block size in bits."""
        return self._block_size

    @property
    def block_bytes(self) -> int:
        return self._block_size // 8

    @property
    def key_width(self) -> int:
        """Key width in bits."""
        return self._key_width

    @property
    def key_bytes(self) -> int:
        return self._key_width // 8

    # -- cipher specific hooks -------------------------------------------------

    @abstractmethod
    def initial_permutation(self, block: BitBuffer) -> None:
        """Cipher specific initial permutation (IP), applied in place."""

    @abstractmethod
    def round_key(self, key_state: BitBuffer, round_index: int) -> BitBuffer:
        """
        Key for an encryption round.

        Args:
            key_state: Key schedule state owned by the current block; the
                       hook may evolve it from one round to the next
            round_index: Round number, starting at 0

        Returns:
            A new buffer holding the round key
        """

    @abstractmethod
    def round_key_decrypt(self, key_state: BitBuffer, round_index: int) -> BitBuffer:
        """
        Key for a decryption round.

        Must yield the encryption round keys in reverse order.
        """

    @abstractmethod
    def f_function(self, right: BitBuffer, round_key: BitBuffer) -> BitBuffer:
        """
        Cipher specific round function.

        Args:
            right: Right half of the block (must not be modified)
            round_key: Key for this round

        Returns:
            A new buffer, half a block wide
        """

    @abstractmethod
    def final_permutation(self, block: BitBuffer) -> None:
        """Cipher specific final permutation, the inverse of the initial one."""

    # -- block primitive ---------------------------------------------------------

    def encrypt_block(self, block: BitBuffer, key: BitBuffer) -> BitBuffer:
        """
        Encrypt a single block.

        Args:
            block: Cleartext block (left unchanged)
            key: Key bits (left unchanged)

        Returns:
            A new buffer with the ciphertext block
        """
        return self._process_block(block, key, self.round_key)

    def decrypt_block(self, block: BitBuffer, key: BitBuffer) -> BitBuffer:
        """
        Decrypt a single block.

        Args:
            block: Ciphertext block (left unchanged)
            key: Key bits (left unchanged)

        Returns:
            A new buffer with the cleartext block
        """
        return self._process_block(block, key, self.round_key_decrypt)

    def _process_block(self, block: BitBuffer, key: BitBuffer, next_round_key: RoundKeyHook) -> BitBuffer:
        half = self._block_size // 2
        text = block.clone()
        try:
            with key.clone() as key_state:
                self.initial_permutation(text)

                with text.get_range(0, half) as left, text.get_range(half, self._block_size) as right:
                    for round_index in range(self._n_rounds):
                        with next_round_key(key_state, round_index) as round_key:
                            self.feistel_round(left, right, round_key)

                    # Undo the swap of the last round
                    self._swap(left, right)

                    text.overwrite(0, left, 0, half)
                    text.overwrite(half, right, 0, half)

                self.final_permutation(text)
        except Exception:
            text.close()
            raise
        return text

    def feistel_round(self, left: BitBuffer, right: BitBuffer, round_key: BitBuffer) -> None:
        """
        Run one round of the network on the two halves, in place.

        Args:
            left: Left half
            right: Right half
            round_key: Key for this round
        """
        with self.f_function(right, round_key) as f_output:
            left.xor(f_output)
        self._swap(left, right)

    @staticmethod
    def _swap(left: BitBuffer, right: BitBuffer) -> None:
        with left.clone() as tmp:
            left.replace(right)
            right.replace(tmp)

    # -- streaming -----------------------------------------------------------------

    def encrypt(self, message: BinaryIO, key: KeyLike, output: BinaryIO) -> None:
        """
        Encrypt a stream in CBC mode.

        The output starts with a fresh random IV, followed by one ciphertext
        block per cleartext block. A short final block is padded.

        Args:
            message: Readable binary stream holding the cleartext
            key: Encryption key
            output: Writable binary stream receiving the ciphertext

        Raises:
            ValueError: If message or key is missing or key has the wrong width
            OSError: If reading the input or writing the output fails
        """
        if message is None:
            raise ValueError("Message cannot be encrypted: message is None")
        if key is None:
            raise ValueError("Message cannot be encrypted: key is None")

        with self._load_key(key) as key_buffer:
            buffer = bytearray(self.block_bytes)
            cipher_block = self.generate_iv()
            n_blocks = 0
            try:
                self._write_block(output, cipher_block)

                n_read = self._read_fully(message, buffer)
                while n_read > 0:
                    if n_read < self.block_bytes:
                        self.pad(buffer, n_read)

                    with BitBuffer.from_bytes(buffer) as read_buffer:
                        read_buffer.xor(cipher_block)
                        cipher_block.close()
                        cipher_block = self.encrypt_block(read_buffer, key_buffer)
                    self._write_block(output, cipher_block)
                    n_blocks += 1

                    n_read = self._read_fully(message, buffer)
            finally:
                cipher_block.close()
                BitBuffer.clear_key_buffer(buffer)

        logger.debug(f"Encrypted {n_blocks} blocks with {type(self).__name__}")

    def decrypt(self, message: BinaryIO, key: KeyLike, output: BinaryIO) -> None:
        """
        Decrypt a stream produced by encrypt().

        Args:
            message: Readable binary stream holding the IV and ciphertext
            key: Decryption key
            output: Writable binary stream receiving the cleartext

        Raises:
            ValueError: If message or key is missing, the key has the wrong
                        width, or the ciphertext is not a whole number of blocks
            OSError: If reading the input or writing the output fails
        """
        if message is None:
            raise ValueError("Message cannot be decrypted: message is None")
        if key is None:
            raise ValueError("Message cannot be decrypted: key is None")

        with self._load_key(key) as key_buffer:
            buffer = bytearray(self.block_bytes)
            previous = self.read_iv(message)
            n_blocks = 0
            try:
                n_read = self._read_cipher_block(message, buffer)
                while n_read > 0:
                    current = BitBuffer.from_bytes(buffer)
                    try:
                        # Read ahead to know whether this is the last block
                        n_read = self._read_cipher_block(message, buffer)

                        with self.decrypt_block(current, key_buffer) as plain_text:
                            plain_text.xor(previous)
                            data = plain_text.to_bytes(self.block_bytes)
                        try:
                            if n_read == 0:
                                self.unpad(data)
                            output.write(data)
                        finally:
                            BitBuffer.clear_key_buffer(data)
                    except Exception:
                        current.close()
                        raise

                    previous.close()
                    previous = current
                    n_blocks += 1
            finally:
                previous.close()
                BitBuffer.clear_key_buffer(buffer)

        logger.debug(f"Decrypted {n_blocks} blocks with {type(self).__name__}")

    # -- padding and IV ---------------------------------------------------------------

    def pad(self, buffer: bytearray, n_read: int) -> None:
        """
        Pad a short block in place up to the block width.

        Every padding byte holds the number of padding bytes added.

        Args:
            buffer: Block buffer, block_bytes long
            n_read: Number of meaningful bytes at the start of buffer
        """
        n_pad = self.block_bytes - n_read
        buffer[n_read:] = bytes([n_pad]) * n_pad

    def unpad(self, data: bytearray) -> None:
        """
        Strip padding from the last decrypted block, in place.

        The last byte n is taken as a padding length when 0 < n < block_bytes
        and exactly the last n bytes equal n. Otherwise the block is left
        as is. A genuine final byte can be taken for padding when the
        cleartext length was a multiple of the block width.

        Args:
            data: Decrypted block
        """
        if not data:
            return

        n = data[-1]
        if not 0 < n < self.block_bytes:
            return

        count = 0
        for value in reversed(data):
            if value != n:
                break
            count += 1

        if count == n:
            data[-n:] = bytes(n)
            del data[-n:]

    def generate_iv(self) -> BitBuffer:
        """Fresh random initialization vector, one block wide."""
        return BitBuffer.from_bytes(secrets.token_bytes(self.block_bytes))

    def read_iv(self, message: BinaryIO) -> BitBuffer:
        """
        Read the initialization vector at the start of a ciphertext stream.

        Raises:
            ValueError: If the stream ends before a whole block was read
        """
        buffer = bytearray(self.block_bytes)
        try:
            n_read = self._read_fully(message, buffer)
            if n_read != self.block_bytes:
                raise ValueError("Ciphertext is too short to hold an initialization vector")
            return BitBuffer.from_bytes(buffer)
        finally:
            BitBuffer.clear_key_buffer(buffer)

    # -- helpers -------------------------------------------------------------------

    def _load_key(self, key: KeyLike) -> BitBuffer:
        if isinstance(key, Key):
            if key.size != self.key_bytes:
                raise ValueError(f"Key must be exactly {self.key_bytes} bytes")
            return key.bits.clone()

        if not isinstance(key, (bytes, bytearray, memoryview)):
            raise ValueError(f"Key must be bytes or a Key, not {type(key).__name__}")
        if len(key) != self.key_bytes:
            raise ValueError(f"Key must be exactly {self.key_bytes} bytes")
        return BitBuffer.from_bytes(key)

    def _write_block(self, output: BinaryIO, block: BitBuffer) -> None:
        data = block.to_bytes(self.block_bytes)
        try:
            output.write(data)
        finally:
            BitBuffer.clear_key_buffer(data)

    def _read_cipher_block(self, message: BinaryIO, buffer: bytearray) -> int:
        n_read = self._read_fully(message, buffer)
        if 0 < n_read < self.block_bytes:
            raise ValueError(f"Ciphertext ends with a partial block of {n_read} bytes")
        return n_read

    @staticmethod
    def _read_fully(stream: BinaryIO, buffer: bytearray) -> int:
        # Keep reading until the buffer is full or the stream is exhausted
        total = 0
        with memoryview(buffer) as view:
            while total < len(buffer):
                n = stream.readinto(view[total:])
                if not n:
                    break
                total += n
        return total

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(n_rounds={self._n_rounds}, "
                f"block_size={self._block_size}, key_width={self._key_width})")
