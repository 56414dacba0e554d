"""
Stream Cipher Contract

Every cipher in the package encrypts from one binary stream into another.
This module defines that contract plus in-memory helpers built on it.
"""

import io
from abc import ABC, abstractmethod
from typing import BinaryIO, Union

from ..util.key import Key

KeyLike = Union[bytes, bytearray, memoryview, Key]


class Cipher(ABC):
    """
    Base class for ciphers that work over byte streams.
    """

    @abstractmethod
    def encrypt(self, message: BinaryIO, key: KeyLike, output: BinaryIO) -> None:
        """
        Encrypt a message stream.

        Args:
            message: Readable binary stream holding the cleartext
            key: Encryption key
            output: Writable binary stream receiving the ciphertext

        Raises:
            ValueError: If message or key is missing or malformed
            OSError: If reading the input or writing the output fails
        """

    @abstractmethod
    def decrypt(self, message: BinaryIO, key: KeyLike, output: BinaryIO) -> None:
        """
        Decrypt a message stream.

        Args:
            message: Readable binary stream holding the ciphertext
            key: Decryption key
            output: Writable binary stream receiving the cleartext

        Raises:
            ValueError: If message or key is missing or malformed
            OSError: If reading the input or writing the output fails
        """

    def encrypt_bytes(self, data: Union[bytes, bytearray], key: KeyLike) -> bytes:
        """
        Encrypt an in-memory message.

        Args:
            data: Cleartext
            key: Encryption key

        Returns:
            The ciphertext
        """
        if data is None:
            raise ValueError("Message cannot be encrypted: message is None")

        output = io.BytesIO()
        self.encrypt(io.BytesIO(data), key, output)
        return output.getvalue()

    def decrypt_bytes(self, data: Union[bytes, bytearray], key: KeyLike) -> bytes:
        """
        Decrypt an in-memory message.

        Args:
            data: Ciphertext
            key: Decryption key

        Returns:
            The cleartext
        """
        if data is None:
            raise ValueError("Message cannot be decrypted: message is None")

        output = io.BytesIO()
        self.decrypt(io.BytesIO(data), key, output)
        return output.getvalue()
