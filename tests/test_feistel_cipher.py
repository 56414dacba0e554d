import io

import pytest

from conftest import readable
from feistelcipher.cipher_core import FeistelCipher
from feistelcipher.util import BitBuffer, Key

TOY_KEY = b'\x5a\xc3\x0f\x96'


class ToyCipher(FeistelCipher):
    """32-bit Feistel network with identity permutations and a constant round key."""

    def __init__(self, n_rounds=4, block_size=32, key_width=32):
        super().__init__(n_rounds, block_size, key_width)

    def initial_permutation(self, block):
        pass

    def round_key(self, key_state, round_index):
        return key_state.clone()

    def round_key_decrypt(self, key_state, round_index):
        return key_state.clone()

    def f_function(self, right, round_key):
        half = self.block_size // 2
        output = right.clone()
        with round_key.get_range(0, half) as key_half:
            output.xor(key_half)
        output.shift_cyclical_left(3, half)
        output.flip(0)
        return output

    def final_permutation(self, block):
        pass


class FailingWriter(io.RawIOBase):
    def writable(self):
        return True

    def write(self, data):
        raise OSError("disk full")


@pytest.fixture
def toy():
    return ToyCipher()


@pytest.fixture
def pinned_iv(monkeypatch, toy):
    iv = b'\x01\x02\x03\x04'
    monkeypatch.setattr(toy, 'generate_iv', lambda: BitBuffer.from_bytes(iv))
    return iv


def test_construction_validation():
    for args in [(0, 32, 32), (4, 0, 32), (4, 12, 32), (4, 24, 32), (4, 32, 0), (4, 32, 12)]:
        with pytest.raises(ValueError):
            ToyCipher(*args)

    with pytest.raises(TypeError):
        FeistelCipher(16, 64, 64)


def test_properties(toy):
    assert toy.n_rounds == 4
    assert toy.block_size == 32
    assert toy.block_bytes == 4
    assert toy.key_bytes == 4
    assert repr(toy) == 'ToyCipher(n_rounds=4, block_size=32, key_width=32)'


def test_block_round_trip(toy):
    block = BitBuffer.from_bytes(b'\xde\xad\xbe\xef')
    key = BitBuffer.from_bytes(TOY_KEY)

    with toy.encrypt_block(block, key) as encrypted:
        assert encrypted.to_bytes(4) != bytearray(b'\xde\xad\xbe\xef')
        with toy.decrypt_block(encrypted, key) as decrypted:
            assert decrypted == block

    assert block == BitBuffer.from_bytes(b'\xde\xad\xbe\xef'), "Block operations must not alter their input"
    assert key == BitBuffer.from_bytes(TOY_KEY), "Block operations must not alter the key"


@pytest.mark.parametrize('length', range(13))
def test_stream_round_trip(toy, length):
    message = readable(length)

    encrypted = toy.encrypt_bytes(message, TOY_KEY)
    n_blocks = -(-length // 4)

    assert len(encrypted) == 4 + 4 * n_blocks, f"Unexpected ciphertext length {len(encrypted)}"
    assert toy.decrypt_bytes(encrypted, TOY_KEY) == message


def test_empty_message_is_iv_only(toy, pinned_iv):
    encrypted = toy.encrypt_bytes(b'', TOY_KEY)

    assert encrypted == pinned_iv
    assert toy.decrypt_bytes(encrypted, TOY_KEY) == b''


def test_pinned_iv_is_deterministic(toy, pinned_iv):
    first = toy.encrypt_bytes(b'abcdefgh', TOY_KEY)
    second = toy.encrypt_bytes(b'abcdefgh', TOY_KEY)

    assert first == second
    assert first[:4] == pinned_iv, "The IV should be written first, unencrypted"


def test_fresh_iv_per_stream(toy):
    first = toy.encrypt_bytes(b'abcdefgh', TOY_KEY)
    second = toy.encrypt_bytes(b'abcdefgh', TOY_KEY)

    assert first != second, "Each stream should get a fresh random IV"


def test_key_object(toy):
    with Key(TOY_KEY) as key:
        encrypted = toy.encrypt_bytes(b'hello', key)
        assert toy.decrypt_bytes(encrypted, key) == b'hello'
        assert not key.is_closed(), "The cipher must not close the caller's key"


def test_pad(toy):
    buffer = bytearray(b'ab\x00\x00')
    toy.pad(buffer, 2)
    assert buffer == bytearray(b'ab\x02\x02')

    buffer = bytearray(b'abc\x00')
    toy.pad(buffer, 3)
    assert buffer == bytearray(b'abc\x01')


@pytest.mark.parametrize('block, expected', [
    (b'ab\x02\x02', b'ab'),
    (b'abc\x01', b'abc'),
    (b'a\x03\x03\x03', b'a'),
    (b'a\x02\x02\x02', b'a\x02\x02\x02'),
    (b'abc\x04', b'abc\x04'),
    (b'abc\x00', b'abc\x00'),
    (b'ab\x01\x02', b'ab\x01\x02'),
    (b'abcd', b'abcd'),
])
def test_unpad(toy, block, expected):
    data = bytearray(block)
    toy.unpad(data)
    assert data == bytearray(expected)


def test_unpad_ambiguity(toy):
    """A whole final block ending in what looks like padding loses those bytes"""
    encrypted = toy.encrypt_bytes(b'abc\x01', TOY_KEY)
    assert toy.decrypt_bytes(encrypted, TOY_KEY) == b'abc'


def test_invalid_arguments(toy):
    message = io.BytesIO(b'abcdefgh')
    output = io.BytesIO()

    with pytest.raises(ValueError):
        toy.encrypt(None, TOY_KEY, output)
    with pytest.raises(ValueError):
        toy.encrypt(message, None, output)
    with pytest.raises(ValueError):
        toy.encrypt(message, b'\x00' * 5, output)
    with pytest.raises(ValueError):
        toy.encrypt(message, 'text', output)
    with pytest.raises(ValueError):
        toy.encrypt(message, Key(b'\x00' * 8), output)
    with pytest.raises(ValueError):
        toy.decrypt(None, TOY_KEY, output)
    with pytest.raises(ValueError):
        toy.decrypt(message, b'\x00' * 3, output)
    with pytest.raises(ValueError):
        toy.encrypt_bytes(None, TOY_KEY)

    assert message.tell() == 0, "Invalid arguments must be rejected before reading"
    assert output.getvalue() == b'', "Invalid arguments must be rejected before writing"


def test_partial_ciphertext(toy):
    encrypted = toy.encrypt_bytes(b'abcdefgh', TOY_KEY)

    with pytest.raises(ValueError):
        toy.decrypt_bytes(encrypted[:-1], TOY_KEY)
    with pytest.raises(ValueError):
        toy.decrypt_bytes(encrypted[:3], TOY_KEY)


def test_io_errors_propagate(toy):
    with pytest.raises(OSError):
        toy.encrypt(io.BytesIO(b'abcd'), TOY_KEY, FailingWriter())


def test_short_reads(toy):
    """Streams that return fewer bytes than asked are read until a block is full"""

    class Trickle(io.RawIOBase):
        def __init__(self, data):
            self._data = io.BytesIO(data)

        def readable(self):
            return True

        def readinto(self, buffer):
            return self._data.readinto(memoryview(buffer)[:1])

    encrypted = toy.encrypt_bytes(b'abcdefghij', TOY_KEY)
    output = io.BytesIO()
    toy.decrypt(Trickle(encrypted), TOY_KEY, output)

    assert output.getvalue() == b'abcdefghij'
