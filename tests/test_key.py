import pytest

from feistelcipher.util import BitBuffer, Key


def test_key_from_bytes():
    key = Key(b'12345678')

    assert key.size == 8
    assert len(key) == 8
    assert key.to_bytes() == bytearray(b'12345678')
    assert key.bits == BitBuffer.from_bytes(b'12345678')


def test_key_keeps_private_copy():
    material = bytearray(b'\xff' * 8)
    key = Key(material)

    material[:] = bytes(8)
    assert key.to_bytes() == bytearray(b'\xff' * 8), "Key must not share the caller's storage"


def test_key_from_text_and_bits():
    assert Key('abc').to_bytes() == bytearray(b'abc')
    assert Key(BitBuffer.from_bytes(b'\x01\x02'), size=2).size == 2


def test_text_key_width_counts_trailing_zero_bytes():
    key = Key("abcdefg\x00")

    assert key.size == 8, f"Expected 8 bytes, got {key.size}"
    assert key.to_bytes() == bytearray(b'abcdefg\x00')


def test_bit_buffer_key_needs_size():
    bits = BitBuffer.from_bytes(b'\x01\x02\x03\x04\x05\x06\x07\x00')

    with pytest.raises(ValueError):
        Key(bits)

    with Key(bits, size=8) as key:
        assert key.size == 8
        assert key.to_bytes() == bytearray(b'\x01\x02\x03\x04\x05\x06\x07\x00')


def test_key_ending_in_zero_byte_encrypts(des):
    material = b'\x01\x02\x03\x04\x05\x06\x07\x00'

    with Key(BitBuffer.from_bytes(material), size=8) as key:
        encrypted = des.encrypt_bytes(b'hello', key)

    assert des.decrypt_bytes(encrypted, material) == b'hello'
    assert des.decrypt_bytes(des.encrypt_bytes(b'hello', Key("abcdefg\x00")), b'abcdefg\x00') == b'hello'


def test_key_explicit_size_pads():
    key = Key(b'\x01', size=4)
    assert key.to_bytes() == bytearray(b'\x01\x00\x00\x00')


def test_key_rejects_none():
    with pytest.raises(ValueError):
        Key(None)
    with pytest.raises(ValueError):
        Key(b'abc', size=-1)


def test_clone_is_independent():
    key = Key(b'12345678')
    duplicate = key.clone()

    duplicate.close()

    assert not key.is_closed()
    assert key.to_bytes() == bytearray(b'12345678')


def test_close_scrubs_key():
    with Key(b'\xff' * 8) as key:
        storage = key.bits._bits

    assert key.is_closed()
    assert not storage.any(), "Closing a key should zero its material"
    with pytest.raises(ValueError):
        key.bits
    assert repr(key) == 'Key(size=8, closed)'
