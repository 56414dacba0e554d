import pytest

from conftest import KAT_KEY
from feistelcipher.des import DESTables
from feistelcipher.key_schedule import DES_ROTATIONS, RotatingKeySchedule
from feistelcipher.util import BitBuffer


def _hex_keys(round_keys):
    try:
        return [rk.to_bytes(6).hex() for rk in round_keys]
    finally:
        for rk in round_keys:
            rk.close()


def test_des_round_keys(des):
    keys = _hex_keys(des.key_schedule.round_keys(BitBuffer.from_bytes(KAT_KEY)))

    assert len(keys) == 16, f"Expected 16 round keys, got {len(keys)}"
    assert keys[0] == '1b02effc7072', f"Unexpected K1: {keys[0]}"
    assert keys[1] == '79aed9dbc9e5', f"Unexpected K2: {keys[1]}"
    assert keys[15] == 'cb3d8b0e17f5', f"Unexpected K16: {keys[15]}"


def test_decryption_keys_are_reversed(des, password_key):
    schedule = des.key_schedule
    key = BitBuffer.from_bytes(password_key)

    encryption = _hex_keys(schedule.round_keys(key))
    decryption = _hex_keys(schedule.round_keys(key, decrypt=True))

    assert decryption == encryption[::-1], "Decryption keys should be the encryption keys reversed"
    assert key == BitBuffer.from_bytes(password_key), "Computing round keys must not alter the key"


def test_round_key_width(des, password_key):
    for rk in des.key_schedule.round_keys(BitBuffer.from_bytes(password_key)):
        with rk:
            assert rk.length() <= 48, f"Round key wider than 48 bits: {rk.length()}"


def test_schedule_properties(des):
    assert des.key_schedule.n_rounds == 16
    assert tuple(des.key_schedule.rotations) == DES_ROTATIONS
    assert sum(DES_ROTATIONS) == 28


def test_schedule_validation():
    tables = DESTables.standard()

    with pytest.raises(ValueError):
        RotatingKeySchedule(tables.pc1, tables.pc2, state_size=55)
    with pytest.raises(ValueError):
        RotatingKeySchedule(tables.pc2, tables.pc2)
    with pytest.raises(ValueError):
        RotatingKeySchedule(tables.pc1, tables.pc2, rotations=(1, 1))
    with pytest.raises(ValueError):
        RotatingKeySchedule(tables.pc1, tables.pc2, rotations=(29,) * 28)
    with pytest.raises(ValueError):
        RotatingKeySchedule(tables.pc1, tables.pc2, rotations=())
