import pytest

from feistelcipher.des import DESTables, SBox
from feistelcipher.des.des_tables import S_BOXES
from feistelcipher.tables import PermutationTable, SubstitutionTable
from feistelcipher.util import BitBuffer


def test_permute_reorders():
    table = PermutationTable.from_one_based([2, 1])
    buffer = BitBuffer.from_bits([1, 0])

    table.permute(buffer)

    assert str(buffer) == '{1}', "Output bit i should take input bit table[i]"


def test_permute_expands_and_compresses():
    buffer = BitBuffer.from_bits([1, 0, 1])
    PermutationTable([0, 0, 2, 2, 1]).permute(buffer)
    assert str(buffer) == '{0, 1, 2, 3}'

    PermutationTable([4]).permute(buffer)
    assert buffer.is_empty()


def test_inverse():
    tables = DESTables.standard()

    assert tables.initial.is_bijective()
    assert tables.initial.inverse() == tables.final
    assert not tables.expansion.is_bijective()
    assert tables.expansion.input_width == 32
    assert len(tables.pc1) == 56
    assert tables.pc1.input_width == 63, "PC-1 never reads the last parity bit"

    with pytest.raises(ValueError):
        tables.expansion.inverse()


def test_permutation_validation():
    with pytest.raises(ValueError):
        PermutationTable([0, -1])
    with pytest.raises(ValueError):
        PermutationTable([[0, 1], [1, 0]])
    with pytest.raises(ValueError):
        PermutationTable.from_one_based([0])


def test_permutation_sequence_protocol():
    table = PermutationTable([2, 0, 1])

    assert len(table) == 3
    assert table[0] == 2
    assert list(table) == [2, 0, 1]


def test_substitution_lookup():
    table = SubstitutionTable([[1, 2], [3, 0]], 2)

    assert (table.rows, table.columns, table.width) == (2, 2, 2)
    assert table.value(1, 0) == 2
    assert table.value(0, 1) == 3

    element = table.get_element(1, 0)
    assert str(element) == '{0}', "Entries are stored most significant bit first"


def test_substitution_is_deterministic_and_immutable():
    table = SubstitutionTable(S_BOXES[0], 4)
    first = table.get_element(3, 2)

    first.set_range(0, 4)
    second = table.get_element(3, 2)

    assert second == BitBuffer.from_bits([1, 0, 0, 0]), "S1 row 2 column 3 is 8"
    assert table.to_list() == [list(row) for row in S_BOXES[0]], "Lookups must never alter the table"


def test_substitution_replace():
    table = SubstitutionTable([[5]], 3)
    bits = BitBuffer.from_bits([0, 1, 0, 1, 1, 1])

    table.replace(bits, 0, 0)

    assert str(bits) == '{0, 2}'


def test_substitution_bounds():
    table = SubstitutionTable([[1, 2], [3, 0]], 2)

    with pytest.raises(IndexError):
        table.get_element(2, 0)
    with pytest.raises(IndexError):
        table.value(0, -1)


def test_substitution_validation():
    with pytest.raises(ValueError):
        SubstitutionTable([[1, 2], [3]], 2)
    with pytest.raises(ValueError):
        SubstitutionTable([[4]], 2)
    with pytest.raises(ValueError):
        SubstitutionTable([[0]], 0)


def test_sbox_coordinates():
    sbox = SBox(S_BOXES[0])
    bits = BitBuffer.from_bits([0, 1, 1, 0, 1, 1])

    assert SBox.row(bits) == 1
    assert SBox.column(bits) == 13

    sbox.substitute(bits)
    assert bits == BitBuffer.from_bits([0, 1, 0, 1]), "S1(011011) should be 0101"
    assert sbox.lookup(0b011011) == 5


def test_sbox_lookup_table():
    sbox = SBox(S_BOXES[0])
    table = sbox.lookup_table()

    assert len(table) == 64
    for row in range(4):
        assert sorted(sbox.value(column, row) for column in range(16)) == list(range(16)), \
            f"S1 row {row} should be a permutation of 0..15"
    assert table[0] == 14
    assert table[0b000001] == 0


def test_sbox_shape():
    with pytest.raises(ValueError):
        SBox([[0] * 16] * 3)
