import pytest

from mealy_etf import IndexMap


def test_index_map():
    index = IndexMap()
    assert len(index) == 0
    assert index.get('a') is None

    assert index.id_of('a') == 0
    assert index.id_of('b') == 1
    assert index.id_of('a') == 0
    assert len(index) == 2
    assert 'b' in index and 'c' not in index

    assert index.key_of(1) == 'b'
    assert list(index) == ['a', 'b']
    assert list(index.ids()) == [0, 1]

    with pytest.raises(LookupError):
        index.key_of(2)


def test_index_map_offset():
    index = IndexMap(offset=3)
    keys = [('x', 1), ('y', 1), ('x', 2), ('y', 1)]
    ids = [index.id_of(k) for k in keys]

    assert ids == [3, 4, 5, 4]
    assert list(index.ids()) == [3, 4, 5]
    assert index.key_of(5) == ('x', 2)
    assert index.inverse[3] == ('x', 1)

    with pytest.raises(KeyError):
        index.key_of(0)


def test_index_map_equal_keys_of_different_types():
    index = IndexMap()
    assert index.id_of(1) == 0
    assert index.id_of(True) == 1
    assert index.id_of(1.0) == 2
    assert index.id_of(1) == 0

    assert True in index and 0 not in index
    assert index.key_of(1) is True
    assert list(index) == [1, True, 1.0]
    assert [type(k) for k in index] == [int, bool, float]
