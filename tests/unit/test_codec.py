import pytest

from kvstore_lib.storage import codec
from kvstore_lib.storage.errors import BackendFailureError, DecodeError, InvalidInputError


NESTED = {
    'name': 'Ann',
    'age': 30,
    'ratio': 0.5,
    'active': True,
    'nothing': None,
    'tags': ['a', 1, 2.5, False, None, {'deep': [1, [2, 3]]}],
    'address': {'city': 'Oslo', 'geo': {'lat': 59.9, 'lon': 10.7}},
}


def test_encode_is_identity_for_documents():
    assert codec.encode(NESTED) is NESTED
    assert codec.encode({}) == {}


@pytest.mark.parametrize('value', [None, [], 'text', 42, [('a', 1)]])
def test_encode_rejects_non_documents(value):
    with pytest.raises(InvalidInputError):
        codec.encode(value)


def test_encode_rejects_unsupported_nested_values():
    with pytest.raises(InvalidInputError) as exc:
        codec.encode({'a': {'b': {1, 2}}})
    assert 'a.b' in str(exc.value)

    with pytest.raises(InvalidInputError):
        codec.encode({'a': {1: 'x'}})


def test_record_layout_and_assignment():
    record = codec.encode_record('user:1', {'name': 'Ann'})
    assert record == ['user:1', {'name': 'Ann'}]
    assert record[codec.KEY_FIELD] == 'user:1'
    assert codec.value_assignment({'x': 1}) == [('=', codec.VALUE_FIELD, {'x': 1})]


def test_decode_roundtrip_preserves_types_and_nesting():
    decoded = codec.decode(codec.encode(NESTED))
    assert decoded == NESTED
    assert type(decoded['age']) is int
    assert type(decoded['ratio']) is float
    assert decoded['active'] is True
    assert decoded is not NESTED


def test_decode_pair_sequence_and_bytes_names():
    raw = [(b'name', b'Ann'), ['info', {b'age': 30}]]
    assert codec.decode(raw) == {'name': 'Ann', 'info': {'age': 30}}


@pytest.mark.parametrize('raw', [None, 'text', 5, [1, 2], [('a', 1, 2)], [(1, 'x')]])
def test_decode_rejects_non_document_shapes(raw):
    with pytest.raises(DecodeError):
        codec.decode(raw)


def test_decode_errors_are_backend_failures():
    with pytest.raises(BackendFailureError):
        codec.decode({'bad': object()})
    with pytest.raises(DecodeError):
        codec.decode({b'\xff': 1})


def test_decode_record_checks_arity():
    assert codec.decode_record(['k', {'a': 1}]) == ('k', {'a': 1})
    assert codec.decode_record(('k', {'a': 1}, 'extra')) == ('k', {'a': 1})
    with pytest.raises(DecodeError):
        codec.decode_record(['k'])
    with pytest.raises(DecodeError):
        codec.decode_record('kv')
    with pytest.raises(DecodeError):
        codec.decode_record(['k', 'not a document'])


@pytest.mark.parametrize('leaf', [float('nan'), float('inf'), float('-inf')])
def test_encode_rejects_non_finite_numbers(leaf):
    with pytest.raises(InvalidInputError):
        codec.encode({'a': leaf})
    with pytest.raises(InvalidInputError):
        codec.encode({'list': [1, {'b': leaf}]})


def test_encode_bounds_integers_to_the_storable_range():
    assert codec.encode({'lo': codec.INT_MIN, 'hi': codec.INT_MAX, 'flag': True})
    for n in (codec.INT_MIN - 1, codec.INT_MAX + 1, 2 ** 70):
        with pytest.raises(InvalidInputError) as exc:
            codec.encode({'nested': {'n': n}})
        assert 'nested.n' in str(exc.value)
