import dataclasses

import pytest

from resp2 import (
    NULL_ARRAY, NULL_BULK_STRING, Array, BulkString, ErrorReply, Integer,
    SimpleString,
)


def test_kinds_never_compare_equal():
    values = [
        SimpleString('1'), ErrorReply('1'), Integer(1),
        BulkString(b'1'), Array([BulkString(b'1')]),
    ]
    for i, left in enumerate(values):
        for j, right in enumerate(values):
            assert (left == right) is (i == j)


def test_simple_string_and_error_reply_differ():
    assert SimpleString('OK') != ErrorReply('OK')


def test_null_constants():
    assert NULL_BULK_STRING == BulkString(None)
    assert NULL_ARRAY == Array(None)
    assert NULL_BULK_STRING.is_null
    assert NULL_ARRAY.is_null
    assert not BulkString(b'').is_null
    assert not Array([]).is_null
    assert NULL_BULK_STRING != NULL_ARRAY


def test_array_items_become_a_tuple():
    items = [Integer(1), Integer(2)]
    array = Array(items)
    items.append(Integer(3))
    assert array.items == (Integer(1), Integer(2))
    assert Array(iter([Integer(1)])) == Array((Integer(1),))
    assert Array([]) == Array(())


def test_bulk_string_payload_becomes_bytes():
    assert BulkString(bytearray(b'abc')).value == b'abc'
    assert type(BulkString(memoryview(b'abc')).value) is bytes


def test_values_are_frozen():
    value = SimpleString('OK')
    with pytest.raises(dataclasses.FrozenInstanceError):
        value.value = 'NOPE'


def test_values_are_hashable():
    seen = {
        SimpleString('OK'), SimpleString('OK'),
        Array([Integer(1)]), Array((Integer(1),)),
        NULL_BULK_STRING, BulkString(None),
    }
    assert len(seen) == 3


@pytest.mark.parametrize(('value', 'expected'), [
    (SimpleString('Hello'), 'Hello'),
    (ErrorReply('ERR nope'), 'ERR nope'),
    (Integer(-42), '-42'),
    (BulkString(b'Hello'), 'Hello'),
    (BulkString('Иван'.encode('utf-8')), 'Иван'),
    (BulkString(b'\xff\xfe'), ''),
    (BulkString(b''), ''),
    (BulkString(None), 'None'),
    (Array(None), 'None'),
    (Array([]), '[]'),
    (
        Array([Integer(1), SimpleString('OK')]),
        "[Integer(value=1), SimpleString(value='OK')]",
    ),
])
def test_str(value, expected):
    assert str(value) == expected
