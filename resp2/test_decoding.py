import io

import pytest

from resp2 import (
    Array, BulkString, ErrorReply, Integer, NestingError, ParsingError,
    ProtocolSyntaxError, SimpleString, StreamError, TextDecodingError,
    UnexpectedEOF, iter_load, load, loads,
)


class Trickle:
    """Stream handing out a single byte per read, like a slow socket."""

    def __init__(self, data: bytes):
        self._buffer = io.BytesIO(data)

    def read(self, size=-1):
        return self._buffer.read(1 if size < 0 else min(size, 1))

    def readline(self, size=-1):
        return self._buffer.readline(size)


class Broken:
    def read(self, size=-1):
        raise ConnectionResetError('connection reset by peer')

    def readline(self, size=-1):
        raise ConnectionResetError('connection reset by peer')


class NonBlocking:
    def read(self, size=-1):
        return None

    def readline(self, size=-1):
        return None


@pytest.mark.parametrize(('data', 'expected'), [
    (b'+Hello\r\n', SimpleString('Hello')),
    (b'+\r\n', SimpleString('')),
    (b'-UNEXPECTED\r\n', ErrorReply('UNEXPECTED')),
    (b"-ERR unknown command 'foobar'\r\n",
     ErrorReply("ERR unknown command 'foobar'")),
    (b':23\r\n', Integer(23)),
    (b':-23\r\n', Integer(-23)),
    (b':0023\r\n', Integer(23)),
    (b'$5\r\nHello\r\n', BulkString(b'Hello')),
    (b'$0\r\n\r\n', BulkString(b'')),
    (b'$-1\r\n', BulkString(None)),
    (b'*-1\r\n', Array(None)),
    (b'*0\r\n', Array(())),
    (
        b'*3\r\n:23\r\n+Hello\r\n$5\r\nthere\r\n',
        Array((Integer(23), SimpleString('Hello'), BulkString(b'there'))),
    ),
])
def test_loads(data, expected):
    assert loads(data) == expected


def test_loads_text():
    assert loads('+Hello\r\n') == SimpleString('Hello')
    assert loads('$5\r\nHello\r\n') == BulkString(b'Hello')


def test_loads_ignores_trailing_bytes():
    assert loads(b':1\r\n:2\r\n') == Integer(1)


def test_integer_bounds():
    assert loads(b':9223372036854775807\r\n') == Integer(2 ** 63 - 1)
    assert loads(b':-9223372036854775808\r\n') == Integer(-2 ** 63)


def test_integer_with_many_leading_zeros():
    assert loads(b':' + b'0' * 5000 + b'7\r\n') == Integer(7)
    assert loads(b':-' + b'0' * 30 + b'\r\n') == Integer(0)
    assert loads(b'$' + b'0' * 20 + b'2\r\nOK\r\n') == BulkString(b'OK')


def test_bulk_string_is_binary_safe():
    payload = b'\x00\r\n$3\r\n\xff\r\n'
    data = b'$' + str(len(payload)).encode() + b'\r\n' + payload + b'\r\n'
    assert loads(data) == BulkString(payload)


def test_bulk_string_payload_is_not_decoded():
    assert loads(b'$2\r\n\xff\xfe\r\n') == BulkString(b'\xff\xfe')


def test_nulls_do_not_cross_decode():
    null_bulk_string = loads(b'$-1\r\n')
    null_array = loads(b'*-1\r\n')
    assert isinstance(null_bulk_string, BulkString)
    assert isinstance(null_array, Array)
    assert null_bulk_string != null_array


def test_empty_array_is_not_null():
    empty = loads(b'*0\r\n')
    assert empty == Array(())
    assert not empty.is_null
    assert empty != Array(None)


def test_negative_lengths_are_null():
    assert loads(b'$-5\r\n') == BulkString(None)
    assert loads(b'*-2\r\n') == Array(None)


def test_nested_arrays():
    data = b'*3\r\n*2\r\n:1\r\n*1\r\n$1\r\nx\r\n*-1\r\n*0\r\n'
    assert loads(data) == Array((
        Array((Integer(1), Array((BulkString(b'x'),)))),
        Array(None),
        Array(()),
    ))


def test_load_consumes_exactly_one_value():
    stream = io.BytesIO(b'$5\r\nHello\r\n*1\r\n:1\r\n+tail')
    assert load(stream) == BulkString(b'Hello')
    assert load(stream) == Array((Integer(1),))
    assert stream.read() == b'+tail'


def test_load_from_buffered_reader():
    stream = io.BufferedReader(io.BytesIO(b'*2\r\n+OK\r\n$3\r\nbar\r\n:5\r\n'))
    assert load(stream) == Array((SimpleString('OK'), BulkString(b'bar')))
    assert load(stream) == Integer(5)


def test_load_retries_short_reads():
    stream = Trickle(b'*2\r\n$5\r\nHello\r\n$0\r\n\r\n')
    assert load(stream) == Array((BulkString(b'Hello'), BulkString(b'')))


def test_iter_load_pipelined_replies():
    data = b'+OK\r\n$-1\r\n*2\r\n:1\r\n:2\r\n-ERR nope\r\n'
    expected = [
        SimpleString('OK'),
        BulkString(None),
        Array((Integer(1), Integer(2))),
        ErrorReply('ERR nope'),
    ]
    assert list(iter_load(io.BytesIO(data))) == expected
    assert list(iter_load(io.BufferedReader(io.BytesIO(data)))) == expected


def test_iter_load_empty_stream():
    assert list(iter_load(io.BytesIO(b''))) == []


def test_iter_load_stream_ending_inside_a_value():
    values = iter_load(io.BytesIO(b'+OK\r\n$5\r\nHel'))
    assert next(values) == SimpleString('OK')
    with pytest.raises(UnexpectedEOF):
        next(values)


@pytest.mark.parametrize('data', [
    b':abc\r\n',
    b':+1\r\n',
    b': 1\r\n',
    b':1 \r\n',
    b':\r\n',
    b':-\r\n',
    b':1.5\r\n',
    b':0x10\r\n',
    ':١\r\n'.encode('utf-8'),
    b':9223372036854775808\r\n',
    b':-9223372036854775809\r\n',
    b'$abc\r\n',
    b'$+5\r\nHello\r\n',
    b'* 1\r\n:1\r\n',
    b':' + b'1' * 5000 + b'\r\n',
    b':-' + b'9' * 20 + b'\r\n',
    b'$' + b'9' * 5000 + b'\r\n',
])
def test_malformed_integers(data):
    with pytest.raises(ProtocolSyntaxError):
        loads(data)


@pytest.mark.parametrize('data', [
    b'!\r\n',
    b'%1\r\n',
    b'_\r\n',
    b'OK\r\n',
    b'\r\n',
])
def test_unknown_tag(data):
    with pytest.raises(ProtocolSyntaxError, match='unexpected tag byte'):
        loads(data)


def test_bulk_string_without_terminator():
    with pytest.raises(ProtocolSyntaxError):
        loads(b'$5\r\nHelloXY')


def test_line_without_carriage_return():
    with pytest.raises(ProtocolSyntaxError):
        loads(b'+OK\n')


@pytest.mark.parametrize('data', [
    b'',
    b'+OK',
    b'+OK\r',
    b':1',
    b'$5',
    b'$5\r\nHel',
    b'$5\r\nHello',
    b'$5\r\nHello\r',
    b'*1\r\n',
    b'*2\r\n:1\r\n',
    b'*2\r\n*1\r\n$3\r\nfo',
])
def test_truncated_input(data):
    with pytest.raises(UnexpectedEOF) as excinfo:
        loads(data)
    assert isinstance(excinfo.value, ParsingError)
    assert isinstance(excinfo.value, EOFError)


@pytest.mark.parametrize('data', [
    b'+\xff\r\n',
    b'-\xc3\r\n',
    b'*1\r\n+caf\xe9\r\n',
])
def test_text_must_be_utf8(data):
    with pytest.raises(TextDecodingError):
        loads(data)


def test_default_nesting_limit():
    assert loads(b'*1\r\n' * 64 + b':1\r\n') is not None
    with pytest.raises(NestingError):
        loads(b'*1\r\n' * 65 + b':1\r\n')


def test_nesting_limit_option():
    data = b'*1\r\n*1\r\n*1\r\n:1\r\n'
    assert loads(data, max_depth=3) == Array((Array((Array((Integer(1),)),)),))
    with pytest.raises(NestingError):
        loads(data, max_depth=2)


def test_nesting_limit_counts_depth_not_siblings():
    data = b'*3\r\n*1\r\n:1\r\n*1\r\n:2\r\n*1\r\n:3\r\n'
    assert len(loads(data, max_depth=2).items) == 3


def test_disabled_nesting_limit_still_fails_cleanly():
    with pytest.raises(NestingError):
        loads(b'*1\r\n' * 5000 + b':1\r\n', max_depth=None)


def test_bulk_length_limit():
    data = b'$11\r\nhello world\r\n'
    with pytest.raises(ProtocolSyntaxError):
        loads(data, max_bulk_length=10)
    assert loads(data, max_bulk_length=11) == BulkString(b'hello world')
    assert loads(data, max_bulk_length=None) == BulkString(b'hello world')


def test_line_length_limit():
    data = b'+' + b'x' * 10 + b'\r\n'
    with pytest.raises(ProtocolSyntaxError):
        loads(data, max_line_length=5)
    assert loads(data, max_line_length=10) == SimpleString('x' * 10)


def test_unknown_option():
    with pytest.raises(TypeError):
        loads(b':1\r\n', max_elements=10)


def test_stream_failure():
    with pytest.raises(StreamError) as excinfo:
        load(Broken())
    assert isinstance(excinfo.value.__cause__, ConnectionResetError)


def test_non_blocking_stream_without_data():
    with pytest.raises(StreamError):
        load(NonBlocking())


def test_closed_stream():
    stream = io.BytesIO(b'+OK\r\n')
    stream.close()
    with pytest.raises(StreamError) as excinfo:
        load(stream)
    assert isinstance(excinfo.value.__cause__, ValueError)
    with pytest.raises(StreamError):
        list(iter_load(stream))
