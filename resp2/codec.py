r"""
Reading and writing whole values.

    >>> from io import BytesIO
    >>> from resp2.values import Array, BulkString, Integer
    >>> loads(b'*2\r\n$3\r\nGET\r\n$3\r\nkey\r\n')
    Array(items=(BulkString(value=b'GET'), BulkString(value=b'key')))
    >>> dumps(Array([BulkString(b'GET'), BulkString(b'key')]))
    b'*2\r\n$3\r\nGET\r\n$3\r\nkey\r\n'

Streams are read one value at a time, leaving whatever follows untouched:

    >>> stream = BytesIO(b'+OK\r\n:1\r\n')
    >>> load(stream)
    SimpleString(value='OK')
    >>> stream.read()
    b':1\r\n'

Options (see ``resp2.grammar.DEFAULT_OPTIONS``) are given as keywords:

    >>> loads(b'*1\r\n*1\r\n*0\r\n', max_depth=2)
    Traceback (most recent call last):
    ...
    resp2.errors.NestingError: maximum nesting depth of 2 exceeded
    >>> loads(b':1\r\n', max_size=2)
    Traceback (most recent call last):
    ...
    TypeError: unknown option(s): max_size

"""
import logging
from typing import Iterator, Union

from resp2.errors import StreamError, TextDecodingError
from resp2.grammar import DEFAULT_OPTIONS, message
from resp2.values import Value

__all__ = ['load', 'loads', 'iter_load', 'dump', 'dumps', 'to_text']

logger = logging.getLogger(__name__)


def _options(options: dict) -> dict:
    unknown = set(options) - set(DEFAULT_OPTIONS)
    if unknown:
        raise TypeError('unknown option(s): {}'.format(', '.join(sorted(unknown))))
    return options


def _at_eof(stream) -> bool:
    try:
        peek = getattr(stream, 'peek', None)
        if peek is not None:
            return not peek(1)
        position = stream.tell()
        at_eof = not stream.read(1)
        stream.seek(position)
        return at_eof
    except Exception as exc:
        raise StreamError(str(exc)) from exc


# Decoding.
def load(stream, **options) -> Value:
    """
    Read exactly one value from a readable binary stream.
    Call it again on the same stream to read the next value.

    :param stream: Buffered binary stream with ``read`` and ``readline``,
    e.g. ``socket.makefile('rb')``.
    :param options: Overrides of ``DEFAULT_OPTIONS``.
    """
    return message.parse_stream(stream, _options(options))


def loads(data: Union[bytes, str], **options) -> Value:
    r"""
    Read the first value from bytes, or from text encoded as UTF-8.
    Anything after the first value is ignored.

        >>> loads('$5\r\nHello\r\n')
        BulkString(value=b'Hello')

    """
    if isinstance(data, str):
        data = data.encode('utf-8')
    return message.parse(data, _options(options))


def iter_load(stream, **options) -> Iterator[Value]:
    r"""
    Read values one after another until the stream ends between two
    values, as with pipelined replies. A stream ending in the middle
    of a value raises ``UnexpectedEOF``.

        >>> from io import BytesIO
        >>> list(iter_load(BytesIO(b'+OK\r\n$-1\r\n:7\r\n')))
        [SimpleString(value='OK'), BulkString(value=None), Integer(value=7)]

    The stream must support ``peek`` (like ``io.BufferedReader``)
    or ``tell`` and ``seek`` (like ``io.BytesIO``).
    """
    options = _options(options)
    count = 0
    while not _at_eof(stream):
        yield message.parse_stream(stream, options)
        count += 1
    logger.debug(f'Stream ended after {count} value(s)')


# Encoding.
def dump(value: Value, stream, **options) -> None:
    """
    Write one value to a writable binary stream.
    """
    message.build_stream(value, stream, _options(options))


def dumps(value: Value, **options) -> bytes:
    """
    Return the frame of one value.
    """
    return message.build(value, _options(options))


def to_text(value: Value, **options) -> str:
    r"""
    Return the frame of one value as text. Frames carrying bulk strings
    that are not UTF-8 have no text form:

        >>> from resp2.values import BulkString, Integer
        >>> to_text(Integer(25))
        ':25\r\n'
        >>> to_text(BulkString(b'\xff'))
        Traceback (most recent call last):
        ...
        resp2.errors.TextDecodingError: 'utf-8' codec can't decode byte 0xff in position 4: invalid start byte

    """
    data = dumps(value, **options)
    try:
        return data.decode('utf-8')
    except UnicodeDecodeError as exc:
        raise TextDecodingError(str(exc)) from exc
