r"""
RESP2, the REdis Serialization Protocol.
Protocol reference: https://redis.io/docs/latest/develop/reference/protocol-spec/

Every frame starts with a tag byte telling what follows, so ``message``
parses any value without knowing its kind in advance.

Simple strings:

    >>> message.parse(b'+OK\r\n')
    SimpleString(value='OK')
    >>> message.build(SimpleString('OK'))
    b'+OK\r\n'

Errors:

    >>> message.parse(b"-ERR unknown command 'foobar'\r\n")
    ErrorReply(value="ERR unknown command 'foobar'")
    >>> message.build(ErrorReply('an error'))
    b'-an error\r\n'

Integers:

    >>> message.parse(b':1000\r\n')
    Integer(value=1000)
    >>> message.parse(b':-2\r\n')
    Integer(value=-2)
    >>> message.build(Integer(123))
    b':123\r\n'

Bulk strings are length-prefixed, so they may contain anything:

    >>> message.parse(b'$6\r\nfoobar\r\n')
    BulkString(value=b'foobar')
    >>> message.parse(b'$0\r\n\r\n')
    BulkString(value=b'')
    >>> message.parse(b'$-1\r\n')
    BulkString(value=None)
    >>> message.build(BulkString(b'xx\r\nyy'))
    b'$6\r\nxx\r\nyy\r\n'

Arrays hold any values, arrays included:

    >>> message.parse(b'*0\r\n')
    Array(items=())
    >>> message.parse(b'*-1\r\n')
    Array(items=None)
    >>> message.parse(b'*2\r\n$3\r\nfoo\r\n$-1\r\n')
    Array(items=(BulkString(value=b'foo'), BulkString(value=None)))
    >>> message.build(Array([Integer(1), Array([SimpleString('Foo'), ErrorReply('Bar')])]))
    b'*2\r\n:1\r\n*2\r\n+Foo\r\n-Bar\r\n'

The two nulls are different frames:

    >>> message.build(NULL_BULK_STRING)
    b'$-1\r\n'
    >>> message.build(NULL_ARRAY)
    b'*-1\r\n'

Anything else is rejected:

    >>> message.parse(b'!3\r\n')
    Traceback (most recent call last):
    ...
    resp2.errors.ProtocolSyntaxError: unexpected tag byte b'!'
    >>> message.build('OK')
    Traceback (most recent call last):
    ...
    resp2.errors.BuildingError: cannot build <class 'str'>, expected one of SimpleString, ErrorReply, Integer, BulkString, Array

Limits are read from the context, see ``DEFAULT_OPTIONS``:

    >>> message.parse(b'*1\r\n*1\r\n:1\r\n', context={'max_depth': 1})
    Traceback (most recent call last):
    ...
    resp2.errors.NestingError: maximum nesting depth of 1 exceeded
    >>> message.parse(b'$10\r\n', context={'max_bulk_length': 5})
    Traceback (most recent call last):
    ...
    resp2.errors.ProtocolSyntaxError: 10 is above the limit of 5

"""
from resp2.constructs import (
    CRLF, Adapted, Bytes, Const, Contextual, Decimal, Defaults, If, Line,
    Nested, Raise, RepeatExactly, Struct, Switch,
)
from resp2.errors import BuildingError
from resp2.values import (
    Array, BulkString, ErrorReply, Integer, NULL_ARRAY, NULL_BULK_STRING,
    SimpleString,
)

__all__ = ['TAG_SIMPLE_STRING', 'TAG_ERROR', 'TAG_INTEGER', 'TAG_BULK_STRING',
           'TAG_ARRAY', 'DEFAULT_OPTIONS', 'simple_string', 'error',
           'integer', 'bulk_string', 'array', 'frame', 'message']

TAG_SIMPLE_STRING = b'+'
TAG_ERROR = b'-'
TAG_INTEGER = b':'
TAG_BULK_STRING = b'$'
TAG_ARRAY = b'*'

DEFAULT_OPTIONS = {
    # arrays nested deeper than this are rejected in both directions
    'max_depth': 64,
    # same as the proto-max-bulk-len default of the redis server
    'max_bulk_length': 512 * 1024 * 1024,
    # simple strings, errors, integers, lengths and counts
    'max_line_length': 64 * 1024,
}


simple_string = Adapted(
    Line('utf-8'),
    before_build=lambda obj: obj.value,
    after_parse=SimpleString,
)

error = Adapted(
    Line('utf-8'),
    before_build=lambda obj: obj.value,
    after_parse=ErrorReply,
)

integer = Adapted(
    Decimal(),
    before_build=lambda obj: obj.value,
    after_parse=Integer,
)


class BulkStringFrame(Struct):
    length = Decimal(maximum=lambda ctx: ctx.get('max_bulk_length'))
    data = If(
        lambda ctx: ctx['length'] >= 0,
        Contextual(Bytes, lambda ctx: ctx['length']),
    )
    ending = If(lambda ctx: ctx['length'] >= 0, Const(CRLF))


def bulk_string_to_frame(obj: BulkString) -> dict:
    if obj.value is None:
        return {'length': -1}
    if not isinstance(obj.value, bytes):
        raise BuildingError('bulk string payload must be bytes, got {!r}'.format(
            type(obj.value)
        ))
    return {'length': len(obj.value), 'data': obj.value}


bulk_string = Adapted(
    BulkStringFrame(),
    before_build=bulk_string_to_frame,
    after_parse=lambda obj: BulkString(obj['data']),
)


class ArrayFrame(Struct):
    count = Decimal()
    # elements are whole frames, hence the late binding of ``frame``
    items = If(
        lambda ctx: ctx['count'] >= 0,
        Nested(Contextual(RepeatExactly, lambda ctx: (frame, ctx['count']))),
    )


def array_to_frame(obj: Array) -> dict:
    if obj.items is None:
        return {'count': -1}
    return {'count': len(obj.items), 'items': obj.items}


array = Adapted(
    ArrayFrame(),
    before_build=array_to_frame,
    after_parse=lambda obj: Array(obj['items']),
)


class MessageFrame(Struct):
    tag = Bytes(1)
    data = Switch(
        lambda ctx: ctx['tag'],
        cases={
            TAG_SIMPLE_STRING: simple_string,
            TAG_ERROR: error,
            TAG_INTEGER: integer,
            TAG_BULK_STRING: bulk_string,
            TAG_ARRAY: array,
        },
        default=Contextual(
            Raise, lambda ctx: 'unexpected tag byte {!r}'.format(ctx['tag']),
        ),
    )


_TAGS = (
    (SimpleString, TAG_SIMPLE_STRING),
    (ErrorReply, TAG_ERROR),
    (Integer, TAG_INTEGER),
    (BulkString, TAG_BULK_STRING),
    (Array, TAG_ARRAY),
)


def value_to_frame(obj) -> dict:
    for cls, tag in _TAGS:
        if isinstance(obj, cls):
            return {'tag': tag, 'data': obj}
    raise BuildingError('cannot build {!r}, expected one of {}'.format(
        type(obj), ', '.join(cls.__name__ for cls, _ in _TAGS),
    ))


frame = Adapted(
    MessageFrame(),
    before_build=value_to_frame,
    after_parse=lambda obj: obj['data'],
)

message = Defaults(frame, DEFAULT_OPTIONS)
