r"""
Declarative building blocks for line-oriented, length-prefixed protocols.

Every construct works in both directions: ``build`` turns a python object
into bytes and ``parse`` turns bytes back into a python object. Constructs
are composed into bigger ones (structs, conditionals, switches, repeaters)
and the RESP grammar in ``resp2.grammar`` is nothing but such a composition.

    >>> class Entry(Struct):
    ...     length = Decimal()
    ...     data = Contextual(Bytes, lambda ctx: ctx['length'])
    ...     ending = Const(CRLF)
    >>> Entry().build({'length': 3, 'data': b'foo'})
    b'3\r\nfoo\r\n'
    >>> Entry().parse(b'3\r\nbar\r\n') == {
    ...     'length': 3, 'data': b'bar', 'ending': b'\r\n'
    ... }
    True

"""
import re
from io import BytesIO
from collections import ChainMap

from resp2.errors import (
    Error, BuildingError, ProtocolSyntaxError, UnexpectedEOF, NestingError,
    StreamError, TextDecodingError, translate,
)

__all__ = ['CRLF', 'Construct', 'Subconstruct', 'Context', 'Pass', 'Bytes',
           'Line', 'Decimal', 'Const', 'Raise', 'Adapted', 'RepeatExactly',
           'Struct', 'Selector', 'Contextual', 'If', 'Switch', 'Nested',
           'Defaults', 'read_exactly', 'read_line', 'write']

CRLF = b'\r\n'

INT64_MIN = -2 ** 63
INT64_MAX = 2 ** 63 - 1

_DECIMAL = re.compile(rb'-?[0-9]+')

# len(str(INT64_MIN)) without the sign
INT64_DIGITS = 19


# Stream helpers.
def _stream_call(method, *args):
    # closed files raise ValueError, sockets OSError, wrappers anything
    try:
        return method(*args)
    except Exception as exc:
        raise StreamError(str(exc)) from exc


def write(stream, data: bytes) -> None:
    """
    Write ``data`` to the stream, any failure of the stream is reported
    as StreamError.
    """
    _stream_call(stream.write, data)


def read_exactly(stream, size: int) -> bytes:
    """
    Read exactly ``size`` bytes, retrying short reads until the stream
    reports its end.
    """
    chunks = []
    remaining = size
    while remaining > 0:
        chunk = _stream_call(stream.read, remaining)
        if chunk is None:
            raise StreamError('stream has no data available (non-blocking?)')
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    data = b''.join(chunks)
    if len(data) != size:
        raise UnexpectedEOF(
            'could not read enough bytes, expected {}, found {}'.format(
                size, len(data)
            )
        )
    return data


def read_line(stream, limit: int = None) -> bytes:
    """
    Read through the next LF and return the line without its CRLF.

    :param limit: Maximum line length, terminator excluded. None means
    no limit.
    """
    line = _stream_call(stream.readline, -1 if limit is None else limit + 2)
    if line is None:
        raise StreamError('stream has no data available (non-blocking?)')
    if not line.endswith(b'\n'):
        if limit is not None and len(line) == limit + 2:
            raise ProtocolSyntaxError(
                'line is longer than {} bytes'.format(limit)
            )
        raise UnexpectedEOF(
            'could not read a line, stream ended after {!r}'.format(line)
        )
    if not line.endswith(CRLF):
        raise ProtocolSyntaxError(
            'line must end with CRLF, got {!r}'.format(line)
        )
    return line[:-2]


# Base classes.
class Construct:
    """
    Base class for all kinds of constructs.

    Subclasses must implement the following methods:

        * _build_stream(self, obj, stream, context)
        * _parse_stream(self, stream, context)
        * _repr(self)

    """
    __slots__ = ()

    def build(self, obj, context=None) -> bytes:
        """
        Build bytes from the python object.

        :param obj: Python object to build bytes from.
        :param context: Optional context dictionary.
        """
        stream = BytesIO()
        self.build_stream(obj, stream, context)
        return stream.getvalue()

    def parse(self, data: bytes, context=None):
        """
        Parse some python object from the data. Bytes that follow
        the parsed object are ignored.

        :param data: Data to be parsed.
        :param context: Optional context dictionary.
        """
        stream = BytesIO(data)
        return self.parse_stream(stream, context)

    def build_stream(self, obj, stream, context=None) -> None:
        """
        Build bytes from the python object into the stream.

        :param obj: Python object to build bytes from.
        :param stream: A writable binary stream.
        :param context: Optional context dictionary.
        """
        if context is None:
            context = Context()
        if not isinstance(context, Context):
            context = Context(context)
        try:
            self._build_stream(obj, stream, context)
        except Error:
            raise
        except Exception as exc:
            raise translate(exc) from exc

    def parse_stream(self, stream, context=None):
        """
        Parse some python object from the stream, consuming exactly
        the bytes that belong to it.

        :param stream: A readable binary stream supporting ``read``
        and ``readline``.
        :param context: Optional context dictionary.
        """
        if context is None:
            context = Context()
        if not isinstance(context, Context):
            context = Context(context)
        try:
            return self._parse_stream(stream, context)
        except Error:
            raise
        except Exception as exc:
            raise translate(exc) from exc

    def __repr__(self):
        return self._repr()

    def _build_stream(self, obj, stream, context):  # pragma: nocover
        raise NotImplementedError

    def _parse_stream(self, stream, context):  # pragma: nocover
        raise NotImplementedError

    def _repr(self):  # pragma: nocover
        raise NotImplementedError


class Subconstruct(Construct):
    """
    Non-trivial constructs often wrap other constructs and add
    transformations on top of them. This class proxies build and parse
    to the wrapped construct.

    Note that _repr still has to be implemented.

    :param construct: Wrapped construct.

    """
    __slots__ = Construct.__slots__ + ('construct',)

    def __init__(self, construct: Construct):
        super().__init__()
        self.construct = construct

    def _build_stream(self, obj, stream, context):
        return self.construct._build_stream(obj, stream, context)

    def _parse_stream(self, stream, context):
        return self.construct._parse_stream(stream, context)

    def _repr(self):  # pragma: nocover
        raise NotImplementedError


class Context(ChainMap):
    """
    Tracks a building/parsing call: options given by the caller, the current
    nesting depth, and values of struct fields processed so far. Fields can
    depend on them via a contextual function.
    """


# Primitive constructs.
class Pass(Construct):
    r"""
    Empty field: nothing is written and nothing is read. It stands for
    the missing body of a null, e.g. ``$-1\r\n`` has no payload and no
    trailing CRLF.

        >>> Pass()
        Pass()
        >>> Pass().build(None)
        b''
        >>> stream = BytesIO(b'+OK\r\n')
        >>> Pass().parse_stream(stream) is None
        True
        >>> stream.tell()
        0

    """
    __slots__ = Construct.__slots__

    def _build_stream(self, obj, stream, context):
        pass

    def _parse_stream(self, stream, context):
        return None

    def _repr(self):
        return 'Pass()'


class Bytes(Construct):
    r"""
    Build and parse raw bytes with the specified length.

        >>> b = Bytes(3)
        >>> b
        Bytes(3)
        >>> b.build(b'foo')
        b'foo'
        >>> b.parse(b'bar')
        b'bar'
        >>> b.build(b'foobar')
        Traceback (most recent call last):
        ...
        resp2.errors.BuildingError: must build 3 bytes, got 6
        >>> b.parse(b'ba')
        Traceback (most recent call last):
        ...
        resp2.errors.UnexpectedEOF: could not read enough bytes, expected 3, found 2

    :param length: Number of bytes to build and to parse.

    """
    __slots__ = Construct.__slots__ + ('length',)

    def __init__(self, length: int):
        super().__init__()
        if length < 0:
            raise ValueError('length must be >= 0, got {}'.format(length))
        self.length = length

    def _build_stream(self, obj, stream, context):
        if not isinstance(obj, (bytes, bytearray, memoryview)):
            raise BuildingError('must build bytes, got {!r}'.format(type(obj)))
        if len(obj) != self.length:
            raise BuildingError('must build {!r} bytes, got {!r}'.format(
                self.length, len(obj)
            ))
        write(stream, obj)

    def _parse_stream(self, stream, context) -> bytes:
        return read_exactly(stream, self.length)

    def _repr(self):
        return 'Bytes({})'.format(self.length)


class Line(Construct):
    r"""
    Bytes ending in CRLF (b'\r\n'). Useful for building and parsing
    text-based network protocols.

        >>> l = Line()
        >>> l
        Line()
        >>> l.build(b'foo')
        b'foo\r\n'
        >>> l.parse(b'bar\r\nbaz\r\n')
        b'bar'

    With an encoding, lines are built from and parsed into strings:

        >>> l = Line('utf-8')
        >>> l
        Line(encoding='utf-8')
        >>> l.build('Иван')
        b'\xd0\x98\xd0\xb2\xd0\xb0\xd0\xbd\r\n'
        >>> l.parse(b'\xd0\x98\xd0\xb2\xd0\xb0\xd0\xbd\r\n')
        'Иван'
        >>> l.parse(b'\xff\r\n')
        Traceback (most recent call last):
        ...
        resp2.errors.TextDecodingError: 'utf-8' codec can't decode byte 0xff in position 0: invalid start byte

    Parsing reads through the first LF only, which must come right after CR:

        >>> Line().parse(b'foo\nbar\r\n')
        Traceback (most recent call last):
        ...
        resp2.errors.ProtocolSyntaxError: line must end with CRLF, got b'foo\n'
        >>> Line().parse(b'foo')
        Traceback (most recent call last):
        ...
        resp2.errors.UnexpectedEOF: could not read a line, stream ended after b'foo'

    The ``max_line_length`` context value bounds the length of a line,
    terminator excluded:

        >>> Line().parse(b'foobar\r\n', context={'max_line_length': 3})
        Traceback (most recent call last):
        ...
        resp2.errors.ProtocolSyntaxError: line is longer than 3 bytes

    Lines are not checked for embedded CR or LF when building: keeping them
    out is up to the producer.

    :param encoding: Encode/decode using this encoding. Default is None,
    meaning lines are built from and parsed into bytes.

    """
    __slots__ = Construct.__slots__ + ('encoding',)

    def __init__(self, encoding: str = None):
        super().__init__()
        self.encoding = encoding

    def _build_stream(self, obj, stream, context):
        if self.encoding is not None:
            if not isinstance(obj, str):
                raise BuildingError('must build str, got {!r}'.format(type(obj)))
            try:
                obj = obj.encode(self.encoding)
            except UnicodeEncodeError as exc:
                raise BuildingError(str(exc)) from exc
        elif not isinstance(obj, (bytes, bytearray, memoryview)):
            raise BuildingError('must build bytes, got {!r}'.format(type(obj)))
        write(stream, bytes(obj) + CRLF)

    def _parse_stream(self, stream, context):
        data = read_line(stream, context.get('max_line_length'))
        if self.encoding is None:
            return data
        try:
            return data.decode(self.encoding)
        except UnicodeDecodeError as exc:
            raise TextDecodingError(str(exc)) from exc

    def _repr(self):
        if self.encoding is None:
            return 'Line()'
        return 'Line(encoding={!r})'.format(self.encoding)


class Decimal(Subconstruct):
    r"""
    Signed base-10 integer written as an ASCII line.

        >>> d = Decimal()
        >>> d
        Decimal()
        >>> d.build(-42)
        b'-42\r\n'
        >>> d.parse(b'1000\r\n')
        1000
        >>> d.parse(b'007\r\n')
        7

    Only an optional minus sign followed by ASCII digits is accepted, and the
    value must fit into a signed 64-bit integer:

        >>> d.parse(b'+1\r\n')
        Traceback (most recent call last):
        ...
        resp2.errors.ProtocolSyntaxError: not a decimal integer: b'+1'
        >>> d.parse(b'9223372036854775808\r\n')
        Traceback (most recent call last):
        ...
        resp2.errors.ProtocolSyntaxError: integer out of range: b'9223372036854775808'
        >>> d.build(2 ** 63)
        Traceback (most recent call last):
        ...
        resp2.errors.BuildingError: integer out of range: 9223372036854775808
        >>> d.build(True)
        Traceback (most recent call last):
        ...
        resp2.errors.BuildingError: must build int, got <class 'bool'>

    A maximum can be given, either constant or as a function of context,
    to reject larger values when parsing:

        >>> d = Decimal(maximum=lambda ctx: ctx['limit'])
        >>> d.parse(b'10\r\n', context={'limit': 10})
        10
        >>> d.parse(b'11\r\n', context={'limit': 10})
        Traceback (most recent call last):
        ...
        resp2.errors.ProtocolSyntaxError: 11 is above the limit of 10

    :param maximum: Largest value accepted when parsing. None (or a function
    returning None) means no limit.

    """
    __slots__ = Subconstruct.__slots__ + ('maximum',)

    def __init__(self, maximum=None):
        super().__init__(Line())
        self.maximum = maximum

    def _build_stream(self, obj, stream, context):
        if not isinstance(obj, int) or isinstance(obj, bool):
            raise BuildingError('must build int, got {!r}'.format(type(obj)))
        if not INT64_MIN <= obj <= INT64_MAX:
            raise BuildingError('integer out of range: {}'.format(obj))
        self.construct._build_stream(str(obj).encode('ascii'), stream, context)

    def _parse_stream(self, stream, context) -> int:
        data = self.construct._parse_stream(stream, context)
        if _DECIMAL.fullmatch(data) is None:
            raise ProtocolSyntaxError('not a decimal integer: {!r}'.format(data))
        negative = data.startswith(b'-')
        digits = data.lstrip(b'-').lstrip(b'0')
        if len(digits) > INT64_DIGITS:
            raise ProtocolSyntaxError('integer out of range: {!r}'.format(data))
        obj = int(digits) if digits else 0
        if negative:
            obj = -obj
        if not INT64_MIN <= obj <= INT64_MAX:
            raise ProtocolSyntaxError('integer out of range: {!r}'.format(data))
        maximum = self.maximum(context) if callable(self.maximum) else self.maximum
        if maximum is not None and obj > maximum:
            raise ProtocolSyntaxError(
                '{} is above the limit of {}'.format(obj, maximum)
            )
        return obj

    def _repr(self):
        if self.maximum is None:
            return 'Decimal()'
        return 'Decimal(maximum={!r})'.format(self.maximum)


class Const(Subconstruct):
    r"""
    Build and parse constant values using the given construct.
    ``None`` can be specified for building.

        >>> c = Const(Decimal(), -1)
        >>> c
        Const(Decimal(), value=-1)
        >>> c.build(None)
        b'-1\r\n'
        >>> c.build(5)
        Traceback (most recent call last):
        ...
        resp2.errors.BuildingError: provided value must be None or -1, got 5
        >>> c.parse(b'-2\r\n')
        Traceback (most recent call last):
        ...
        resp2.errors.ProtocolSyntaxError: parsed value must be -1, got -2

    Since the majority of constant fields are terminators and signatures,
    ``Const`` supports the following short-hand:

        >>> c = Const(CRLF)
        >>> c
        Const(Bytes(2), value=b'\r\n')
        >>> c.build(None)
        b'\r\n'
        >>> c.parse(b'\r\n')
        b'\r\n'

    :param construct: Construct used to build and parse the constant value.

    :param value: Constant value to be built and parsed.

    """
    __slots__ = Subconstruct.__slots__ + ('value',)

    def __init__(self, construct, value=None):
        if value is None:
            if isinstance(construct, bytes):
                construct, value = Bytes(len(construct)), construct
        super().__init__(construct)
        self.value = value

    def _build_stream(self, obj, stream, context):
        if obj is not None and obj != self.value:
            raise BuildingError('provided value must be None '
                                'or {!r}, got {!r}'.format(self.value, obj))
        return self.construct._build_stream(self.value, stream, context)

    def _parse_stream(self, stream, context):
        obj = self.construct._parse_stream(stream, context)
        if obj != self.value:
            raise ProtocolSyntaxError('parsed value must be '
                                      '{!r}, got {!r}'.format(self.value, obj))
        return obj

    def _repr(self):
        return 'Const({}, value={!r})'.format(self.construct, self.value)


class Raise(Construct):
    """
    Construct that unconditionally raises BuildingError when building
    and ProtocolSyntaxError when parsing, with the given message.
    Useful in conditional constructs.

        >>> r = Raise('a condition is false')
        >>> r
        Raise(message='a condition is false')
        >>> r.build(None)
        Traceback (most recent call last):
        ...
        resp2.errors.BuildingError: a condition is false
        >>> r.parse(b'anything')
        Traceback (most recent call last):
        ...
        resp2.errors.ProtocolSyntaxError: a condition is false

    :param message: Message of the raised errors. Use ``Contextual``
    to specify dynamic messages.

    """
    __slots__ = Construct.__slots__ + ('message',)

    def __init__(self, message):
        super().__init__()
        self.message = message

    def _build_stream(self, obj, stream, context):
        raise BuildingError(self.message)

    def _parse_stream(self, stream, context):
        raise ProtocolSyntaxError(self.message)

    def _repr(self):
        return 'Raise(message={!r})'.format(self.message)


# Adapters.
class Adapted(Subconstruct):
    r"""
    Converts between caller objects and what the wrapped construct builds
    and parses. The grammar maps its dict frames to value classes this way,
    callers can map values further to their own types:

        >>> ok = Adapted(Line('utf-8'),
        ...     before_build=lambda obj: 'OK' if obj else 'NOT OK',
        ...     after_parse=lambda obj: obj == 'OK',
        ... )
        >>> ok
        Adapted(Line(encoding='utf-8'), before_build=<function <lambda> at ...>, after_parse=<function <lambda> at ...>)
        >>> ok.build(True)
        b'OK\r\n'
        >>> ok.parse(b'QUEUED\r\n')
        False

    A hook only needs to be given for the direction it adapts:

        >>> Adapted(Decimal(), after_parse=str)
        Adapted(Decimal(), after_parse=<class 'str'>)

    An exception escaping a hook is reported as a MessageError:

        >>> def positive(obj):
        ...     if obj <= 0:
        ...         raise ValueError('expected a positive number, got {}'.format(obj))
        ...     return obj
        >>> Adapted(Decimal(), after_parse=positive).parse(b'-5\r\n')
        Traceback (most recent call last):
        ...
        resp2.errors.MessageError: expected a positive number, got -5

    :param construct: Construct to adapt.

    :param before_build: Function of the caller's object, returning what
    ``construct`` builds. None leaves objects as they are.

    :param after_parse: Function of what ``construct`` parsed, returning
    the caller's object. None leaves objects as they are.

    """
    __slots__ = Subconstruct.__slots__ + ('before_build', 'after_parse')

    def __init__(self, construct: Construct,
                 before_build: callable = None, after_parse: callable = None):
        super().__init__(construct)
        self.before_build = before_build
        self.after_parse = after_parse

    def _build_stream(self, obj, stream, context):
        hook = self.before_build
        self.construct._build_stream(
            obj if hook is None else hook(obj), stream, context,
        )

    def _parse_stream(self, stream, context):
        obj = self.construct._parse_stream(stream, context)
        hook = self.after_parse
        return obj if hook is None else hook(obj)

    def _repr(self):
        hooks = [
            '{}={!r}'.format(name, getattr(self, name))
            for name in ('before_build', 'after_parse')
            if getattr(self, name) is not None
        ]
        return 'Adapted({})'.format(', '.join([repr(self.construct)] + hooks))


class RepeatExactly(Subconstruct):
    r"""
    Repeat the specified construct exactly n times.

        >>> r = RepeatExactly(Decimal(), 3)
        >>> r
        RepeatExactly(Decimal(), 3)
        >>> r.build([1, 2, 3])
        b'1\r\n2\r\n3\r\n'
        >>> r.parse(b'4\r\n5\r\n6\r\n7\r\n')
        [4, 5, 6]
        >>> r.build([1])
        Traceback (most recent call last):
        ...
        resp2.errors.BuildingError: must build 3 items, got 1

    :param construct: Construct to repeat.

    :param n: Repeat building/parsing exactly this number of times.

    """
    __slots__ = Subconstruct.__slots__ + ('n',)

    def __init__(self, construct: Construct, n: int):
        super().__init__(construct)
        if n < 0:
            raise ValueError('n must be >= 0, got {}'.format(n))
        self.n = n

    def _build_stream(self, obj, stream, context):
        if len(obj) != self.n:
            raise BuildingError('must build {} items, got {}'.format(
                self.n, len(obj)
            ))
        build_stream = self.construct._build_stream
        for item in obj:
            build_stream(item, stream, context)

    def _parse_stream(self, stream, context) -> list:
        parse_stream = self.construct._parse_stream
        return [parse_stream(stream, context) for _ in range(self.n)]

    def _repr(self):
        return 'RepeatExactly({}, {})'.format(self.construct, self.n)


# Structs.
class StructMeta(type):
    """
    Metaclass for Struct, collects the declared fields in order
    and keeps user defined structs slotted.
    """

    def __new__(mcs, name, bases, namespace):
        fields = {
            key: value for key, value in namespace.items()
            if isinstance(value, Construct)
        }
        namespace['__struct_fields__'] = fields
        if namespace.get('__slots__') is None:
            namespace['__slots__'] = Construct.__slots__
        return type.__new__(mcs, name, bases, namespace)


class Struct(Construct, metaclass=StructMeta):
    r"""
    Sequence of named constructs, built and parsed in the order
    they are defined. Parsing returns a dict, building takes one.

        >>> class Entry(Struct):
        ...     key = Line('utf-8')
        ...     value = Decimal()
        >>> entry = Entry()
        >>> entry
        Entry()
        >>> entry.build({'key': 'answer', 'value': 42})
        b'answer\r\n42\r\n'
        >>> entry.parse(b'answer\r\n42\r\n') == {'key': 'answer', 'value': 42}
        True
        >>> list(entry.fields)
        ['key', 'value']

    During building and parsing structs fill in the context with values
    of their fields, so ``Contextual``, ``If`` and ``Switch`` fields can
    depend on fields that come before them:

        >>> class Blob(Struct):
        ...     length = Decimal()
        ...     data = If(
        ...         lambda ctx: ctx['length'] >= 0,
        ...         Contextual(Bytes, lambda ctx: ctx['length']),
        ...     )
        >>> blob = Blob()
        >>> blob.build({'length': 3, 'data': b'foo'})
        b'3\r\nfoo'
        >>> blob.parse(b'-1\r\n') == {'length': -1, 'data': None}
        True

    """

    @property
    def fields(self):
        return self.__struct_fields__  # noqa

    def _build_stream(self, obj, stream, context):
        context = context.new_child(obj)
        for name, field in self.fields.items():
            ctx_value = field._build_stream(obj.get(name), stream, context)
            if ctx_value is not None:
                context[name] = ctx_value

    def _parse_stream(self, stream, context):
        context = context.new_child()
        obj = {}
        for name, field in self.fields.items():
            context[name] = obj[name] = field._parse_stream(stream, context)
        return obj

    def _repr(self):
        return '{}()'.format(self.__class__.__name__)


# Context-dependent constructs.
class Selector(Construct):
    """
    Base class for constructs that pick the construct to use from
    the context of the call, right before building or parsing.

    Subclasses must implement ``_select(self, context)``.
    """
    __slots__ = Construct.__slots__

    def _select(self, context) -> Construct:  # pragma: nocover
        raise NotImplementedError

    def _build_stream(self, obj, stream, context):
        return self._select(context)._build_stream(obj, stream, context)

    def _parse_stream(self, stream, context):
        return self._select(context)._parse_stream(stream, context)


class Contextual(Selector):
    r"""
    Instantiates a construct from values found in the context, typically
    a body whose size was given by an earlier field:

        >>> body = Contextual(Bytes, lambda ctx: ctx['length'])
        >>> body
        Contextual(Bytes, <function <lambda> at ...>)
        >>> body.parse(b'Hello\r\n', context={'length': 5})
        b'Hello'
        >>> body.build(b'Hello', context={'length': 4})
        Traceback (most recent call last):
        ...
        resp2.errors.BuildingError: must build 4 bytes, got 5

    A tuple is spread over several arguments:

        >>> items = Contextual(RepeatExactly, lambda ctx: (Decimal(), ctx['count']))
        >>> items.parse(b'1\r\n2\r\n', context={'count': 2})
        [1, 2]

    :param to_construct: Construct class, or any callable returning
    a construct.

    :param args_func: Function of context returning the argument
    (or a tuple of arguments) for ``to_construct``.

    """
    __slots__ = Selector.__slots__ + ('to_construct', 'args_func')

    def __init__(self, to_construct, args_func):
        super().__init__()
        self.to_construct = to_construct
        self.args_func = args_func

    def _select(self, context) -> Construct:
        args = self.args_func(context)
        if isinstance(args, tuple):
            return self.to_construct(*args)
        return self.to_construct(args)

    def _repr(self):
        name = getattr(self.to_construct, '__name__', self.to_construct)
        return 'Contextual({}, {})'.format(name, self.args_func)


class If(Selector):
    r"""
    Chooses between two constructs with a predicate of the context.
    Null bulk strings, for instance, have a body only when their length
    is not negative:

        >>> body = If(lambda ctx: ctx['length'] >= 0, Const(CRLF))
        >>> body
        If(<function <lambda> at ...>, Const(Bytes(2), value=b'\r\n'))
        >>> body.parse(b'\r\n', context={'length': 0})
        b'\r\n'
        >>> body.parse(b'\r\n', context={'length': -1}) is None
        True
        >>> body.build(None, context={'length': -1})
        b''

    :param predicate: Function of context. ``then_construct`` is used when
    it returns a true value, ``else_construct`` otherwise.

    :param then_construct: Construct for a true predicate.

    :param else_construct: Construct for a false predicate, Pass()
    if omitted.

    """
    __slots__ = Selector.__slots__ + ('predicate', 'then_construct',
                                      'else_construct')

    def __init__(self, predicate, then_construct, else_construct=Pass()):
        super().__init__()
        self.predicate = predicate
        self.then_construct = then_construct
        self.else_construct = else_construct

    def _select(self, context) -> Construct:
        return (self.then_construct if self.predicate(context)
                else self.else_construct)

    def _repr(self):
        args = [repr(self.predicate), repr(self.then_construct)]
        if not isinstance(self.else_construct, Pass):
            args.append('else_construct={!r}'.format(self.else_construct))
        return 'If({})'.format(', '.join(args))


class Switch(Selector):
    r"""
    Dispatches on a key computed from the context, like the tag byte
    that starts every frame:

        >>> value = Switch(
        ...     lambda ctx: ctx['tag'],
        ...     cases={b':': Decimal(), b'+': Line('utf-8')},
        ... )
        >>> value
        Switch(<function <lambda> at ...>, cases={b':': Decimal(), b'+': Line(encoding='utf-8')})
        >>> value.parse(b'OK\r\n', context={'tag': b'+'})
        'OK'
        >>> value.build(-1, context={'tag': b':'})
        b'-1\r\n'
        >>> value.parse(b'1\r\n', context={'tag': b'#'})
        Traceback (most recent call last):
        ...
        resp2.errors.ProtocolSyntaxError: no default case specified

    :param key: Function of context returning the case to use.

    :param cases: Mapping of keys to constructs.

    :param default: Construct for keys missing from ``cases``.
    Raise() if omitted.

    """
    __slots__ = Selector.__slots__ + ('key', 'cases', 'default')

    def __init__(self, key, cases, default=None):
        super().__init__()
        self.key = key
        self.cases = cases
        self.default = (Raise('no default case specified')
                        if default is None else default)

    def _select(self, context) -> Construct:
        return self.cases.get(self.key(context), self.default)

    def _repr(self):
        args = [repr(self.key), 'cases={!r}'.format(self.cases)]
        if not isinstance(self.default, Raise):
            args.append('default={!r}'.format(self.default))
        return 'Switch({})'.format(', '.join(args))


class Nested(Subconstruct):
    r"""
    Enters one level of nesting before building or parsing the wrapped
    construct. The current depth is kept in the context under ``depth``
    and bounded by the ``max_depth`` context value (None means no bound).

        >>> n = Nested(Decimal())
        >>> n
        Nested(Decimal())
        >>> n.parse(b'1\r\n', context={'max_depth': 1})
        1
        >>> n.parse(b'1\r\n', context={'max_depth': 1, 'depth': 1})
        Traceback (most recent call last):
        ...
        resp2.errors.NestingError: maximum nesting depth of 1 exceeded

    :param construct: Construct found one level deeper.

    """
    __slots__ = Subconstruct.__slots__

    def _descend(self, context) -> Context:
        depth = context.get('depth', 0) + 1
        limit = context.get('max_depth')
        if limit is not None and depth > limit:
            raise NestingError(
                'maximum nesting depth of {} exceeded'.format(limit)
            )
        return context.new_child({'depth': depth})

    def _build_stream(self, obj, stream, context):
        return self.construct._build_stream(obj, stream, self._descend(context))

    def _parse_stream(self, stream, context):
        return self.construct._parse_stream(stream, self._descend(context))

    def _repr(self):
        return 'Nested({})'.format(self.construct)


class Defaults(Subconstruct):
    r"""
    Provides default context values to the wrapped construct. Values given
    by the caller take precedence, including None.

        >>> d = Defaults(Line(), {'max_line_length': 3})
        >>> d
        Defaults(Line(), {'max_line_length': 3})
        >>> d.parse(b'foobar\r\n')
        Traceback (most recent call last):
        ...
        resp2.errors.ProtocolSyntaxError: line is longer than 3 bytes
        >>> d.parse(b'foobar\r\n', context={'max_line_length': None})
        b'foobar'

    :param construct: Construct to provide defaults to.

    :param defaults: Mapping of default context values.

    """
    __slots__ = Subconstruct.__slots__ + ('defaults',)

    def __init__(self, construct: Construct, defaults):
        super().__init__(construct)
        self.defaults = defaults

    def _build_stream(self, obj, stream, context):
        context = Context(*context.maps, self.defaults)
        return self.construct._build_stream(obj, stream, context)

    def _parse_stream(self, stream, context):
        context = Context(*context.maps, self.defaults)
        return self.construct._parse_stream(stream, context)

    def _repr(self):
        return 'Defaults({}, {!r})'.format(self.construct, self.defaults)
