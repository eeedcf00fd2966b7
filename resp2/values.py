r"""
In-memory RESP2 values.

Each of the five wire kinds is a small immutable class. Bulk strings and
arrays carry their own null: ``None`` as the payload means the null bulk
string or the null array, which are different values:

    >>> BulkString(None) == Array(None)
    False
    >>> BulkString(None) == BulkString(b'')
    False
    >>> Array(None) == Array([])
    False

Arrays keep their items in a tuple, lists are converted on construction:

    >>> Array([Integer(1), SimpleString('OK')])
    Array(items=(Integer(value=1), SimpleString(value='OK')))

``str()`` renders a value for humans:

    >>> str(BulkString(b'hello'))
    'hello'
    >>> str(BulkString(b'\xff'))
    ''
    >>> str(Array([Integer(1), BulkString(None)]))
    '[Integer(value=1), BulkString(value=None)]'
    >>> str(Array(None))
    'None'

"""
from dataclasses import dataclass
from typing import Optional, Tuple, Union

__all__ = ['SimpleString', 'ErrorReply', 'Integer', 'BulkString', 'Array',
           'Value', 'NULL_BULK_STRING', 'NULL_ARRAY']


@dataclass(frozen=True)
class SimpleString:
    """
    Short, non binary-safe text (``+OK``). Must not contain CR or LF.
    """
    value: str

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class ErrorReply:
    """
    Error reply sent by a server (``-ERR unknown command``).
    Must not contain CR or LF.
    """
    value: str

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class Integer:
    """
    Signed 64-bit integer.
    """
    value: int

    def __str__(self):
        return str(self.value)


@dataclass(frozen=True)
class BulkString:
    """
    Binary-safe string. ``None`` is the null bulk string.
    """
    value: Optional[bytes]

    def __post_init__(self):
        if isinstance(self.value, (bytearray, memoryview)):
            object.__setattr__(self, 'value', bytes(self.value))

    @property
    def is_null(self) -> bool:
        return self.value is None

    def __str__(self):
        if self.value is None:
            return 'None'
        try:
            return self.value.decode('utf-8')
        except UnicodeDecodeError:
            return ''


@dataclass(frozen=True)
class Array:
    """
    Ordered sequence of values, possibly nested. ``None`` is the null array.
    """
    items: Optional[Tuple['Value', ...]]

    def __post_init__(self):
        if self.items is not None and not isinstance(self.items, tuple):
            object.__setattr__(self, 'items', tuple(self.items))

    @property
    def is_null(self) -> bool:
        return self.items is None

    def __str__(self):
        if self.items is None:
            return 'None'
        return '[{}]'.format(', '.join(repr(item) for item in self.items))


Value = Union[SimpleString, ErrorReply, Integer, BulkString, Array]

NULL_BULK_STRING = BulkString(None)
NULL_ARRAY = Array(None)
