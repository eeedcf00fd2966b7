r"""
Encoder and decoder for RESP2, the REdis Serialization Protocol.

    >>> import resp2
    >>> resp2.loads(b'*3\r\n:23\r\n+Hello\r\n$5\r\nthere\r\n')
    Array(items=(Integer(value=23), SimpleString(value='Hello'), BulkString(value=b'there')))
    >>> resp2.dumps(resp2.Array([resp2.BulkString(b'PING')]))
    b'*1\r\n$4\r\nPING\r\n'

"""
from resp2.codec import dump, dumps, iter_load, load, loads, to_text
from resp2.errors import (
    BuildingError, Error, MessageError, NestingError, ParsingError,
    ProtocolSyntaxError, StreamError, TextDecodingError, UnexpectedEOF,
)
from resp2.grammar import DEFAULT_OPTIONS, message
from resp2.values import (
    NULL_ARRAY, NULL_BULK_STRING, Array, BulkString, ErrorReply, Integer,
    SimpleString, Value,
)

__version__ = '0.1.0'

__all__ = ['load', 'loads', 'iter_load', 'dump', 'dumps', 'to_text',
           'message', 'DEFAULT_OPTIONS',
           'SimpleString', 'ErrorReply', 'Integer', 'BulkString', 'Array',
           'Value', 'NULL_BULK_STRING', 'NULL_ARRAY',
           'Error', 'ParsingError', 'BuildingError', 'ProtocolSyntaxError',
           'UnexpectedEOF', 'NestingError', 'StreamError',
           'TextDecodingError', 'MessageError']
