"""
Every failure raised by the codec is an instance of ``Error``.

Decoding failures derive from ``ParsingError`` and encoding failures from
``BuildingError``; problems that are not tied to a direction (the stream
itself failing, text that is not UTF-8, a caller hook rejecting a value)
derive from ``Error`` directly.
"""
import logging

__all__ = ['Error', 'ParsingError', 'BuildingError', 'ProtocolSyntaxError',
           'UnexpectedEOF', 'NestingError', 'StreamError',
           'TextDecodingError', 'MessageError', 'translate']

logger = logging.getLogger(__name__)


class Error(Exception):
    """
    Generic error, base class for all library errors.
    """


class ParsingError(Error):
    """
    Raises when parsing fails.
    """


class BuildingError(Error):
    """
    Raises when building fails: the object is not something the grammar
    can encode.
    """


class ProtocolSyntaxError(ParsingError):
    """
    Raises when the bytes do not follow the wire grammar: an unknown tag
    byte, a line that is not a decimal integer, a body that is not followed
    by CRLF, or a field above its configured limit.
    """


class UnexpectedEOF(ParsingError, EOFError):
    """
    Raises when the stream ends before a complete frame has been read.
    """

    def __init__(self, message='unexpected end of input'):
        super().__init__(message)


class NestingError(ParsingError, BuildingError):
    """
    Raises when arrays are nested deeper than the ``max_depth`` option,
    in either direction.
    """


class StreamError(Error):
    """
    Raises when the underlying stream fails for a reason other than
    reaching its end.
    """


class TextDecodingError(Error):
    """
    Raises when bytes that must be text are not valid UTF-8.
    """


class MessageError(Error):
    """
    Raises when a caller-supplied hook (see ``Adapted``) rejects the value
    it was given. Hooks may raise it directly; any other exception escaping
    a hook is reported as a ``MessageError`` too.
    """


def translate(exc: Exception) -> Error:
    """
    Map an exception that escaped a construct onto the error taxonomy.
    Library errors are returned as is.
    """
    if isinstance(exc, Error):
        return exc
    if isinstance(exc, EOFError):
        error = UnexpectedEOF(str(exc) or 'unexpected end of input')
    elif isinstance(exc, UnicodeDecodeError):
        error = TextDecodingError(str(exc))
    elif isinstance(exc, RecursionError):
        error = NestingError(str(exc))
    elif isinstance(exc, OSError):
        error = StreamError(str(exc))
    else:
        error = MessageError(str(exc))
    logger.debug(f'{type(exc).__name__} reported as {type(error).__name__}: {exc}')
    return error
