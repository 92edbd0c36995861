import re

from contextlib import contextmanager
from typing import Iterator, Union

from bencodec.utils import ascii_to_int


__all__ = (
    "MAX_DEPTH",
    "MAX_INTEGER_DIGITS",
    "BencodeDecoder",
    "BencodeDecodeError",
    "MalformedEncodingError",
    "InvalidIntegerError",
    "TruncatedDataError",
    "UnterminatedContainerError",
    "NestingTooDeepError",
    "decode",
    "decode_prefix",
    "decode_integer",
    "decode_string",
    "decode_list",
    "decode_dictionary",
)


BencodeValue = Union[dict, list, bytes, int]

# Containers nested deeper than this are rejected instead of exhausting
# the interpreter's recursion limit.
MAX_DEPTH = 256

# Longer integer bodies are rejected before any decimal conversion.
MAX_INTEGER_DIGITS = 10_000

_INTEGER_RE = re.compile(rb"-?(?:0|[1-9][0-9]*)")
_LENGTH_RE = re.compile(rb"0|[1-9][0-9]*")


def decode(data: bytes, max_depth: int = MAX_DEPTH) -> BencodeValue:
    return BencodeDecoder(data, max_depth).decode()


def decode_prefix(data: bytes,
                  max_depth: int = MAX_DEPTH) -> tuple[BencodeValue, int]:
    """Decode the value at the start of ``data``.

    Returns the value together with the number of bytes it occupied, so
    callers can pick up whatever follows it (e.g. the raw piece appended
    to a metadata extension message).
    """
    decoder = BencodeDecoder(data, max_depth)
    value = decoder.decode()
    return value, decoder.position


def decode_integer(data: bytes) -> int:
    return BencodeDecoder(data).decode_int()


def decode_string(data: bytes) -> bytes:
    return BencodeDecoder(data).decode_string()


def decode_list(data: bytes, max_depth: int = MAX_DEPTH) -> list:
    return BencodeDecoder(data, max_depth).decode_list()


def decode_dictionary(data: bytes, max_depth: int = MAX_DEPTH) -> dict:
    return BencodeDecoder(data, max_depth).decode_dict()


class BencodeDecoder:
    """Cursor over a bencoded buffer.

    Every ``decode*`` method reads one value starting at the current
    position and leaves the cursor on the first byte after it.
    """

    def __init__(self, data: bytes, max_depth: int = MAX_DEPTH) -> None:
        self._data = bytes(data)
        self._cur_pos = 0
        self._depth = 0
        self._max_depth = max_depth

    @property
    def position(self) -> int:
        return self._cur_pos

    def decode(self) -> BencodeValue:
        if self._cur_ch == b"i":
            return self.decode_int()
        elif self._cur_ch == b"l":
            return self.decode_list()
        elif self._cur_ch == b"d":
            return self.decode_dict()
        elif self._cur_ch.isdigit():
            return self.decode_string()
        elif not self._cur_ch:
            raise MalformedEncodingError(
                f"Unexpected end of data on position {self._cur_pos}")
        else:
            raise MalformedEncodingError(
                f"Invalid character on position {self._cur_pos}")

    @property
    def _cur_ch(self) -> bytes:
        return self._data[self._cur_pos: self._cur_pos + 1]

    def decode_int(self) -> int:
        self._expect(b"i")
        begin = self._cur_pos + 1
        end = self._data.find(b"e", begin)
        if end == -1:
            raise MalformedEncodingError(
                f"Unterminated integer on position {self._cur_pos}")
        body = self._data[begin:end]
        if not _INTEGER_RE.fullmatch(body) or body == b"-0":
            raise InvalidIntegerError(
                f"Invalid integer {body!r} on position {self._cur_pos}")
        if len(body.lstrip(b"-")) > MAX_INTEGER_DIGITS:
            raise InvalidIntegerError(
                f"Integer on position {self._cur_pos} has more than "
                f"{MAX_INTEGER_DIGITS} digits")
        self._cur_pos = end + 1
        return ascii_to_int(body)

    def decode_string(self) -> bytes:
        start = self._cur_pos
        separator_idx = self._data.find(b":", start)
        if separator_idx == -1:
            raise MalformedEncodingError(
                f"Missing string length separator on position {start}")
        length_prefix = self._data[start:separator_idx]
        if not _LENGTH_RE.fullmatch(length_prefix):
            raise MalformedEncodingError(
                f"Invalid string length {length_prefix!r} "
                f"on position {start}")
        # a prefix with more digits than the buffer size can never fit
        if len(length_prefix) > len(str(len(self._data))):
            raise TruncatedDataError(
                f"String on position {start} declares more bytes "
                f"than the {len(self._data)} in the buffer")
        length = ascii_to_int(length_prefix)
        begin = separator_idx + 1
        end = begin + length
        if end > len(self._data):
            raise TruncatedDataError(
                f"String on position {start} declares "
                f"{length_prefix.decode('ascii')} bytes, "
                f"only {len(self._data) - begin} available")
        self._cur_pos = end
        return self._data[begin:end]

    def decode_list(self) -> list:
        start = self._cur_pos
        self._expect(b"l")
        self._cur_pos += 1
        blist = []
        with self._nested():
            while self._cur_ch != b"e":
                if not self._cur_ch:
                    raise UnterminatedContainerError(
                        f"Unterminated list on position {start}")
                blist.append(self.decode())
        self._cur_pos += 1
        return blist

    def decode_dict(self) -> dict:
        start = self._cur_pos
        self._expect(b"d")
        self._cur_pos += 1
        bdict = {}
        with self._nested():
            while self._cur_ch != b"e":
                if not self._cur_ch:
                    raise UnterminatedContainerError(
                        f"Unterminated dictionary on position {start}")
                if not self._cur_ch.isdigit():
                    raise MalformedEncodingError(
                        f"Dictionary key on position {self._cur_pos} "
                        f"is not a byte string")
                key = self.decode_string()
                # repeated keys: the last one wins
                bdict[key] = self.decode()
        self._cur_pos += 1
        return bdict

    def _expect(self, token: bytes) -> None:
        if self._cur_ch != token:
            raise MalformedEncodingError(
                f"Expected {token!r} on position {self._cur_pos}, "
                f"got {self._cur_ch!r}")

    @contextmanager
    def _nested(self) -> Iterator[None]:
        if self._depth >= self._max_depth:
            raise NestingTooDeepError(
                f"Nesting deeper than {self._max_depth} "
                f"on position {self._cur_pos}")
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1


class BencodeDecodeError(ValueError):
    pass


class MalformedEncodingError(BencodeDecodeError):
    pass


class UnterminatedContainerError(MalformedEncodingError):
    pass


class InvalidIntegerError(BencodeDecodeError):
    pass


class TruncatedDataError(BencodeDecodeError):
    pass


class NestingTooDeepError(BencodeDecodeError):
    pass
