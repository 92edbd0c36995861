from typing import Union
from urllib.parse import urlparse


# Byte strings longer than this that are not text (piece hashes) are
# summarized instead of dumped.
MAX_HEX_BYTES = 64

# Stays well below the interpreter's int <-> str digit limit.
DIGITS_CHUNK = 1000
_CHUNK_BASE = 10 ** DIGITS_CHUNK


def is_url(url: str) -> bool:
    try:
        parsed = urlparse(url)
        return all([parsed.scheme, parsed.netloc])
    except ValueError:
        return False


def int_to_ascii(value: int) -> bytes:
    if value < 0:
        return b"-" + int_to_ascii(-value)
    chunks = []
    while value >= _CHUNK_BASE:
        value, rem = divmod(value, _CHUNK_BASE)
        chunks.append(b"%0*d" % (DIGITS_CHUNK, rem))
    chunks.append(b"%d" % value)
    return b"".join(reversed(chunks))


def ascii_to_int(digits: bytes) -> int:
    """Parse an already validated, optionally signed decimal literal."""
    if digits.startswith(b"-"):
        return -ascii_to_int(digits[1:])
    value = 0
    for ptr in range(0, len(digits), DIGITS_CHUNK):
        chunk = digits[ptr: ptr + DIGITS_CHUNK]
        value = value * 10 ** len(chunk) + int(chunk)
    return value


def to_printable(value) -> Union[dict, list, str, int]:
    """Turn a decoded value into something ``json.dumps`` accepts.

    UTF-8 byte strings become text. Other byte strings, and text that
    itself starts with ``0x``, become ``0x`` hex, so distinct dictionary
    keys stay distinct. Long binary values (not keys) are replaced by their
    size. Integers too long for ``json`` are rendered as decimal strings.
    """
    if isinstance(value, dict):
        return {_bytes_to_str(key, summarize=False): to_printable(item)
                for key, item in value.items()}
    elif isinstance(value, list):
        return list(map(to_printable, value))
    elif isinstance(value, bytes):
        return _bytes_to_str(value)
    elif isinstance(value, int) and abs(value) >= _CHUNK_BASE:
        return int_to_ascii(value).decode("ascii")
    return value


def _bytes_to_str(data: bytes, summarize: bool = True) -> str:
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        text = None
    if text is not None and not text.startswith("0x"):
        return text
    if summarize and text is None and len(data) > MAX_HEX_BYTES:
        return f"<{len(data)} bytes>"
    return "0x" + data.hex()
