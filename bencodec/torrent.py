import hashlib
import logging

from itertools import chain
from functools import cached_property

from bencodec.utils import is_url
from bencodec.encoder import encode
from bencodec.decoder import MAX_DEPTH, decode_dictionary


__all__ = (
    "Torrent",
    "TorrentFileError",
    "UnreadableFileError",
    "MissingRequiredFieldError",
    "check_required_fields",
    "decode_file",
)


logger = logging.getLogger(__name__)


def decode_file(path: str, strict: bool = False,
                max_depth: int = MAX_DEPTH) -> dict:
    """Read and decode a .torrent file.

    With ``strict`` the root dictionary must also hold a non-empty
    ``announce`` string and a non-empty ``info`` dictionary.
    """
    try:
        with open(path, "rb") as fin:
            file_data = fin.read()
    except OSError as exc:
        raise UnreadableFileError(
            f"File {path} does not exist or can not be read") from exc
    logger.debug("Read %d bytes from %s", len(file_data), path)

    # .torrent file always contains dict in bencode format
    data = decode_dictionary(file_data, max_depth)
    if strict:
        check_required_fields(data)
    return data


def check_required_fields(data: dict) -> None:
    announce = data.get(b"announce")
    if not isinstance(announce, bytes) or not announce:
        raise MissingRequiredFieldError('Missing or empty "announce" key')
    info = data.get(b"info")
    if not isinstance(info, dict) or not info:
        raise MissingRequiredFieldError('Missing or empty "info" key')


class Torrent:
    def __init__(self, path: str, strict: bool = False,
                 max_depth: int = MAX_DEPTH) -> None:
        self.path = path
        self.data = decode_file(path, strict, max_depth)

    @cached_property
    def info(self) -> dict:
        info = self.data.get(b"info")
        return info if isinstance(info, dict) else {}

    @cached_property
    def announce(self) -> str:
        return _text(self.data.get(b"announce"))

    @cached_property
    def announce_list(self) -> list[list[str]]:
        tiers = self.data.get(b"announce-list")
        if not isinstance(tiers, list):
            return []
        return [
            list(filter(is_url, map(_text, urls)))
            for urls in tiers
            if isinstance(urls, list)
        ]

    @cached_property
    def announce_urls(self) -> list[str]:
        urls = list(chain(*self.announce_list))
        if urls:
            return urls
        return [self.announce] if self.announce else []

    @cached_property
    def name(self) -> str:
        return _text(self.info.get(b"name"))

    @cached_property
    def info_hash(self) -> bytes:
        return hashlib.sha1(encode(self.info)).digest()

    @cached_property
    def is_multifile(self) -> bool:
        return b"files" in self.info

    @cached_property
    def size(self) -> int:
        if self.is_multifile:
            files = self.info[b"files"]
            if not isinstance(files, list):
                return 0
            return sum(_length(file) for file in files
                       if isinstance(file, dict))
        return _length(self.info)

    def __repr__(self) -> str:
        return f"Torrent(path={self.path!r}, name={self.name!r})"


def _length(entry: dict) -> int:
    length = entry.get(b"length")
    return length if isinstance(length, int) else 0


def _text(value) -> str:
    # non-strict roots may hold anything under the well-known keys
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return ""


class TorrentFileError(Exception):
    pass


class UnreadableFileError(TorrentFileError):
    pass


class MissingRequiredFieldError(TorrentFileError):
    pass
