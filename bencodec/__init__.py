__version__ = "0.1.0"

import sys
import json
import logging
import argparse

from typing import Optional, Sequence

from tqdm import tqdm  # type: ignore[import]

from bencodec.utils import to_printable
from bencodec.encoder import BencodeEncodeError, encode, encode_string
from bencodec.decoder import (MAX_DEPTH,
                              MAX_INTEGER_DIGITS,
                              BencodeDecodeError,
                              InvalidIntegerError,
                              MalformedEncodingError,
                              NestingTooDeepError,
                              TruncatedDataError,
                              UnterminatedContainerError,
                              decode,
                              decode_dictionary,
                              decode_integer,
                              decode_list,
                              decode_prefix,
                              decode_string)
from bencodec.torrent import (MissingRequiredFieldError,
                              Torrent,
                              TorrentFileError,
                              UnreadableFileError,
                              decode_file)


logger = logging.getLogger(__name__)

LOG_FMT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
PROGRESS_FMT = "{l_bar}{bar} [{n_fmt}/{total_fmt}]"


def _max_depth(value: str) -> int:
    # the decoder uses two stack frames per nesting level
    limit = sys.getrecursionlimit() // 3
    depth = int(value)
    if not 0 <= depth <= limit:
        raise argparse.ArgumentTypeError(
            f"max depth must be between 0 and {limit}")
    return depth


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="bencodec", description="Decode .torrent files")
    parser.add_argument("files", nargs="+", metavar="FILE")
    parser.add_argument("-s", "--strict", action="store_true",
                        help="require non-empty announce and info keys")
    parser.add_argument("-p", "--progress", action="store_true")
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("--max-depth", type=_max_depth, default=MAX_DEPTH)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format=LOG_FMT)

    failed = 0
    for path in tqdm(args.files, disable=not args.progress,
                     bar_format=PROGRESS_FMT):
        try:
            torrent = Torrent(path, args.strict, args.max_depth)
        except (TorrentFileError, BencodeDecodeError) as exc:
            logger.error("%s: %s", path, exc)
            failed += 1
            continue
        tqdm.write(json.dumps({
            "file": path,
            "info_hash": torrent.info_hash.hex(),
            "content": to_printable(torrent.data),
        }, indent=2))

    return 1 if failed else 0
