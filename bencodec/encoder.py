from typing import Union

from bencodec.utils import int_to_ascii


__all__ = (
    "BencodeEncoder",
    "BencodeEncodeError",
    "encode",
    "encode_string",
)


BencodeValue = Union[dict, list, bytes, int]


def encode(data: BencodeValue) -> bytes:
    return BencodeEncoder(data).encode()


def encode_string(data: bytes) -> bytes:
    return BencodeEncoder.encode_string(data)


class BencodeEncoder:
    def __init__(self, data: BencodeValue) -> None:
        self._data = data

    @staticmethod
    def encode_string(data: bytes) -> bytes:
        if not isinstance(data, (bytes, bytearray)):
            raise BencodeEncodeError(
                f"Object of type {type(data).__name__} "
                f"is not a Bencode byte string")
        return b"%d:" % len(data) + bytes(data)

    def _encode(self, data: BencodeValue) -> bytes:
        if isinstance(data, dict):
            return b"d" + self._encode_dict_items(data) + b"e"
        elif isinstance(data, (list, tuple)):
            payload = b"".join(map(self._encode, data))
            return b"l" + payload + b"e"
        elif isinstance(data, (bytes, bytearray)):
            return self.encode_string(data)
        elif isinstance(data, int) and not isinstance(data, bool):
            return b"i" + int_to_ascii(data) + b"e"
        else:
            err_msg = (
                f"Object of type {type(data).__name__} "
                f"is not Bencode serializable"
            )
            raise BencodeEncodeError(err_msg)

    def _encode_dict_items(self, data: dict) -> bytes:
        for key in data:
            if not isinstance(key, (bytes, bytearray)):
                raise BencodeEncodeError(
                    f"Dictionary key of type {type(key).__name__} "
                    f"is not Bencode serializable")
        # keys go out in raw byte order whatever the insertion order was
        return b"".join(
            self.encode_string(key) + self._encode(data[key])
            for key in sorted(data, key=bytes)
        )

    def encode(self) -> bytes:
        return self._encode(self._data)


class BencodeEncodeError(TypeError):
    pass
