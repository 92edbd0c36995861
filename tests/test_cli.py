import json
import logging

import pytest

from bencodec import main
from bencodec.encoder import encode
from bencodec.utils import ascii_to_int, int_to_ascii, is_url, to_printable


class TestMain:
    def test_prints_decoded_torrent(self, tmp_path, capsys):
        info = {b"length": 5, b"name": b"a.txt", b"pieces": b"\xff" * 20}
        path = tmp_path / "a.torrent"
        path.write_bytes(encode({b"announce": b"http://t/announce",
                                 b"info": info}))

        assert main([str(path), "--strict"]) == 0

        output = json.loads(capsys.readouterr().out)
        assert output["file"] == str(path)
        assert output["content"]["announce"] == "http://t/announce"
        assert output["content"]["info"]["pieces"] == "0x" + "ff" * 20
        assert len(output["info_hash"]) == 40

    def test_failures_are_logged(self, tmp_path, caplog):
        broken = tmp_path / "broken.torrent"
        broken.write_bytes(b"d3:cow")
        missing = tmp_path / "missing.torrent"

        with caplog.at_level(logging.ERROR, logger="bencodec"):
            assert main([str(broken), str(missing)]) == 1

        messages = [record.getMessage() for record in caplog.records]
        assert len(messages) == 2
        assert messages[0].startswith(f"{broken}: ")
        assert messages[1].startswith(f"{missing}: ")

    def test_strict_failure(self, tmp_path):
        path = tmp_path / "bare.torrent"
        path.write_bytes(b"de")
        assert main([str(path)]) == 0
        assert main([str(path), "-s"]) == 1

    def test_huge_integer(self, tmp_path, capsys):
        path = tmp_path / "huge.torrent"
        path.write_bytes(b"d1:ai" + b"1" * 5000 + b"ee")

        assert main([str(path)]) == 0

        output = json.loads(capsys.readouterr().out)
        assert output["content"]["a"] == "1" * 5000

    @pytest.mark.parametrize("max_depth", ["-1", "10000", "deep"])
    def test_rejects_bad_max_depth(self, tmp_path, max_depth):
        path = tmp_path / "deep.torrent"
        path.write_bytes(b"d1:a" + b"l" * 5000 + b"e" * 5000 + b"e")
        with pytest.raises(SystemExit) as excinfo:
            main([str(path), "--max-depth", max_depth])
        assert excinfo.value.code == 2

    def test_deep_nesting_is_logged(self, tmp_path, caplog):
        deep = tmp_path / "deep.torrent"
        deep.write_bytes(b"d1:a" + b"l" * 5000 + b"e" * 5000 + b"e")
        fine = tmp_path / "fine.torrent"
        fine.write_bytes(b"d1:ai1ee")

        with caplog.at_level(logging.ERROR, logger="bencodec"):
            assert main([str(deep), str(fine), "--max-depth", "300"]) == 1

        messages = [record.getMessage() for record in caplog.records]
        assert messages == [
            f"{deep}: Nesting deeper than 300 on position 304"]

    def test_requires_files(self):
        with pytest.raises(SystemExit):
            main([])


class TestUtils:
    @pytest.mark.parametrize("url, expected_res", [
        ("http://tracker.example/announce", True),
        ("udp://tracker.example:6969/announce", True),
        ("not a url", False),
        ("http://[::1", False),
        ("", False)
    ])
    def test_is_url(self, url, expected_res):
        assert is_url(url) is expected_res

    @pytest.mark.parametrize("value, expected_res", [
        (42, 42),
        (b"spam", "spam"),
        (b"\xff\x00", "0xff00"),
        ({b"ab": 1, b"\xab": 2}, {"ab": 1, "0xab": 2}),
        ({b"0xab": 1, b"\xab": 2}, {"0x30786162": 1, "0xab": 2}),
        (b"0xab", "0x30786162"),
        ({b"\xff" * 65: 1, b"\xfe" * 65: 2},
         {"0x" + "ff" * 65: 1, "0x" + "fe" * 65: 2}),
        pytest.param(10 ** 5000, "1" + "0" * 5000, id="huge-int"),
        (-42, -42),
        (b"\xff" * 65, "<65 bytes>"),
        ([b"a", 1], ["a", 1]),
        ({b"k": {b"\xfe": [b"v"]}}, {"k": {"0xfe": ["v"]}})
    ])
    def test_to_printable(self, value, expected_res):
        assert to_printable(value) == expected_res

    @pytest.mark.parametrize("value, expected_res", [
        (0, b"0"),
        (7, b"7"),
        (-120, b"-120"),
        (2 ** 63, b"9223372036854775808")
    ])
    def test_int_to_ascii(self, value, expected_res):
        assert int_to_ascii(value) == expected_res
        assert ascii_to_int(expected_res) == value

    @pytest.mark.parametrize("sign", [1, -1])
    def test_huge_int_conversion(self, sign):
        value = sign * (10 ** 4999 + 12345)
        digits = int_to_ascii(value)
        assert len(digits.lstrip(b"-")) == 5000
        assert digits.endswith(b"0" * 3000 + b"12345")
        assert ascii_to_int(digits) == value
