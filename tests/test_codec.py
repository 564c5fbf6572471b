import pytest

from arbor.codec import BytesCodec, Decoder, LinesCodec


def test_lines_decoder():
    codec = LinesCodec()
    buf = bytearray(b"\nline 1\nline 2\r\nline 3\n\r\n\r")

    assert codec.decode(buf) == ""
    assert codec.decode(buf) == "line 1"
    assert codec.decode(buf) == "line 2"
    assert codec.decode(buf) == "line 3"
    assert codec.decode(buf) == ""
    assert codec.decode(buf) is None
    assert codec.decode_eof(buf) is None

    buf.extend(b"k")
    assert codec.decode(buf) is None
    assert codec.decode_eof(buf) == "\rk"

    assert codec.decode(buf) is None
    assert codec.decode_eof(buf) is None


def test_lines_encoder():
    codec = LinesCodec()
    buf = bytearray()

    codec.encode("", buf)
    assert bytes(buf) == b"\n"

    codec.encode("test", buf)
    assert bytes(buf) == b"\ntest\n"

    codec.encode("a\nb", buf)
    assert bytes(buf) == b"\ntest\na\nb\n"


@pytest.mark.parametrize(
    "text",
    ["1234567", "12345678", "123456789111213", "1234567891112131"],
)
def test_lines_encoder_no_overflow(text):
    codec = LinesCodec()
    buf = bytearray()
    codec.encode(text, buf)
    assert bytes(buf) == text.encode() + b"\n"


def test_lines_decode_eof_drains_text():
    codec = LinesCodec()
    buf = bytearray(b"lorem ipsum\r\ndolor sit\namet")
    lines = []
    while (line := codec.decode_eof(buf)) is not None:
        lines.append(line)
    assert lines == ["lorem ipsum", "dolor sit", "amet"]
    assert buf == bytearray()


def test_lines_encode_decode_round_trip():
    codec = LinesCodec()
    buf = bytearray()
    items = ["héllo", "", "wörld"]
    for item in items:
        codec.encode(item, buf)
    decoded = [codec.decode(buf) for _ in items]
    assert decoded == items
    assert codec.decode(buf) is None


def test_lines_invalid_utf8_raises():
    codec = LinesCodec()
    buf = bytearray(b"\xff\xfe\n")
    with pytest.raises(UnicodeDecodeError):
        codec.decode(buf)


def test_bytes_codec_decode_takes_everything():
    codec = BytesCodec()
    buf = bytearray(b"abc")
    assert codec.decode(buf) == b"abc"
    assert buf == bytearray()
    assert codec.decode(buf) is None


def test_bytes_codec_encode_appends():
    codec = BytesCodec()
    buf = bytearray(b"x")
    codec.encode(b"yz", buf)
    assert bytes(buf) == b"xyz"


def test_bytes_codec_decode_eof_empty():
    codec = BytesCodec()
    assert codec.decode_eof(bytearray()) is None


class _FourBytes(Decoder):
    def decode(self, src):
        if len(src) < 4:
            return None
        frame = bytes(src[:4])
        del src[:4]
        return frame


def test_default_decode_eof_raises_on_leftover():
    codec = _FourBytes()
    buf = bytearray(b"abcdef")
    assert Decoder.decode_eof(codec, buf) == b"abcd"
    with pytest.raises(EOFError):
        Decoder.decode_eof(codec, buf)