"""Codecs that turn byte buffers into frames and frames back into bytes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, TypeVar

__all__ = ["Decoder", "Encoder", "BytesCodec", "LinesCodec"]

ItemT = TypeVar("ItemT")


class Decoder(ABC, Generic[ItemT]):
    """Decodes frames from the front of a mutable byte buffer."""

    @abstractmethod
    def decode(self, src: bytearray) -> Optional[ItemT]:
        """Remove one frame from ``src`` and return it, or return None if more data is needed."""

    def decode_eof(self, src: bytearray) -> Optional[ItemT]:
        """Decode a frame once the underlying stream has ended.

        Raises ``EOFError`` if bytes remain that do not form a frame.
        """
        frame = self.decode(src)
        if frame is not None:
            return frame
        if not src:
            return None
        raise EOFError("bytes remaining on stream")


class Encoder(ABC, Generic[ItemT]):
    """Encodes frames onto the end of a mutable byte buffer."""

    @abstractmethod
    def encode(self, item: ItemT, dst: bytearray) -> None:
        """Append the encoded form of ``item`` to ``dst``."""


class BytesCodec(Decoder[bytes], Encoder[Any]):
    """Reads and writes raw chunks of bytes."""

    def encode(self, item: bytes | bytearray | memoryview, dst: bytearray) -> None:
        dst.extend(item)

    def decode(self, src: bytearray) -> Optional[bytes]:
        if not src:
            return None
        chunk = bytes(src)
        src.clear()
        return chunk

    def __repr__(self) -> str:
        return "BytesCodec"


class LinesCodec(Decoder[str], Encoder[str]):
    """Reads and writes newline-delimited UTF-8 strings.

    Input is split on LF or CRLF; a carriage return ending a line is dropped.
    Invalid UTF-8 raises ``UnicodeDecodeError``.
    """

    def encode(self, item: str, dst: bytearray) -> None:
        dst.extend(item.encode("utf-8"))
        dst.append(0x0A)

    def decode(self, src: bytearray) -> Optional[str]:
        if not src:
            return None
        end = src.find(b"\n")
        if end < 0:
            return None
        line = bytes(src[:end])
        del src[: end + 1]
        if not line:
            return ""
        if line.endswith(b"\r"):
            line = line[:-1]
        return line.decode("utf-8")

    def decode_eof(self, src: bytearray) -> Optional[str]:
        frame = self.decode(src)
        if frame is not None:
            return frame
        if not src:
            return None
        if src.endswith(b"\r"):
            # the trailing CR stays in the buffer
            rest = bytes(src[:-1])
            del src[:-1]
        else:
            rest = bytes(src)
            src.clear()
        if not rest:
            return None
        return rest.decode("utf-8")

    def __repr__(self) -> str:
        return "LinesCodec"