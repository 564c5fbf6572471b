"""Frame-level reading and writing on top of a byte transport."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Optional, Protocol, TypeVar

from arbor.codec import Decoder, Encoder

__all__ = ["Framed", "FramedParts"]

# The write buffer counts as full from this size on; reads also fetch this much at a time.
HIGH_WATER_MARK = 8 * 1024

IoT = TypeVar("IoT")
CodecT = TypeVar("CodecT")


class _Transport(Protocol):
    async def read(self, n: int) -> bytes: ...

    async def write(self, data: bytes) -> int: ...

    async def flush(self) -> None: ...

    async def shutdown(self) -> None: ...


class _Flags(enum.Flag):
    EOF = enum.auto()
    READABLE = enum.auto()


_NO_FLAGS = _Flags(0)


@dataclass
class FramedParts(Generic[IoT, CodecT]):
    """The transport, codec and buffers of a ``Framed``, taken apart."""

    io: IoT
    codec: CodecT
    read_buf: bytearray = field(default_factory=bytearray)
    write_buf: bytearray = field(default_factory=bytearray)
    _flags: _Flags = field(default=_NO_FLAGS, repr=False, compare=False)

    @classmethod
    def new(cls, io: IoT, codec: CodecT) -> "FramedParts[IoT, CodecT]":
        """Create parts with empty buffers."""
        return cls(io, codec)

    @classmethod
    def with_read_buf(
        cls, io: IoT, codec: CodecT, read_buf: bytearray
    ) -> "FramedParts[IoT, CodecT]":
        """Create parts whose read buffer already holds data."""
        return cls(io, codec, read_buf=bytearray(read_buf))


class Framed(Generic[IoT, CodecT]):
    """Reads and writes frames over a byte transport using a codec.

    The transport must provide the coroutines ``read(n)`` (an empty result
    means end of stream), ``write(data)`` (returning the number of bytes
    taken), ``flush()`` and ``shutdown()``.

    Iterating with ``async for`` yields decoded frames until the stream ends.
    """

    def __init__(self, io: IoT, codec: CodecT) -> None:
        self._io = io
        self._codec = codec
        self._flags = _NO_FLAGS
        self._read_buf = bytearray()
        self._write_buf = bytearray()

    @property
    def codec(self) -> CodecT:
        """The codec in use."""
        return self._codec

    @property
    def io(self) -> IoT:
        """The underlying transport.

        Reading from it directly may corrupt the stream of frames.
        """
        return self._io

    def is_read_buf_empty(self) -> bool:
        """Whether no unprocessed read data is buffered."""
        return not self._read_buf

    def is_write_buf_empty(self) -> bool:
        """Whether no written data awaits flushing."""
        return not self._write_buf

    def is_write_buf_full(self) -> bool:
        """Whether the write buffer has reached the high-water mark."""
        return len(self._write_buf) >= HIGH_WATER_MARK

    def is_write_ready(self) -> bool:
        """Whether the write buffer has room for more data."""
        return len(self._write_buf) < HIGH_WATER_MARK

    def replace_codec(self, codec: Any) -> "Framed[IoT, Any]":
        """Return a ``Framed`` over the same transport and buffers with another codec."""
        parts = self.into_parts()
        parts.codec = codec
        return Framed.from_parts(parts)

    def into_map_io(self, func: Callable[[IoT], Any]) -> "Framed[Any, CodecT]":
        """Return a ``Framed`` whose transport is ``func`` applied to this one's."""
        parts = self.into_parts()
        parts.io = func(parts.io)
        return Framed.from_parts(parts)

    def into_map_codec(self, func: Callable[[CodecT], Any]) -> "Framed[IoT, Any]":
        """Return a ``Framed`` whose codec is ``func`` applied to this one's."""
        parts = self.into_parts()
        parts.codec = func(parts.codec)
        return Framed.from_parts(parts)

    def write(self, item: Any) -> None:
        """Encode ``item`` into the write buffer."""
        encoder: Encoder[Any] = self._codec  # type: ignore[assignment]
        encoder.encode(item, self._write_buf)

    async def next_item(self) -> Optional[Any]:
        """Read from the transport until a frame decodes; return None at end of stream."""
        decoder: Decoder[Any] = self._codec  # type: ignore[assignment]
        transport: _Transport = self._io  # type: ignore[assignment]
        while True:
            if _Flags.READABLE in self._flags:
                if _Flags.EOF in self._flags:
                    return decoder.decode_eof(self._read_buf)
                frame = decoder.decode(self._read_buf)
                if frame is not None:
                    return frame
                self._flags &= ~_Flags.READABLE

            data = await transport.read(HIGH_WATER_MARK)
            if not data:
                self._flags |= _Flags.EOF
            else:
                self._read_buf.extend(data)
            self._flags |= _Flags.READABLE

    async def flush(self) -> None:
        """Write the whole write buffer to the transport, then flush it.

        Raises ``OSError`` if the transport accepts no bytes.
        """
        transport: _Transport = self._io  # type: ignore[assignment]
        while self._write_buf:
            written = await transport.write(bytes(self._write_buf))
            if written == 0:
                raise OSError("failed to write frame to transport")
            del self._write_buf[:written]
        await transport.flush()

    async def close(self) -> None:
        """Flush and shut down the transport."""
        transport: _Transport = self._io  # type: ignore[assignment]
        await transport.flush()
        await transport.shutdown()

    async def ready(self) -> None:
        """Wait until there is room in the write buffer, flushing if it is full."""
        if not self.is_write_ready():
            await self.flush()

    async def send(self, item: Any) -> None:
        """Wait for room, encode ``item`` and flush."""
        await self.ready()
        self.write(item)
        await self.flush()

    @classmethod
    def from_parts(cls, parts: FramedParts[IoT, CodecT]) -> "Framed[IoT, CodecT]":
        """Build a ``Framed`` from previously taken-apart pieces."""
        framed = cls(parts.io, parts.codec)
        framed._flags = parts._flags
        framed._read_buf = parts.read_buf
        framed._write_buf = parts.write_buf
        return framed

    def into_parts(self) -> FramedParts[IoT, CodecT]:
        """Take this ``Framed`` apart into its transport, codec and buffers."""
        return FramedParts(
            io=self._io,
            codec=self._codec,
            read_buf=self._read_buf,
            write_buf=self._write_buf,
            _flags=self._flags,
        )

    def __aiter__(self) -> "Framed[IoT, CodecT]":
        return self

    async def __anext__(self) -> Any:
        frame = await self.next_item()
        if frame is None:
            raise StopAsyncIteration
        return frame

    def __repr__(self) -> str:
        return f"Framed(io={self._io!r}, codec={self._codec!r})"