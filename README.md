# arbor

Small building blocks for asynchronous programs built on `asyncio`.

- **Codecs** (`arbor.codec`): `Decoder` and `Encoder` are the interfaces a
  codec follows, working on a `bytearray` buffer. `BytesCodec` passes chunks
  of bytes through unchanged; `LinesCodec` splits input on LF or CRLF and
  writes each string followed by `\n`.
- **Framed transports** (`arbor.framed`): `Framed` wraps a byte transport and
  a codec into one object you can write frames to and read frames from, also
  with `async for`. `FramedParts` holds the transport, codec and buffers of a
  `Framed` taken apart, so it can be rebuilt with another codec while keeping
  buffered data.
- **Runtime** (`arbor.runtime`): `Runtime` owns an event loop, with `spawn`
  for background tasks and `block_on` to run an awaitable to completion. The
  module-level `spawn` starts a task on the loop already running.

## Installing

```
pip install .
```

## Decoding lines

```python
from arbor.codec import LinesCodec

codec = LinesCodec()
buf = bytearray(b"line 1\nline 2\r\npartial")
codec.decode(buf)      # "line 1"
codec.decode(buf)      # "line 2"
codec.decode(buf)      # None: no full line yet
codec.decode_eof(buf)  # "partial"

out = bytearray()
codec.encode("hello", out)  # out == b"hello\n"
```

A decoder's `decode` returns `None` while more data is needed. The default
`Decoder.decode_eof` raises `EOFError` if bytes remain that form no frame.
`LinesCodec` raises `UnicodeDecodeError` on invalid UTF-8.

## Framing a transport

`Framed` expects a transport object with the coroutines `read(n)` (an empty
result means end of stream), `write(data)` (returning how many bytes it
took), `flush()` and `shutdown()`.

```python
from arbor.codec import LinesCodec
from arbor.framed import Framed

async def echo(transport):
    framed = Framed(transport, LinesCodec())
    async for line in framed:
        await framed.send(line)
    await framed.close()
```

`write` only encodes into the write buffer; `flush` writes the buffer out and
raises `OSError` if the transport accepts no bytes. `ready` flushes once the
buffer reaches 8 KiB, and `send` does `ready`, `write` and `flush` in turn.
`replace_codec`, `into_map_io`, `into_map_codec`, `into_parts` and
`Framed.from_parts` move buffered data to a new `Framed`.

## Running coroutines

```python
import asyncio

from arbor.runtime import Runtime

async def answer():
    await asyncio.sleep(0.01)
    return 42

with Runtime() as rt:
    task = rt.spawn(answer())
    assert rt.block_on(task) == 42
```

Spawned tasks only make progress while `block_on` runs. Leaving the `with`
block (or calling `close`) cancels what is still pending and closes the loop.

## What it does not do

Everything runs on the thread that calls `block_on`. The package has no
supervisor that starts several event-loop threads, hands work to them or
stops them together with an exit code, and it has no decorator that turns an
`async def` function into a plain entry point or test function.

## Running the tests

```
pip install ".[test]"
pytest
```