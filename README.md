# streamfetch

Building blocks for streaming downloads:

- storage layers that hand out a reader and a writer, each with its own position;
- rules and a registry that route an input string to the right handler;
- commands whose standard output can be read as a byte stream;
- settings, progress types and a cancellation token for a download.

The package has no dependencies outside the standard library.

## Installation

```
pip install streamfetch
```

To run the test suite:

```
pip install "streamfetch[test]"
pytest
```

## Storage

A storage provider's `into_reader_writer(content_length)` returns a
`(reader, writer)` pair. Readers offer `read`, `seek` and `tell`. Writers
offer `write`, `flush`, `seek` and `tell`.

- `streamfetch.storage.memory.MemoryStorageProvider` creates two
  `MemoryStorage` handles over one shared in-memory buffer.
  - The buffer starts at the content length, if one is given.
  - It grows whenever a write needs more room.
- `streamfetch.storage.temp.TempStorageProvider` keeps the data in a temporary
  file. You can choose how that file is created:
  - `TempStorageProvider.new_in(path)` creates it in a chosen directory;
  - `with_prefix(prefix)` and `with_prefix_in(prefix, path)` give its name a
    chosen prefix;
  - `with_tempfile_builder(builder)` uses your own builder.

  The reader is a `TempStorageReader` and the writer is an ordinary binary
  file opened on the same path. `TempStorageReader.close()` closes the file.
  It also deletes the file if the provider created it.
- `streamfetch.storage.bounded.BoundedStorageProvider(inner, buffer_size)`
  wraps another provider in a fixed-size circular buffer.
  - When the content length is known and smaller, the buffer uses that length.
  - A write accepts only as many bytes as fit without overtaking the reader,
    possibly none.
  - Reading more than the buffer size raises `ValueError`.
  - Reading data that has already been overwritten also raises `ValueError`.
  - Seeking from the end is not supported.
- `streamfetch.storage.adaptive.AdaptiveStorageProvider(inner, size)` picks the
  storage from the content length:
  - when the length is known, it uses `inner` directly;
  - when the length is unknown, it uses a bounded buffer of `size` bytes.

```python
from streamfetch.storage.memory import MemoryStorageProvider
from streamfetch.storage.bounded import BoundedStorageProvider

reader, writer = BoundedStorageProvider(MemoryStorageProvider(), 1024).into_reader_writer(None)
writer.write(b"hello")
print(reader.read(5))  # b'hello'
```

## Routing inputs

`streamfetch.registry.registry.Registry` passes an input to the first
`RegistryEntry` whose rules match. Entries are tried in order of
`priority()`, and lower numbers come first. `find_match` is a coroutine. It
returns the result of the chosen entry's async `handler`, or `None` when no
entry matches.

The input can be a raw string or an `Input` object from
`streamfetch.registry.inputs`.

- A raw string becomes a `Source`. It holds a `Url` when the string parses as
  an absolute URL, and the plain string otherwise.
- An `Input` keeps any prefix that a prefix rule removed.
- `Input.into_raw()` gives back the original string.

Rules come from `streamfetch.registry.matcher.Rule`:

- prefixes: `Rule.prefix`;
- plain strings: `Rule.string`, `Rule.any_string`;
- URLs: `Rule.any_url`, `Rule.url_scheme`, `Rule.url_domain`,
  `Rule.http_domain`, `Rule.any_http`, `Rule.url`.

A matcher argument can be either of two kinds:

- a string, which is compared for equality;
- a compiled `re` pattern, which is searched.

```python
import asyncio
from streamfetch.registry.registry import Registry, RegistryEntry
from streamfetch.registry.matcher import Rule

class Http(RegistryEntry):
    def priority(self):
        return 1

    def rules(self):
        return [Rule.any_http()]

    async def handler(self, input):
        return input.source.into_url()

registry = Registry().entry(Http())
print(asyncio.run(registry.find_match("https://example.com/a.mp3")))
```

## Processes

`streamfetch.process` starts external programs with their standard output
piped.

- `command.Command` holds one program with its arguments. Its `spawn()`
  returns a `SpawnedCommand`. A `SpawnedCommand` provides:
  - `stdout`;
  - `wait()`;
  - `kill()`;
  - `stderr_output()`;
  - `close()`, which also makes it a context manager.
- `command_builder.CommandBuilder` pipes several commands together, like
  `cmd1 | cmd2`.
- `yt_dlp.YtDlpCommand` builds a `yt-dlp` invocation that writes to standard
  output. It has options for audio extraction, format and binary path.
- `ffmpeg.FfmpegConvertAudioCommand` builds an `ffmpeg` invocation that
  converts audio from standard input to standard output.
- `command.ProcessStreamParams` spawns a command as soon as it is created. It
  also records an optional content length.

Unless `Command.stderr_handle` is set, each child's standard error goes to a
temporary file. `SpawnedCommand.stderr_output()` returns those contents.

## Settings and progress

`streamfetch.settings.Settings` is a frozen dataclass with these options:

- `prefetch_bytes` (default 256 KiB);
- `seek_buffer_size` (default 128);
- `retry_timeout` (default 5 seconds);
- `cancel_on_drop` (default true);
- `on_progress` and `on_reconnect` callbacks.

The `with_*` methods return modified copies.

`StreamState` and `StreamPhase` describe the progress of a download.
`StreamPhase` takes one of three kinds:

- prefetching;
- downloading;
- complete.

`CancellationToken` is a thread-safe flag that can also be awaited.

## What this package does not do

The package has no download loop. Nothing fetches data from an HTTP server,
an object store or a process and writes it into the storage layers. Nothing
uses `Settings` or calls the progress callbacks either. Readers do not wait
for data that has not been written yet. There is no HTTP client and no
command-line program. Each piece is usable on its own, and you supply the
code that connects them.