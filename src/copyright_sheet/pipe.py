"""Bounded in-process byte pipe between a producer thread and a consumer.

The writer side blocks while the pipe is full. The reader sees the data
followed by either a clean end of stream (`b""`) or the producer's error.
Closing the reader wakes a blocked writer with `PipeClosedError`.
"""
from __future__ import annotations

import queue
import threading
from typing import Iterator, Optional, Tuple

from .errors import PipeClosedError

DEFAULT_CHUNK_SIZE = 64 * 1024
DEFAULT_MAX_CHUNKS = 16

# Interval at which a blocked writer re-checks whether the reader went away
_POLL_SECONDS = 0.05


class _End:
    """Terminal marker carrying an optional error."""

    __slots__ = ("error",)

    def __init__(self, error: Optional[BaseException] = None) -> None:
        self.error = error


class PipeReader:
    """Consumer side of a pipe; file-like and iterable."""

    def __init__(self, channel: "queue.Queue", closed: threading.Event) -> None:
        self._channel = channel
        self._closed = closed
        self._pending = b""
        self._end: Optional[_End] = None

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def _next_chunk(self) -> bytes:
        if self._end is None:
            item = self._channel.get()
            if isinstance(item, _End):
                self._end = item
            else:
                return item
        if self._end.error is not None:
            raise self._end.error
        return b""

    def read(self, size: int = -1) -> bytes:
        """
        Read up to `size` bytes (all remaining bytes when `size` < 0).

        Returns b"" at a clean end of stream.

        Raises:
            PipeClosedError: If the reader was closed
            Exception: The producer's error, once the data before it is consumed
        """
        if self.closed:
            raise PipeClosedError("read from closed pipe")

        if size < 0:
            parts = [self._pending]
            self._pending = b""
            while True:
                chunk = self._next_chunk()
                if not chunk:
                    return b"".join(parts)
                parts.append(chunk)

        while not self._pending:
            chunk = self._next_chunk()
            if not chunk:
                return b""
            self._pending = chunk

        data, self._pending = self._pending[:size], self._pending[size:]
        return data

    def __iter__(self) -> Iterator[bytes]:
        if self.closed:
            raise PipeClosedError("iterate over closed pipe")
        if self._pending:
            data, self._pending = self._pending, b""
            yield data
        while True:
            chunk = self._next_chunk()
            if not chunk:
                return
            yield chunk

    def close(self) -> None:
        """Stop consuming; any blocked or later write fails with PipeClosedError."""
        self._closed.set()
        # Drain so a writer blocked on a full queue can observe the close
        try:
            while True:
                self._channel.get_nowait()
        except queue.Empty:
            pass

    def __enter__(self) -> "PipeReader":
        return self

    def __exit__(self, *args) -> None:
        self.close()


class PipeWriter:
    """Producer side of a pipe."""

    def __init__(
        self,
        channel: "queue.Queue",
        closed: threading.Event,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self._channel = channel
        self._reader_closed = closed
        self._chunk_size = chunk_size
        self._finished = False

    def _put(self, item) -> None:
        while True:
            if self._reader_closed.is_set():
                raise PipeClosedError("write to closed pipe")
            try:
                self._channel.put(item, timeout=_POLL_SECONDS)
                return
            except queue.Full:
                continue

    def write(self, data: bytes) -> int:
        """Write `data` in chunks, blocking while the pipe is full."""
        if self._finished:
            raise PipeClosedError("write after close")
        view = memoryview(data)
        for start in range(0, len(view), self._chunk_size):
            self._put(bytes(view[start : start + self._chunk_size]))
        return len(data)

    def close(self) -> None:
        """Signal a clean end of stream."""
        self._finish(_End())

    def close_with_error(self, error: BaseException) -> None:
        """End the stream so that the reader raises `error`."""
        self._finish(_End(error))

    def _finish(self, end: _End) -> None:
        if self._finished:
            return
        self._finished = True
        try:
            self._put(end)
        except PipeClosedError:
            # Nobody is reading any more
            pass


def create_pipe(
    max_chunks: int = DEFAULT_MAX_CHUNKS,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Tuple[PipeReader, PipeWriter]:
    """Create a connected (reader, writer) pair buffering at most `max_chunks` chunks."""
    channel: "queue.Queue" = queue.Queue(maxsize=max_chunks)
    closed = threading.Event()
    return PipeReader(channel, closed), PipeWriter(channel, closed, chunk_size)
