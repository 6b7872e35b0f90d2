"""
Byte-stream channel: a unidirectional OS pipe between two stages.

The write end is handed to a producer (a child process via its fd, or a
closure via ``write``). A pump thread empties the read end into memory as
bytes arrive, so a producer never blocks on a full pipe buffer while the
stage that owns the channel is still waiting for it to finish.

Protocol: every producer closes the write end (``close_writer``) on every
exit path before anyone calls ``drain``. Until then ``drain`` blocks.
"""

from __future__ import annotations

import logging
import os
import threading
from typing import List, Optional

logger = logging.getLogger(__name__)

_CHUNK = 65536


class Channel:
    def __init__(self) -> None:
        self._read_fd, self._write_fd = os.pipe()
        self._writer_open = True
        self._chunks: List[bytes] = []
        self._lock = threading.Lock()
        self._pump = threading.Thread(
            target=self._pump_loop, name=f"channel-pump-{self._read_fd}", daemon=True
        )
        self._pump.start()

    def __repr__(self) -> str:
        state = "open" if self._writer_open else "closed"
        return f"Channel(write_fd={self._write_fd}, writer={state})"

    def __enter__(self) -> "Channel":
        return self

    def __exit__(self, *exc) -> None:
        self.close_writer()

    def _pump_loop(self) -> None:
        try:
            while True:
                chunk = os.read(self._read_fd, _CHUNK)
                if not chunk:
                    break
                with self._lock:
                    self._chunks.append(chunk)
        finally:
            os.close(self._read_fd)

    @property
    def write_fd(self) -> int:
        """File descriptor of the write end, for handing to a child process."""
        if not self._writer_open:
            raise ValueError("write end of channel is closed")
        return self._write_fd

    @property
    def writer_open(self) -> bool:
        return self._writer_open

    def write_bytes(self, data: bytes) -> None:
        if not data:
            return
        if not self._writer_open:
            raise ValueError("write to closed channel")
        view = memoryview(data)
        while view:
            written = os.write(self._write_fd, view)
            view = view[written:]

    def write(self, text: str) -> None:
        """Write text as UTF-8; empty text never touches the pipe."""
        if text:
            self.write_bytes(text.encode("utf-8"))

    def close_writer(self) -> None:
        """Close the write end. Safe to call more than once."""
        if self._writer_open:
            self._writer_open = False
            os.close(self._write_fd)

    # the read end is owned by the pump, closing the writer releases everything
    close = close_writer

    def drain_bytes(self) -> bytes:
        """Block until end-of-stream and return (and consume) every byte received."""
        self._pump.join()
        with self._lock:
            data = b"".join(self._chunks)
            self._chunks.clear()
        return data

    def drain(self) -> Optional[str]:
        """Block until end-of-stream; None if nothing was written, else UTF-8 text."""
        data = self.drain_bytes()
        if not data:
            return None
        return data.decode("utf-8", errors="replace")
