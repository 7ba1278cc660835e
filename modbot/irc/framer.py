"""Streaming line framer for inbound protocol traffic."""

from __future__ import annotations

import codecs

from ..constants import LINE_TERMINATOR


class LineFramer:
    """Turns arbitrary transport chunks into complete protocol lines.

    Any unterminated tail of a chunk is kept and prepended to the next one,
    including a lone ``\\r`` whose ``\\n`` arrives in the following read.
    Bytes go through an incremental UTF-8 decoder so a character split
    across reads is decoded once it is whole.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._pending = ""

    @property
    def pending(self) -> str:
        return self._pending

    def feed(self, chunk: bytes | str) -> list[str]:
        if isinstance(chunk, bytes | bytearray):
            chunk = self._decoder.decode(bytes(chunk))
        if not chunk:
            return []
        buffer = self._pending + chunk
        *complete, self._pending = buffer.split(LINE_TERMINATOR)
        lines = []
        for line in complete:
            line = line.strip()
            if line:
                lines.append(line)
        return lines

    def reset(self) -> None:
        self._pending = ""
        self._decoder.reset()
