"""Incremental line reading by byte offset.

This module reads the complete lines appended to a file between two byte
offsets. Partial trailing lines are left for the next read so every line is
emitted exactly once while the file is only appended to.
"""

from __future__ import annotations

import codecs
import logging
from pathlib import Path

from ..errors import TailReadError

logger = logging.getLogger(__name__)

MAX_LINE_BYTES = 4096


class LineReader:
    """Reads newly appended lines from a file without re-reading it.

    The file is opened read-only for the duration of one call and closed
    before returning; no handle survives between tail cycles. Lines longer
    than ``max_line_bytes`` are split and emitted as several records; a UTF-8
    character is never cut in two, and the terminator right after a full-length
    piece ends that piece rather than producing an empty line.

    Attributes:
        max_line_bytes: Longest line emitted as a single record.
        encoding: Text encoding used to decode lines.
    """

    def __init__(self, max_line_bytes: int = MAX_LINE_BYTES, encoding: str = "utf-8"):
        """Initialize line reader.

        Args:
            max_line_bytes: Longest line emitted as a single record.
            encoding: Text encoding for decoding; undecodable bytes are replaced.
        """
        self.max_line_bytes = max_line_bytes
        self.encoding = encoding
        self._utf8 = codecs.lookup(encoding).name == "utf-8"

    def read_lines(self, path: str | Path, start: int, end: int) -> tuple[list[str], int]:
        """Read complete lines between two byte offsets.

        Args:
            path: File to read.
            start: Offset of the first unread byte.
            end: Offset not to read past (the size observed at stat time).

        Returns:
            Tuple of (lines, new_offset) where lines are the complete lines
            found, without terminators, and new_offset is the offset just
            past the last complete line (``start`` if there was none).

        Raises:
            TailReadError: If the file cannot be opened or read.
        """
        log_path = Path(path)
        if end <= start:
            return [], start

        lines: list[str] = []
        pos = start
        try:
            with log_path.open("rb") as f:
                f.seek(start)
                while pos < end:
                    limit = min(self.max_line_bytes, end - pos)
                    chunk = f.readline(limit)
                    if not chunk:
                        # file shrank underneath us
                        break
                    if chunk.endswith(b"\n"):
                        lines.append(self._decode(chunk))
                        pos += len(chunk)
                        continue
                    if len(chunk) < self.max_line_bytes or pos + len(chunk) >= end:
                        # unterminated tail: leave it for the next cycle
                        break

                    # full-length piece of a longer line
                    piece = self._trim_to_char_boundary(chunk)
                    after = pos + len(piece)
                    f.seek(after)
                    following = f.read(min(2, end - after))
                    if following == b"\r":
                        # may be the first half of a CRLF not yet written
                        break
                    if following.startswith(b"\n"):
                        if piece.endswith(b"\r"):
                            piece = piece[:-1]
                        after += 1
                    elif following == b"\r\n":
                        after += 2
                    lines.append(piece.decode(self.encoding, errors="replace"))
                    pos = after
                    f.seek(pos)
        except OSError as e:
            logger.error(f"OS error reading {log_path}: {e}")
            raise TailReadError(str(log_path), f"Unable to read file: {e}") from e

        if lines:
            logger.debug(f"Read {len(lines)} new lines from {log_path} (offset {start} -> {pos})")
        return lines, pos

    def _decode(self, chunk: bytes) -> str:
        if chunk.endswith(b"\n"):
            chunk = chunk[:-1]
            if chunk.endswith(b"\r"):
                chunk = chunk[:-1]
        return chunk.decode(self.encoding, errors="replace")

    def _trim_to_char_boundary(self, chunk: bytes) -> bytes:
        """Drop a UTF-8 sequence cut off at the end of ``chunk``."""
        if not self._utf8:
            return chunk
        i = len(chunk) - 1
        continuation = 0
        while i > 0 and continuation < 3 and chunk[i] & 0xC0 == 0x80:
            i -= 1
            continuation += 1
        lead = chunk[i]
        if lead >= 0xF0:
            needed = 4
        elif lead >= 0xE0:
            needed = 3
        elif lead >= 0xC0:
            needed = 2
        else:
            return chunk
        if continuation + 1 < needed and i > 0:
            return chunk[:i]
        return chunk
