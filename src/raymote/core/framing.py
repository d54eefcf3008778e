"""Line framing and filtering for receiver firmware output."""

from __future__ import annotations

LINE_DELIMITER = b"\r\n"

# Substrings the receiver firmware prints for a decoded signal and on boot.
DECODED_MARKER = "Decoded"
READY_MARKER = "Ready to receive"


class LineFramer:
    """Split a byte stream into CR+LF-terminated text lines.

    Partial lines are buffered until their delimiter arrives.
    """

    def __init__(self, delimiter: bytes = LINE_DELIMITER, encoding: str = "utf-8") -> None:
        self._delimiter = delimiter
        self._encoding = encoding
        self._buffer = bytearray()

    def feed(self, data: bytes) -> list[str]:
        """Append data and return every complete line it finished."""
        self._buffer.extend(data)
        lines: list[str] = []
        while True:
            idx = self._buffer.find(self._delimiter)
            if idx < 0:
                break
            raw = bytes(self._buffer[:idx])
            del self._buffer[: idx + len(self._delimiter)]
            lines.append(raw.decode(self._encoding, errors="replace"))
        return lines

    def reset(self) -> None:
        self._buffer.clear()

    @property
    def pending(self) -> int:
        """Number of buffered bytes not yet terminated by a delimiter."""
        return len(self._buffer)


def is_reportable(line: str) -> bool:
    """Whether a receiver line should be forwarded to subscribers.

    Anything without a decoded or ready marker is firmware chatter.
    """
    return DECODED_MARKER in line or READY_MARKER in line
