"""Decoder for the `data: {json}` token-stream frames of chat-completion gateways.

Frames are newline separated. A data frame carries either a JSON chunk with a
``choices[0].delta.content`` string or the ``[DONE]`` sentinel. Bytes are
buffered until a newline arrives, so a frame split across two network reads
decodes the same as one delivered whole.
"""

import json
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DONE_TOKEN = "[DONE]"
_DATA_PREFIX = "data:"


@dataclass
class Frame:
    data: str
    delta: str | None = None
    done: bool = False
    malformed: bool = False


def extract_delta(payload: object) -> str | None:
    """Return the incremental text of a chunk, or None for role-only/finish frames."""
    if not isinstance(payload, dict):
        return None
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return None
    delta = choices[0].get("delta")
    if not isinstance(delta, dict):
        return None
    content = delta.get("content")
    return content if isinstance(content, str) else None


def parse_line(line: str) -> Frame | None:
    """Decode one line. Comments, event names and blank keep-alives give None."""
    line = line.rstrip("\r")
    if not line.startswith(_DATA_PREFIX):
        return None

    data = line[len(_DATA_PREFIX):].strip()
    if data == DONE_TOKEN:
        return Frame(data=data, done=True)

    try:
        payload = json.loads(data)
    except json.JSONDecodeError:
        logger.debug(f"Skipping malformed frame: {data[:120]!r}")
        return Frame(data=data, malformed=True)

    return Frame(data=data, delta=extract_delta(payload))


class FrameDecoder:
    """Incremental frame decoder owned by a single stream."""

    def __init__(self) -> None:
        self._buffer = bytearray()

    def feed(self, chunk: bytes) -> list[Frame]:
        self._buffer.extend(chunk)
        frames = []
        while True:
            newline = self._buffer.find(b"\n")
            if newline < 0:
                break
            raw = bytes(self._buffer[:newline])
            del self._buffer[: newline + 1]
            frame = parse_line(raw.decode("utf-8", errors="replace"))
            if frame is not None:
                frames.append(frame)
        return frames

    def flush(self) -> list[Frame]:
        """Decode whatever is left once the stream hits EOF without a final newline."""
        if not self._buffer:
            return []
        raw = bytes(self._buffer)
        self._buffer.clear()
        frame = parse_line(raw.decode("utf-8", errors="replace"))
        return [frame] if frame is not None else []
