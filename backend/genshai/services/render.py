"""Split an agent reply into markdown and rich blocks (charts, diagrams, images)."""

import json
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

_THINK_BLOCK = re.compile(r"<think>.*?</think>", re.IGNORECASE | re.DOTALL)
_THINK_UNCLOSED = re.compile(r"<think>.*\Z", re.IGNORECASE | re.DOTALL)
_RICH_BLOCK = re.compile(r"```(chart|mermaid|image)\n(.*?)```", re.DOTALL)


class SegmentKind(str, Enum):
    MARKDOWN = "markdown"
    CHART = "chart"
    MERMAID = "mermaid"
    IMAGE = "image"


@dataclass
class Segment:
    kind: SegmentKind
    text: str = ""
    data: dict[str, Any] = field(default_factory=dict)


def strip_reasoning(content: str) -> str:
    """Drop <think> sections emitted by reasoning models, including an unfinished trailing one."""
    cleaned = _THINK_BLOCK.sub("", content)
    cleaned = _THINK_UNCLOSED.sub("", cleaned)
    return cleaned.strip()


def _json_block(kind: str, body: str) -> Segment | None:
    try:
        data = json.loads(body.strip())
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    return Segment(kind=SegmentKind(kind), data=data)


def split_segments(content: str) -> list[Segment]:
    segments: list[Segment] = []
    pending: list[str] = []

    def flush_markdown() -> None:
        text = "".join(pending)
        pending.clear()
        if text.strip():
            segments.append(Segment(kind=SegmentKind.MARKDOWN, text=text.strip()))

    cleaned = strip_reasoning(content)
    position = 0
    for match in _RICH_BLOCK.finditer(cleaned):
        pending.append(cleaned[position:match.start()])
        position = match.end()
        kind, body = match.group(1), match.group(2)

        if kind == "mermaid":
            block: Segment | None = Segment(kind=SegmentKind.MERMAID, text=body.strip())
        else:
            block = _json_block(kind, body)

        if block is None:
            # Invalid JSON is shown as an ordinary code block.
            pending.append(f"```\n{body}```")
            continue

        flush_markdown()
        segments.append(block)

    pending.append(cleaned[position:])
    flush_markdown()
    return segments
