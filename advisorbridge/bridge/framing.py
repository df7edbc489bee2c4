"""Reassembles complete JSON objects from the advisor's raw stdout.

The advisor pretty-prints its replies, so one message may span many lines
and one line may end in the middle of a message. Lines are appended to a
FrameBuffer and objects are cut off its front once their braces balance.
"""

from __future__ import annotations

import json
from collections.abc import Iterator

HANDSHAKE_ID = 0


class FrameBuffer:
    """Append-only text accumulator owned by the stdout reader."""

    def __init__(self, text: str = ""):
        self.text = text

    def append(self, chunk: str) -> None:
        self.text += chunk

    def feed(self, line: str) -> Iterator[str]:
        """Append one raw output line and yield every message it completes."""
        self.append(line if line.endswith("\n") else line + "\n")
        while True:
            message = extract_message(self)
            if message is None:
                return
            yield message


def _find_object_end(text: str, start: int) -> int | None:
    """Index of the brace closing the object opened at ``start``, if present yet."""
    depth = 0
    in_string = False
    escape = False
    for index in range(start, len(text)):
        char = text[index]
        if escape:
            escape = False
            continue
        if char == "\\":
            escape = True
            continue
        if char == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
    return None


def is_handshake(payload: object) -> bool:
    if not isinstance(payload, dict):
        return False
    msg_id = payload.get("id")
    return type(msg_id) is int and msg_id == HANDSHAKE_ID


def extract_message(buffer: FrameBuffer) -> str | None:
    """Cut the next complete JSON object off the front of ``buffer``.

    Returns None when no object is complete yet (buffer untouched), or when
    the completed text is not valid JSON (that text is dropped). Handshake
    objects (``"id": 0``) are dropped and extraction continues.
    """
    while True:
        start = buffer.text.find("{")
        if start == -1:
            return None
        end = _find_object_end(buffer.text, start)
        if end is None:
            return None
        candidate = buffer.text[start : end + 1]
        buffer.text = buffer.text[end + 1 :]
        try:
            payload = json.loads(candidate)
        except ValueError:
            return None
        if is_handshake(payload):
            continue
        return candidate
