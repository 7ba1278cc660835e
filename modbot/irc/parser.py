"""IRC line parsing and formatting utilities."""

from __future__ import annotations

import re

from ..errors import MalformedLineError
from .models import ParsedRecord

#   @tags      :sender      CODE                  middle params           :trailing
_LINE_RE = re.compile(
    r"^(?:@(?P<tags>\S+)\s+)?"
    r"(?::(?P<sender>\S+)\s+)?"
    r"(?P<code>[A-Za-z]+|\d{3})"
    r"(?P<middle>(?:\s+[^:\s]\S*)*)"
    r"(?:\s+:(?P<text>.*))?\s*$"
)


def parse_line(raw_line: str) -> ParsedRecord:
    """Parse one raw protocol line.

    Raises:
        MalformedLineError: If the line does not match the protocol grammar.
    """
    match = _LINE_RE.match(raw_line)
    if match is None:
        raise MalformedLineError(raw_line)

    params = tuple(match.group("middle").split())
    text = match.group("text")
    return ParsedRecord(
        code=match.group("code"),
        sender=match.group("sender"),
        dest=" ".join(params) if params else None,
        text=text.strip() if text is not None else None,
        params=params,
        tags=_parse_tags(match.group("tags")) if match.group("tags") else {},
        raw=raw_line,
    )


def _parse_tags(raw_tags: str) -> dict[str, str]:
    tags: dict[str, str] = {}
    for tag in raw_tags.split(";"):
        if not tag:
            continue
        if "=" in tag:
            k, v = tag.split("=", 1)
        else:
            k, v = tag, ""
        tags[k] = v
    return tags


def format_line(code: str, *params: str, text: str | None = None) -> str:
    """Build an outbound line; ``text`` becomes the ``:``-prefixed trailing parameter."""
    parts = [code, *params]
    if text is not None:
        parts.append(f":{text}")
    return " ".join(parts)
