"""
Splitting, decoding and rendering of front matter headers.

A document opens with a marker line, a header block, a second marker line and
then the Markdown body. ``+++`` headers hold TOML, ``---`` headers hold YAML.
"""

from __future__ import annotations

import re
import tomllib
from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import tomli_w
import yaml

from .exceptions import FrontmatterError

TOML_MARKER = "+++"
YAML_MARKER = "---"
MARKERS = (TOML_MARKER, YAML_MARKER)

_TOML_KEY = re.compile(r"""^\s*(?P<key>[A-Za-z0-9_-]+|"[^"]*"|'[^']*')\s*=""")
_TOML_TABLE = re.compile(r"^\s*\[")
_TOML_MULTILINE = ('"""', "'''")
_YAML_KEY = re.compile(r"""^(?P<key>[^\s#'"\-][^:]*|"[^"]*"|'[^']*')\s*:(\s|$)""")


@dataclass(frozen=True)
class Document:
    """A document split on its front matter markers."""

    marker: str
    header: str
    body: str


def opening_marker(text: str) -> str | None:
    """Return the marker the document opens with, if its first line is one."""
    first_line = text.split("\n", 1)[0].rstrip("\r")
    return first_line if first_line in MARKERS else None


def split(text: str) -> Document:
    marker = opening_marker(text)
    if marker is None:
        raise FrontmatterError("document does not open with a front matter marker")

    lines = text.splitlines(keepends=True)
    for index in range(1, len(lines)):
        if lines[index].rstrip("\r\n") == marker:
            header = "".join(lines[1:index])
            body = "".join(lines[index + 1 :])
            return Document(marker=marker, header=header, body=body)
    raise FrontmatterError(f"front matter opened with '{marker}' is never closed")


def decode(header: str, marker: str) -> dict[str, Any]:
    """Decode a raw header block into a mapping."""
    if marker == TOML_MARKER:
        try:
            return tomllib.loads(header)
        except tomllib.TOMLDecodeError as exc:
            raise FrontmatterError(f"invalid TOML front matter: {exc}") from exc
    if marker == YAML_MARKER:
        try:
            meta = yaml.safe_load(header) or {}
        except yaml.YAMLError as exc:
            raise FrontmatterError(f"invalid YAML front matter: {exc}") from exc
        if not isinstance(meta, dict):
            raise FrontmatterError("front matter must parse to a mapping")
        return meta
    raise FrontmatterError(f"unknown front matter marker '{marker}'")


def parse(text: str) -> tuple[dict[str, Any], str]:
    document = split(text)
    return decode(document.header, document.marker), document.body


def render(meta: Mapping[str, Any], body: str, marker: str = TOML_MARKER) -> str:
    """Render metadata and body back into a front matter document."""
    payload = {key: value for key, value in meta.items() if value is not None}
    if marker == TOML_MARKER:
        header = tomli_w.dumps(payload)
    elif marker == YAML_MARKER:
        header = yaml.safe_dump(payload, allow_unicode=True, sort_keys=False)
    else:
        raise FrontmatterError(f"unknown front matter marker '{marker}'")
    body = body.lstrip("\n")
    rendered = f"{marker}\n{header.strip()}\n{marker}\n\n{body}"
    return rendered.rstrip() + "\n"


def count_keys(header: str, marker: str) -> Counter[str]:
    """Count top-level key declarations in a raw header.

    Works on the raw lines: ``tomllib`` rejects duplicate keys outright and
    YAML keeps only the last one.
    """
    counts: Counter[str] = Counter()
    open_string: str | None = None
    for line in header.splitlines():
        if marker == TOML_MARKER:
            if open_string is not None:
                if line.count(open_string) % 2:
                    open_string = None
                continue
            if _TOML_TABLE.match(line):
                break
            match = _TOML_KEY.match(line)
            open_string = next((quote for quote in _TOML_MULTILINE if line.count(quote) % 2), None)
        else:
            match = _YAML_KEY.match(line)
        if match:
            counts[match.group("key").strip().strip("\"'")] += 1
    return counts
