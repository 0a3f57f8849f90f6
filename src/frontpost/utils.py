from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Iterable

SLUG_PATTERN = re.compile(r"[^a-z0-9]+")
APOSTROPHES = re.compile(r"['’]")


def slugify(value: Any) -> str:
    """Normalize a value into a filesystem-friendly slug."""
    text = str(value).strip().lower()
    text = APOSTROPHES.sub("", text)
    text = SLUG_PATTERN.sub("-", text)
    text = text.strip("-")
    return text or "item"


def iter_files(root: Path, suffixes: Iterable[str], *, recursive: bool = False) -> list[Path]:
    """Sorted files under ``root`` whose suffix is one of ``suffixes``."""
    wanted = {suffix.lower() for suffix in suffixes}
    candidates = root.rglob("*") if recursive else root.glob("*")
    return sorted(path for path in candidates if path.is_file() and path.suffix.lower() in wanted)
