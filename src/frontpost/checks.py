"""
Structural checks for post files.

Each check reports :class:`Issue` records rather than raising, so a whole
content directory can be linted in one pass.
"""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path

from . import frontmatter
from .exceptions import FrontmatterError
from .handlers import POST_EXTENSIONS
from .posts import DEFAULT_DATE_FORMAT
from .utils import iter_files

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("title", "date")
FILENAME_DATE = re.compile(r"^(?P<prefix>\d{2,4}-\d{2}-\d{2})-")


@dataclass(frozen=True)
class Issue:
    path: str
    code: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: [{self.code}] {self.message}"


def _as_date(value) -> date | None:
    if isinstance(value, datetime):
        return None
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            return None
    return None


def check_text(text: str, name: str = "<text>") -> list[Issue]:
    """Check one document's front matter and body."""
    issues: list[Issue] = []

    def report(code: str, message: str) -> None:
        issues.append(Issue(path=name, code=code, message=message))

    if frontmatter.opening_marker(text) is None:
        report("missing-open-marker", "file does not start with '+++' or '---'")
        return issues
    try:
        document = frontmatter.split(text)
    except FrontmatterError as exc:
        report("missing-close-marker", str(exc))
        return issues

    counts = frontmatter.count_keys(document.header, document.marker)
    duplicated = sorted(key for key, seen in counts.items() if seen > 1)
    for key in duplicated:
        report("duplicate-key", f"'{key}' is declared {counts[key]} times")
    if duplicated:
        return issues

    try:
        meta = frontmatter.decode(document.header, document.marker)
    except FrontmatterError as exc:
        report("bad-header", str(exc))
        return issues

    for key in REQUIRED_KEYS:
        if key not in meta:
            report("missing-key", f"'{key}' is missing from the front matter")
    for key in meta:
        if key not in REQUIRED_KEYS:
            report("unexpected-key", f"'{key}' is not a recognised front matter key")

    if "title" in meta:
        title = meta["title"]
        if not isinstance(title, str) or not title.strip():
            report("empty-title", "title must be non-empty text")
    if "date" in meta and _as_date(meta["date"]) is None:
        report("bad-date", f"date {meta['date']!r} is not a YYYY-MM-DD calendar date")

    if not document.body.strip():
        report("empty-body", "post has no body text")
    return issues


def post_date(text: str) -> date | None:
    """The parsed ``date`` of a document, or ``None`` if it has none."""
    try:
        meta, _ = frontmatter.parse(text)
    except FrontmatterError:
        return None
    return _as_date(meta.get("date"))


def _check_path(path: Path, date_format: str) -> tuple[list[Issue], date | None]:
    """Issues for one file plus its declared date, reading the file once."""
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        issue = Issue(
            path=str(path),
            code="bad-encoding",
            message=f"not valid UTF-8: {exc.reason} at byte {exc.start}",
        )
        return [issue], None
    issues = check_text(text, name=str(path))

    declared = post_date(text)
    match = FILENAME_DATE.match(path.name)
    if declared is not None and match is not None:
        try:
            named = datetime.strptime(match.group("prefix"), date_format).date()
        except ValueError:
            named = None
        if named != declared:
            issues.append(
                Issue(
                    path=str(path),
                    code="filename-date",
                    message=f"file name date {match.group('prefix')} does not match {declared.isoformat()}",
                )
            )
    logger.debug("checked %s: %d issue(s)", path, len(issues))
    return issues, declared


def check_file(path: Path | str, *, date_format: str = DEFAULT_DATE_FORMAT) -> list[Issue]:
    issues, _ = _check_path(Path(path), date_format)
    return issues


def iter_post_files(root: Path | str, *, recursive: bool = False) -> list[Path]:
    """The files a :class:`PostCollection` over ``root`` would load."""
    root = Path(root)
    if root.is_file():
        return [root]
    return iter_files(root, POST_EXTENSIONS, recursive=recursive)


def check_collection(root: Path | str, *, date_format: str = DEFAULT_DATE_FORMAT) -> list[Issue]:
    """Check every post under ``root`` and that no two posts share a date."""
    issues: list[Issue] = []
    by_date: dict[date, list[Path]] = defaultdict(list)
    for path in iter_post_files(root):
        found, declared = _check_path(path, date_format)
        issues.extend(found)
        if declared is not None:
            by_date[declared].append(path)

    for day, paths in sorted(by_date.items()):
        if len(paths) < 2:
            continue
        others = ", ".join(path.name for path in paths)
        for path in paths:
            issues.append(
                Issue(
                    path=str(path),
                    code="duplicate-date",
                    message=f"{day.isoformat()} is shared by {others}",
                )
            )
    return issues
