from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from . import frontmatter
from .exceptions import FrontmatterError

logger = logging.getLogger(__name__)

POST_EXTENSIONS = (".md", ".markdown")


class FileHandler(ABC):
    """Abstract interface for translating between files and dictionaries."""

    extension: str
    extensions: tuple[str, ...] | None = None

    @abstractmethod
    def read(self, path: Path, *, body_field: str | None = None) -> dict[str, Any]:
        """Read the file and return a dictionary payload for Pydantic."""

    @abstractmethod
    def write(
        self,
        path: Path,
        data: Mapping[str, Any],
        *,
        body_field: str | None = None,
    ) -> None:
        """Persist a dictionary payload to disk."""


class FrontmatterHandler(FileHandler):
    """Markdown files with a metadata header; the body lands in ``body_field``."""

    marker: str
    extension = ".md"
    extensions = POST_EXTENSIONS
    default_body_field = "body"

    def read(self, path: Path, *, body_field: str | None = None) -> dict[str, Any]:
        document = frontmatter.split(path.read_text(encoding="utf-8"))
        if document.marker != self.marker:
            raise FrontmatterError(
                f"{path} uses '{document.marker}' front matter, expected '{self.marker}'"
            )
        data = frontmatter.decode(document.header, document.marker)
        data[body_field or self.default_body_field] = document.body.lstrip("\n").rstrip()
        return data

    def write(
        self,
        path: Path,
        data: Mapping[str, Any],
        *,
        body_field: str | None = None,
    ) -> None:
        payload = dict(data)
        body = payload.pop(body_field or self.default_body_field, "")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(frontmatter.render(payload, body, marker=self.marker), encoding="utf-8")
        logger.debug("wrote %s", path)


class TomlFrontmatterHandler(FrontmatterHandler):
    marker = frontmatter.TOML_MARKER


class YamlFrontmatterHandler(FrontmatterHandler):
    marker = frontmatter.YAML_MARKER


HANDLERS_BY_MARKER: Mapping[str, type[FrontmatterHandler]] = {
    frontmatter.TOML_MARKER: TomlFrontmatterHandler,
    frontmatter.YAML_MARKER: YamlFrontmatterHandler,
}
