"""The blog's content directory as a collection of :class:`Post` records."""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Any, Mapping

from . import frontmatter
from .collection import Collection
from .exceptions import PostExistsError
from .models import Post
from .utils import slugify

logger = logging.getLogger(__name__)

DEFAULT_DATE_FORMAT = "%y-%m-%d"


def post_stem(post_date: date, title: str, date_format: str = DEFAULT_DATE_FORMAT) -> str:
    """File stem for a post, e.g. ``20-08-20-lets-start-a-blog``."""
    return f"{post_date.strftime(date_format)}-{slugify(title)}"


class PostCollection(Collection[Post]):
    """Posts stored as Markdown files with ``+++`` TOML front matter."""

    def __init__(
        self,
        path: Path | str,
        *,
        format: str = "toml",
        date_format: str = DEFAULT_DATE_FORMAT,
    ) -> None:
        self.date_format = date_format
        super().__init__(
            Post,
            path,
            format=format,
            body_field="body",
            filename=self._stem_for,
        )

    def _stem_for(self, data: Mapping[str, Any]) -> str:
        return post_stem(data["date"], data["title"], self.date_format)

    def latest(self, n: int = 5) -> list[Post]:
        return self.order_by("-date").head(n).to_list()


def new_post(
    root: Path | str,
    title: str,
    post_date: date | None = None,
    *,
    date_format: str = DEFAULT_DATE_FORMAT,
    marker: str = frontmatter.TOML_MARKER,
) -> Path:
    """Create an empty post stub, refusing to overwrite an existing file."""
    post = Post(title=title, date=post_date or date.today())
    directory = Path(root).expanduser()
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / (post_stem(post.date, post.title, date_format) + ".md")

    meta = post.model_dump(exclude={"body"})
    rendered = frontmatter.render(meta, "", marker=marker)
    try:
        # "x" mode only creates, never truncates
        with path.open("x", encoding="utf-8") as fh:
            fh.write(rendered)
    except FileExistsError as exc:
        raise PostExistsError(f"{path} already exists") from exc
    logger.debug("created %s", path)
    return path
