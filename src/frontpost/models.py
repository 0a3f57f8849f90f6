from __future__ import annotations

from datetime import date

from markdown_it import MarkdownIt
from markdown_it.token import Token
from pydantic import BaseModel, ConfigDict, field_validator

from .utils import slugify

_PARSER = MarkdownIt("commonmark")


class Post(BaseModel):
    """A single blog post: front matter metadata plus its Markdown body."""

    model_config = ConfigDict(extra="forbid")

    title: str
    date: date
    body: str = ""

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must not be empty")
        return value

    @property
    def slug(self) -> str:
        return slugify(self.title)

    def tokens(self) -> list[Token]:
        """CommonMark token stream for the body."""
        return _PARSER.parse(self.body)

    def headings(self) -> list[str]:
        """Source text of every ATX and setext heading in the body."""
        tokens = self.tokens()
        return [
            tokens[index + 1].content
            for index, token in enumerate(tokens)
            if token.type == "heading_open"
        ]

    def code_blocks(self) -> list[tuple[str, str]]:
        """``(language, code)`` pairs for each fenced block in the body."""
        return [
            (token.info.split()[0] if token.info.strip() else "", token.content.rstrip("\n"))
            for token in self.tokens()
            if token.type == "fence"
        ]
