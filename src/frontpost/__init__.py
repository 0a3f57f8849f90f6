"""
Blog posts on disk, validated by Pydantic models.

Posts are Markdown files with a ``+++`` TOML front matter header. The public
API centers around :class:`PostCollection`, a :class:`Collection` of
:class:`Post` records, and :func:`check_collection`, which lints a content
directory for an external static-site generator.
"""

from .checks import Issue, check_collection, check_file, check_text
from .collection import Collection
from .handlers import FileHandler
from .models import Post
from .posts import PostCollection, new_post

__all__ = (
    "Collection",
    "FileHandler",
    "Issue",
    "Post",
    "PostCollection",
    "check_collection",
    "check_file",
    "check_text",
    "new_post",
)
