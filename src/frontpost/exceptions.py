class FrontpostError(Exception):
    """Base exception for frontpost errors."""


class UnknownFormatError(FrontpostError):
    """Raised when a requested file format is not supported."""


class MissingPathError(FrontpostError):
    """Raised when an operation requires a path but none is known."""


class InconsistentFormatError(FrontpostError):
    """Raised when multiple file formats are encountered in a collection."""


class FrontmatterError(FrontpostError, ValueError):
    """Raised when a document's front matter cannot be split or decoded."""


class InvalidRecordError(FrontpostError):
    """Raised when a file on disk does not validate against the collection model."""

    def __init__(self, path, errors) -> None:
        self.path = path
        self.errors = errors
        super().__init__(f"{path}: {errors}")


class PostExistsError(FrontpostError):
    """Raised when creating a post whose file already exists."""
