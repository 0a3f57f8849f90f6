from __future__ import annotations

import logging
import weakref
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Callable, Generic, Iterator, List, Mapping, Optional, TypeVar
from uuid import uuid4

from pydantic import BaseModel, ValidationError

from . import frontmatter
from .exceptions import (
    InconsistentFormatError,
    InvalidRecordError,
    MissingPathError,
    UnknownFormatError,
)
from .handlers import HANDLERS_BY_MARKER, POST_EXTENSIONS, FrontmatterHandler
from .utils import iter_files, slugify

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)
Predicate = Callable[[T], bool]
Namer = Callable[[Mapping[str, Any]], str]

FORMAT_REGISTRY: Mapping[str, str] = {
    "toml": frontmatter.TOML_MARKER,
    "+++": frontmatter.TOML_MARKER,
    "markdown": frontmatter.YAML_MARKER,
    "yaml": frontmatter.YAML_MARKER,
    "---": frontmatter.YAML_MARKER,
}


def _resolve_handler(name: str) -> FrontmatterHandler:
    try:
        marker = FORMAT_REGISTRY[name.lower()]
    except KeyError as exc:
        raise UnknownFormatError(f"Unsupported format '{name}'") from exc
    return HANDLERS_BY_MARKER[marker]()


def default_filename(data: Mapping[str, Any]) -> str:
    """Derive a file stem from the first usable identifying field."""
    for key in ("slug", "id", "name", "title"):
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return slugify(value)
    return uuid4().hex


def sniff_marker(path: Path) -> str | None:
    """Marker on the first line of ``path``, without reading the whole file."""
    with path.open("r", encoding="utf-8", errors="replace") as fh:
        return frontmatter.opening_marker(fh.readline())


class Collection(Generic[T]):
    """Lazy, disk-backed collection of Pydantic models stored as Markdown.

    Parameters
    ----------
    model:
        Pydantic model type used to validate each record found on disk.
    path:
        Root directory where files live. Created automatically if missing.
    format:
        Front matter flavour: ``"toml"`` (``+++``) or ``"markdown"``/``"yaml"``
        (``---``). When omitted it is sniffed from the opening marker of the
        files already present; an empty or mixed directory needs it spelled out.
    body_field:
        Field that receives the Markdown body below the header.
    recursive:
        When ``True``, sub-directories are scanned too.
    filename:
        Callable turning a dumped model into a file stem for new records.

    Query methods compose and only read from disk when materialized
    (iteration, ``to_list``, ``first``...). Instances remain pure Pydantic
    models; disk metadata is tracked separately.
    """

    def __init__(
        self,
        model: type[T],
        path: Path | str,
        *,
        format: str | None = None,
        body_field: str | None = None,
        recursive: bool = False,
        filename: Namer | None = None,
    ) -> None:
        self.model = model
        self.root = Path(path).expanduser()
        self.root.mkdir(parents=True, exist_ok=True)
        self._recursive = recursive
        self._handler = _resolve_handler(format) if format is not None else self._infer_handler()
        self.body_field = body_field
        self._filename = filename or default_filename

        self._model_cache: dict[Path, T] = {}
        self._path_refs: dict[int, tuple[weakref.ReferenceType[T], Path]] = {}

    @property
    def handler(self) -> FrontmatterHandler:
        return self._handler

    # Query entrypoints -------------------------------------------------
    def query(self) -> "CollectionQuery[T]":
        return CollectionQuery(self)

    def filter(self, predicate: Predicate) -> "CollectionQuery[T]":
        return self.query().filter(predicate)

    def order_by(self, field: str) -> "CollectionQuery[T]":
        return self.query().order_by(field)

    def head(self, n: int = 5) -> "CollectionQuery[T]":
        return self.query().head(n)

    def tail(self, n: int = 5) -> "CollectionQuery[T]":
        return self.query().tail(n)

    def to_list(self) -> List[T]:
        return self.query().to_list()

    def count(self) -> int:
        return self.query().count()

    def first(self) -> Optional[T]:
        return self.query().first()

    def last(self) -> Optional[T]:
        return self.query().last()

    def exists(self, predicate: Predicate | None = None) -> bool:
        if predicate is None:
            return self.first() is not None
        return self.filter(predicate).first() is not None

    def __iter__(self) -> Iterator[T]:
        return iter(self.query())

    def paths(self) -> list[Path]:
        """Post files this collection would load, in name order."""
        return iter_files(self.root, self._handler.extensions, recursive=self._recursive)

    def get(self, filename: str | Path) -> Optional[T]:
        """Load a single file by name relative to the collection root."""
        target = Path(filename)
        if not target.is_absolute():
            target = self.root / target
        if not target.is_file() or target.suffix.lower() not in self._handler.extensions:
            return None
        return self._load_model(target)

    # Lifecycle operations ----------------------------------------------
    def add(self, model: T, path: Path | str | None = None) -> Path:
        if path is None and self._lookup_path(model) is not None:
            return self.update(model)
        target = self._resolve(path) if path is not None else self._free_path(model)
        self._write(model, target)
        self._track(model, target)
        return target

    def update(self, model: T) -> Path:
        path = self._lookup_path(model)
        if path is None:
            raise MissingPathError(
                "Cannot update model that was not loaded from disk. "
                "Use add() or upsert(), or provide path explicitly."
            )
        self._write(model, path)
        return path

    def upsert(self, model: T) -> Path:
        if self._lookup_path(model) is None:
            return self.add(model)
        return self.update(model)

    def delete(self, target: T | str | Path) -> None:
        if isinstance(target, BaseModel):
            path = self._lookup_path(target)
            if path is None:
                raise MissingPathError("Model has no associated path; cannot delete")
            self._path_refs.pop(id(target), None)
        else:
            path = self._resolve(target)
        self._model_cache.pop(path, None)
        if path.exists():
            path.unlink()
            logger.debug("deleted %s", path)

    def refresh(self, model: T) -> T:
        path = self._lookup_path(model)
        if path is None:
            raise MissingPathError("Model has no associated path; cannot refresh")
        return self._load_model(path, force=True)

    def path_for(self, model: T) -> Path | None:
        return self._lookup_path(model)

    # Internal helpers --------------------------------------------------
    def _resolve(self, path: Path | str) -> Path:
        path = Path(path)
        return path if path.is_absolute() else self.root / path

    def _write(self, model: T, path: Path) -> None:
        self._handler.write(path, model.model_dump(), body_field=self.body_field)
        self._model_cache[path] = model

    def _free_path(self, model: T) -> Path:
        """First unused ``<stem>[-N]`` path, or the file already holding ``model``."""
        data = model.model_dump()
        stem = self._filename(data)
        candidate = self.root / (stem + self._handler.extension)
        counter = 0
        while candidate.exists():
            if self._holds(candidate, data):
                return candidate
            counter += 1
            candidate = candidate.with_stem(f"{stem}-{counter}")
        return candidate

    def _holds(self, path: Path, data: Mapping[str, Any]) -> bool:
        try:
            existing = self._load_model(path)
        except (InvalidRecordError, ValueError):
            return False
        return existing.model_dump() == data

    def _track(self, model: T, path: Path) -> None:
        model_id = id(model)
        ref = weakref.ref(model, lambda _: self._path_refs.pop(model_id, None))
        self._path_refs[model_id] = (ref, path)

    def _load_model(self, path: Path, *, force: bool = False) -> T:
        if not force and path in self._model_cache:
            return self._model_cache[path]
        data = self._handler.read(path, body_field=self.body_field)
        try:
            instance = self.model.model_validate(data)
        except ValidationError as exc:
            raise InvalidRecordError(path, exc.errors(include_url=False)) from exc
        logger.debug("loaded %s", path)
        self._track(instance, path)
        self._model_cache[path] = instance
        return instance

    def _lookup_path(self, model: T) -> Path | None:
        entry = self._path_refs.get(id(model))
        if not entry:
            return None
        ref, path = entry
        if ref() is None:
            self._path_refs.pop(id(model), None)
            return None
        return path

    def _infer_handler(self) -> FrontmatterHandler:
        markers: dict[str, Path] = {}
        for path in iter_files(self.root, POST_EXTENSIONS, recursive=self._recursive):
            marker = sniff_marker(path)
            if marker is None:
                raise UnknownFormatError(
                    f"Cannot infer format: '{path.name}' has no front matter marker. "
                    "Pass format=... explicitly."
                )
            markers.setdefault(marker, path)
        if len(markers) > 1:
            names = ", ".join(f"{path.name} ({marker})" for marker, path in markers.items())
            raise InconsistentFormatError(
                f"Mixed front matter markers ({names}). Pass format=... explicitly."
            )
        if not markers:
            raise UnknownFormatError(
                "Cannot infer format for empty collection. Pass format=... explicitly."
            )
        (marker,) = markers
        return HANDLERS_BY_MARKER[marker]()


@dataclass(frozen=True)
class CollectionQuery(Generic[T]):
    """Immutable query over a collection; every step returns a new query."""

    collection: Collection[T]
    predicates: tuple[Predicate, ...] = ()
    sort_field: str | None = None
    descending: bool = False
    windows: tuple[slice, ...] = ()

    def filter(self, predicate: Predicate) -> "CollectionQuery[T]":
        return replace(self, predicates=self.predicates + (predicate,))

    def order_by(self, field: str) -> "CollectionQuery[T]":
        return replace(self, sort_field=field.lstrip("-"), descending=field.startswith("-"))

    def head(self, n: int = 5) -> "CollectionQuery[T]":
        if n < 0:
            raise ValueError("head expects a non-negative integer")
        return replace(self, windows=self.windows + (slice(None, n),))

    def tail(self, n: int = 5) -> "CollectionQuery[T]":
        if n < 0:
            raise ValueError("tail expects a non-negative integer")
        return replace(self, windows=self.windows + (slice(-n, None) if n else slice(0, 0),))

    def to_list(self) -> List[T]:
        load = self.collection._load_model
        items = [
            item
            for item in map(load, self.collection.paths())
            if all(predicate(item) for predicate in self.predicates)
        ]
        if self.sort_field is not None:
            items.sort(key=lambda item: getattr(item, self.sort_field), reverse=self.descending)
        for window in self.windows:
            items = items[window]
        return items

    def count(self) -> int:
        return len(self.to_list())

    def first(self) -> Optional[T]:
        items = self.to_list()
        return items[0] if items else None

    def last(self) -> Optional[T]:
        items = self.to_list()
        return items[-1] if items else None

    def __iter__(self) -> Iterator[T]:
        return iter(self.to_list())
