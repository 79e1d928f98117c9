"""Board data – normalized image records and the two search-result dialects."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

from .errors import DecodeError

TWIBOORU_HOSTS = frozenset({"twibooru.org"})
TAG_SEPARATOR = ", "


@dataclass
class Image:
    """A source image as it will be sent to the target board."""
    id: int
    description: str = ""
    source_url: str | None = None
    tags: list[str] = field(default_factory=list)
    view_url: str = ""

    def add_tag(self, tag: str) -> bool:
        """Append *tag* unless already present.  Returns True if it was added."""
        if tag in self.tags:
            return False
        self.tags.append(tag)
        return True

    @property
    def tag_input(self) -> str:
        return TAG_SEPARATOR.join(self.tags)


@dataclass
class SearchPage:
    images: list[Image]
    total: int

    @property
    def empty(self) -> bool:
        return not self.images


class UploadStatus(enum.Enum):
    SUCCESS = "success"
    DUPLICATE = "duplicate"


# ── decoding ─────────────────────────────────────────────────────


def _require_list(data: Any, key: str) -> list[Any]:
    if not isinstance(data, dict):
        raise DecodeError(f"expected a JSON object, got {type(data).__name__}")
    items = data.get(key)
    if not isinstance(items, list):
        raise DecodeError(f"search result has no {key!r} list")
    return items


def _total(data: dict) -> int:
    try:
        return int(data.get("total") or 0)
    except (TypeError, ValueError) as exc:
        raise DecodeError(f"bad total: {data.get('total')!r}") from exc


def image_from_philomena(raw: dict) -> Image:
    try:
        return Image(
            id=int(raw["id"]),
            description=raw.get("description") or "",
            source_url=raw.get("source_url"),
            tags=list(raw.get("tags") or []),
            view_url=raw.get("view_url") or "",
        )
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise DecodeError(f"bad image record: {exc}") from exc


def image_from_twibooru(raw: dict) -> Image:
    """Map a Twibooru search record onto :class:`Image`.

    Twibooru sends tags as one ``"a, b, c"`` string and calls the
    full-size url ``image`` instead of ``view_url``.
    """
    try:
        tag_string = raw.get("tags") or ""
        return Image(
            id=int(raw["id"]),
            description=raw.get("description") or "",
            source_url=raw.get("source_url"),
            tags=[t for t in tag_string.split(TAG_SEPARATOR) if t],
            view_url=raw.get("image") or "",
        )
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise DecodeError(f"bad image record: {exc}") from exc


def decode_philomena_page(data: Any) -> SearchPage:
    items = _require_list(data, "images")
    return SearchPage(images=[image_from_philomena(i) for i in items], total=_total(data))


def decode_twibooru_page(data: Any) -> SearchPage:
    items = _require_list(data, "search")
    return SearchPage(images=[image_from_twibooru(i) for i in items], total=_total(data))


class Dialect(enum.Enum):
    """JSON dialect spoken by a board's search endpoint."""
    PHILOMENA = "philomena"
    TWIBOORU = "twibooru"

    @classmethod
    def for_host(cls, host: str) -> Dialect:
        return cls.TWIBOORU if host.lower() in TWIBOORU_HOSTS else cls.PHILOMENA

    @property
    def search_path(self) -> str:
        if self is Dialect.TWIBOORU:
            return "/search.json"
        return "/api/v1/json/search/images"

    def decode_page(self, data: Any) -> SearchPage:
        if self is Dialect.TWIBOORU:
            return decode_twibooru_page(data)
        return decode_philomena_page(data)
