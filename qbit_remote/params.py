"""
Query builder for ``/api/v2/torrents/info`` list filtering.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional


class TorrentListFilter(str, Enum):
    """State filter accepted by the torrent list endpoint."""
    ALL = "all"
    DOWNLOADING = "downloading"
    SEEDING = "seeding"
    COMPLETED = "completed"
    PAUSED = "paused"
    ACTIVE = "active"
    INACTIVE = "inactive"
    RESUMED = "resumed"
    STALLED = "stalled"
    STALLED_UPLOADING = "stalled_uploading"
    STALLED_DOWNLOADING = "stalled_downloading"
    ERRORED = "errored"


def _render(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return value.value
    return str(value)


@dataclass(frozen=True)
class GetTorrentListParams:
    """Immutable filter/sort configuration for a torrent list query."""
    filter: Optional[TorrentListFilter] = None
    category: Optional[str] = None
    tag: Optional[str] = None
    reverse: Optional[bool] = None
    limit: Optional[int] = None
    offset: Optional[int] = None
    hashes: Optional[tuple[str, ...]] = None

    @staticmethod
    def builder() -> "GetTorrentListParamsBuilder":
        return GetTorrentListParamsBuilder()

    def to_query(self) -> list[tuple[str, str]]:
        """
        Rendered ``(key, value)`` pairs for the set fields.

        Fields come in a fixed order (filter, category, tag, reverse, limit,
        offset, hashes). Unset fields are omitted entirely. Values are not
        escaped; pass the pairs as ``params=`` so aiohttp encodes them.
        """
        fields = (
            ("filter", self.filter),
            ("category", self.category),
            ("tag", self.tag),
            ("reverse", self.reverse),
            ("limit", self.limit),
            ("offset", self.offset),
            ("hashes", "|".join(self.hashes) if self.hashes is not None else None),
        )
        return [(key, _render(value)) for key, value in fields if value is not None]

    def to_params(self) -> str:
        """Render the set fields as ``&key=value`` segments, unescaped."""
        return "".join(f"&{key}={value}" for key, value in self.to_query())


@dataclass
class GetTorrentListParamsBuilder:
    """Chained setters for GetTorrentListParams."""
    _filter: Optional[TorrentListFilter] = None
    _category: Optional[str] = None
    _tag: Optional[str] = None
    _reverse: Optional[bool] = None
    _limit: Optional[int] = None
    _offset: Optional[int] = None
    _hashes: Optional[list[str]] = field(default=None)

    def filter(self, state_filter: TorrentListFilter) -> "GetTorrentListParamsBuilder":
        """Filter torrents by state."""
        self._filter = TorrentListFilter(state_filter)
        return self

    def category(self, category: str) -> "GetTorrentListParamsBuilder":
        """Only torrents in the given category."""
        self._category = category
        return self

    def tag(self, tag: str) -> "GetTorrentListParamsBuilder":
        """Only torrents with the given tag."""
        self._tag = tag
        return self

    def reverse(self, enabled: bool = True) -> "GetTorrentListParamsBuilder":
        """Reverse the sort order."""
        self._reverse = enabled
        return self

    def limit(self, limit: int) -> "GetTorrentListParamsBuilder":
        self._limit = limit
        return self

    def offset(self, offset: int) -> "GetTorrentListParamsBuilder":
        self._offset = offset
        return self

    def hash(self, torrent_hash: str) -> "GetTorrentListParamsBuilder":
        """Add one hash to filter by. Repeated calls accumulate."""
        if self._hashes is None:
            self._hashes = []
        self._hashes.append(torrent_hash)
        return self

    def hashes(self, hashes: Iterable[str]) -> "GetTorrentListParamsBuilder":
        """Replace the hashes to filter by."""
        self._hashes = list(hashes)
        return self

    def build(self) -> GetTorrentListParams:
        return GetTorrentListParams(
            filter=self._filter,
            category=self._category,
            tag=self._tag,
            reverse=self._reverse,
            limit=self._limit,
            offset=self._offset,
            hashes=tuple(self._hashes) if self._hashes is not None else None,
        )
