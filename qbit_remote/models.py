"""
Response model for the qBittorrent Web API.
Typed, immutable snapshots of torrents and trackers as reported by the server.
"""

import json
import logging
from enum import Enum, IntEnum
from typing import Any, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_serializer, field_validator

from .exceptions import DecodeError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class TorrentState(str, Enum):
    """Torrent lifecycle states reported by qBittorrent."""
    ERROR = "error"
    MISSING_FILES = "missingFiles"
    UPLOADING = "uploading"
    PAUSED_UP = "pausedUP"
    QUEUED_UP = "queuedUP"
    STALLED_UP = "stalledUP"
    CHECKING_UP = "checkingUP"
    FORCED_UP = "forcedUP"
    ALLOCATING = "allocating"
    DOWNLOADING = "downloading"
    META_DL = "metaDL"
    PAUSED_DL = "pausedDL"
    QUEUED_DL = "queuedDL"
    STALLED_DL = "stalledDL"
    CHECKING_DL = "checkingDL"
    FORCED_DL = "forcedDL"
    CHECKING_RESUME_DATA = "checkingResumeData"
    MOVING = "moving"
    UNKNOWN = "unknown"

    @classmethod
    def from_wire(cls, value: Any) -> "TorrentState":
        """Decode a wire value, falling back to UNKNOWN for anything unrecognized."""
        try:
            return cls(value)
        except ValueError:
            logger.debug(f"Unrecognized torrent state {value!r}, using unknown")
            return cls.UNKNOWN

    @property
    def is_downloading(self) -> bool:
        return self in _DOWNLOADING_STATES

    @property
    def is_uploading(self) -> bool:
        return self in _UPLOADING_STATES

    @property
    def is_paused(self) -> bool:
        return self in (TorrentState.PAUSED_DL, TorrentState.PAUSED_UP)

    @property
    def is_checking(self) -> bool:
        return self in (
            TorrentState.CHECKING_DL,
            TorrentState.CHECKING_UP,
            TorrentState.CHECKING_RESUME_DATA,
        )

    @property
    def is_errored(self) -> bool:
        return self in (TorrentState.ERROR, TorrentState.MISSING_FILES)


_DOWNLOADING_STATES = frozenset({
    TorrentState.ALLOCATING,
    TorrentState.DOWNLOADING,
    TorrentState.META_DL,
    TorrentState.PAUSED_DL,
    TorrentState.QUEUED_DL,
    TorrentState.STALLED_DL,
    TorrentState.CHECKING_DL,
    TorrentState.FORCED_DL,
})

_UPLOADING_STATES = frozenset({
    TorrentState.UPLOADING,
    TorrentState.PAUSED_UP,
    TorrentState.QUEUED_UP,
    TorrentState.STALLED_UP,
    TorrentState.CHECKING_UP,
    TorrentState.FORCED_UP,
})


class TrackerStatus(IntEnum):
    """Tracker status codes. Unknown codes are rejected on decode."""
    DISABLED = 0  # DHT, PeX and LSD entries
    NOT_CONTACTED = 1
    WORKING = 2
    UPDATING = 3
    NOT_WORKING = 4


class TorrentInfo(BaseModel):
    """
    One torrent as reported by ``/api/v2/torrents/info``.

    Only ``hash``, ``name`` and ``state`` are required; counters default to
    zero so that older or newer servers with a slightly different field set
    still decode. Fetch a new snapshot to observe changes.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    # Identity
    hash: str
    name: str
    state: TorrentState

    # Timestamps (Unix epoch)
    added_on: int = 0
    completion_on: int = 0
    last_activity: int = 0
    seen_complete: int = 0

    # Transfer counters (bytes, bytes/s)
    amount_left: int = 0
    completed: int = 0
    downloaded: int = 0
    downloaded_session: int = 0
    uploaded: int = 0
    uploaded_session: int = 0
    dlspeed: int = 0
    upspeed: int = 0
    size: int = 0
    total_size: int = 0

    # Progress and swarm
    availability: float = 0.0
    progress: float = 0.0
    ratio: float = 0.0
    eta: int = 0
    num_complete: int = 0
    num_incomplete: int = 0
    num_leechs: int = 0
    num_seeds: int = 0
    priority: int = 0
    time_active: int = 0
    seeding_time: int = 0

    # Policy
    auto_tmm: bool = False
    dl_limit: int = -1
    up_limit: int = -1
    f_l_piece_prio: bool = False
    force_start: bool = False
    max_ratio: float = -1.0
    max_seeding_time: int = -1
    ratio_limit: float = -2.0
    seeding_time_limit: int = -2
    seq_dl: bool = False
    super_seeding: bool = False

    # Location and labels
    category: str = ""
    content_path: str = ""
    save_path: str = ""
    magnet_uri: str = ""
    tracker: str = ""
    tags: tuple[str, ...] = ()

    @field_validator("state", mode="before")
    @classmethod
    def _decode_state(cls, value: Any) -> TorrentState:
        return TorrentState.from_wire(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _decode_tags(cls, value: Any) -> tuple[str, ...]:
        if value is None:
            return ()
        if isinstance(value, str):
            value = value.split(",")
        # Ordered set: first occurrence wins
        seen: dict[str, None] = {}
        for tag in value:
            tag = str(tag).strip()
            if tag:
                seen.setdefault(tag, None)
        return tuple(seen)

    @field_serializer("tags")
    def _encode_tags(self, tags: tuple[str, ...]) -> str:
        return ",".join(tags)


class TorrentTracker(BaseModel):
    """One tracker entry from ``/api/v2/torrents/trackers``."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    url: str
    status: TrackerStatus
    tier: int = -1  # < 0 when no tier applies (DHT, PeX, LSD)
    num_peers: int = 0
    num_seeds: int = 0
    num_leeches: int = 0
    num_downloaded: int = 0
    message: str = Field(default="", alias="msg")

    @field_validator("tier", mode="before")
    @classmethod
    def _decode_tier(cls, value: Any) -> int:
        # Special entries report an empty string for the tier
        if value == "":
            return -1
        return value

    @property
    def has_tier(self) -> bool:
        return self.tier >= 0


def decode_list(body: str, model: Type[ModelT]) -> list[ModelT]:
    """
    Decode a JSON array body into a list of ``model`` instances.

    Raises:
        DecodeError: If the body is not JSON, not an array, or an element
            does not match the model.
    """
    try:
        data = json.loads(body)
    except ValueError as e:
        raise DecodeError(f"Response is not valid JSON: {e}", body=body) from e

    if not isinstance(data, list):
        raise DecodeError(
            f"Expected a JSON array, got {type(data).__name__}", body=body
        )

    try:
        return [model.model_validate(item) for item in data]
    except ValidationError as e:
        raise DecodeError(
            f"Response does not match {model.__name__}: {e}", body=body
        ) from e


def decode_string_list(body: str) -> list[str]:
    """Decode a JSON array of strings, such as the tag list."""
    try:
        data = json.loads(body)
    except ValueError as e:
        raise DecodeError(f"Response is not valid JSON: {e}", body=body) from e

    if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
        raise DecodeError("Expected a JSON array of strings", body=body)
    return data
