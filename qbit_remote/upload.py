"""
Multipart payload builder for ``/api/v2/torrents/add``.

Each optional policy field is sent under the exact form field name the
qBittorrent Web API expects; the mapping lives in ``_POLICY_FIELDS``.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Union

import aiohttp

from .exceptions import EmptyUploadError, TorrentFileError

logger = logging.getLogger(__name__)

TORRENT_CONTENT_TYPE = "application/x-bittorrent"

# attribute name -> form field name
_POLICY_FIELDS = (
    ("save_path", "savepath"),
    ("cookie", "cookie"),
    ("category", "category"),
    ("tags", "tags"),
    ("skip_hash_check", "skip_checking"),
    ("paused", "paused"),
    ("root_folder", "root_folder"),
    ("rename", "rename"),
    ("upload_limit", "upLimit"),
    ("download_limit", "dlLimit"),
    ("ratio_limit", "ratioLimit"),
    ("seeding_time_limit", "seedingTimeLimit"),
    ("auto_tmm", "autoTMM"),
    ("sequential_download", "sequentialDownload"),
    ("first_last_piece_prio", "firstLastPiecePrio"),
)


@dataclass(frozen=True)
class FormField:
    """One part of a multipart body."""
    name: str
    value: Union[str, bytes]
    filename: Optional[str] = None
    content_type: Optional[str] = None


def _render(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (tuple, list)):
        return ",".join(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class TorrentUpload:
    """A request to add one or more torrents."""
    urls: tuple[str, ...] = ()
    torrents: tuple[tuple[str, bytes], ...] = ()  # (filename, content)
    save_path: Optional[str] = None
    cookie: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[tuple[str, ...]] = None
    skip_hash_check: Optional[bool] = None
    paused: Optional[bool] = None
    root_folder: Optional[bool] = None
    rename: Optional[str] = None
    upload_limit: Optional[int] = None  # bytes/s
    download_limit: Optional[int] = None  # bytes/s
    ratio_limit: Optional[float] = None
    seeding_time_limit: Optional[int] = None  # seconds
    auto_tmm: Optional[bool] = None
    sequential_download: Optional[bool] = None
    first_last_piece_prio: Optional[bool] = None

    @staticmethod
    def builder() -> "TorrentUploadBuilder":
        return TorrentUploadBuilder()

    def validate(self) -> None:
        """Raise EmptyUploadError unless at least one URL or file is present."""
        if not self.urls and not self.torrents:
            raise EmptyUploadError()

    def form_fields(self) -> list[FormField]:
        """
        List the multipart parts in wire order.

        URLs are joined by newlines into a single ``urls`` part. Each torrent
        file becomes its own ``torrents`` part with a filename and the
        ``application/x-bittorrent`` content type. Unset policy fields are
        left out.
        """
        self.validate()

        parts = []
        if self.urls:
            parts.append(FormField("urls", "\n".join(self.urls)))

        for filename, content in self.torrents:
            parts.append(FormField(
                "torrents",
                content,
                filename=filename,
                content_type=TORRENT_CONTENT_TYPE,
            ))

        for attribute, name in _POLICY_FIELDS:
            value = getattr(self, attribute)
            if value is not None:
                parts.append(FormField(name, _render(value)))

        return parts

    def to_multipart_form(self) -> aiohttp.MultipartWriter:
        """Encode the upload as a ``multipart/form-data`` body."""
        writer = aiohttp.MultipartWriter("form-data")
        for form_field in self.form_fields():
            if form_field.filename is not None:
                part = writer.append(
                    form_field.value,
                    {aiohttp.hdrs.CONTENT_TYPE: form_field.content_type},
                )
                part.set_content_disposition(
                    "form-data", name=form_field.name, filename=form_field.filename
                )
            else:
                part = writer.append(form_field.value)
                part.set_content_disposition("form-data", name=form_field.name)
        return writer


class TorrentUploadBuilder:
    """
    Chained setters for TorrentUpload.

    Usage:
        upload = (
            TorrentUpload.builder()
            .url("magnet:?xt=urn:btih:...")
            .category("tv")
            .paused(True)
            .build()
        )
    """

    def __init__(self):
        self._urls: list[str] = []
        self._torrents: list[tuple[str, bytes]] = []
        self._tags: Optional[list[str]] = None
        self._options: dict[str, object] = {}

    def url(self, url: str) -> "TorrentUploadBuilder":
        self._urls.append(url)
        return self

    def urls(self, urls: Iterable[str]) -> "TorrentUploadBuilder":
        self._urls.extend(urls)
        return self

    def torrent_file(self, torrent_path: Union[str, Path]) -> "TorrentUploadBuilder":
        """Read a .torrent file from disk now; the filename is the last path segment."""
        return self.torrent_path(Path(torrent_path))

    def torrent_path(self, torrent_path: Path) -> "TorrentUploadBuilder":
        try:
            content = torrent_path.read_bytes()
        except OSError as e:
            raise TorrentFileError(str(torrent_path), str(e)) from e
        logger.debug(f"Read {len(content)} bytes from {torrent_path}")
        return self.torrent_data(torrent_path.name, content)

    def torrent_data(self, filename: str, data: bytes) -> "TorrentUploadBuilder":
        self._torrents.append((filename, bytes(data)))
        return self

    def tag(self, tag: str) -> "TorrentUploadBuilder":
        """Add one tag. Repeated calls accumulate."""
        if self._tags is None:
            self._tags = []
        self._tags.append(tag)
        return self

    def tags(self, tags: Iterable[str]) -> "TorrentUploadBuilder":
        """Replace the tag list."""
        self._tags = list(tags)
        return self

    def _set(self, name: str, value) -> "TorrentUploadBuilder":
        self._options[name] = value
        return self

    def save_path(self, save_path: str) -> "TorrentUploadBuilder":
        return self._set("save_path", save_path)

    def cookie(self, cookie: str) -> "TorrentUploadBuilder":
        return self._set("cookie", cookie)

    def category(self, category: str) -> "TorrentUploadBuilder":
        return self._set("category", category)

    def skip_hash_check(self, skip_hash_check: bool) -> "TorrentUploadBuilder":
        return self._set("skip_hash_check", skip_hash_check)

    def paused(self, paused: bool) -> "TorrentUploadBuilder":
        return self._set("paused", paused)

    def root_folder(self, root_folder: bool) -> "TorrentUploadBuilder":
        return self._set("root_folder", root_folder)

    def rename(self, rename: str) -> "TorrentUploadBuilder":
        return self._set("rename", rename)

    def upload_limit(self, upload_limit: int) -> "TorrentUploadBuilder":
        return self._set("upload_limit", upload_limit)

    def download_limit(self, download_limit: int) -> "TorrentUploadBuilder":
        return self._set("download_limit", download_limit)

    def ratio_limit(self, ratio_limit: float) -> "TorrentUploadBuilder":
        return self._set("ratio_limit", ratio_limit)

    def seeding_time_limit(self, seeding_time_limit: int) -> "TorrentUploadBuilder":
        return self._set("seeding_time_limit", seeding_time_limit)

    def auto_tmm(self, auto_tmm: bool) -> "TorrentUploadBuilder":
        return self._set("auto_tmm", auto_tmm)

    def sequential_download(self, sequential_download: bool) -> "TorrentUploadBuilder":
        return self._set("sequential_download", sequential_download)

    def first_last_piece_prio(self, first_last_piece_prio: bool) -> "TorrentUploadBuilder":
        return self._set("first_last_piece_prio", first_last_piece_prio)

    def build(self) -> TorrentUpload:
        """
        Snapshot the configuration into an immutable TorrentUpload.

        Raises:
            EmptyUploadError: If no URL and no torrent file were added.
        """
        upload = TorrentUpload(
            urls=tuple(self._urls),
            torrents=tuple(self._torrents),
            tags=tuple(self._tags) if self._tags is not None else None,
            **self._options,
        )
        upload.validate()
        return upload

