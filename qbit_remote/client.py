"""
qBittorrent Web API Client
Session-authenticated async client for the qBittorrent remote control API.
Turns high-level calls into HTTP requests and decodes typed results.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Union

import aiohttp
from aiohttp import hdrs

from .config import ClientSettings
from .exceptions import (
    AuthorizationError,
    DecodeError,
    LoginFailedError,
    QbitRemoteError,
    TransportError,
    ValidationError,
)
from .logging_config import LogContext, redact_token
from .models import TorrentInfo, TorrentTracker, decode_list, decode_string_list
from .params import GetTorrentListParams
from .upload import TorrentUpload

logger = logging.getLogger(__name__)

LOGIN_OK = "Ok."
SESSION_COOKIE = "SID"

TorrentRef = Union[TorrentInfo, str]


@dataclass(frozen=True)
class Session:
    """Connection info and the session cookie obtained from one successful login."""
    url: str
    username: str
    password: str = field(repr=False)
    token: str = field(repr=False)


def _hash_of(torrent: TorrentRef) -> str:
    if isinstance(torrent, TorrentInfo):
        return torrent.hash
    return torrent


def _bool_field(value: bool) -> str:
    return "true" if value else "false"


def extract_session_cookie(set_cookie_headers: Iterable[str]) -> str:
    """
    Find the ``SID=<token>`` segment in the given Set-Cookie header values.

    Raises:
        DecodeError: If no segment starts with ``SID=``.
    """
    prefix = f"{SESSION_COOKIE}="
    for header in set_cookie_headers:
        for segment in header.split(";"):
            segment = segment.strip()
            if segment.startswith(prefix):
                return segment
    raise DecodeError(f"Login response did not set a {SESSION_COOKIE} cookie")


class QBittorrentClient:
    """
    Client for the qBittorrent Web API v2.

    API Documentation: https://github.com/qbittorrent/qBittorrent/wiki/WebUI-API-(qBittorrent-4.1)
    API Base Path: {url}/api/v2/{namespace}/{method}

    Call ``login`` once; every other operation raises AuthorizationError
    until it has succeeded. Concurrent calls share one aiohttp session and
    are not ordered relative to each other.
    """

    def __init__(self, timeout: float = 30.0, verify_ssl: bool = True):
        self.timeout = timeout
        self.verify_ssl = verify_ssl

        self._session: Optional[aiohttp.ClientSession] = None
        self._auth: Optional[Session] = None

    @classmethod
    def from_settings(cls, settings: ClientSettings) -> "QBittorrentClient":
        return cls(timeout=settings.timeout, verify_ssl=settings.verify_ssl)

    @property
    def session(self) -> Optional[Session]:
        """The current authenticated session, or None before login."""
        return self._auth

    @property
    def is_authenticated(self) -> bool:
        return self._auth is not None and bool(self._auth.token) and bool(self._auth.url)

    async def __aenter__(self) -> "QBittorrentClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            # The SID cookie is sent explicitly; the jar must not add its own copy
            self._session = aiohttp.ClientSession(
                connector=aiohttp.TCPConnector(ssl=self.verify_ssl),
                cookie_jar=aiohttp.DummyCookieJar(),
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
        return self._session

    @staticmethod
    def _endpoint(base_url: str, path: str) -> str:
        return f"{base_url.rstrip('/')}/api/v2/{path}"

    def _require_session(self) -> Session:
        """Return the active session or raise AuthorizationError without touching the network."""
        auth = self._auth
        if auth is None or not auth.token or not auth.url:
            raise AuthorizationError("Not logged in", "call login() first")
        return auth

    async def _send(
        self,
        method: str,
        url: str,
        path: str,
        data: Any = None,
        headers: Optional[dict] = None,
        params: Optional[list[tuple[str, str]]] = None,
    ) -> tuple[int, str, str, list[str]]:
        """Dispatch one request; returns (status, reason, body, set-cookie headers)."""
        session = await self._get_session()
        try:
            async with session.request(
                method, url, params=params, data=data, headers=headers
            ) as response:
                body = await response.text()
                return (
                    response.status,
                    response.reason or "",
                    body,
                    list(response.headers.getall(hdrs.SET_COOKIE, [])),
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(
                f"qBittorrent request failed: {method} {path}: {e!r}",
                extra={"error": type(e).__name__},
            )
            raise TransportError(f"Request to {path} failed", reason=str(e) or type(e).__name__) from e

    @staticmethod
    def _check_status(status: int, reason: str, path: str) -> None:
        if not 200 <= status < 300:
            logger.warning(
                f"qBittorrent returned HTTP {status} for {path}",
                extra={"status": status},
            )
            raise TransportError(f"HTTP {status}: {reason}", status=status, reason=reason)

    async def _request(
        self,
        method: str,
        path: str,
        data: Any = None,
        params: Optional[list[tuple[str, str]]] = None,
        torrent_hash: Optional[str] = None,
    ) -> str:
        """Make an authenticated request and return the response body."""
        auth = self._require_session()

        with LogContext(endpoint=path, torrent_hash=torrent_hash):
            logger.debug(f"{method} {path}")
            status, reason, body, _ = await self._send(
                method,
                self._endpoint(auth.url, path),
                path,
                data=data,
                headers={hdrs.COOKIE: auth.token},
                params=params or None,
            )
            self._check_status(status, reason, path)
        return body

    async def login(self, url: str, username: str, password: str) -> None:
        """
        Authenticate with qBittorrent.

        Success is signalled only by the body ``Ok.``; any other body is a
        rejected login whatever the HTTP status. On success the session
        cookie and the connection info replace any previous session.

        Raises:
            LoginFailedError: The server did not answer ``Ok.``.
            TransportError: Network failure, or ``Ok.`` with a non-2xx status.
            DecodeError: No ``SID`` cookie in the response.
        """
        path = "auth/login"
        with LogContext(endpoint=path):
            status, reason, body, cookies = await self._send(
                hdrs.METH_POST,
                self._endpoint(url, path),
                path,
                data={"username": username, "password": password},
            )

            if body != LOGIN_OK:
                logger.warning(
                    f"qBittorrent login rejected for {username} at {url} (HTTP {status})",
                    extra={"status": status},
                )
                raise LoginFailedError(body, status)

            self._check_status(status, reason, path)
            token = extract_session_cookie(cookies)

        self._auth = Session(url=url, username=username, password=password, token=token)
        logger.info(f"qBittorrent authenticated as {username} at {url} ({redact_token(token)})")

    async def logout(self) -> None:
        """End the session on the server. The local session is cleared regardless."""
        if self._auth is None:
            return
        try:
            await self._request(hdrs.METH_POST, "auth/logout")
        except QbitRemoteError as e:
            logger.warning(f"qBittorrent logout error: {e}")
        finally:
            self._auth = None

    async def close(self) -> None:
        """Log out and close the HTTP session."""
        await self.logout()
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def list_torrents(
        self, params: Optional[GetTorrentListParams] = None
    ) -> list[TorrentInfo]:
        """List torrents, optionally filtered and sorted by ``params``."""
        query = params.to_query() if params is not None else None
        body = await self._request(hdrs.METH_POST, "torrents/info", params=query)
        torrents = decode_list(body, TorrentInfo)
        logger.debug(f"Listed {len(torrents)} torrent(s)")
        return torrents

    async def get_torrent_list(self) -> list[TorrentInfo]:
        """List every torrent without filtering."""
        return await self.list_torrents()

    async def get_trackers(self, torrent: TorrentRef) -> list[TorrentTracker]:
        """Get the trackers of a torrent."""
        torrent_hash = _hash_of(torrent)
        body = await self._request(
            hdrs.METH_POST,
            "torrents/trackers",
            data={"hash": torrent_hash},
            torrent_hash=torrent_hash,
        )
        return decode_list(body, TorrentTracker)

    async def add_tracker(self, torrent: TorrentRef, tracker_url: str) -> None:
        """Add a tracker URL to a torrent."""
        torrent_hash = _hash_of(torrent)
        await self._request(
            hdrs.METH_POST,
            "torrents/addTrackers",
            data={"hash": torrent_hash, "urls": tracker_url},
            torrent_hash=torrent_hash,
        )

    async def replace_tracker(self, torrent: TorrentRef, old_url: str, new_url: str) -> None:
        """Replace one tracker URL of a torrent with another."""
        torrent_hash = _hash_of(torrent)
        await self._request(
            hdrs.METH_POST,
            "torrents/editTracker",
            data={"hash": torrent_hash, "origUrl": old_url, "newUrl": new_url},
            torrent_hash=torrent_hash,
        )

    async def remove_tracker(self, torrent: TorrentRef, tracker_url: str) -> None:
        """Remove a tracker URL from a torrent."""
        torrent_hash = _hash_of(torrent)
        await self._request(
            hdrs.METH_POST,
            "torrents/removeTrackers",
            data={"hash": torrent_hash, "urls": tracker_url},
            torrent_hash=torrent_hash,
        )

    async def add_torrent(self, upload: TorrentUpload) -> None:
        """
        Add torrents by URL and/or file content.

        qBittorrent does not return the added torrents; list torrents
        afterwards to find them.
        """
        self._require_session()
        form = upload.to_multipart_form()
        await self._request(hdrs.METH_POST, "torrents/add", data=form)
        logger.info(
            f"Added {len(upload.urls)} URL(s) and {len(upload.torrents)} file(s)"
            + (f" to category {upload.category}" if upload.category else "")
        )

    async def remove_torrent(self, torrent: TorrentRef, delete_files: bool = False) -> None:
        """Remove a torrent, optionally deleting its downloaded data."""
        torrent_hash = _hash_of(torrent)
        await self._request(
            hdrs.METH_POST,
            "torrents/delete",
            data={"hashes": torrent_hash, "deleteFiles": _bool_field(delete_files)},
            torrent_hash=torrent_hash,
        )
        logger.info(f"Removed torrent {torrent_hash} (delete_files={delete_files})")

    async def remove_torrents(
        self, torrents: Iterable[TorrentRef], delete_files: bool = False
    ) -> None:
        """Remove several torrents in one request. ``delete_files`` applies to all of them."""
        hashes = [_hash_of(t) for t in torrents]
        if not hashes:
            raise ValidationError("No torrents given to remove")

        await self._request(
            hdrs.METH_POST,
            "torrents/delete",
            data={"hashes": "|".join(hashes), "deleteFiles": _bool_field(delete_files)},
        )
        logger.info(f"Removed {len(hashes)} torrent(s) (delete_files={delete_files})")

    async def get_tags(self) -> list[str]:
        """Get all tags known to the server."""
        body = await self._request(hdrs.METH_GET, "torrents/tags")
        return decode_string_list(body)

    async def create_tag(self, tag: str) -> None:
        await self._request(hdrs.METH_POST, "torrents/createTags", data={"tags": tag})

    async def delete_tag(self, tag: str) -> None:
        await self._request(hdrs.METH_POST, "torrents/deleteTags", data={"tags": tag})

    async def app_version(self) -> str:
        """Get the qBittorrent application version, e.g. ``v4.6.2``."""
        body = await self._request(hdrs.METH_GET, "app/version")
        return body.strip()

    async def test_connection(self) -> tuple[bool, str]:
        """Check that the current session can reach the server."""
        try:
            version = await self.app_version()
            return True, f"Connected to qBittorrent {version}"
        except QbitRemoteError as e:
            return False, str(e)
