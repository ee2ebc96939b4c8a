"""
qbit-remote: typed async client for the qBittorrent Web API.
"""

from .client import QBittorrentClient, Session
from .config import ClientSettings
from .exceptions import (
    AuthorizationError,
    ConfigurationError,
    DecodeError,
    EmptyUploadError,
    LoginFailedError,
    QbitRemoteError,
    TorrentFileError,
    TransportError,
    ValidationError,
)
from .models import TorrentInfo, TorrentState, TorrentTracker, TrackerStatus
from .params import GetTorrentListParams, GetTorrentListParamsBuilder, TorrentListFilter
from .upload import TorrentUpload, TorrentUploadBuilder

__version__ = "0.3.0"

__all__ = [
    "AuthorizationError",
    "ClientSettings",
    "ConfigurationError",
    "DecodeError",
    "EmptyUploadError",
    "GetTorrentListParams",
    "GetTorrentListParamsBuilder",
    "LoginFailedError",
    "QBittorrentClient",
    "QbitRemoteError",
    "Session",
    "TorrentFileError",
    "TorrentInfo",
    "TorrentListFilter",
    "TorrentState",
    "TorrentTracker",
    "TorrentUpload",
    "TorrentUploadBuilder",
    "TrackerStatus",
    "TransportError",
    "ValidationError",
]
