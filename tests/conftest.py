"""
Pytest configuration and shared fixtures.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from multidict import CIMultiDict

from qbit_remote.client import QBittorrentClient, Session


BASE_URL = "http://localhost:8080"
TOKEN = "SID=abc123"


@pytest.fixture
def mock_response():
    """Create a factory for mock aiohttp responses."""
    def _create_response(body="", status=200, reason="OK", headers=None):
        response = AsyncMock()
        response.status = status
        response.reason = reason
        response.text = AsyncMock(return_value=body)
        response.headers = CIMultiDict(headers or [])
        return response
    return _create_response


@pytest.fixture
def mock_session():
    """Create a mock aiohttp session; ``respond`` queues responses for ``request``."""
    session = MagicMock()
    session.closed = False
    session.close = AsyncMock()

    def respond(*responses):
        session.request = MagicMock(side_effect=[
            AsyncMock(__aenter__=AsyncMock(return_value=r)) for r in responses
        ])

    session.respond = respond
    session.request = MagicMock()
    return session


@pytest.fixture
def client(mock_session):
    """A client wired to the mock session, not logged in."""
    qbit = QBittorrentClient()
    qbit._session = mock_session
    return qbit


@pytest.fixture
def logged_in_client(client):
    """A client with an active session."""
    client._auth = Session(
        url=BASE_URL,
        username="admin",
        password="adminadmin",
        token=TOKEN,
    )
    return client


@pytest.fixture
def torrent_data():
    """A torrents/info record as qBittorrent 4.x returns it."""
    return {
        "added_on": 1700000000,
        "amount_left": 0,
        "auto_tmm": False,
        "availability": -1,
        "category": "tv",
        "completed": 1048576,
        "completion_on": 1700000500,
        "content_path": "/downloads/Some.Show.S01E01.mkv",
        "dl_limit": -1,
        "dlspeed": 0,
        "downloaded": 1048576,
        "downloaded_session": 0,
        "eta": 8640000,
        "f_l_piece_prio": False,
        "force_start": False,
        "hash": "8c212779b4abde7c6bc608063a0d008b7e40ce32",
        "last_activity": 1700000600,
        "magnet_uri": "magnet:?xt=urn:btih:8c212779b4abde7c6bc608063a0d008b7e40ce32",
        "max_ratio": -1,
        "max_seeding_time": -1,
        "name": "Some.Show.S01E01.mkv",
        "num_complete": 12,
        "num_incomplete": 3,
        "num_leechs": 0,
        "num_seeds": 0,
        "priority": 0,
        "progress": 1,
        "ratio": 0.5,
        "ratio_limit": -2,
        "save_path": "/downloads/",
        "seeding_time": 3600,
        "seeding_time_limit": -2,
        "seen_complete": 1700000500,
        "seq_dl": False,
        "size": 1048576,
        "state": "stalledUP",
        "super_seeding": False,
        "tags": "hd, weekly",
        "time_active": 4000,
        "total_size": 1048576,
        "tracker": "udp://tracker.example.org:1337/announce",
        "up_limit": -1,
        "uploaded": 524288,
        "uploaded_session": 0,
        "upspeed": 0,
    }


@pytest.fixture
def tracker_data():
    """A torrents/trackers response with a DHT entry and a real tracker."""
    return [
        {
            "url": "** [DHT] **",
            "status": 0,
            "tier": -1,
            "num_peers": 5,
            "num_seeds": 2,
            "num_leeches": 3,
            "num_downloaded": -1,
            "msg": "",
        },
        {
            "url": "udp://tracker.example.org:1337/announce",
            "status": 2,
            "tier": 0,
            "num_peers": 10,
            "num_seeds": 8,
            "num_leeches": 2,
            "num_downloaded": 100,
            "msg": "Tracker is working",
        },
    ]
