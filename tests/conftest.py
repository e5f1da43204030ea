"""
Pytest fixtures for TikSnap tests.
"""

import json
from typing import List

import pytest


def make_item(index: int, image: bool = False) -> dict:
    """Raw item list record as returned by TikTok."""
    item = {
        "id": f"7{index:018d}",
        "desc": f"post {index}",
        "createTime": 1700000000 + index,
        "digged": False,
        "duetEnabled": True,
        "forFriend": False,
        "officalItem": False,
        "originalItem": False,
        "privateItem": False,
        "shareEnabled": True,
        "stitchEnabled": True,
        "stats": {"diggCount": index * 10, "playCount": index * 100},
        "music": {"id": "m1", "title": "original sound"},
        "author": {
            "id": "6800000000000000000",
            "uniqueId": "alice",
            "nickname": "Alice",
            "avatarLarger": "https://cdn.example.com/a_l.jpg",
            "avatarThumb": "https://cdn.example.com/a_t.jpg",
            "avatarMedium": "https://cdn.example.com/a_m.jpg",
            "signature": "hi",
            "verified": True,
            "openFavorite": False,
            "privateAccount": False,
            "isADVirtual": False,
            "isEmbedBanned": False,
        },
    }
    if image:
        item["imagePost"] = {
            "images": [
                {"imageURL": {"urlList": [f"https://cdn.example.com/{index}_1.jpg", "https://mirror/1.jpg"]}},
                {"imageURL": {"urlList": [f"https://cdn.example.com/{index}_2.jpg"]}},
            ]
        }
    else:
        item["video"] = {
            "id": f"v{index}",
            "duration": 15,
            "format": "mp4",
            "bitrate": 1000,
            "ratio": "720p",
            "playAddr": f"https://cdn.example.com/{index}.mp4",
            "cover": "https://cdn.example.com/cover.jpg",
            "originCover": "https://cdn.example.com/origin.jpg",
            "dynamicCover": "https://cdn.example.com/dynamic.webp",
            "downloadAddr": f"https://cdn.example.com/{index}_dl.mp4",
        }
    return item


def make_items(start: int, count: int) -> List[dict]:
    return [make_item(i) for i in range(start, start + count)]


def profile_html(sec_uid: str = "MS4wLjABAAAA_alice", status_code: int = 0) -> str:
    """Profile page carrying the rehydration JSON."""
    detail = {"statusCode": status_code}
    if status_code == 0:
        detail["userInfo"] = {"user": {"secUid": sec_uid, "uniqueId": "alice"}}
    data = {"__DEFAULT_SCOPE__": {"webapp.user-detail": detail}}
    return (
        "<html><head>"
        f'<script id="__UNIVERSAL_DATA_FOR_REHYDRATION__" type="application/json">{json.dumps(data)}</script>'
        "</head><body></body></html>"
    )


class RecordingSleep:
    """Awaitable sleep stand-in that records requested delays."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def raw_video_item():
    return make_item(1)


@pytest.fixture
def raw_image_item():
    return make_item(2, image=True)
