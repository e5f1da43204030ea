"""Data models for fetched TikTok posts and fetch outcomes."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


@dataclass
class Author:
    """Represents the author of a post."""
    id: str
    username: str
    nickname: Optional[str] = None
    avatar_larger: Optional[str] = None
    avatar_thumb: Optional[str] = None
    avatar_medium: Optional[str] = None
    signature: Optional[str] = None
    verified: bool = False
    open_favorite: bool = False
    private_account: bool = False
    is_ad_virtual: bool = False
    is_embed_banned: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "nickname": self.nickname,
            "avatarLarger": self.avatar_larger,
            "avatarThumb": self.avatar_thumb,
            "avatarMedium": self.avatar_medium,
            "signature": self.signature,
            "verified": self.verified,
            "openFavorite": self.open_favorite,
            "privateAccount": self.private_account,
            "isADVirtual": self.is_ad_virtual,
            "isEmbedBanned": self.is_embed_banned,
        }


@dataclass
class Video:
    """Video stream details of a video post."""
    id: Optional[str] = None
    duration: Optional[int] = None
    format: Optional[str] = None
    bitrate: Optional[int] = None
    ratio: Optional[str] = None
    play_addr: Optional[str] = None
    cover: Optional[str] = None
    origin_cover: Optional[str] = None
    dynamic_cover: Optional[str] = None
    download_addr: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "duration": self.duration,
            "format": self.format,
            "bitrate": self.bitrate,
            "ratio": self.ratio,
            "playAddr": self.play_addr,
            "cover": self.cover,
            "originCover": self.origin_cover,
            "dynamicCover": self.dynamic_cover,
            "downloadAddr": self.download_addr,
        }


@dataclass
class _PostBase:
    id: str
    author: Author
    desc: Optional[str] = None
    create_time: Optional[int] = None
    digged: bool = False
    duet_enabled: bool = False
    for_friend: bool = False
    offical_item: bool = False
    original_item: bool = False
    private_item: bool = False
    share_enabled: bool = False
    stitch_enabled: bool = False
    stats: Dict[str, Any] = field(default_factory=dict)
    music: Dict[str, Any] = field(default_factory=dict)

    def _common_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "desc": self.desc,
            "createTime": self.create_time,
            "digged": self.digged,
            "duetEnabled": self.duet_enabled,
            "forFriend": self.for_friend,
            "officalItem": self.offical_item,
            "originalItem": self.original_item,
            "privateItem": self.private_item,
            "shareEnabled": self.share_enabled,
            "stitchEnabled": self.stitch_enabled,
            "stats": self.stats,
            "music": self.music,
            "author": self.author.to_dict(),
        }


@dataclass
class VideoPost(_PostBase):
    """A regular video post."""
    video: Video = field(default_factory=Video)
    type: str = "video"

    def to_dict(self) -> Dict[str, Any]:
        data = self._common_dict()
        data["type"] = self.type
        data["video"] = self.video.to_dict()
        return data


@dataclass
class ImagePost(_PostBase):
    """A photo carousel post."""
    images: List[str] = field(default_factory=list)
    type: str = "image"

    def to_dict(self) -> Dict[str, Any]:
        data = self._common_dict()
        data["type"] = self.type
        data["imagePost"] = list(self.images)
        return data


Post = Union[VideoPost, ImagePost]


@dataclass
class FetchSuccess:
    """All requested posts were fetched."""
    records: List[Any]
    total: int
    status: str = "success"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "result": [r.to_dict() if hasattr(r, "to_dict") else r for r in self.records],
            "totalPosts": self.total,
        }


@dataclass
class FetchFailure:
    """The fetch ended without a usable result."""
    message: str
    status: str = "error"

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "message": self.message}


FetchOutcome = Union[FetchSuccess, FetchFailure]
