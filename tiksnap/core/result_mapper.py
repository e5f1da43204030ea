"""Map raw item list records to post models."""

from typing import Any, Dict, Iterable, List

from tiksnap.models.data_models import Author, ImagePost, Post, Video, VideoPost
from tiksnap.utils.logging import get_logger

logger = get_logger(__name__)


def _map_author(raw: Dict[str, Any]) -> Author:
    return Author(
        id=str(raw.get("id", "")),
        username=raw.get("uniqueId", ""),
        nickname=raw.get("nickname"),
        avatar_larger=raw.get("avatarLarger"),
        avatar_thumb=raw.get("avatarThumb"),
        avatar_medium=raw.get("avatarMedium"),
        signature=raw.get("signature"),
        verified=bool(raw.get("verified", False)),
        open_favorite=bool(raw.get("openFavorite", False)),
        private_account=bool(raw.get("privateAccount", False)),
        is_ad_virtual=bool(raw.get("isADVirtual", False)),
        is_embed_banned=bool(raw.get("isEmbedBanned", False)),
    )


def _map_video(raw: Dict[str, Any]) -> Video:
    return Video(
        id=raw.get("id"),
        duration=raw.get("duration"),
        format=raw.get("format"),
        bitrate=raw.get("bitrate"),
        ratio=raw.get("ratio"),
        play_addr=raw.get("playAddr"),
        cover=raw.get("cover"),
        origin_cover=raw.get("originCover"),
        dynamic_cover=raw.get("dynamicCover"),
        download_addr=raw.get("downloadAddr"),
    )


def _image_urls(image_post: Dict[str, Any]) -> List[str]:
    urls = []
    for image in image_post.get("images") or []:
        url_list = (image.get("imageURL") or {}).get("urlList") or []
        if url_list:
            urls.append(url_list[0])
    return urls


def map_post(raw: Dict[str, Any]) -> Post:
    """
    Normalize one raw record.

    Records carrying an ``imagePost`` become ImagePost, everything else
    VideoPost.
    """
    common = dict(
        id=str(raw.get("id", "")),
        author=_map_author(raw.get("author") or {}),
        desc=raw.get("desc"),
        create_time=raw.get("createTime"),
        digged=bool(raw.get("digged", False)),
        duet_enabled=bool(raw.get("duetEnabled", False)),
        for_friend=bool(raw.get("forFriend", False)),
        offical_item=bool(raw.get("officalItem", False)),
        original_item=bool(raw.get("originalItem", False)),
        private_item=bool(raw.get("privateItem", False)),
        share_enabled=bool(raw.get("shareEnabled", False)),
        stitch_enabled=bool(raw.get("stitchEnabled", False)),
        stats=raw.get("stats") or {},
        music=raw.get("music") or {},
    )

    if raw.get("imagePost"):
        return ImagePost(images=_image_urls(raw["imagePost"]), **common)
    return VideoPost(video=_map_video(raw.get("video") or {}), **common)


def map_posts(raws: Iterable[Dict[str, Any]]) -> List[Post]:
    """Map raw records in order."""
    return [map_post(raw) for raw in raws]
