"""YouTube Data API v3 domain client."""

from .client import MAX_RESULTS, YouTubeApiClient, parse_duration
from .models import (
    AccountInfo,
    ChannelInfo,
    PlaylistInfo,
    PlaylistThumbnails,
    PlaylistVideo,
    PlaylistVideoCount,
    RelatedPlaylists,
    SubscribedChannel,
    Thumbnail,
    UploadsPlaylist,
    VideoMetaData,
)
from .pagination import always_continue, list_all

__all__ = [
    "MAX_RESULTS",
    "AccountInfo",
    "ChannelInfo",
    "PlaylistInfo",
    "PlaylistThumbnails",
    "PlaylistVideo",
    "PlaylistVideoCount",
    "RelatedPlaylists",
    "SubscribedChannel",
    "Thumbnail",
    "UploadsPlaylist",
    "VideoMetaData",
    "YouTubeApiClient",
    "always_continue",
    "list_all",
    "parse_duration",
]
