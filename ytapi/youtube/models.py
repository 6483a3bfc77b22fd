"""Pydantic models for values returned by the YouTube Data API client."""

from datetime import datetime

from pydantic import BaseModel


class Thumbnail(BaseModel):
    """A single thumbnail image; keyed by quality ("default", "high", ...)."""

    url: str
    width: int | None = None
    height: int | None = None


Thumbnails = dict[str, Thumbnail]


class RelatedPlaylists(BaseModel):
    watch_history: str | None = None
    watch_later: str | None = None


class AccountInfo(BaseModel):
    """The channel of a YouTube account and its special playlists."""

    id: str
    title: str
    playlist_ids: RelatedPlaylists


class ChannelInfo(BaseModel):
    id: str
    title: str
    uploads_playlist_id: str | None = None
    thumbnails: Thumbnails = {}


class UploadsPlaylist(BaseModel):
    """Maps a channel ID to the ID of its uploads playlist."""

    id: str
    uploads_playlist_id: str | None = None


class SubscribedChannel(BaseModel):
    """A channel the account is subscribed to."""

    id: str
    title: str
    video_count: int = 0
    thumbnails: Thumbnails = {}


class PlaylistInfo(BaseModel):
    id: str
    title: str
    description: str = ""
    channel_id: str
    video_count: int = 0
    thumbnails: Thumbnails = {}


class PlaylistVideoCount(BaseModel):
    id: str
    video_count: int = 0


class PlaylistThumbnails(BaseModel):
    id: str
    thumbnails: Thumbnails = {}


class PlaylistVideo(BaseModel):
    """A video as listed within a playlist."""

    id: str
    title: str
    description: str = ""
    published_at: datetime
    channel_id: str
    thumbnails: Thumbnails = {}


class VideoMetaData(BaseModel):
    id: str
    duration: int  # seconds
    view_count: int
