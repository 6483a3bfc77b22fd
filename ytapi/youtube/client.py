"""YouTube Data API v3 client for channels, playlists, videos and subscriptions."""

import logging
from datetime import datetime, timedelta
from itertools import islice
from typing import Any, Callable, Iterable, Iterator, Sequence, TypeVar

import isodate

from ytapi.api.client import ApiClient
from ytapi.youtube.models import (
    AccountInfo,
    ChannelInfo,
    PlaylistInfo,
    PlaylistThumbnails,
    PlaylistVideo,
    PlaylistVideoCount,
    RelatedPlaylists,
    SubscribedChannel,
    Thumbnail,
    Thumbnails,
    UploadsPlaylist,
    VideoMetaData,
)
from ytapi.youtube.pagination import ContinuationPredicate, always_continue, list_all

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Upper bound of IDs per request and of items per page
MAX_RESULTS = 50


def chunked(ids: Iterable[str], size: int = MAX_RESULTS) -> Iterator[list[str]]:
    """Split IDs into lists of at most ``size`` elements."""
    iterator = iter(ids)
    while chunk := list(islice(iterator, size)):
        yield chunk


def parse_thumbnails(raw: dict[str, Any] | None) -> Thumbnails:
    return {quality: Thumbnail(**thumbnail) for quality, thumbnail in (raw or {}).items()}


def parse_duration(value: str | None) -> int:
    """Convert an ISO 8601 duration such as "PT7M39S" or "P1DT36M50S" to seconds."""
    if not value:
        return 0
    duration = isodate.parse_duration(value)
    if not isinstance(duration, timedelta):
        # Year/month components need an anchor date
        duration = duration.totimedelta(start=datetime(1970, 1, 1))
    return int(duration.total_seconds())


def _first_item(response: dict[str, Any]) -> dict[str, Any] | None:
    items = response.get("items") or []
    return items[0] if items else None


def _uploads_playlist(item: dict[str, Any]) -> str | None:
    related = item.get("contentDetails", {}).get("relatedPlaylists", {})
    return related.get("uploads")


def _channel_info(item: dict[str, Any]) -> ChannelInfo:
    snippet = item.get("snippet", {})
    return ChannelInfo(
        id=item["id"],
        title=snippet.get("title", ""),
        uploads_playlist_id=_uploads_playlist(item),
        thumbnails=parse_thumbnails(snippet.get("thumbnails")),
    )


def _subscribed_channel(item: dict[str, Any]) -> SubscribedChannel:
    snippet = item.get("snippet", {})
    return SubscribedChannel(
        id=snippet["resourceId"]["channelId"],
        title=snippet.get("title", ""),
        video_count=item.get("contentDetails", {}).get("totalItemCount", 0),
        thumbnails=parse_thumbnails(snippet.get("thumbnails")),
    )


def _playlist_info(item: dict[str, Any]) -> PlaylistInfo:
    snippet = item.get("snippet", {})
    return PlaylistInfo(
        id=item["id"],
        title=snippet.get("title", ""),
        description=snippet.get("description", ""),
        channel_id=snippet.get("channelId", ""),
        video_count=item.get("contentDetails", {}).get("itemCount", 0),
        thumbnails=parse_thumbnails(snippet.get("thumbnails")),
    )


def _playlist_video(item: dict[str, Any]) -> PlaylistVideo:
    snippet = item["snippet"]
    return PlaylistVideo(
        id=snippet["resourceId"]["videoId"],
        title=snippet.get("title", ""),
        description=snippet.get("description", ""),
        published_at=datetime.fromisoformat(snippet["publishedAt"].replace("Z", "+00:00")),
        channel_id=snippet.get("channelId", ""),
        thumbnails=parse_thumbnails(snippet.get("thumbnails")),
    )


def _video_meta_data(item: dict[str, Any]) -> VideoMetaData:
    return VideoMetaData(
        id=item["id"],
        duration=parse_duration(item.get("contentDetails", {}).get("duration")),
        view_count=int(item.get("statistics", {}).get("viewCount", 0)),
    )


class YouTubeApiClient:
    """Typed convenience methods over the YouTube Data API v3.

    Operations that read public data use the API key. Operations on the
    user's own account (``mine=true``) and all write operations are sent
    authorized, using the token provider of the underlying :class:`ApiClient`.
    """

    def __init__(self, api_client: ApiClient, page_size: int = MAX_RESULTS):
        self._api_client = api_client
        self._page_size = min(page_size, MAX_RESULTS)

    @property
    def api_client(self) -> ApiClient:
        return self._api_client

    async def __aenter__(self) -> "YouTubeApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self._api_client.aclose()

    async def get_account_info(self, account_id: str | None = None) -> AccountInfo | None:
        """Fetch the account's channel and its watch history / watch later playlists.

        Args:
            account_id: Channel ID of the account; None means the authorized
                user's own account (requires authorization)

        Returns:
            The account info, or None if no such channel exists
        """
        parameters: dict[str, Any] = {
            "part": "id,snippet,contentDetails",
            "fields": "items(id,snippet/title,"
            "contentDetails/relatedPlaylists(watchHistory,watchLater))",
        }
        if account_id:
            parameters["id"] = account_id
        else:
            parameters["mine"] = True

        response = await self._api_client.list("channels", parameters, not account_id)
        account = _first_item(response)
        if account is None:
            return None

        playlists = account.get("contentDetails", {}).get("relatedPlaylists", {})
        return AccountInfo(
            id=account["id"],
            title=account.get("snippet", {}).get("title", ""),
            playlist_ids=RelatedPlaylists(
                watch_history=playlists.get("watchHistory") or None,
                watch_later=playlists.get("watchLater") or None,
            ),
        )

    async def get_user_channel_id(self, username: str) -> str | None:
        """Resolve a legacy YouTube username to its channel ID."""
        response = await self._api_client.list(
            "channels",
            {"part": "id", "forUsername": username, "fields": "items/id"},
        )
        channel = _first_item(response)
        return channel["id"] if channel else None

    async def get_channel_info(self, channel_id: str) -> ChannelInfo | None:
        response = await self._api_client.list(
            "channels",
            {
                "part": "id,snippet,contentDetails",
                "id": channel_id,
                "fields": "items(id,snippet(title,thumbnails),"
                "contentDetails/relatedPlaylists/uploads)",
            },
        )
        channel = _first_item(response)
        return _channel_info(channel) if channel else None

    async def get_uploads_playlist_id(self, channel_id: str) -> str | None:
        """Fetch the ID of the playlist holding a channel's uploads.

        Returns:
            The playlist ID, or None if the channel does not exist
        """
        response = await self._api_client.list(
            "channels",
            {
                "part": "contentDetails",
                "id": channel_id,
                "fields": "items/contentDetails/relatedPlaylists/uploads",
            },
        )
        channel = _first_item(response)
        if channel is None:
            return None
        return _uploads_playlist(channel)

    async def get_uploads_playlist_ids(self, channel_ids: Sequence[str]) -> list[UploadsPlaylist]:
        """Batch variant of :meth:`get_uploads_playlist_id`; unknown channels are left out."""
        return await self._list_by_ids(
            "channels",
            channel_ids,
            {
                "part": "contentDetails",
                "fields": "items(id,contentDetails/relatedPlaylists/uploads)",
            },
            lambda item: UploadsPlaylist(id=item["id"], uploads_playlist_id=_uploads_playlist(item)),
        )

    async def get_subscribed_channels(
        self,
        account_id: str | None = None,
        should_continue: ContinuationPredicate = always_continue,
        authorized: bool | None = None,
    ) -> list[SubscribedChannel]:
        """List the channels an account is subscribed to, across all pages.

        Args:
            account_id: Channel ID of the account; None means the authorized
                user's own subscriptions (requires authorization). Other
                accounts' subscriptions are only visible if public.
            should_continue: Called with each page of subscriptions; return
                False to stop fetching further pages
            authorized: Send the request with the OAuth token rather than the
                API key; defaults to authorizing only when account_id is None

        Returns:
            The subscriptions in the order the API returned them
        """
        parameters: dict[str, Any] = {
            "part": "snippet,contentDetails",
            "maxResults": self._page_size,
            "fields": "nextPageToken,items(snippet(title,resourceId/channelId,thumbnails),"
            "contentDetails/totalItemCount)",
        }
        if account_id:
            parameters["channelId"] = account_id
        else:
            parameters["mine"] = True

        return await list_all(
            self._api_client,
            "subscriptions",
            parameters,
            should_continue,
            authorized=not account_id if authorized is None else authorized,
            process=_subscribed_channel,
        )

    async def get_playlist_info(self, playlist_id: str) -> PlaylistInfo | None:
        playlists = await self.get_playlists([playlist_id])
        return playlists[0] if playlists else None

    async def get_playlists(self, playlist_ids: Sequence[str]) -> list[PlaylistInfo]:
        return await self._list_by_ids(
            "playlists",
            playlist_ids,
            {
                "part": "snippet,contentDetails",
                "fields": "items(id,snippet(title,description,channelId,thumbnails),"
                "contentDetails/itemCount)",
            },
            _playlist_info,
        )

    async def get_playlist_video_counts(self, playlist_ids: Sequence[str]) -> list[PlaylistVideoCount]:
        return await self._list_by_ids(
            "playlists",
            playlist_ids,
            {"part": "contentDetails", "fields": "items(id,contentDetails/itemCount)"},
            lambda item: PlaylistVideoCount(
                id=item["id"], video_count=item.get("contentDetails", {}).get("itemCount", 0)
            ),
        )

    async def get_playlist_thumbnails(self, playlist_ids: Sequence[str]) -> list[PlaylistThumbnails]:
        return await self._list_by_ids(
            "playlists",
            playlist_ids,
            {"part": "snippet", "fields": "items(id,snippet/thumbnails)"},
            lambda item: PlaylistThumbnails(
                id=item["id"],
                thumbnails=parse_thumbnails(item.get("snippet", {}).get("thumbnails")),
            ),
        )

    async def get_playlist_videos(
        self,
        playlist_id: str,
        should_continue: ContinuationPredicate = always_continue,
    ) -> list[PlaylistVideo]:
        """List the videos of a playlist, page by page.

        Args:
            playlist_id: ID of the playlist
            should_continue: Called with the :class:`PlaylistVideo` items of
                each page; return False to stop fetching further pages

        Returns:
            The videos in playlist order
        """
        return await list_all(
            self._api_client,
            "playlistItems",
            {
                "part": "snippet",
                "maxResults": self._page_size,
                "playlistId": playlist_id,
                "fields": "nextPageToken,items/snippet(publishedAt,title,description,"
                "channelId,thumbnails,resourceId/videoId)",
            },
            should_continue,
            process=_playlist_video,
        )

    async def get_video_meta_data(self, video_id: str) -> VideoMetaData | None:
        videos = await self.get_videos_meta_data([video_id])
        return videos[0] if videos else None

    async def get_videos_meta_data(self, video_ids: Sequence[str]) -> list[VideoMetaData]:
        """Fetch duration (in seconds) and view count of videos; unknown IDs are left out."""
        return await self._list_by_ids(
            "videos",
            video_ids,
            {
                "part": "contentDetails,statistics",
                "fields": "items(id,contentDetails/duration,statistics/viewCount)",
            },
            _video_meta_data,
        )

    async def add_playlist_item(self, playlist_id: str, video_id: str) -> None:
        """Append a video to a playlist. Requires authorization."""
        await self._api_client.insert(
            "playlistItems?part=snippet",
            {
                "snippet": {
                    "playlistId": playlist_id,
                    "resourceId": {"kind": "youtube#video", "videoId": video_id},
                }
            },
            True,
        )
        logger.info(f"Added video {video_id} to playlist {playlist_id}")

    async def _list_by_ids(
        self,
        path: str,
        ids: Sequence[str],
        parameters: dict[str, Any],
        process: Callable[[dict[str, Any]], T],
    ) -> list[T]:
        results: list[T] = []
        for chunk in chunked(ids):
            response = await self._api_client.list(path, {**parameters, "id": ",".join(chunk)})
            results.extend(process(item) for item in response.get("items") or [])
        return results
