"""
Content-type dispatch over the Spotify Web API.

The DataFetcher turns a RequestDescriptor into one aggregate payload. Album
and artist embeds are composite fetches: their sub-requests run concurrently
and either all succeed or the whole fetch fails. Only complete results are
written to the response cache.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional
from urllib.parse import quote

from spotinote.enums import ContentType
from spotinote.results import FetchResult
from .cache import ResponseCache
from .exceptions import SpotifyError, SpotifyAPIError, UnsupportedTypeError
from .http_client import SpotifyHTTPClient

if TYPE_CHECKING:
    from spotinote.schemas.descriptors import (
        PlaylistDescriptor,
        RequestDescriptor,
        SearchDescriptor,
    )

logger = logging.getLogger(__name__)

DEFAULT_MARKET = "US"
ALBUM_TRACKS_PAGE_SIZE = 50
ARTIST_ALBUMS_PAGE_SIZE = 20
ARTIST_ALBUM_GROUPS = "album,single"


class DataFetcher:
    """
    Fetches and caches the aggregate payload for a descriptor.

    The fetcher is the only writer of the cache and the only caller of the
    HTTP client.

    Example:
        fetcher = DataFetcher(http_client, InMemoryResponseCache())
        album = fetcher.fetch(AlbumDescriptor(id="4aawyAB9vmqN3uQ7FjRGTy"))
        album["tracks"]["items"]
    """

    def __init__(
        self,
        client: SpotifyHTTPClient,
        cache: ResponseCache,
        market: str = DEFAULT_MARKET,
        max_workers: int = 4,
    ):
        """
        Initialize the fetcher.

        Args:
            client: Authenticated HTTP client.
            cache: Response cache backend.
            market: ISO country code used for top tracks and album lists.
            max_workers: Thread pool size for composite fetches.
        """
        self._client = client
        self._cache = cache
        self._market = (market or DEFAULT_MARKET).upper()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="spotinote-fetch"
        )
        self._pool_lock = threading.Lock()
        self._closed = False
        self._handlers: Dict[str, Callable[[Any], Any]] = {
            ContentType.TRACK: self._fetch_track,
            ContentType.ALBUM: self._fetch_album,
            ContentType.ARTIST: self._fetch_artist,
            ContentType.PLAYLIST: self._fetch_playlist,
            ContentType.SEARCH: self._fetch_search,
        }

    @property
    def market(self) -> str:
        return self._market

    def close(self) -> None:
        """
        Shut down the worker pool once running sub-requests have settled.

        Callers still holding the fetcher keep working: after close their
        composite sub-requests run one after another on the calling thread.
        """
        with self._pool_lock:
            self._closed = True
        self._executor.shutdown(wait=True)

    def fetch(self, descriptor: "RequestDescriptor") -> Any:
        """
        Return the aggregate payload for a descriptor.

        A cache hit is returned unchanged; on a miss the payload is fetched,
        cached and returned.

        Raises:
            UnsupportedTypeError: If the content type is unknown.
            SpotifyError: Whatever the HTTP client raised.
        """
        content_type = getattr(descriptor, "content_type", None)
        handler = self._handlers.get(content_type)
        if handler is None:
            raise UnsupportedTypeError(str(content_type))

        cached = self._cache.get(descriptor)
        if cached is not None:
            return cached

        logger.debug("Fetching %s from Spotify", descriptor.cache_key())
        payload = handler(descriptor)
        self._cache.put(descriptor, payload)
        return payload

    def fetch_result(self, descriptor: "RequestDescriptor") -> FetchResult:
        """Like fetch, but reports failures as a FetchResult."""
        try:
            return FetchResult.ok(self.fetch(descriptor))
        except SpotifyError as e:
            logger.warning("Fetch failed for %s: %s", content_label(descriptor), e)
            return FetchResult.failure(e)

    # -----------------------------------------------------------------
    # Per-type handlers
    # -----------------------------------------------------------------

    def _fetch_track(self, descriptor) -> Dict[str, Any]:
        return self._require(self._client.get(f"/tracks/{descriptor.id}"), "track")

    def _fetch_album(self, descriptor) -> Dict[str, Any]:
        album, tracks = self._gather(
            lambda: self._client.get(f"/albums/{descriptor.id}"),
            lambda: self._client.get(
                f"/albums/{descriptor.id}/tracks",
                params={"limit": ALBUM_TRACKS_PAGE_SIZE},
            ),
        )
        album = dict(self._require(album, "album"))
        album["tracks"] = {"items": (tracks or {}).get("items") or []}
        return album

    def _fetch_artist(self, descriptor) -> Dict[str, Any]:
        artist, top_tracks, albums = self._gather(
            lambda: self._client.get(f"/artists/{descriptor.id}"),
            lambda: self._client.get(
                f"/artists/{descriptor.id}/top-tracks",
                params={"market": self._market},
            ),
            lambda: self._client.get(
                f"/artists/{descriptor.id}/albums",
                params={
                    "include_groups": ARTIST_ALBUM_GROUPS,
                    "market": self._market,
                    "limit": ARTIST_ALBUMS_PAGE_SIZE,
                },
            ),
        )
        artist = dict(self._require(artist, "artist"))
        artist["topTracks"] = (top_tracks or {}).get("tracks") or []
        artist["albums"] = (albums or {}).get("items") or []
        return artist

    def _fetch_playlist(self, descriptor: "PlaylistDescriptor") -> Dict[str, Any]:
        playlist = dict(
            self._require(self._client.get(f"/playlists/{descriptor.id}"), "playlist")
        )
        if not descriptor.fetch_all_pages:
            return playlist

        tracks = dict(playlist.get("tracks") or {})
        items: List[Dict] = list(tracks.get("items") or [])
        next_url: Optional[str] = tracks.get("next")
        if next_url:
            items.extend(self._client.get_all_pages(next_url))
            logger.debug(
                "Fetched %d playlist items across all pages for %s",
                len(items), descriptor.id,
            )
        tracks["items"] = items
        tracks["next"] = None
        playlist["tracks"] = tracks
        return playlist

    def _fetch_search(self, descriptor: "SearchDescriptor") -> Dict[str, Any]:
        path = (
            f"/search?q={quote(descriptor.query, safe='')}"
            f"&type={descriptor.search_type.value}"
            f"&limit={descriptor.limit}"
        )
        results = self._client.get(path) or {}
        page = results.get(descriptor.results_key)
        if isinstance(page, dict) and len(page.get("items") or []) > descriptor.limit:
            page = dict(page)
            page["items"] = page["items"][: descriptor.limit]
            results = dict(results)
            results[descriptor.results_key] = page
        return results

    # -----------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------

    def _gather(self, *calls: Callable[[], Any]) -> List[Any]:
        """
        Run calls concurrently and wait for all of them.

        Raises the first failure (in call order) after every call has
        settled, so no sub-request is still writing when we return.
        """
        with self._pool_lock:
            futures = (
                None if self._closed
                else [self._executor.submit(call) for call in calls]
            )
        if futures is None:
            return [call() for call in calls]

        results: List[Any] = []
        first_error: Optional[BaseException] = None
        for future in futures:
            try:
                results.append(future.result())
            except Exception as e:
                if first_error is None:
                    first_error = e
                results.append(None)
        if first_error is not None:
            raise first_error
        return results

    @staticmethod
    def _require(payload: Any, kind: str) -> Dict[str, Any]:
        if not isinstance(payload, dict):
            raise SpotifyAPIError(f"Spotify returned no {kind} data")
        return payload


def content_label(descriptor: Any) -> str:
    """Short human label for logs: ``album:4aawyAB9...``."""
    content_type = getattr(descriptor, "content_type", "?")
    ident = getattr(descriptor, "id", None) or getattr(descriptor, "query", "")
    return f"{content_type}:{ident}"
