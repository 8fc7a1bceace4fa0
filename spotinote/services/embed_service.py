"""
Embed service.

The boundary nearest the note author: takes raw block text, inline links
or whole markdown documents and returns HTML. Every failure, from a bad
block to a Spotify outage, is rendered as a labeled error block; nothing
raised below this layer reaches the caller.
"""

import logging
import re
from typing import Callable, Optional

from spotinote.enums import BlockKind
from spotinote.parser import (
    parse_code_block,
    parse_inline_link,
    parse_search_block,
    parse_search_query,
)
from spotinote.rendering import EmbedRenderer
from spotinote.results import FetchResult
from spotinote.schemas.descriptors import RequestDescriptor
from spotinote.schemas.settings import EmbedSettings
from spotinote.spotify.client import SpotinoteClient
from spotinote.spotify.exceptions import SpotifyError

logger = logging.getLogger(__name__)

# <a href="spotify:track:4iV5W9uYEdYUVa79Axb7Rh">...</a>
_INLINE_LINK_PATTERN = re.compile(
    r"<a\s[^>]*?href=[\"'](?P<href>spotify:[^\"']*)[\"'][^>]*>.*?</a>",
    re.IGNORECASE | re.DOTALL,
)

# [label](spotify:album:4aawyAB9vmqN3uQ7FjRGTy)
_MARKDOWN_LINK_PATTERN = re.compile(r"\[[^\]]*\]\((?P<href>spotify:[^)\s]*)\)")

# ```spotify ... ``` and ```spotify-search ... ```
_FENCED_BLOCK_PATTERN = re.compile(
    r"^(?P<fence>`{3,}|~{3,})[ \t]*(?P<kind>spotify-search|spotify)[ \t]*\n"
    r"(?P<body>.*?)"
    r"^(?P=fence)[ \t]*$",
    re.MULTILINE | re.DOTALL,
)


class EmbedService:
    """
    Turns embed sources into HTML fragments.

    Example:
        service = EmbedService(client, settings_provider=store.load)
        html = service.process_code_block("type: track\\nid: 4iV5W9uYEdYUVa79Axb7Rh")
    """

    def __init__(
        self,
        client: SpotinoteClient,
        settings_provider: Optional[Callable[[], EmbedSettings]] = None,
        fetch_all_pages: bool = False,
    ):
        """
        Initialize the service.

        Args:
            client: Client used for every Spotify fetch.
            settings_provider: Returns the current display settings. Called
                per request so changes to the settings blob apply at once.
            fetch_all_pages: Default playlist pagination mode for blocks
                that do not set ``fetchAllPages``.
        """
        self._client = client
        self._settings_provider = settings_provider or EmbedSettings
        self._fetch_all_pages = fetch_all_pages

    @property
    def client(self) -> SpotinoteClient:
        return self._client

    # =========================================================================
    # Programmatic access
    # =========================================================================

    def fetch(self, descriptor: RequestDescriptor) -> FetchResult:
        """Fetch one descriptor, reporting any failure in the result."""
        return self._client.fetch_result(descriptor)

    def parse(self, source: str) -> FetchResult:
        """Parse a ```spotify block without fetching it."""
        try:
            return FetchResult.ok(
                parse_code_block(source, self._settings(), self._fetch_all_pages)
            )
        except SpotifyError as e:
            return FetchResult.failure(e)

    # =========================================================================
    # Rendering entry points
    # =========================================================================

    def process_code_block(self, source: str) -> str:
        """Render the body of a ```spotify block."""
        settings = self._settings()
        renderer = EmbedRenderer(settings)
        try:
            descriptor = parse_code_block(source, settings, self._fetch_all_pages)
            payload = self._client.fetch(descriptor)
            return renderer.render(payload, descriptor)
        except SpotifyError as e:
            logger.info("Spotify block failed: %s", e)
            return renderer.render_error(str(e))
        except Exception as e:
            logger.exception("Unexpected error rendering Spotify block")
            return renderer.render_error(str(e) or e.__class__.__name__)

    def process_search_block(self, source: str) -> str:
        """
        Render the body of a ```spotify-search block.

        Blocks with a ``query`` render the results directly; without one
        they render an empty search form.
        """
        settings = self._settings()
        renderer = EmbedRenderer(settings)
        try:
            config = parse_search_block(source, settings)
            descriptor = config.descriptor
            if descriptor is None:
                return renderer.render_search_form(config)
            payload = self._client.fetch(descriptor)
            return renderer.render_search_results(payload, descriptor)
        except SpotifyError as e:
            logger.info("Spotify search block failed: %s", e)
            return renderer.render_error(f"Search failed: {e}")
        except Exception as e:
            logger.exception("Unexpected error rendering Spotify search block")
            return renderer.render_error(str(e) or e.__class__.__name__)

    def process_search_query(
        self,
        query: Optional[str],
        search_type: Optional[str] = None,
        limit: Optional[str] = None,
    ) -> str:
        """
        Run a search submitted from a rendered search box.

        Returns the results fragment, or a ``Search failed: ...`` error
        block.
        """
        settings = self._settings()
        renderer = EmbedRenderer(settings)
        try:
            descriptor = parse_search_query(query, search_type, limit, settings)
            payload = self._client.fetch(descriptor)
            return renderer.render_search_results(payload, descriptor)
        except SpotifyError as e:
            logger.info("Spotify search for %r failed: %s", query, e)
            return renderer.render_error(f"Search failed: {e}")
        except Exception as e:
            logger.exception("Unexpected error running Spotify search")
            return renderer.render_error(str(e) or e.__class__.__name__)

    def process_inline_links(self, html: str) -> str:
        """
        Replace every ``<a href="spotify:type:id">`` in an HTML fragment.

        Markdown links of the form ``[label](spotify:type:id)`` are
        replaced the same way.

        Each link becomes an inline container, or an error block if it
        cannot be parsed or fetched. Other links are left untouched.
        """
        renderer = EmbedRenderer(self._settings())

        def replace(match: "re.Match[str]") -> str:
            href = match.group("href")
            try:
                descriptor = parse_inline_link(href)
                payload = self._client.fetch(descriptor)
                return renderer.render_inline(payload, descriptor)
            except SpotifyError as e:
                logger.info("Inline Spotify link %s failed: %s", href, e)
                return renderer.render_error(str(e))
            except Exception as e:
                logger.exception("Unexpected error rendering inline link %s", href)
                return renderer.render_error(str(e) or e.__class__.__name__)

        html = _INLINE_LINK_PATTERN.sub(replace, html or "")
        return _MARKDOWN_LINK_PATTERN.sub(replace, html)

    def render_markdown_blocks(self, markdown_text: str) -> str:
        """Replace fenced ``spotify`` / ``spotify-search`` blocks with HTML."""

        def replace(match: "re.Match[str]") -> str:
            body = match.group("body")
            if match.group("kind") == BlockKind.SPOTIFY_SEARCH:
                return self.process_search_block(body)
            return self.process_code_block(body)

        return _FENCED_BLOCK_PATTERN.sub(replace, markdown_text or "")

    def render_document(self, markdown_text: str) -> str:
        """Render fenced blocks, then inline links, in one pass each."""
        return self.process_inline_links(self.render_markdown_blocks(markdown_text))

    def _settings(self) -> EmbedSettings:
        try:
            return self._settings_provider()
        except Exception as e:
            logger.warning("Could not load settings, using defaults: %s", e)
            return EmbedSettings()
