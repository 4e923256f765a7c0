"""
Client for the external stock-footage search capability (Pexels videos API).

The search request is keyed by a query and a result-count cap; each result is
a video with an id, a native duration and a list of `video_files`
(renditions). `parse_candidate` maps one result onto the pipeline's
CandidateSegment.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from .errors import ConfigError
from .models import CandidateSegment, Keyword, Rendition

logger = logging.getLogger(__name__)


def build_http_timeout(config: Dict[str, Any]) -> httpx.Timeout:
    """Connect/read timeouts for every HTTP call the pipeline makes."""
    return httpx.Timeout(
        config["HTTP_READ_TIMEOUT_SEC"],
        connect=config["HTTP_CONNECT_TIMEOUT_SEC"],
    )


def open_download_client(config: Dict[str, Any], transport: Optional[httpx.BaseTransport] = None) -> httpx.Client:
    """
    Creates the client used to fetch rendition bytes.

    It carries no API credentials: rendition links point at a CDN.
    """
    return httpx.Client(
        timeout=build_http_timeout(config),
        follow_redirects=True,
        transport=transport,
    )


class PexelsVideoSearch:
    """Thin wrapper over the Pexels `/videos/search` endpoint."""

    def __init__(
        self,
        api_key: Optional[str],
        api_url: str = "https://api.pexels.com/videos/search",
        timeout: Optional[httpx.Timeout] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        if not api_key:
            raise ConfigError("PEXELS_API_KEY not found in environment variables.")
        self.api_url = api_url
        self._client = httpx.Client(
            headers={"Authorization": api_key},
            timeout=timeout or httpx.Timeout(30.0),
            transport=transport,
        )

    @classmethod
    def from_config(cls, config: Dict[str, Any], transport: Optional[httpx.BaseTransport] = None) -> "PexelsVideoSearch":
        return cls(
            api_key=config.get("PEXELS_API_KEY"),
            api_url=config["PEXELS_API_URL"],
            timeout=build_http_timeout(config),
            transport=transport,
        )

    def search(self, query: str, per_page: int) -> List[Dict[str, Any]]:
        """
        Runs one search.

        Args:
            query (str): The keyword to search for.
            per_page (int): Maximum number of results to return.

        Returns:
            List[Dict[str, Any]]: Raw video results in the order the API ranked them.

        Raises:
            httpx.HTTPError: On transport failures or a non-2xx response.
            ValueError: If the response body is not JSON.
        """
        response = self._client.get(self.api_url, params={"query": query, "per_page": per_page})
        response.raise_for_status()
        body = response.json()
        if not isinstance(body, dict):
            raise ValueError(f"Expected a JSON object from the search API, got {type(body).__name__}")
        videos = body.get("videos") or []
        if not isinstance(videos, list):
            raise ValueError(f"Expected 'videos' to be a list, got {type(videos).__name__}")
        logger.debug(f"Pexels returned {len(videos)} results for '{query}'.")
        return videos

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "PexelsVideoSearch":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def parse_rendition(video_file: Dict[str, Any]) -> Rendition:
    fps = video_file.get("fps")
    return Rendition(
        quality=video_file.get("quality"),
        width=int(video_file.get("width") or 0),
        height=int(video_file.get("height") or 0),
        fps=float(fps) if fps is not None else None,
        url=video_file.get("link") or "",
        file_type=video_file.get("file_type"),
    )


def parse_candidate(raw: Dict[str, Any], keyword: Keyword, source: str = "pexels") -> CandidateSegment:
    """
    Converts one raw search result into a CandidateSegment.

    Raises:
        KeyError, TypeError, ValueError: If the result is missing its id or duration.
    """
    return CandidateSegment(
        id=raw["id"],
        keyword=keyword,
        duration=float(raw["duration"]),
        renditions=tuple(parse_rendition(f) for f in raw.get("video_files") or []),
        source=source,
    )
