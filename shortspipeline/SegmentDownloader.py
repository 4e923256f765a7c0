import logging
import os
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Dict, List, Mapping, Tuple

import httpx

from .errors import DownloadError, NoSuitableRendition
from .models import CandidateSegment, DownloadedSegment, Keyword, Rendition

logger = logging.getLogger(__name__)


def select_rendition(candidate: CandidateSegment, config: Dict[str, Any]) -> Rendition:
    """
    Picks the highest-quality rendition that is at least MIN_RENDITION_WIDTH wide.

    Quality is ranked by tier (QUALITY_TIER_RANK, unknown tiers lowest), then
    by width, then by height.

    Raises:
        NoSuitableRendition: If no rendition with a fetch URL is wide enough.
    """
    min_width: int = config["MIN_RENDITION_WIDTH"]
    tier_rank: Dict[str, int] = config["QUALITY_TIER_RANK"]

    eligible = [r for r in candidate.renditions if r.url and r.width >= min_width]
    if not eligible:
        raise NoSuitableRendition(
            f"No rendition of video {candidate.id} ('{candidate.keyword.term}') is at least {min_width}px wide.",
            candidate=candidate,
        )
    return max(eligible, key=lambda r: (tier_rank.get(r.quality or "", 0), r.width, r.height))


def segment_filename(candidate: CandidateSegment) -> str:
    # The keyword position keeps files distinct when one video matches two keywords
    return f"{candidate.source}_{candidate.keyword.position:03d}_{candidate.id}.mp4"


def _discard_partial(path: str) -> None:
    try:
        if os.path.exists(path):
            os.remove(path)
    except OSError as e:
        logger.warning(f"Could not remove partial download {path}: {e}")


def download_segment(
    candidate: CandidateSegment,
    dest_dir: str,
    http_client: httpx.Client,
    config: Dict[str, Any],
) -> DownloadedSegment:
    """
    Streams the chosen rendition of one candidate to local disk.

    Args:
        candidate (CandidateSegment): The candidate to retrieve.
        dest_dir (str): Directory for downloaded segments.
        http_client (httpx.Client): Client used for the transfer.
        config (Dict[str, Any]): Run configuration.

    Returns:
        DownloadedSegment: The candidate with its local path.

    Raises:
        NoSuitableRendition: If no rendition qualifies.
        DownloadError: On transport, HTTP or disk failure, or an empty body.
    """
    rendition = select_rendition(candidate, config)
    output_path = os.path.join(dest_dir, segment_filename(candidate))
    chunk_size: int = config["DOWNLOAD_CHUNK_SIZE"]

    try:
        with http_client.stream("GET", rendition.url) as response:
            response.raise_for_status()
            with open(output_path, "wb") as f:
                for chunk in response.iter_bytes(chunk_size):
                    f.write(chunk)
    except (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError, OSError) as e:
        _discard_partial(output_path)
        raise DownloadError(f"Failed to download video {candidate.id}: {e}", candidate=candidate) from e

    if os.path.getsize(output_path) == 0:
        _discard_partial(output_path)
        raise DownloadError(f"Download of video {candidate.id} produced an empty file.", candidate=candidate)

    logger.info(
        f"⬇️ Downloaded video: id={candidate.id}, keyword='{candidate.keyword.term}', "
        f"quality={rendition.quality}, width={rendition.width}, height={rendition.height}, fps={rendition.fps}"
    )
    return DownloadedSegment(candidate=candidate, rendition=rendition, path=output_path)


def download_segments(
    candidates_by_keyword: Mapping[Keyword, List[CandidateSegment]],
    dest_dir: str,
    http_client: httpx.Client,
    config: Dict[str, Any],
) -> Dict[Keyword, List[DownloadedSegment]]:
    """
    Downloads every candidate of every keyword concurrently.

    Failures are logged and the candidate is dropped; sibling downloads are
    unaffected. The result keeps keyword order and, within a keyword, the
    candidates' arrival order regardless of which transfer finishes first.

    Returns:
        Dict[Keyword, List[DownloadedSegment]]: Successful downloads per keyword.
    """
    os.makedirs(dest_dir, exist_ok=True)
    jobs: List[Tuple[Keyword, CandidateSegment]] = [
        (keyword, candidate) for keyword, candidates in candidates_by_keyword.items() for candidate in candidates
    ]
    results: Dict[Keyword, List[DownloadedSegment]] = {keyword: [] for keyword in candidates_by_keyword}
    if not jobs:
        logger.warning("No candidates to download.")
        return results

    logger.info(f"⬇️ Downloading {len(jobs)} candidate segments to {dest_dir}...")
    max_workers = min(int(config["MAX_CONCURRENT_REQUESTS"]), len(jobs))
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures: List[Future] = [
            executor.submit(download_segment, candidate, dest_dir, http_client, config) for _, candidate in jobs
        ]
        for (keyword, candidate), future in zip(jobs, futures):
            try:
                results[keyword].append(future.result())
            except (NoSuitableRendition, DownloadError) as e:
                logger.error(f"❌ Dropping video {candidate.id} ('{keyword.term}'): {e}")

    downloaded = sum(len(v) for v in results.values())
    logger.info(f"✅ Downloaded {downloaded}/{len(jobs)} segments.")
    return results
