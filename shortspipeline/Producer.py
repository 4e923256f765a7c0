"""
End-to-end production of the background track.

Stages:
1.  Fetch stock-footage candidates for every keyword (concurrent).
2.  Download the chosen rendition of every candidate (concurrent).
3.  Trim and normalize the downloads (sequential, keyword order).
4.  Assemble the Timeline against the narration length.
5.  Concatenate the Timeline with stream copy.
"""
import logging
import math
import random
from typing import Any, Dict, Optional, Sequence, Tuple

import httpx

from . import CandidateFetcher, ClipTrimmer, Concatenator, Scheduler, SegmentDownloader
from .KeywordQueue import load_keywords
from .models import Keyword, Timeline
from .Narration import get_narration_duration
from .StockFootage import PexelsVideoSearch, open_download_client
from .utils import log_run_summary
from .Workspace import RunWorkspace

logger = logging.getLogger(__name__)


def produce_background_video(
    keywords: Sequence[Keyword],
    target_duration: float,
    workspace: RunWorkspace,
    config: Dict[str, Any],
    search: Any,
    http_client: httpx.Client,
    rng: Optional[random.Random] = None,
) -> Tuple[str, Timeline]:
    """
    Runs every stage for an already-prepared workspace.

    Args:
        keywords (Sequence[Keyword]): Keywords in script order.
        target_duration (float): Seconds the background track must cover.
        workspace (RunWorkspace): Where downloads, clips and the output go.
        config (Dict[str, Any]): Run configuration.
        search: The stock-footage search capability.
        http_client (httpx.Client): Client used to download renditions.
        rng (Optional[random.Random]): Trim-length source; built from RANDOM_SEED if omitted.

    Returns:
        Tuple[str, Timeline]: The output video path and the Timeline it was built from.

    Raises:
        InsufficientCoverage: If no clip survives to be scheduled.
        ManifestError, TranscodeError: If the final join fails.
    """
    rng = rng if rng is not None else ClipTrimmer.make_rng(config)

    logger.info("--- STAGE 1: Fetching Candidates ---")
    candidates = CandidateFetcher.fetch_candidates(keywords, search, config)

    logger.info("--- STAGE 2: Downloading Segments ---")
    downloads = SegmentDownloader.download_segments(candidates, workspace.samples_dir, http_client, config)

    logger.info("--- STAGE 3: Trimming Clips ---")
    clips = ClipTrimmer.trim_segments(downloads, workspace.trimmed_dir, config, rng, target_duration=target_duration)

    logger.info("--- STAGE 4: Assembling Timeline ---")
    timeline = Scheduler.assemble(clips, target_duration)
    log_run_summary(workspace.run_dir, config, timeline.to_summary())

    logger.info("--- STAGE 5: Concatenating Background Track ---")
    output_path = Concatenator.build(timeline, workspace.manifest_path, workspace.output_path, config)
    return output_path, timeline


def run_pipeline(
    config: Dict[str, Any],
    workspace: RunWorkspace,
    keywords_path: str,
    narration_path: Optional[str] = None,
    target_duration: Optional[float] = None,
    search: Any = None,
    http_client: Optional[httpx.Client] = None,
) -> Tuple[str, Timeline]:
    """
    Loads the run's inputs, opens the network clients and produces the track.

    Either `target_duration` or `narration_path` must be given; an explicit
    duration wins. Clients passed in are left open for the caller to close.
    """
    keywords = load_keywords(keywords_path)
    if target_duration is None:
        if not narration_path:
            raise ValueError("Either a narration file or an explicit target duration is required.")
        target_duration = get_narration_duration(narration_path)
    if not math.isfinite(target_duration) or target_duration <= 0:
        raise ValueError(f"Target duration must be a positive number of seconds, got {target_duration!r}")

    owns_search = search is None
    owns_client = http_client is None
    search = search if search is not None else PexelsVideoSearch.from_config(config)
    try:
        http_client = http_client if http_client is not None else open_download_client(config)
        try:
            with workspace:
                return produce_background_video(keywords, target_duration, workspace, config, search, http_client)
        finally:
            if owns_client:
                http_client.close()
    finally:
        if owns_search:
            search.close()
