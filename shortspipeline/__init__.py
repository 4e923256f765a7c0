# shortspipeline/__init__.py

"""
This file initializes the 'shortspipeline' package.

It builds the stock-footage background track of a narrated short: keywords
from the script are searched, matching footage is downloaded, trimmed to short
clips, scheduled against the narration length and joined with stream copy.

The key functions and classes are re-exported here so callers can simply
`import shortspipeline` instead of knowing the module layout.
"""

# --- Configuration and Errors ---
from .config import DEFAULT_CONFIG, load_config
from .errors import (
    PipelineError,
    ConfigError,
    FetchError,
    NoSuitableRendition,
    DownloadError,
    TranscodeError,
    ManifestError,
    InsufficientCoverage,
)

# --- Data Model ---
from .models import Keyword, Rendition, CandidateSegment, DownloadedSegment, TrimmedClip, Timeline

# --- Utilities ---
from .LoggerSetup import setup_logging
from .utils import log_run_summary, redact_config

# --- Inputs ---
from .KeywordQueue import parse_keywords, load_keywords
from .Narration import get_narration_duration

# --- Stages ---
from .StockFootage import PexelsVideoSearch, parse_candidate, open_download_client
from .CandidateFetcher import fetch_candidates
from .SegmentDownloader import select_rendition, download_segment, download_segments
from .ClipTrimmer import draw_trim_duration, trim_segment, trim_segments, make_rng
from .Scheduler import assemble
from .Concatenator import write_manifest, build as build_background_video

# --- Orchestration ---
from .Workspace import RunWorkspace
from .Producer import produce_background_video, run_pipeline


__all__ = [
    # Config & errors
    "DEFAULT_CONFIG",
    "load_config",
    "PipelineError",
    "ConfigError",
    "FetchError",
    "NoSuitableRendition",
    "DownloadError",
    "TranscodeError",
    "ManifestError",
    "InsufficientCoverage",
    # Model
    "Keyword",
    "Rendition",
    "CandidateSegment",
    "DownloadedSegment",
    "TrimmedClip",
    "Timeline",
    # Utils
    "setup_logging",
    "log_run_summary",
    "redact_config",
    # Inputs
    "parse_keywords",
    "load_keywords",
    "get_narration_duration",
    # Stages
    "PexelsVideoSearch",
    "parse_candidate",
    "open_download_client",
    "fetch_candidates",
    "select_rendition",
    "download_segment",
    "download_segments",
    "draw_trim_duration",
    "trim_segment",
    "trim_segments",
    "make_rng",
    "assemble",
    "write_manifest",
    "build_background_video",
    # Orchestration
    "RunWorkspace",
    "produce_background_video",
    "run_pipeline",
]
