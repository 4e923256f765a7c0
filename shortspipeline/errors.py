"""
Exception taxonomy for the background-track pipeline.

Every error carries the `stage` it was raised in so a fatal failure can be
reported with enough context to re-run the pipeline by hand.

Per-keyword, per-segment and per-clip errors (FetchError, NoSuitableRendition,
DownloadError, TranscodeError during trim) are caught by the stage that raises
them and the item is dropped. Timeline and concatenation errors propagate.
"""
from typing import Optional


class PipelineError(Exception):
    """Base class for all pipeline failures."""

    stage: str = "pipeline"

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        if stage is not None:
            self.stage = stage


class ConfigError(PipelineError, ValueError):
    """Invalid or missing configuration value."""

    stage = "config"


class FetchError(PipelineError):
    """The stock-footage search failed for one keyword."""

    stage = "fetch"

    def __init__(self, message: str, keyword=None):
        super().__init__(message)
        self.keyword = keyword


class NoSuitableRendition(PipelineError):
    """A candidate has no rendition wide enough to download."""

    stage = "download"

    def __init__(self, message: str, candidate=None):
        super().__init__(message)
        self.candidate = candidate


class DownloadError(PipelineError):
    """Retrieving a candidate's bytes failed."""

    stage = "download"

    def __init__(self, message: str, candidate=None):
        super().__init__(message)
        self.candidate = candidate


class TranscodeError(PipelineError):
    """ffmpeg failed. Non-fatal during trim, fatal during concat."""

    stage = "transcode"


class ManifestError(PipelineError):
    """The concat manifest could not be written or references missing clips."""

    stage = "concat"


class InsufficientCoverage(PipelineError):
    """No clip survived to be scheduled, so the Timeline would be empty."""

    stage = "schedule"
