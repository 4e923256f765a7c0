import logging
import math
import os
import random
from typing import Any, Dict, List, Mapping, Optional

import ffmpeg

from .errors import TranscodeError
from .models import DownloadedSegment, Keyword, TrimmedClip
from .VideoIO import run_ffmpeg

logger = logging.getLogger(__name__)


def make_rng(config: Dict[str, Any]) -> random.Random:
    """The run's random source, seeded from RANDOM_SEED when one is configured."""
    return random.Random(config.get("RANDOM_SEED"))


def draw_trim_duration(rng: random.Random, min_sec: float, max_sec: float) -> float:
    """
    Draws a trim length uniformly from [min_sec, max_sec).

    The value is truncated to centiseconds (the precision passed to ffmpeg),
    never rounded up, so it stays strictly below `max_sec`.
    """
    value = min_sec + rng.random() * (max_sec - min_sec)
    return max(min_sec, math.floor(value * 100) / 100)


def trimmed_filename(segment: DownloadedSegment) -> str:
    return f"trimmed_{segment.keyword.position:03d}_{segment.id}.mp4"


def build_trim_stream(source_path: str, output_path: str, duration: float, config: Dict[str, Any]):
    """
    Builds the ffmpeg command that cuts the leading `duration` seconds and
    normalizes the clip.

    Every clip leaves with the same resolution, sample aspect, frame rate,
    pixel format and codec settings, and without audio, so the final join can
    stream-copy.
    """
    width, height = config["CLIP_WIDTH"], config["CLIP_HEIGHT"]
    video = (
        ffmpeg.input(source_path)
        .video
        .filter('scale', width, height, force_original_aspect_ratio='decrease')
        .filter('pad', width, height, '(ow-iw)/2', '(oh-ih)/2', color='black')
        .filter('setsar', 1)
        .filter('fps', fps=config["CLIP_FPS"])
        .filter('format', config["CLIP_PIX_FMT"])
    )
    return (
        ffmpeg.output(
            video,
            output_path,
            t=f"{duration:.2f}",
            vcodec=config["CLIP_VCODEC"],
            preset=config["CLIP_PRESET"],
            crf=config["CLIP_CRF"],
            an=None,
        )
        .overwrite_output()
    )


def trim_segment(
    segment: DownloadedSegment,
    output_dir: str,
    config: Dict[str, Any],
    rng: random.Random,
) -> Optional[TrimmedClip]:
    """
    Cuts a downloaded segment to a short randomized length.

    Segments with a native duration at or below MIN_SOURCE_DURATION_SEC are
    skipped. The trim length does not depend on the native duration.

    Args:
        segment (DownloadedSegment): The downloaded source.
        output_dir (str): Directory for trimmed clips.
        config (Dict[str, Any]): Run configuration.
        rng (random.Random): Source of the trim length.

    Returns:
        Optional[TrimmedClip]: The clip, or None if the segment was skipped or
                               ffmpeg failed.
    """
    if segment.duration <= config["MIN_SOURCE_DURATION_SEC"]:
        logger.info(f"Skipping video {segment.id} as its duration is <= {config['MIN_SOURCE_DURATION_SEC']} seconds")
        return None

    duration = draw_trim_duration(rng, config["TRIM_MIN_SEC"], config["TRIM_MAX_SEC"])
    output_path = os.path.join(output_dir, trimmed_filename(segment))

    try:
        run_ffmpeg(
            build_trim_stream(segment.path, output_path, duration, config),
            stage="trim",
            description=f"trim of video {segment.id}",
        )
    except TranscodeError as e:
        logger.error(f"❌ Failed to create {duration:.2f}s clip for {segment.id}: {e}")
        return None

    logger.info(f"✂️ Created {duration:.2f}s clip for {segment.id} ('{segment.keyword.term}')")
    return TrimmedClip(segment_id=segment.id, path=output_path, duration=duration, keyword=segment.keyword)


def trim_segments(
    downloads_by_keyword: Mapping[Keyword, List[DownloadedSegment]],
    output_dir: str,
    config: Dict[str, Any],
    rng: random.Random,
    target_duration: Optional[float] = None,
) -> Dict[Keyword, List[TrimmedClip]]:
    """
    Trims segments one at a time in keyword order, then arrival order.

    When TRIM_ONLY_WHAT_IS_NEEDED is set and `target_duration` is given,
    trimming stops as soon as the trimmed total reaches the target; the clips
    that would have followed can never be scheduled.

    Returns:
        Dict[Keyword, List[TrimmedClip]]: Surviving clips per keyword, in keyword order.
    """
    os.makedirs(output_dir, exist_ok=True)
    stop_at: Optional[float] = target_duration if config.get("TRIM_ONLY_WHAT_IS_NEEDED") else None

    clips_by_keyword: Dict[Keyword, List[TrimmedClip]] = {keyword: [] for keyword in downloads_by_keyword}
    trimmed_total = 0.0
    for keyword in sorted(downloads_by_keyword, key=lambda k: k.position):
        for segment in downloads_by_keyword[keyword]:
            if stop_at is not None and trimmed_total >= stop_at:
                break
            clip = trim_segment(segment, output_dir, config, rng)
            if clip is not None:
                clips_by_keyword[keyword].append(clip)
                trimmed_total += clip.duration

    count = sum(len(c) for c in clips_by_keyword.values())
    logger.info(f"✅ Trimmed {count} clips totalling {trimmed_total:.2f}s.")
    return clips_by_keyword
