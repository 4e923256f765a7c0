import logging
import math
from typing import List, Mapping

from .errors import InsufficientCoverage
from .models import Keyword, Timeline, TrimmedClip

logger = logging.getLogger(__name__)


def assemble(clips_by_keyword: Mapping[Keyword, List[TrimmedClip]], target_duration: float) -> Timeline:
    """
    Sequences trimmed clips into a Timeline that covers `target_duration`.

    Keywords are visited in script order and each keyword's clips in arrival
    order. Every clip is appended and its duration added to a running total;
    the walk stops as soon as the total reaches the target, possibly in the
    middle of a keyword. Clips are never repeated or reordered to fill a gap.

    Args:
        clips_by_keyword (Mapping[Keyword, List[TrimmedClip]]): Surviving clips per keyword.
        target_duration (float): Seconds to cover, usually the narration length.

    Returns:
        Timeline: The scheduled clips. If the whole pool is shorter than the
                  target, the Timeline holds the whole pool and is returned as is.

    Raises:
        ValueError: If `target_duration` is not a positive finite number.
        InsufficientCoverage: If there is no clip to schedule.
    """
    if not math.isfinite(target_duration) or target_duration <= 0:
        raise ValueError(f"Target duration must be a positive number of seconds, got {target_duration!r}")

    timeline = Timeline(target_duration=target_duration)
    running_total = 0.0

    for keyword in sorted(clips_by_keyword, key=lambda k: k.position):
        for clip in clips_by_keyword[keyword]:
            timeline.clips.append(clip)
            running_total += clip.duration
            logger.debug(f"Using clip {clip.segment_id} ('{keyword.term}', {clip.duration:.2f}s) (Total: {running_total:.2f}s)")
            if running_total >= target_duration:
                break
        if running_total >= target_duration:
            break

    if not timeline.clips:
        raise InsufficientCoverage("No trimmed clips are available to build the background track.")

    if running_total < target_duration:
        logger.warning(
            f"⚠️  Clip pool exhausted: timeline covers {running_total:.2f}s of {target_duration:.2f}s "
            f"({target_duration - running_total:.2f}s short)."
        )
    else:
        logger.info(
            f"🗓️ Scheduled {len(timeline.clips)} clips covering {running_total:.2f}s "
            f"(target {target_duration:.2f}s, overshoot {running_total - target_duration:.2f}s)."
        )
    return timeline
