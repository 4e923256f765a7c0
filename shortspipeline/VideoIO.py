import logging
from typing import Any, Dict, Optional, Tuple

import ffmpeg

from .errors import TranscodeError

logger = logging.getLogger(__name__)

# (codec, width, height, pix_fmt, frame rate) of a clip's first video stream
VideoSignature = Tuple[str, int, int, str, str]


def run_ffmpeg(stream: Any, stage: str, description: str) -> None:
    """
    Runs a compiled ffmpeg-python stream and translates failures.

    Args:
        stream: An ffmpeg-python output stream (already `.overwrite_output()`-ed if needed).
        stage (str): The pipeline stage, recorded on the raised error ('trim' or 'concat').
        description (str): Human-readable context used in log and error messages.

    Raises:
        TranscodeError: If ffmpeg exits non-zero or the binary cannot be started.
    """
    logger.debug(f"ffmpeg ({description}): {' '.join(ffmpeg.compile(stream))}")
    try:
        stream.run(capture_stdout=True, capture_stderr=True)
    except ffmpeg.Error as e:
        stderr_info = (e.stderr or b"").decode('utf8', errors='ignore').strip().replace('\n', '\n   ')
        raise TranscodeError(f"FFMPEG ERROR during {description}: {stderr_info}", stage=stage) from e
    except OSError as e:
        # Typically the ffmpeg executable is not on PATH
        raise TranscodeError(f"Could not start ffmpeg for {description}: {e}", stage=stage) from e


def probe_duration(media_path: str) -> Optional[float]:
    """
    Reads a media file's container duration with ffprobe.

    Args:
        media_path (str): Path to an audio or video file.

    Returns:
        Optional[float]: Duration in seconds, or None if the probe fails.
    """
    try:
        probe: Dict[str, Any] = ffmpeg.probe(media_path)
        duration = probe.get('format', {}).get('duration')
        if duration is not None:
            return float(duration)
        stream_durations = [float(s['duration']) for s in probe.get('streams', []) if s.get('duration')]
        return max(stream_durations) if stream_durations else None
    except (ffmpeg.Error, OSError, ValueError) as e:
        logger.warning(f"Could not probe duration for {media_path}: {e}")
    return None


def probe_video_signature(video_path: str) -> Optional[VideoSignature]:
    """
    Gets the parameters that must match across clips for a stream-copy join.

    Args:
        video_path (str): Path to the video file.

    Returns:
        Optional[VideoSignature]: (codec, width, height, pix_fmt, r_frame_rate),
                                  or None if the probe fails or there is no video stream.
    """
    try:
        probe = ffmpeg.probe(video_path)
        video_stream = next((s for s in probe['streams'] if s['codec_type'] == 'video'), None)
        if video_stream:
            return (
                video_stream.get('codec_name', ''),
                int(video_stream['width']),
                int(video_stream['height']),
                video_stream.get('pix_fmt', ''),
                video_stream.get('r_frame_rate', ''),
            )
    except (ffmpeg.Error, OSError, KeyError, ValueError) as e:
        logger.warning(f"Could not probe video parameters for {video_path}: {e}")
    return None
