import logging
import os

from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError

from .VideoIO import probe_duration

logger = logging.getLogger(__name__)


def get_narration_duration(audio_path: str) -> float:
    """
    Measures the narration audio, which sets the background track's target length.

    Args:
        audio_path (str): Path to the synthesized narration (e.g. 'narration.mp3').

    Returns:
        float: Length in seconds.

    Raises:
        FileNotFoundError: If the audio file does not exist.
        ValueError: If no duration can be read from it.
    """
    if not os.path.exists(audio_path):
        raise FileNotFoundError(f"Narration audio not found at {audio_path}")

    try:
        duration = AudioSegment.from_file(audio_path).duration_seconds
    except (CouldntDecodeError, OSError, IndexError) as e:
        logger.warning(f"pydub could not decode {audio_path} ({e}); falling back to ffprobe.")
        duration = probe_duration(audio_path)

    if not duration or duration <= 0:
        raise ValueError(f"Could not determine a positive duration for {audio_path}")

    logger.info(f"🎙️ Narration length: {duration:.2f}s")
    return float(duration)
