import logging
import os
from typing import Any, Dict, List, Optional

import ffmpeg

from .errors import ManifestError
from .models import Timeline
from .VideoIO import probe_video_signature, run_ffmpeg

logger = logging.getLogger(__name__)


def manifest_line(clip_path: str) -> str:
    """One concat-demuxer entry. Single quotes inside the path are escaped as '\\''."""
    escaped = os.path.abspath(clip_path).replace("'", "'\\''")
    return f"file '{escaped}'"


def write_manifest(timeline: Timeline, manifest_path: str) -> str:
    """
    Writes the Timeline's clip paths, in order, as an ffmpeg concat manifest.

    Raises:
        ManifestError: If the file cannot be written.
    """
    contents = "".join(manifest_line(path) + "\n" for path in timeline.clip_paths())
    try:
        manifest_dir = os.path.dirname(manifest_path)
        if manifest_dir:
            os.makedirs(manifest_dir, exist_ok=True)
        with open(manifest_path, 'w', encoding='utf-8', newline='\n') as f:
            f.write(contents)
    except OSError as e:
        raise ManifestError(f"Could not write concat manifest {manifest_path}: {e}") from e
    logger.debug(f"Concat manifest with {len(timeline.clips)} entries written to {manifest_path}")
    return manifest_path


def build_concat_stream(manifest_path: str, output_path: str):
    """Stream-copy join of every file listed in the manifest."""
    return (
        ffmpeg.input(manifest_path, format='concat', safe=0)
        .output(
            output_path,
            c='copy',
            movflags='+faststart',
            map_metadata=-1,
            fflags='+bitexact',
        )
        .overwrite_output()
    )


def check_uniform_clips(clip_paths: List[str]) -> bool:
    """
    Probes each distinct clip and warns if their codec parameters differ.

    Stream copy silently produces a broken file when they do, so a mismatch is
    worth a loud warning even though the join is still attempted.
    """
    signatures = {}
    for path in dict.fromkeys(clip_paths):
        signature = probe_video_signature(path)
        if signature:
            signatures[path] = signature
        else:
            logger.warning(f"Could not determine codec parameters for {path}, proceeding anyway")

    unique = set(signatures.values())
    if len(unique) > 1:
        logger.warning(f"⚠️  Codec parameter mismatch across clips: {sorted(unique)}")
        return False
    if unique:
        logger.info(f"✅ All clips share codec parameters: {unique.pop()}")
    return True


def build(timeline: Timeline, manifest_path: str, output_path: str, config: Optional[Dict[str, Any]] = None) -> str:
    """
    Joins the Timeline's clips into one continuous video without re-encoding.

    Args:
        timeline (Timeline): The scheduled clips. Must not be empty.
        manifest_path (str): Where to write the concat manifest.
        output_path (str): Where to write the joined video.
        config (Optional[Dict[str, Any]]): Run configuration ('VERIFY_CLIPS_BEFORE_CONCAT').

    Returns:
        str: `output_path`.

    Raises:
        ValueError: If the Timeline is empty.
        ManifestError: If a clip file is missing or the manifest cannot be written.
        TranscodeError: If ffmpeg fails.
    """
    if not timeline.clips:
        raise ValueError("Cannot concatenate an empty timeline.")

    clip_paths = timeline.clip_paths()
    missing = [p for p in clip_paths if not os.path.isfile(p)]
    if missing:
        raise ManifestError(f"{len(missing)} scheduled clip(s) are missing on disk: {', '.join(missing)}")

    if config is None or config.get("VERIFY_CLIPS_BEFORE_CONCAT", True):
        check_uniform_clips(clip_paths)

    write_manifest(timeline, manifest_path)

    output_dir = os.path.dirname(output_path)
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)

    logger.info(f"🎬 Concatenating {len(clip_paths)} clips ({timeline.total_duration:.2f}s) into {output_path} using stream copy...")
    run_ffmpeg(
        build_concat_stream(manifest_path, output_path),
        stage="concat",
        description="final concatenation",
    )
    logger.info(f"✅ Background video created successfully: {output_path}")
    return output_path
