# shortspipeline/config.py
import copy
import os
from typing import Any, Callable, Dict, Optional

from dotenv import load_dotenv

from .errors import ConfigError

# --- Static Configuration ---
# Every pipeline setting lives in this dictionary. Call `load_config()` once at
# start-up and pass the returned copy to each stage; nothing reads it globally.
DEFAULT_CONFIG: Dict[str, Any] = {
    # --- Input & Output ---
    "BASE_OUTPUT_DIR": "output",
    "KEYWORDS_FILENAME": "keywords.txt",
    "NARRATION_FILENAME": "narration.mp3",
    "BACKGROUND_VIDEO_FILENAME": "background_video.mp4",
    "SAMPLES_DIRNAME": "samples",
    "TRIMMED_CLIPS_DIRNAME": "trimmed_clips",
    "MANIFEST_FILENAME": "concat_list.txt",
    # Keep downloaded and trimmed footage after the run (False deletes them)
    "RETAIN_ASSETS_AFTER_RUN": True,

    # --- Stock Footage Search (Pexels) ---
    "PEXELS_API_KEY": None,
    "PEXELS_API_URL": "https://api.pexels.com/videos/search",
    "SEARCH_RESULTS_PER_KEYWORD": 3,
    "REQUIRED_QUALITY_TIER": "hd",
    "QUALITY_TIER_RANK": {"uhd": 3, "hd": 2, "sd": 1},
    "MIN_RENDITION_WIDTH": 1080,

    # --- Network ---
    "MAX_CONCURRENT_REQUESTS": 8,
    "HTTP_CONNECT_TIMEOUT_SEC": 30.0,
    "HTTP_READ_TIMEOUT_SEC": 120.0,
    "DOWNLOAD_CHUNK_SIZE": 1024 * 1024,

    # --- Trimming ---
    "MIN_SOURCE_DURATION_SEC": 3.0,  # sources at or below this are skipped
    "TRIM_MIN_SEC": 1.0,
    "TRIM_MAX_SEC": 3.0,  # exclusive
    "TRIM_ONLY_WHAT_IS_NEEDED": True,
    "RANDOM_SEED": None,

    # --- Clip Normalization (must be identical for every clip) ---
    "CLIP_WIDTH": 1920,
    "CLIP_HEIGHT": 1080,
    "CLIP_FPS": 23.976,
    "CLIP_PIX_FMT": "yuv420p",
    "CLIP_VCODEC": "libx264",
    "CLIP_PRESET": "slow",
    "CLIP_CRF": 22,

    # --- Concatenation ---
    "VERIFY_CLIPS_BEFORE_CONCAT": True,
}

# Environment variables that may override a default, with their parser.
ENV_OVERRIDES: Dict[str, Callable[[str], Any]] = {
    "PEXELS_API_KEY": str,
    "BASE_OUTPUT_DIR": str,
    "RANDOM_SEED": int,
}

SECRET_KEYS = {"PEXELS_API_KEY"}


def load_config(overrides: Optional[Dict[str, Any]] = None, dotenv_path: Optional[str] = ".env") -> Dict[str, Any]:
    """
    Builds the run configuration.

    Precedence, lowest first: DEFAULT_CONFIG, environment (after loading the
    .env file), then `overrides`. Overrides whose value is None are ignored so
    unset CLI flags do not clobber the environment.

    Args:
        overrides (Optional[Dict[str, Any]]): Explicit values, e.g. from the CLI.
        dotenv_path (Optional[str]): Path of the .env file to load, or None to skip it.

    Returns:
        Dict[str, Any]: A fresh, validated configuration dictionary.

    Raises:
        ConfigError: If a value is malformed or the bounds are inconsistent.
    """
    if dotenv_path:
        load_dotenv(dotenv_path=dotenv_path)

    config: Dict[str, Any] = copy.deepcopy(DEFAULT_CONFIG)

    for key, parse in ENV_OVERRIDES.items():
        raw = os.getenv(key)
        if raw is None or raw == "":
            continue
        try:
            config[key] = parse(raw)
        except ValueError as e:
            raise ConfigError(f"Environment variable {key}={raw!r} is invalid: {e}") from e

    if overrides:
        config.update({k: v for k, v in overrides.items() if v is not None})

    validate_config(config)
    return config


def validate_config(config: Dict[str, Any]) -> None:
    """Raises ConfigError when a setting would make the pipeline misbehave."""
    if not 0 < config["TRIM_MIN_SEC"] < config["TRIM_MAX_SEC"]:
        raise ConfigError(
            f"Trim bounds must satisfy 0 < TRIM_MIN_SEC < TRIM_MAX_SEC, "
            f"got [{config['TRIM_MIN_SEC']}, {config['TRIM_MAX_SEC']})"
        )
    if config["MIN_SOURCE_DURATION_SEC"] < 0:
        raise ConfigError("MIN_SOURCE_DURATION_SEC cannot be negative.")
    if int(config["SEARCH_RESULTS_PER_KEYWORD"]) < 1:
        raise ConfigError("SEARCH_RESULTS_PER_KEYWORD must be at least 1.")
    if int(config["MAX_CONCURRENT_REQUESTS"]) < 1:
        raise ConfigError("MAX_CONCURRENT_REQUESTS must be at least 1.")
    if config["CLIP_WIDTH"] % 2 or config["CLIP_HEIGHT"] % 2:
        # yuv420p needs even dimensions
        raise ConfigError("CLIP_WIDTH and CLIP_HEIGHT must be even.")
