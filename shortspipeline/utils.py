import json
import logging
import os
from typing import Any, Dict, Iterable, Optional

from .config import SECRET_KEYS

logger = logging.getLogger(__name__)


def redact_config(config: Dict[str, Any], secret_keys: Iterable[str] = SECRET_KEYS) -> Dict[str, Any]:
    """
    Returns a shallow copy of `config` with secret values masked.

    Args:
        config (Dict[str, Any]): The run configuration.
        secret_keys (Iterable[str]): Keys whose values must not be written to disk.

    Returns:
        Dict[str, Any]: The configuration safe to log or save.
    """
    secrets = set(secret_keys)
    return {
        key: ("***" if key in secrets and value else value)
        for key, value in config.items()
    }


def log_run_summary(run_output_dir: str, config: Dict[str, Any], timeline_summary: Optional[Dict[str, Any]]) -> Optional[str]:
    """
    Saves a JSON summary of the run's configuration and resulting Timeline.

    The summary is meant for reproducing a run by hand: it records the seed,
    the trim bounds and the exact clip order that was concatenated.

    Args:
        run_output_dir (str): The run directory. 'run_summary.json' is saved here.
        config (Dict[str, Any]): The configuration used for the run. Secrets are redacted.
        timeline_summary (Optional[Dict[str, Any]]): Output of `Timeline.to_summary()`.

    Returns:
        Optional[str]: The path of the summary file, or None if it could not be written.
    """
    summary: Dict[str, Any] = {
        "run_configuration": redact_config(config),
        "timeline": timeline_summary,
    }
    summary_path: str = os.path.join(run_output_dir, "run_summary.json")
    try:
        os.makedirs(run_output_dir, exist_ok=True)
        with open(summary_path, 'w', encoding='utf-8') as f:
            json.dump(summary, f, indent=4, default=lambda o: list(o) if isinstance(o, set) else str(o))
        logger.info(f"📋 Run summary saved to {summary_path}")
        return summary_path
    except OSError as e:
        logger.error(f"❌ Could not save run summary to {summary_path}: {e}", exc_info=True)
        return None
