# main.py
"""
Main entry point for building the stock-footage background track.

This script assumes the script-writing and narration stages have already
produced a keyword list and a narration audio file.

Workflow:
1.  Parses command-line arguments and builds the run configuration.
2.  Sets up a dedicated run directory and logging.
3.  Measures the narration to get the target duration.
4.  Fetches, downloads and trims stock footage for every keyword.
5.  Schedules the clips into a Timeline and joins them with stream copy.
"""

import argparse
import logging
import os
import random
import sys
import time
from typing import Optional

from shortspipeline import PipelineError, RunWorkspace, load_config, run_pipeline, setup_logging


def run_production(
    keywords_path: Optional[str],
    narration_path: Optional[str],
    target_duration: Optional[float],
    run_name: str,
    output_dir: Optional[str],
    seed: Optional[int],
    reclaim_assets: bool,
) -> int:
    """
    Executes the background-track pipeline and reports the outcome.

    Args:
        keywords_path: Keyword file; defaults to '<output dir>/keywords.txt'.
        narration_path: Narration audio; defaults to '<output dir>/narration.mp3'.
        target_duration: Explicit target in seconds; skips measuring the narration.
        run_name: Name of the run directory under '<output dir>/runs'.
        output_dir: Overrides BASE_OUTPUT_DIR.
        seed: Seed for the trim-length random source.
        reclaim_assets: Delete downloaded and trimmed footage after a successful run.

    Returns:
        int: Process exit status.
    """
    overrides = {
        "BASE_OUTPUT_DIR": output_dir,
        "RANDOM_SEED": seed,
        "RETAIN_ASSETS_AFTER_RUN": False if reclaim_assets else None,
    }
    try:
        config = load_config(overrides)
    except PipelineError as e:
        print(f"❌ [{e.stage}] {e}", file=sys.stderr)
        return 1
    if config["RANDOM_SEED"] is None:
        # Record a concrete seed so the run summary can reproduce the trim lengths
        config["RANDOM_SEED"] = random.randrange(2 ** 32)

    workspace = RunWorkspace(config, run_name)
    setup_logging(workspace.run_dir)
    logger = logging.getLogger('shortspipeline.main')

    keywords_path = keywords_path or os.path.join(config["BASE_OUTPUT_DIR"], config["KEYWORDS_FILENAME"])
    if target_duration is None:
        narration_path = narration_path or os.path.join(config["BASE_OUTPUT_DIR"], config["NARRATION_FILENAME"])

    logger.info("--- BACKGROUND TRACK PRODUCTION ---")
    logger.info(f"Run:       {run_name}")
    logger.info(f"Keywords:  {keywords_path}")
    logger.info(f"Narration: {narration_path if target_duration is None else f'(explicit {target_duration:.2f}s)'}")
    logger.info(f"Seed:      {config['RANDOM_SEED']}")
    logger.info("-----------------------------------")

    try:
        output_path, timeline = run_pipeline(
            config,
            workspace,
            keywords_path,
            narration_path=narration_path,
            target_duration=target_duration,
        )
    except PipelineError as e:
        cause = f" (caused by {type(e.__cause__).__name__}: {e.__cause__})" if e.__cause__ else ""
        logger.critical(f"❌ Pipeline failed at stage '{e.stage}': {e}{cause}")
        logger.critical(f"Intermediate files were kept in {workspace.run_dir} for inspection.")
        return 1
    except OSError as e:
        logger.critical(f"❌ Could not read the run's inputs: {e}")
        return 1
    except ValueError as e:
        logger.critical(f"❌ Invalid run inputs: {e}")
        return 1

    logger.info("🎉🎉🎉 BACKGROUND TRACK COMPLETE! 🎉🎉🎉")
    logger.info(f"Final video available at: {output_path}")
    if not timeline.is_covered:
        logger.warning(f"The track is {timeline.shortfall:.2f}s shorter than the narration.")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Build a stock-footage background track that covers a narration.",
        formatter_class=argparse.RawTextHelpFormatter
    )
    parser.add_argument(
        "--keywords",
        type=str,
        help="Newline-separated keyword file. Defaults to '<output dir>/keywords.txt'."
    )
    parser.add_argument(
        "--narration",
        type=str,
        help="Narration audio whose length is the target. Defaults to '<output dir>/narration.mp3'."
    )
    parser.add_argument(
        "--target-duration",
        type=float,
        help="Target length in seconds. Overrides --narration."
    )
    parser.add_argument(
        "--run-name",
        type=str,
        default=f"run_{int(time.time())}",
        help="A unique name for this run. Defaults to a timestamp."
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        help="Base output directory (BASE_OUTPUT_DIR). Defaults to 'output'."
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Seed for the random trim lengths, for reproducible runs."
    )
    parser.add_argument(
        "--reclaim-assets",
        action="store_true",
        help="Delete downloaded and trimmed footage after a successful run."
    )
    args = parser.parse_args()

    start_time = time.time()
    status = run_production(
        keywords_path=args.keywords,
        narration_path=args.narration,
        target_duration=args.target_duration,
        run_name=args.run_name,
        output_dir=args.output_dir,
        seed=args.seed,
        reclaim_assets=args.reclaim_assets,
    )
    end_time = time.time()

    logging.getLogger('shortspipeline').info(f"Total execution time: {end_time - start_time:.2f} seconds.")
    sys.exit(status)
