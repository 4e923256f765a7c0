import logging
import os
import sys

PACKAGE_LOGGER_NAME = "shortspipeline"

# Module -> pipeline stage, as reported on PipelineError.stage
MODULE_STAGES = {
    "CandidateFetcher": "fetch",
    "StockFootage": "fetch",
    "SegmentDownloader": "download",
    "ClipTrimmer": "trim",
    "Scheduler": "schedule",
    "Concatenator": "concat",
    "VideoIO": "ffmpeg",
    "Narration": "input",
    "KeywordQueue": "input",
    "config": "config",
}


class StageFilter(logging.Filter):
    """Adds a `stage` attribute to every record, derived from the emitting module."""

    def filter(self, record: logging.LogRecord) -> bool:
        module = record.name.rsplit(".", 1)[-1]
        record.stage = MODULE_STAGES.get(module, "pipeline")
        return True


def setup_logging(run_output_dir: str, log_filename: str = "pipeline.log") -> logging.Logger:
    """
    Configures logging for the whole package.

    - INFO and above go to the console.
    - DEBUG and above go to `log_filename` in the run directory, each line
      tagged with the stage that emitted it so a failed run can be grepped
      per stage.

    Returns:
        logging.Logger: The package root logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    # Repeated runs in one process must not stack handlers or leak open files
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    logger.addHandler(console_handler)

    log_file_path = os.path.join(run_output_dir, log_filename)
    try:
        os.makedirs(run_output_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file_path, encoding='utf-8')
    except OSError as e:
        logger.error(f"Failed to set up file logging to {log_file_path}: {e}")
        logger.info("Proceeding without file logging. All logs will go to console.")
        return logger

    file_handler.setLevel(logging.DEBUG)
    file_handler.addFilter(StageFilter())
    file_handler.setFormatter(logging.Formatter('%(asctime)s - [%(stage)s] %(name)s - %(levelname)s - %(message)s'))
    logger.addHandler(file_handler)
    logger.info(f"Logging initialized. Detailed log file at: {log_file_path}")
    return logger
