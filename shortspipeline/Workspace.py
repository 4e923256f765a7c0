import logging
import os
import shutil
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


class RunWorkspace:
    """
    Owns the local files of one pipeline run.

    Layout under BASE_OUTPUT_DIR:
        background_video.mp4          fixed output, read by the mixing/caption stages
        runs/<run_name>/samples/      downloaded renditions
        runs/<run_name>/trimmed_clips/
        runs/<run_name>/concat_list.txt, pipeline.log, run_summary.json

    `reclaim()` applies RETAIN_ASSETS_AFTER_RUN. The default keeps all footage;
    turning it off deletes the samples and trimmed clips but never the output.
    """

    def __init__(self, config: Dict[str, Any], run_name: str):
        self.base_dir: str = os.path.abspath(config["BASE_OUTPUT_DIR"])
        self.run_name = run_name
        self.run_dir: str = os.path.join(self.base_dir, "runs", run_name)
        self.samples_dir: str = os.path.join(self.run_dir, config["SAMPLES_DIRNAME"])
        self.trimmed_dir: str = os.path.join(self.run_dir, config["TRIMMED_CLIPS_DIRNAME"])
        self.manifest_path: str = os.path.join(self.run_dir, config["MANIFEST_FILENAME"])
        self.output_path: str = os.path.join(self.base_dir, config["BACKGROUND_VIDEO_FILENAME"])
        self.retain_assets: bool = bool(config["RETAIN_ASSETS_AFTER_RUN"])

    def prepare(self) -> "RunWorkspace":
        for directory in (self.base_dir, self.run_dir, self.samples_dir, self.trimmed_dir):
            os.makedirs(directory, exist_ok=True)
        logger.debug(f"Workspace ready at {self.run_dir}")
        return self

    def reclaim(self) -> List[str]:
        """
        Applies the retention policy.

        Returns:
            List[str]: Directories that were removed (empty when assets are retained).
        """
        if self.retain_assets:
            logger.info(f"Retaining downloaded and trimmed footage in {self.run_dir}")
            return []

        removed = []
        for directory in (self.samples_dir, self.trimmed_dir):
            if os.path.isdir(directory):
                shutil.rmtree(directory)
                removed.append(directory)
        logger.info(f"🧹 Reclaimed {len(removed)} asset directories from {self.run_dir}")
        return removed

    def __enter__(self) -> "RunWorkspace":
        return self.prepare()

    def __exit__(self, exc_type, exc, tb) -> None:
        # Nothing is deleted after a failure, so the run can be inspected and re-invoked
        if exc_type is None:
            self.reclaim()
