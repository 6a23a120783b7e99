"""
Batch orchestration for rectification jobs.

Each job turns one input file into one WebP output. Jobs share nothing but
the (read-only) processor configuration, so they run on a thread pool in any
order. A failing job is logged and counted; the others carry on.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from src.rectification.processor import RectificationProcessor
from src.utils.constants import DEFAULT_WEBP_QUALITY, EXIT_FAILURE, EXIT_SUCCESS
from src.utils.io import load_image, save_webp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Job:
    """One input image and the file its rectified version is written to."""

    input_path: Path
    output_path: Path


@dataclass
class JobOutcome:
    """Result of running a single job."""

    job: Job
    error: Optional[Exception] = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass
class BatchReport:
    """Aggregated outcomes of a batch run, in completion order."""

    outcomes: List[JobOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.success)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if not o.success)

    @property
    def failures(self) -> List[JobOutcome]:
        return [o for o in self.outcomes if not o.success]

    @property
    def exit_code(self) -> int:
        return EXIT_FAILURE if self.failed else EXIT_SUCCESS


def run_job(
    job: Job,
    processor: RectificationProcessor,
    quality: int = DEFAULT_WEBP_QUALITY,
) -> None:
    """
    Load, rectify and write one image.

    Nothing is written when a stage fails; the error propagates to the
    caller.
    """
    color, gray = load_image(job.input_path)
    output = processor.correct(color, gray)
    save_webp(output, job.output_path, quality)
    logger.info(f"Converted {job.input_path} -> {job.output_path}")


def run_batch(
    jobs: Iterable[Job],
    processor: Optional[RectificationProcessor] = None,
    max_workers: Optional[int] = None,
    quality: Optional[int] = None,
) -> BatchReport:
    """
    Run independent jobs in parallel and collect their outcomes.

    Args:
        jobs: Input/output pairs to process.
        processor: Shared processor. Loads the default config if None.
        max_workers: Thread pool size. Falls back to the config value, then
                     to the executor default.
        quality: WebP quality. Falls back to the config value.

    Returns:
        BatchReport with one outcome per job.

    Example:
        >>> report = run_batch([Job(Path("a.jpg"), Path("a.webp"))])
        >>> report.exit_code
        0
    """
    jobs = list(jobs)
    if processor is None:
        processor = RectificationProcessor()
    if max_workers is None:
        max_workers = processor.config.output.max_workers
    if quality is None:
        quality = processor.config.output.webp_quality

    logger.info(f"Processing {len(jobs)} job(s)")

    report = BatchReport()
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            executor.submit(run_job, job, processor, quality): job for job in jobs
        }
        for future in as_completed(futures):
            job = futures[future]
            try:
                future.result()
            # Every job error is recorded so the other jobs still get counted
            except Exception as e:
                logger.error(f"Error while converting {job.input_path}: {e}")
                report.outcomes.append(JobOutcome(job=job, error=e))
            else:
                report.outcomes.append(JobOutcome(job=job))

    if report.failed:
        logger.error(f"Failed to convert {report.failed} inputs")
    else:
        logger.info(f"Converted {report.succeeded} input(s)")

    return report
