"""
Batch driver for the rectification pipeline.

Maps (input, output) file pairs onto independent rectification jobs and
reports how many failed.
"""

from src.pipeline.batch import BatchReport, Job, JobOutcome, run_batch, run_job

__all__ = [
    "BatchReport",
    "Job",
    "JobOutcome",
    "run_batch",
    "run_job",
]
