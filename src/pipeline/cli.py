"""
Command-line entry point for qdcrop.

Straightens and crops photographs of flat rectangles, writing one WebP file
per input.

Usage:
    qdcrop photo.jpg                      # -> ./photo.webp
    qdcrop photo.jpg -o straight.webp
    qdcrop a.jpg b.jpg -o out_dir         # -> out_dir/a.webp, out_dir/b.webp
    qdcrop a.jpg b.jpg -o x.webp -o y.webp
"""

import argparse
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from src.pipeline.batch import Job, run_batch
from src.rectification.processor import RectificationProcessor
from src.utils.constants import EXIT_FAILURE, OUTPUT_SUFFIX

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qdcrop",
        description="Straighten and remove borders from photographed rectangles.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("input", nargs="+", type=Path, help="Input image file(s)")
    parser.add_argument(
        "-o",
        "--output",
        action="append",
        type=Path,
        default=None,
        help=(
            "Output file, or output directory when several inputs share one -o. "
            "Repeat once per input to name each output."
        ),
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Rectification config YAML (default: bundled config.yaml)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of worker threads (default: from config)",
    )
    parser.add_argument(
        "--quality",
        type=int,
        default=None,
        help="WebP quality 1-100 (default: from config)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    return parser


def _default_output_name(input_path: Path) -> Path:
    return Path(input_path.name).with_suffix(OUTPUT_SUFFIX)


def resolve_jobs(
    inputs: Sequence[Path], outputs: Optional[Sequence[Path]]
) -> List[Job]:
    """
    Pair inputs with output paths.

    - One input: at most one output; defaults to ``<input name>.webp`` in
      the current directory.
    - Several inputs with several outputs: counts must match, paired in order.
    - Several inputs with zero or one output: that output (default ``.``) is
      a directory receiving ``<input name>.webp`` for each input.

    Raises:
        ValueError: If the number of outputs does not fit the inputs.
    """
    outputs = list(outputs or [])

    if len(inputs) > 1:
        if len(outputs) > 1:
            if len(outputs) != len(inputs):
                raise ValueError(
                    "When multiple inputs and outputs are specified, "
                    "there must be an equal number of inputs and outputs."
                )
            return [Job(i, o) for i, o in zip(inputs, outputs)]

        base = outputs[0] if outputs else Path(".")
        return [Job(i, base / _default_output_name(i)) for i in inputs]

    if len(outputs) > 1:
        raise ValueError(
            "When one input is specified, at most one output can be specified."
        )
    input_path = inputs[0]
    output_path = outputs[0] if outputs else _default_output_name(input_path)
    return [Job(input_path, output_path)]


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point. Returns the process exit status."""
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        if args.quality is not None and not 1 <= args.quality <= 100:
            raise ValueError(f"--quality must be in [1, 100], got {args.quality}")
        if args.workers is not None and args.workers < 1:
            raise ValueError(f"--workers must be at least 1, got {args.workers}")
        jobs = resolve_jobs(args.input, args.output)
        processor = RectificationProcessor(config_path=args.config)
    except (FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        return EXIT_FAILURE

    report = run_batch(
        jobs,
        processor=processor,
        max_workers=args.workers,
        quality=args.quality,
    )
    return report.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
