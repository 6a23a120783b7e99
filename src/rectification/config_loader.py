"""
Configuration loader for the Rectification module.

Loads and validates configuration from config.yaml file.
"""

import logging
from pathlib import Path
from typing import Any, Dict

import yaml

from src.rectification.resampler import INTERPOLATION_FLAGS
from src.rectification.types import (
    OutputConfig,
    RectificationConfig,
    ResamplingConfig,
    SizePolicyConfig,
    SolverConfig,
    ThresholdConfig,
)

logger = logging.getLogger(__name__)

# Default configuration path (relative to this file)
DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"


def load_config(config_path: Path = DEFAULT_CONFIG_PATH) -> RectificationConfig:
    """
    Load rectification configuration from YAML file.

    Args:
        config_path: Path to the configuration YAML file.

    Returns:
        Validated RectificationConfig object.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config is invalid or missing required fields.

    Example:
        >>> config = load_config()
        >>> print(config.size_policy.max_height)
        1024
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    logger.debug(f"Loading rectification config from {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        raw_config = yaml.safe_load(f)

    try:
        config = _parse_config(raw_config)
        _validate_config(config)
        logger.info("Successfully loaded rectification configuration")
        return config
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid configuration file: {e}") from e


def _parse_config(raw: Dict[str, Any]) -> RectificationConfig:
    """Parse raw dictionary into structured config objects."""
    fill_raw = raw["resampling"]["fill_color"]
    if len(fill_raw) != 3:
        raise ValueError(f"fill_color must have 3 components, got {len(fill_raw)}")

    max_workers = raw["output"]["max_workers"]

    return RectificationConfig(
        threshold=ThresholdConfig(
            block_radius=int(raw["threshold"]["block_radius"]),
        ),
        size_policy=SizePolicyConfig(
            aspect_width=int(raw["size_policy"]["aspect_width"]),
            aspect_height=int(raw["size_policy"]["aspect_height"]),
            max_height=int(raw["size_policy"]["max_height"]),
        ),
        solver=SolverConfig(
            singular_value_tolerance=float(
                raw["solver"]["singular_value_tolerance"]
            ),
            reprojection_tolerance=float(raw["solver"]["reprojection_tolerance"]),
            collinearity_tolerance=float(raw["solver"]["collinearity_tolerance"]),
        ),
        resampling=ResamplingConfig(
            interpolation=str(raw["resampling"]["interpolation"]),
            fill_color=tuple(int(c) for c in fill_raw),
        ),
        output=OutputConfig(
            webp_quality=int(raw["output"]["webp_quality"]),
            max_workers=None if max_workers is None else int(max_workers),
        ),
    )


def _validate_config(config: RectificationConfig) -> None:
    """
    Validate configuration values for logical consistency.

    Raises:
        ValueError: If any configuration value is invalid.
    """
    if config.threshold.block_radius < 1:
        raise ValueError("block_radius must be at least 1")

    if config.size_policy.aspect_width < 1 or config.size_policy.aspect_height < 1:
        raise ValueError("aspect_width and aspect_height must be positive")

    if config.size_policy.max_height < 1:
        raise ValueError("max_height must be at least 1")

    if not 0 < config.solver.singular_value_tolerance < 1:
        raise ValueError("singular_value_tolerance must be in (0, 1)")

    if config.solver.reprojection_tolerance <= 0:
        raise ValueError("reprojection_tolerance must be positive")

    if not 0 <= config.solver.collinearity_tolerance < 1:
        raise ValueError("collinearity_tolerance must be in [0, 1)")

    if config.resampling.interpolation not in INTERPOLATION_FLAGS:
        raise ValueError(
            f"Invalid interpolation: {config.resampling.interpolation}. "
            f"Must be one of {list(INTERPOLATION_FLAGS)}"
        )

    if any(not 0 <= c <= 255 for c in config.resampling.fill_color):
        raise ValueError("fill_color components must be in [0, 255]")

    if not 1 <= config.output.webp_quality <= 100:
        raise ValueError("webp_quality must be in [1, 100]")

    if config.output.max_workers is not None and config.output.max_workers < 1:
        raise ValueError("max_workers must be at least 1 when set")

    logger.debug("Configuration validation passed")
