"""
Common types and utilities shared across all modules.

This module provides standardized data types for the rectification pipeline,
ensuring consistency between the core stages and the batch driver.
"""

from src.common.types import ImageBuffer, Point

__all__ = ["ImageBuffer", "Point"]
