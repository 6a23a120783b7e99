"""
Shared Constants for the qdcrop pipeline

This module contains constants used by the batch driver and the CLI to
ensure consistency and avoid duplication.
"""

# ============================================================================
# Output Encoding
# ============================================================================
OUTPUT_SUFFIX = ".webp"
DEFAULT_WEBP_QUALITY = 95  # Lossy, visually near-lossless

# ============================================================================
# Exit Status
# ============================================================================
EXIT_SUCCESS = 0
EXIT_FAILURE = 1  # At least one job failed, or arguments were inconsistent
