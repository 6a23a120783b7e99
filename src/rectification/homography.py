"""
Homography estimation for the rectification target.

Solves for the 8-parameter projective transform that carries the corners of
the output rectangle onto the located source corners. The Direct Linear
Transform (DLT) system is built on whitened coordinates and solved as a
truncated least-squares problem via SVD, so an ill-conditioned
configuration is detected instead of producing an unstable matrix.
"""

import itertools
import logging
from typing import Sequence, Tuple, Union

import numpy as np

from src.common.types import Point
from src.rectification.exceptions import DegenerateGeometryError
from src.rectification.types import OutputDimensions, Projection

logger = logging.getLogger(__name__)

DEFAULT_SINGULAR_VALUE_TOLERANCE = 1e-6
DEFAULT_REPROJECTION_TOLERANCE = 1e-3
DEFAULT_COLLINEARITY_TOLERANCE = 1e-2

PointLike = Union[Point, Tuple[float, float], Sequence[float]]


def target_corners(dims: OutputDimensions) -> np.ndarray:
    """
    Corners of the output rectangle, clockwise from top-left.

    Returns:
        Array of shape (4, 2): (0, 0), (W, 0), (W, H), (0, H).
    """
    w, h = float(dims.width), float(dims.height)
    return np.array([[0.0, 0.0], [w, 0.0], [w, h], [0.0, h]], dtype=np.float64)


def _as_array(points: Sequence[PointLike]) -> np.ndarray:
    rows = [p.to_numpy() if isinstance(p, Point) else p for p in points]
    arr = np.asarray(rows, dtype=np.float64)
    if arr.shape != (4, 2):
        raise ValueError(
            f"Expected exactly 4 points with shape (4, 2), got shape {arr.shape}"
        )
    return arr


def _triangle_sine(p1: np.ndarray, p2: np.ndarray, p3: np.ndarray) -> float:
    """
    Sine of the largest angle of a triangle.

    The largest angle sits opposite the longest side, so its sine is twice
    the area over the product of the two shorter sides. Zero for collinear
    or coincident points, independent of the triangle's size.
    """
    sides = sorted(
        [np.linalg.norm(p2 - p1), np.linalg.norm(p3 - p2), np.linalg.norm(p1 - p3)]
    )
    if sides[0] == 0:
        return 0.0

    v1 = p2 - p1
    v2 = p3 - p1
    cross = v1[0] * v2[1] - v1[1] * v2[0]
    return float(abs(cross) / (sides[0] * sides[1]))


def _has_collinear_triple(quad: np.ndarray, min_sine: float) -> bool:
    """
    Check whether any three of the 4 points are (nearly) collinear.

    Args:
        quad: Points with shape (4, 2).
        min_sine: Smallest accepted sine of any triangle's largest angle.
    """
    sines = [
        _triangle_sine(quad[i], quad[j], quad[k])
        for i, j, k in itertools.combinations(range(4), 3)
    ]

    if min(sines) <= min_sine:
        logger.warning(f"Degenerate control points. Triangle sines: {np.round(sines, 4)}")
        return True

    return False


def _normalization_transform(points: np.ndarray) -> np.ndarray:
    """
    Affine whitening: centroid to the origin, unit variance along both
    principal axes.

    Any rectangle lands on the corners of the square (+-1, +-1), whatever
    its aspect ratio, which keeps the DLT system well conditioned for thin
    content and extreme output sizes alike.
    """
    centroid = points.mean(axis=0)
    centered = points - centroid
    covariance = centered.T @ centered / len(points)
    eigenvalues, eigenvectors = np.linalg.eigh(covariance)

    if not eigenvalues[0] > 0:
        raise DegenerateGeometryError("Control points span no area")

    linear = (eigenvectors / np.sqrt(eigenvalues)).T
    transform = np.eye(3)
    transform[:2, :2] = linear
    transform[:2, 2] = -linear @ centroid
    return transform


def _apply(transform: np.ndarray, points: np.ndarray) -> np.ndarray:
    homogeneous = points @ transform[:, :2].T + transform[:, 2]
    return homogeneous[:, :2] / homogeneous[:, 2:3]


def build_dlt_system(
    src: np.ndarray, dst: np.ndarray
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Build the 8x8 DLT system for a homography with h33 fixed to 1.

    For each correspondence (u, v) -> (x, y) the two rows are::

        [u, v, 1, 0, 0, 0, -u*x, -v*x] . h = x
        [0, 0, 0, u, v, 1, -u*y, -v*y] . h = y

    Args:
        src: Domain points (4, 2).
        dst: Image points (4, 2).

    Returns:
        (A, b) with A of shape (8, 8) and b of shape (8,).
    """
    a = np.zeros((8, 8), dtype=np.float64)
    b = np.zeros(8, dtype=np.float64)
    for k, ((u, v), (x, y)) in enumerate(zip(src, dst)):
        a[k] = [u, v, 1.0, 0.0, 0.0, 0.0, -u * x, -v * x]
        a[k + 4] = [0.0, 0.0, 0.0, u, v, 1.0, -u * y, -v * y]
        b[k] = x
        b[k + 4] = y
    return a, b


def solve_truncated_least_squares(
    a: np.ndarray, b: np.ndarray, tolerance: float
) -> Tuple[np.ndarray, int]:
    """
    Solve A x = b through the SVD, discarding small singular values.

    A singular value is discarded when it is below ``tolerance`` times the
    largest one, so the cut-off does not depend on the scale of A.

    Returns:
        (x, rank) where rank counts the singular values that were kept.
    """
    u, s, vt = np.linalg.svd(a)
    keep = s >= tolerance * s[0]
    inverse_s = np.zeros_like(s)
    inverse_s[keep] = 1.0 / s[keep]
    x = vt.T @ (inverse_s * (u.T @ b))

    logger.debug(f"DLT singular values: {np.array2string(s, precision=4)}")

    return x, int(np.count_nonzero(keep))


def solve_projection(
    points: Sequence[PointLike],
    dims: OutputDimensions,
    singular_value_tolerance: float = DEFAULT_SINGULAR_VALUE_TOLERANCE,
    reprojection_tolerance: float = DEFAULT_REPROJECTION_TOLERANCE,
    collinearity_tolerance: float = DEFAULT_COLLINEARITY_TOLERANCE,
) -> Projection:
    """
    Solve the projection mapping the output rectangle onto the source quad.

    Args:
        points: Source corners clockwise from top-left, as ``Point`` objects
                or (x, y) pairs.
        dims: Output rectangle size (W, H). Corners (0, 0), (W, 0), (W, H),
              (0, H) correspond to the points in order.
        singular_value_tolerance: Singular values of the normalised DLT
              system below this fraction of the largest are treated as zero.
        reprojection_tolerance: Largest accepted distance, in source pixels,
              between a mapped target corner and its source point.
        collinearity_tolerance: Smallest accepted sine of the largest angle
              of any triangle formed by three of the points.

    Returns:
        Projection P with P(0, 0) ~ points[0], ..., P(0, H) ~ points[3].

    Raises:
        ValueError: If points do not have shape (4, 2).
        DegenerateGeometryError: If three of the points are (nearly)
            collinear, or the system is too ill-conditioned to solve.

    Example:
        >>> dims = OutputDimensions(width=160, height=90)
        >>> quad = [(10, 12), (170, 8), (175, 100), (6, 104)]
        >>> projection = solve_projection(quad, dims)
        >>> [round(c) for c in projection(160, 0)]
        [170, 8]
    """
    source = _as_array(points)
    target = target_corners(dims)

    if not np.all(np.isfinite(source)):
        raise DegenerateGeometryError("Control points contain non-finite values")

    if _has_collinear_triple(source, collinearity_tolerance):
        raise DegenerateGeometryError("Three of the control points are collinear")

    t_target = _normalization_transform(target)
    t_source = _normalization_transform(source)

    a, b = build_dlt_system(_apply(t_target, target), _apply(t_source, source))
    h, rank = solve_truncated_least_squares(a, b, singular_value_tolerance)

    if rank < 8:
        raise DegenerateGeometryError(
            f"Projection system is ill-conditioned: rank {rank} of 8 "
            f"at relative tolerance {singular_value_tolerance}"
        )

    normalized = np.append(h, 1.0).reshape(3, 3)
    matrix = np.linalg.inv(t_source) @ normalized @ t_target

    if not np.all(np.isfinite(matrix)) or abs(matrix[2, 2]) < np.finfo(float).eps:
        raise DegenerateGeometryError("Projection matrix is not finite")
    matrix = matrix / matrix[2, 2]

    projection = Projection(matrix=matrix)

    residual = np.linalg.norm(projection.map_points(target) - source, axis=1).max()
    if not residual <= reprojection_tolerance:
        raise DegenerateGeometryError(
            f"Projection does not reproduce the control points "
            f"(max error {residual:.3g}px > {reprojection_tolerance}px)"
        )

    logger.debug(f"Solved projection (max reprojection error {residual:.2e}px)")

    return projection
