"""
4x4 homogeneous transform utilities.

All matrices are ``(4, 4)`` float32 arrays acting on column vectors, so
``compose(a, b)`` applies ``b`` first. Poses are stored on disk as four
row lists (row-major) and converted with ``rows_to_matrix`` /
``matrix_to_rows``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Sequence

import numpy as np

if TYPE_CHECKING:
    from .intrinsics import CameraIntrinsics


def identity() -> np.ndarray:
    """Return a fresh 4x4 identity transform."""
    return np.eye(4, dtype=np.float32)


def intrinsics_to_projection(
    intrinsics: "CameraIntrinsics",
    zscale: float = 1.0,
    zmin: float = 0.0,
) -> np.ndarray:
    """
    Build the local-to-pixel projection for a pinhole camera.

    Parameters
    ----------
    intrinsics : CameraIntrinsics
        Camera model; only ``fx``, ``fy``, ``cx`` and ``cy`` are used.
    zscale : float
        Scale applied to depth.
    zmin : float
        Near-plane offset added to the homogeneous component.

    Returns
    -------
    np.ndarray
        Matrix of shape (4, 4)::

            [[fx,  0, cx,     0   ],
             [ 0, fy, cy,     0   ],
             [ 0,  0, zscale, zmin],
             [ 0,  0, 0,      1   ]]
    """
    projection = np.zeros((4, 4), dtype=np.float32)
    projection[0, 0] = intrinsics.fx
    projection[1, 1] = intrinsics.fy
    projection[:, 2] = (intrinsics.cx, intrinsics.cy, zscale, 0.0)
    projection[:, 3] = (0.0, 0.0, zmin, 1.0)
    return projection


def invert(matrix: np.ndarray) -> np.ndarray:
    """
    Invert a 4x4 transform.

    Raises
    ------
    numpy.linalg.LinAlgError
        If the matrix is singular.
    """
    return np.linalg.inv(_as_matrix(matrix)).astype(np.float32)


def compose(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Matrix product ``a @ b`` (``b`` applied first)."""
    return (_as_matrix(a) @ _as_matrix(b)).astype(np.float32)


def apply_homogeneous(matrix: np.ndarray, xyz: np.ndarray) -> np.ndarray:
    """
    Transform points as homogeneous ``(x, y, z, 1)``.

    The result is ``out.xyz * out.w``, scaled by the output's homogeneous
    component. This is not a perspective divide; poses are authored so that
    ``w`` stays 1 for rigid transforms.

    Parameters
    ----------
    matrix : np.ndarray
        Transform of shape (4, 4).
    xyz : np.ndarray
        Points of shape (3,) or (N, 3).

    Returns
    -------
    np.ndarray
        Transformed points with the same shape as ``xyz``.
    """
    matrix = _as_matrix(matrix)
    points = np.asarray(xyz, dtype=np.float32)
    if points.shape[-1] != 3:
        raise ValueError(f"Expected points of shape (..., 3), got {points.shape}")

    ones = np.ones(points.shape[:-1] + (1,), dtype=np.float32)
    homogeneous = np.concatenate([points, ones], axis=-1)
    out = homogeneous @ matrix.T
    return (out[..., :3] * out[..., 3:4]).astype(np.float32)


def apply_global_transform(
    global_transform: np.ndarray,
    poses: Sequence[np.ndarray],
) -> List[np.ndarray]:
    """
    Re-express poses in another world frame: ``global @ pose`` for each pose.

    Order is preserved.
    """
    return [compose(global_transform, pose) for pose in poses]


def rows_to_matrix(rows: Sequence[Sequence[float]]) -> np.ndarray:
    """
    Build a matrix from four row lists (``rows[0]`` is row 0).

    Raises
    ------
    ValueError
        If ``rows`` is not 4 lists of 4 numbers.
    """
    if len(rows) != 4 or any(len(row) != 4 for row in rows):
        raise ValueError("expected 4 rows of 4 values")
    return np.array(rows, dtype=np.float32)


def matrix_to_rows(matrix: np.ndarray) -> List[List[float]]:
    """
    Inverse of ``rows_to_matrix``.

    The columns of the transposed matrix are the original rows, and each one
    is written out as a row list.
    """
    transposed = _as_matrix(matrix).T
    return [[float(v) for v in transposed[:, i]] for i in range(4)]


def _as_matrix(matrix: np.ndarray) -> np.ndarray:
    matrix = np.asarray(matrix, dtype=np.float32)
    if matrix.shape != (4, 4):
        raise ValueError(f"Expected a (4, 4) transform, got {matrix.shape}")
    return matrix
