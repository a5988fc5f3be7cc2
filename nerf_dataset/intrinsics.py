"""
Camera intrinsics and their frame/global resolution.

Any intrinsic field may be set globally in ``transforms.json``, overridden
per frame, or omitted. ``resolve_intrinsics`` turns the two partial records
into a complete ``CameraIntrinsics`` or fails naming the first missing field.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .errors import MissingFieldError
from .transforms import intrinsics_to_projection, invert


# Resolution order; also the order errors are reported in
INTRINSIC_FIELDS: Tuple[str, ...] = (
    "w", "h", "fx", "fy", "cx", "cy", "k1", "k2", "k3", "p1", "p2",
)

# On-disk key for each field where it differs from the attribute name
JSON_KEYS = {"fx": "fl_x", "fy": "fl_y"}


@dataclass(frozen=True)
class CameraIntrinsics:
    """
    Fully resolved camera model.

    Attributes
    ----------
    w, h : float
        Image width and height in pixels.
    fx, fy : float
        Focal lengths in pixels.
    cx, cy : float
        Principal point in pixels.
    k1, k2, k3 : float
        Radial distortion coefficients.
    p1, p2 : float
        Tangential distortion coefficients.
    """
    w: float
    h: float
    fx: float
    fy: float
    cx: float
    cy: float
    k1: float
    k2: float
    k3: float
    p1: float
    p2: float

    @classmethod
    def from_image_size(cls, width: int, height: int) -> "CameraIntrinsics":
        """Default pinhole model: focal = image size, centered, no distortion."""
        w = float(width)
        h = float(height)
        return cls(
            w=w, h=h,
            fx=w, fy=h,
            cx=w / 2, cy=h / 2,
            k1=0.0, k2=0.0, k3=0.0,
            p1=0.0, p2=0.0,
        )

    @property
    def local_to_pixel_transform(self) -> np.ndarray:
        """Camera-local to pixel projection, shape (4, 4)."""
        return intrinsics_to_projection(self)

    @property
    def pixel_to_local_transform(self) -> np.ndarray:
        return invert(self.local_to_pixel_transform)


@dataclass
class PartialIntrinsics:
    """Intrinsics where every field may be absent (``None``)."""
    w: Optional[float] = None
    h: Optional[float] = None
    fx: Optional[float] = None
    fy: Optional[float] = None
    cx: Optional[float] = None
    cy: Optional[float] = None
    k1: Optional[float] = None
    k2: Optional[float] = None
    k3: Optional[float] = None
    p1: Optional[float] = None
    p2: Optional[float] = None

    @classmethod
    def from_intrinsics(cls, intrinsics: CameraIntrinsics) -> "PartialIntrinsics":
        return cls(**{name: getattr(intrinsics, name) for name in INTRINSIC_FIELDS})


def resolve_intrinsics(
    frame: PartialIntrinsics,
    defaults: PartialIntrinsics,
    context: Optional[str] = None,
) -> CameraIntrinsics:
    """
    Resolve each intrinsic field: frame value, else global value, else fail.

    Parameters
    ----------
    frame : PartialIntrinsics
        Per-frame overrides.
    defaults : PartialIntrinsics
        Global values from the top of the descriptor.
    context : str, optional
        Added to the error message (usually the frame's file path).

    Returns
    -------
    CameraIntrinsics
        Complete intrinsics. No field is ever defaulted.

    Raises
    ------
    MissingFieldError
        On the first field (in ``INTRINSIC_FIELDS`` order) set on neither.
    """
    values = {}
    for name in INTRINSIC_FIELDS:
        value = getattr(frame, name)
        if value is None:
            value = getattr(defaults, name)
        if value is None:
            raise MissingFieldError(name, context)
        values[name] = float(value)
    return CameraIntrinsics(**values)
