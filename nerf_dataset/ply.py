"""
Point extraction from PLY files.

``iter_elements`` reads a whole PLY file and yields its elements as blocks.
``extract_points`` keeps only the ``vertex`` element and turns it into flat
position and color buffers, applying an optional homogeneous transform to
positions.
"""

from __future__ import annotations

from contextlib import closing
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Tuple, Union

import numpy as np
from plyfile import PlyData

from .errors import SchemaError
from .transforms import apply_homogeneous


POSITION_PROPERTIES = ("x", "y", "z")
COLOR_PROPERTIES = ("red", "green", "blue")


@dataclass
class PlyElementBlock:
    """
    All records of one PLY element.

    Attributes
    ----------
    name : str
        Element name from the header (e.g. ``vertex``, ``face``).
    property_names : tuple of str
        Property names in header order.
    data : np.ndarray
        Structured array with one record per element instance, in file order.
    """
    name: str
    property_names: Tuple[str, ...]
    data: np.ndarray

    def __len__(self) -> int:
        return len(self.data)

    def float_values(self, name: str, normalise8: Optional[float] = None) -> np.ndarray:
        """
        Values of a scalar property as float32.

        If ``normalise8`` is given and the property is stored as an 8-bit
        integer, values are divided by it.
        """
        values = self.data[name]
        if normalise8 is not None and values.dtype.kind in "iu" and values.dtype.itemsize == 1:
            return (values.astype(np.float32) / np.float32(normalise8)).astype(np.float32)
        return values.astype(np.float32)


def iter_elements(path: Union[str, Path]) -> Iterator[PlyElementBlock]:
    """
    Yield each element of a PLY file (ASCII or binary) in header order.

    The whole file is parsed by ``PlyData.read`` before the first block is
    yielded; blocks are already in memory, not read lazily. The file is
    closed once the generator finishes, fails or is discarded.
    """
    with open(path, "rb") as f:
        ply = PlyData.read(f, mmap=False)
        for element in ply.elements:
            yield PlyElementBlock(
                name=element.name,
                property_names=tuple(prop.name for prop in element.properties),
                data=element.data,
            )


def extract_points(
    path: Union[str, Path],
    transform: Optional[np.ndarray] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Read vertex positions and colors from a PLY file.

    Parameters
    ----------
    path : str or Path
        PLY file.
    transform : np.ndarray, optional
        (4, 4) transform applied to every position with
        ``apply_homogeneous``. Positions pass through unchanged if omitted.

    Returns
    -------
    positions : np.ndarray
        Flat float32 array ``[x0, y0, z0, x1, ...]``, length 3N.
    colors : np.ndarray
        Flat float32 array ``[r0, g0, b0, r1, ...]``, length 3N. 8-bit
        channels are normalized to [0, 1].

    Raises
    ------
    SchemaError
        If a vertex element lacks any of x/y/z/red/green/blue. Nothing is
        returned in that case.
    """
    positions = []
    colors = []

    with closing(iter_elements(path)) as blocks:
        for block in blocks:
            if block.name != "vertex":
                continue

            missing = [
                name for name in POSITION_PROPERTIES + COLOR_PROPERTIES
                if name not in block.property_names
            ]
            if missing:
                raise SchemaError(missing, source=str(path))

            xyz = np.stack([block.float_values(name) for name in POSITION_PROPERTIES], axis=-1)
            rgb = np.stack([block.float_values(name, normalise8=255) for name in COLOR_PROPERTIES], axis=-1)

            if transform is not None:
                xyz = apply_homogeneous(transform, xyz)

            positions.append(xyz.reshape(-1))
            colors.append(rgb.reshape(-1))

    if not positions:
        return np.zeros(0, dtype=np.float32), np.zeros(0, dtype=np.float32)
    return (
        np.concatenate(positions).astype(np.float32),
        np.concatenate(colors).astype(np.float32),
    )
