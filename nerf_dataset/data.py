"""
Dataset loading for NeRF-style scene directories.

A dataset root holds ``transforms.json`` and the point-cloud file it
references through ``ply_file_path``. Loading aligns every camera pose and
every point with one caller-supplied transform, so both stay in the same
world frame.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple, Union

import numpy as np
import torch

from .config import DataConfig
from .descriptor import SceneDescriptor, load_descriptor
from .errors import NerfDataError
from .ply import extract_points
from .transforms import identity


PointLoader = Callable[[Path, Optional[np.ndarray]], Tuple[np.ndarray, np.ndarray]]

# Keyed by file suffix (case-sensitive)
POINT_LOADERS: Dict[str, PointLoader] = {
    ".ply": extract_points,
}


@dataclass
class TensorData:
    """
    Dataset arrays as torch tensors.

    Attributes
    ----------
    poses : torch.Tensor
        Camera-to-world matrices of shape (F, 4, 4).
    points : torch.Tensor
        Point positions of shape (N, 3).
    colors : torch.Tensor
        Point colors of shape (N, 3) in [0, 1].
    """
    poses: torch.Tensor
    points: torch.Tensor
    colors: torch.Tensor


@dataclass
class Dataset:
    """
    A loaded scene: descriptor plus point cloud.

    Attributes
    ----------
    transforms : SceneDescriptor
        Descriptor with poses already aligned.
    positions : np.ndarray
        Flat float32 positions, length 3N.
    colors : np.ndarray
        Flat float32 colors, length 3N, index-aligned with ``positions``.
    """
    transforms: SceneDescriptor
    positions: np.ndarray
    colors: np.ndarray

    def __post_init__(self):
        if self.positions.shape != self.colors.shape or self.positions.size % 3:
            raise NerfDataError(
                f"Point buffers are not aligned: positions {self.positions.shape}, "
                f"colors {self.colors.shape}"
            )

    @classmethod
    def load(
        cls,
        root: Union[str, Path],
        align_transform: Optional[np.ndarray] = None,
        config: Optional[DataConfig] = None,
    ) -> "Dataset":
        return load_dataset(root, align_transform, config)

    @property
    def point_count(self) -> int:
        return self.positions.size // 3

    @property
    def points_xyz(self) -> np.ndarray:
        """Positions as an (N, 3) view."""
        return self.positions.reshape(-1, 3)

    @property
    def points_rgb(self) -> np.ndarray:
        """Colors as an (N, 3) view."""
        return self.colors.reshape(-1, 3)

    @property
    def poses(self) -> np.ndarray:
        """All frame poses stacked, shape (F, 4, 4)."""
        if not self.transforms.frames:
            return np.zeros((0, 4, 4), dtype=np.float32)
        return np.stack([frame.local_to_world for frame in self.transforms.frames])

    def to_tensors(self, device: str = "cpu") -> TensorData:
        return TensorData(
            poses=torch.from_numpy(self.poses.astype(np.float32)).to(device),
            points=torch.from_numpy(self.points_xyz.copy()).to(device),
            colors=torch.from_numpy(self.points_rgb.copy()).to(device),
        )


def load_dataset(
    root: Union[str, Path],
    align_transform: Optional[np.ndarray] = None,
    config: Optional[DataConfig] = None,
) -> Dataset:
    """
    Load ``transforms.json`` and its point cloud from a dataset directory.

    Parameters
    ----------
    root : str or Path
        Dataset directory.
    align_transform : np.ndarray, optional
        (4, 4) transform applied as ``align @ pose`` to every frame and to
        every point. Defaults to identity.
    config : DataConfig, optional
        Loading options.

    Returns
    -------
    Dataset
        Aligned descriptor and point buffers.

    Raises
    ------
    FileNotFoundError
        If the descriptor or point file is missing.
    ParseError
        If the descriptor does not match the schema.
    SchemaError
        If the point file lacks a required vertex property.
    NerfDataError
        If no point file is referenced or its type is unsupported.
    """
    if config is None:
        config = DataConfig()
    if align_transform is None:
        align_transform = identity()
    root = Path(root)

    transforms_path = root / config.transforms_filename
    transforms = load_descriptor(transforms_path)
    transforms.apply_global_transform(align_transform)

    positions, colors = load_points(root, transforms.ply_file_path, align_transform)

    if config.verbose:
        print(f"  Loaded {transforms_path}")
        print(f"    Camera model: {transforms.camera_model}")
        print(f"    Frames: {len(transforms.frames)}")
        print(f"    Points: {positions.size // 3} from {transforms.ply_file_path}")

    return Dataset(transforms=transforms, positions=positions, colors=colors)


def load_points(
    root: Path,
    point_file_path: Optional[str],
    align_transform: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Load the point file referenced by the descriptor, relative to ``root``.

    The loader is chosen from the file suffix before the file is opened.
    """
    if point_file_path is None:
        raise NerfDataError(f"No point/ply file referenced in {root}")
    if not point_file_path.strip():
        raise NerfDataError(f"Empty point file path (ply_file_path) in {root}")

    suffix = Path(point_file_path).suffix
    loader = POINT_LOADERS.get(suffix)
    if loader is None:
        raise NerfDataError(
            f"Unsupported point file type '{suffix or point_file_path}' ({point_file_path})"
        )

    return loader(root / point_file_path, align_transform)
