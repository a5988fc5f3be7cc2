"""
nerf_dataset: load NeRF scene directories into memory.

Reads ``transforms.json`` (camera poses and intrinsics) together with the
point cloud it references, aligned to a common world frame.
"""

__version__ = "0.1.0"

from .config import DataConfig
from .errors import NerfDataError, ParseError, MissingFieldError, SchemaError
from .transforms import (
    identity,
    intrinsics_to_projection,
    invert,
    compose,
    apply_homogeneous,
    apply_global_transform,
    rows_to_matrix,
    matrix_to_rows,
)
from .intrinsics import CameraIntrinsics, PartialIntrinsics, resolve_intrinsics
from .descriptor import SceneFrame, SceneDescriptor, load_descriptor, save_descriptor
from .ply import PlyElementBlock, iter_elements, extract_points
from .data import Dataset, TensorData, load_dataset, load_points

__all__ = [
    # Config
    "DataConfig",
    # Errors
    "NerfDataError",
    "ParseError",
    "MissingFieldError",
    "SchemaError",
    # Transforms
    "identity",
    "intrinsics_to_projection",
    "invert",
    "compose",
    "apply_homogeneous",
    "apply_global_transform",
    "rows_to_matrix",
    "matrix_to_rows",
    # Intrinsics
    "CameraIntrinsics",
    "PartialIntrinsics",
    "resolve_intrinsics",
    # Descriptor
    "SceneFrame",
    "SceneDescriptor",
    "load_descriptor",
    "save_descriptor",
    # Point cloud
    "PlyElementBlock",
    "iter_elements",
    "extract_points",
    # Dataset
    "Dataset",
    "TensorData",
    "load_dataset",
    "load_points",
]
