"""
Scene descriptor (``transforms.json``) model, loading and saving.

The descriptor holds a camera model tag, an ordered list of frames (image
path + 4x4 camera-to-world pose + optional intrinsic overrides), an optional
point-cloud path and optional global intrinsics. Unknown keys are ignored so
newer exporters keep loading.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import numpy as np

from .errors import ParseError
from .intrinsics import (
    INTRINSIC_FIELDS,
    JSON_KEYS,
    CameraIntrinsics,
    PartialIntrinsics,
    resolve_intrinsics,
)
from .transforms import apply_global_transform, identity, matrix_to_rows, rows_to_matrix


@dataclass
class SceneFrame:
    """
    One camera observation.

    Attributes
    ----------
    file_path : str
        Image path as written in the descriptor (not opened here).
    local_to_world : np.ndarray
        Camera-to-world pose of shape (4, 4).
    intrinsics : PartialIntrinsics
        Per-frame overrides; empty when the frame relies on global values.
    """
    file_path: str
    local_to_world: np.ndarray = field(default_factory=identity)
    intrinsics: PartialIntrinsics = field(default_factory=PartialIntrinsics)

    @classmethod
    def from_intrinsics(
        cls,
        file_path: str,
        local_to_world: np.ndarray,
        intrinsics: CameraIntrinsics,
    ) -> "SceneFrame":
        """Frame carrying a complete intrinsics override."""
        return cls(
            file_path=file_path,
            local_to_world=np.array(local_to_world, dtype=np.float32),
            intrinsics=PartialIntrinsics.from_intrinsics(intrinsics),
        )

    @classmethod
    def from_dict(cls, data: Any, path: str = "frame") -> "SceneFrame":
        if not isinstance(data, dict):
            raise ParseError("expected an object", path)
        return cls(
            file_path=_require_str(data, "file_path", path),
            local_to_world=_parse_pose(data, f"{path}.transform_matrix"),
            intrinsics=_parse_intrinsics(data, path),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "file_path": self.file_path,
            "transform_matrix": matrix_to_rows(self.local_to_world),
        }
        data.update(_intrinsics_to_dict(self.intrinsics))
        return data


@dataclass
class SceneDescriptor:
    """
    Contents of a ``transforms.json`` file.

    Frame order is the order found in the file.
    """
    camera_model: str
    frames: List[SceneFrame] = field(default_factory=list)
    ply_file_path: Optional[str] = None
    intrinsics: PartialIntrinsics = field(default_factory=PartialIntrinsics)

    @classmethod
    def from_dict(cls, data: Any) -> "SceneDescriptor":
        """
        Build a descriptor from decoded JSON.

        Raises
        ------
        ParseError
            If a required field is missing or has the wrong type/shape.
        """
        if not isinstance(data, dict):
            raise ParseError("expected a JSON object at the top level", "$")

        camera_model = _require_str(data, "camera_model", "$")
        if "frames" not in data:
            raise ParseError("missing required field", "frames")
        raw_frames = data["frames"]
        if not isinstance(raw_frames, list):
            raise ParseError("expected an array of frames", "frames")

        frames = [
            SceneFrame.from_dict(raw, f"frames[{i}]")
            for i, raw in enumerate(raw_frames)
        ]

        ply_file_path = data.get("ply_file_path")
        if ply_file_path is not None and not isinstance(ply_file_path, str):
            raise ParseError("expected a string", "ply_file_path")

        return cls(
            camera_model=camera_model,
            frames=frames,
            ply_file_path=ply_file_path,
            intrinsics=_parse_intrinsics(data, "$"),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"camera_model": self.camera_model}
        data.update(_intrinsics_to_dict(self.intrinsics))
        if self.ply_file_path is not None:
            data["ply_file_path"] = self.ply_file_path
        data["frames"] = [frame.to_dict() for frame in self.frames]
        return data

    def get_camera_intrinsics(self, frame: SceneFrame) -> CameraIntrinsics:
        """Resolve ``frame``'s intrinsics against the global block."""
        return resolve_intrinsics(
            frame.intrinsics,
            self.intrinsics,
            context=f"frame {frame.file_path!r}",
        )

    def resolve_all_intrinsics(self) -> List[CameraIntrinsics]:
        """Intrinsics for every frame, in frame order."""
        return [self.get_camera_intrinsics(frame) for frame in self.frames]

    def apply_global_transform(self, transform: np.ndarray) -> None:
        """Replace every pose with ``transform @ pose``, in place."""
        poses = apply_global_transform(transform, [frame.local_to_world for frame in self.frames])
        for frame, pose in zip(self.frames, poses):
            frame.local_to_world = pose


def load_descriptor(path: Union[str, Path]) -> SceneDescriptor:
    """
    Read and parse a ``transforms.json`` file.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    ParseError
        If the file is not valid JSON or does not match the schema.
    """
    path = Path(path)
    # Bytes, so json picks UTF-8/16/32 from the content
    with open(path, "rb") as f:
        raw = f.read()

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as err:
        raise ParseError(
            f"invalid JSON at line {err.lineno} column {err.colno}: {err.msg}",
            source=str(path),
        ) from err
    except UnicodeDecodeError as err:
        raise ParseError(
            f"invalid {err.encoding} text at byte {err.start}",
            source=str(path),
        ) from err

    try:
        return SceneDescriptor.from_dict(data)
    except ParseError as err:
        raise ParseError(err.message, err.path, source=str(path)) from err


def save_descriptor(descriptor: SceneDescriptor, path: Union[str, Path]) -> None:
    """Write ``descriptor`` as ``transforms.json``-style JSON."""
    with open(path, "w") as f:
        json.dump(descriptor.to_dict(), f, indent=2)


def _require_str(data: Dict[str, Any], key: str, path: str) -> str:
    where = key if path == "$" else f"{path}.{key}"
    if key not in data:
        raise ParseError("missing required field", where)
    value = data[key]
    if not isinstance(value, str):
        raise ParseError(f"expected a string, got {type(value).__name__}", where)
    return value


def _parse_pose(data: Dict[str, Any], path: str) -> np.ndarray:
    if "transform_matrix" not in data:
        raise ParseError("missing required field", path)
    rows = data["transform_matrix"]
    if not isinstance(rows, list) or len(rows) != 4:
        raise ParseError("expected 4 rows of 4 numbers", path)
    for i, row in enumerate(rows):
        if not isinstance(row, list) or len(row) != 4:
            raise ParseError("expected a row of 4 numbers", f"{path}[{i}]")
        for j, value in enumerate(row):
            if not _is_number(value):
                raise ParseError("expected a number", f"{path}[{i}][{j}]")
    return rows_to_matrix(rows)


def _parse_intrinsics(data: Dict[str, Any], path: str) -> PartialIntrinsics:
    values = {}
    for name in INTRINSIC_FIELDS:
        key = JSON_KEYS.get(name, name)
        value = data.get(key)
        if value is None:
            continue
        if not _is_number(value):
            where = key if path == "$" else f"{path}.{key}"
            raise ParseError("expected a number", where)
        values[name] = float(value)
    return PartialIntrinsics(**values)


def _intrinsics_to_dict(intrinsics: PartialIntrinsics) -> Dict[str, float]:
    data = {}
    for name in INTRINSIC_FIELDS:
        value = getattr(intrinsics, name)
        if value is not None:
            data[JSON_KEYS.get(name, name)] = float(value)
    return data


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
