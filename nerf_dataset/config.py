"""
Configuration for dataset loading.
"""

from dataclasses import dataclass


@dataclass
class DataConfig:
    """Configuration for loading a NeRF dataset directory."""

    # Descriptor file inside the dataset root
    transforms_filename: str = "transforms.json"

    # Print a short summary while loading
    verbose: bool = False

    def __post_init__(self):
        if not self.transforms_filename:
            raise ValueError("transforms_filename must not be empty")
