"""
Exceptions raised while loading a NeRF dataset.

File-system failures are not wrapped: a missing ``transforms.json`` or point
file surfaces as the ``FileNotFoundError`` raised by ``open()``.
"""

from __future__ import annotations

from typing import Optional, Sequence


class NerfDataError(Exception):
    """Base class for dataset errors (missing or unsupported point file, ...)."""


class ParseError(NerfDataError, ValueError):
    """
    The scene descriptor does not match the expected schema.

    Parameters
    ----------
    message : str
        Description of the problem.
    path : str, optional
        Location of the offending field, e.g. ``frames[2].transform_matrix``.
    source : str, optional
        File the descriptor was read from.
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        source: Optional[str] = None,
    ):
        self.message = message
        self.path = path
        self.source = source
        text = message
        if path:
            text = f"{path}: {text}"
        if source:
            text = f"{text} (in {source})"
        super().__init__(text)


class MissingFieldError(NerfDataError, ValueError):
    """An intrinsic field is set neither on the frame nor globally."""

    def __init__(self, field: str, context: Optional[str] = None):
        self.field = field
        self.context = context
        text = f"Missing {field}"
        if context:
            text = f"{text} for {context}"
        super().__init__(text)


class SchemaError(NerfDataError, ValueError):
    """The point-cloud header lacks a required vertex property."""

    def __init__(self, missing: Sequence[str], source: Optional[str] = None):
        self.missing = tuple(missing)
        self.source = source
        text = (
            "Missing x/y/z/red/green/blue from seed points "
            f"(no {', '.join(self.missing)})"
        )
        if source:
            text = f"{text} in {source}"
        super().__init__(text)
