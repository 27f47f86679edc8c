# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
ChaosCV Core Types

Element depths, the fixed 4-axis shape and the strides derived from it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Sequence, Union

import numpy as np

from ..checks import check, fatal
from ..errors import ShapeMismatchError, UnknownDepthError
from .geometry import Size


class Depth(Enum):
    """Supported element kinds."""

    UInt8 = 0
    Int8 = 1
    UInt16 = 2
    Int16 = 3
    Int32 = 4
    Float32 = 5
    Float64 = 6

    Unknown = -1


_DEPTH_DTYPES = {
    Depth.UInt8: np.dtype(np.uint8),
    Depth.Int8: np.dtype(np.int8),
    Depth.UInt16: np.dtype(np.uint16),
    Depth.Int16: np.dtype(np.int16),
    Depth.Int32: np.dtype(np.int32),
    Depth.Float32: np.dtype(np.float32),
    Depth.Float64: np.dtype(np.float64),
}

_DTYPE_DEPTHS = {dtype: depth for depth, dtype in _DEPTH_DTYPES.items()}


def depth_dtype(depth: Depth) -> np.dtype:
    """Get the numpy dtype stored for a depth."""
    dtype = _DEPTH_DTYPES.get(depth)
    if dtype is None:
        fatal(f"Unknown depth {depth!r}", error=UnknownDepthError, stacklevel=2)
    return dtype


def depth_size(depth: Depth) -> int:
    """Get the size in bytes of one element of a depth."""
    dtype = _DEPTH_DTYPES.get(depth)
    if dtype is None:
        fatal(f"Unknown depth {depth!r}", error=UnknownDepthError, stacklevel=2)
    return dtype.itemsize


def depth_of(kind) -> Depth:
    """
    Look up the depth that stores a numpy dtype or scalar type.

    Returns Depth.Unknown for types without a registered depth.
    """
    if isinstance(kind, Depth):
        return kind
    try:
        dtype = np.dtype(kind)
    except TypeError:
        return Depth.Unknown
    return _DTYPE_DEPTHS.get(dtype, Depth.Unknown)


def depth_to_string(depth: Depth) -> str:
    """Get string representation of a depth."""
    return depth.name.lower()


def depth_from_string(name: str) -> Depth:
    """Parse a depth from its name ("float32") or OpenCV-style tag ("32F")."""
    key = name.strip().lower()
    for depth in _DEPTH_DTYPES:
        tag = f"{depth_size(depth) * 8}{_tag_suffix(depth)}".lower()
        if key in (depth.name.lower(), tag):
            return depth
    fatal(f"Unknown depth name '{name}'", error=UnknownDepthError, stacklevel=2)


def _tag_suffix(depth: Depth) -> str:
    kind = _DEPTH_DTYPES[depth].kind
    return {"u": "U", "i": "S", "f": "F"}[kind]


@dataclass(frozen=True)
class MatShape:
    """
    Four axis sizes in NCHW order.

    There are always exactly four axes; a single 2-D plane has
    count = channels = 1.
    """

    count: int = 0
    channels: int = 0
    height: int = 0
    width: int = 0

    def __post_init__(self):
        for name in ("count", "channels", "height", "width"):
            value = int(getattr(self, name))
            check(
                value >= 0,
                f"axis '{name}' must be non-negative, got {value}",
                error=ShapeMismatchError,
                stacklevel=3,
            )
            object.__setattr__(self, name, value)

    @classmethod
    def from_size(cls, size: Size) -> "MatShape":
        return cls(1, 1, int(size.height), int(size.width))

    @classmethod
    def from_list(cls, dims: Sequence[int]) -> "MatShape":
        dims = list(dims)
        check(
            len(dims) == 4,
            f"expected 4 dims (count, channels, height, width), got {len(dims)}",
            error=ShapeMismatchError,
            expression=f"{len(dims)} == 4",
            stacklevel=2,
        )
        return cls(*dims)

    @classmethod
    def of(cls, value: Union["MatShape", Size, Sequence[int]]) -> "MatShape":
        """Coerce a MatShape, Size or 4-element sequence into a MatShape."""
        if isinstance(value, MatShape):
            return value
        if isinstance(value, Size):
            return cls.from_size(value)
        return cls.from_list(value)

    @property
    def size(self) -> Size:
        """2-D extent (width, height) of one slice."""
        return Size(self.width, self.height)

    def numel(self) -> int:
        """Get total number of elements."""
        return self.count * self.channels * self.height * self.width

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self.count, self.channels, self.height, self.width)

    def replace_plane(self, height: int, width: int) -> "MatShape":
        """Same count and channels with a different slice extent."""
        return MatShape(self.count, self.channels, height, width)

    def __getitem__(self, idx: int) -> int:
        return self.as_tuple()[idx]

    def __len__(self) -> int:
        return 4

    def __iter__(self) -> Iterator[int]:
        return iter(self.as_tuple())

    def __repr__(self) -> str:
        return f"MatShape({self.count}, {self.channels}, {self.height}, {self.width})"


@dataclass(frozen=True)
class MatStrides:
    """
    Element strides derived from a MatShape.

    block: elements between consecutive count indices (channels*height*width)
    slice: elements between consecutive channels (height*width)
    row: elements between consecutive rows (width)
    slice_count: number of 2-D slices (count*channels)
    """

    block: int = 0
    slice: int = 0
    row: int = 0
    slice_count: int = 0

    @classmethod
    def from_shape(cls, shape: MatShape) -> "MatStrides":
        return cls(
            block=shape.channels * shape.height * shape.width,
            slice=shape.height * shape.width,
            row=shape.width,
            slice_count=shape.count * shape.channels,
        )

    def __getitem__(self, idx: int) -> int:
        return (self.block, self.slice, self.row)[idx]

    def __len__(self) -> int:
        return 3
