# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""ChaosCV Core Module"""

from .geometry import Point, Size, Rect
from .types import (
    Depth,
    MatShape,
    MatStrides,
    depth_dtype,
    depth_size,
    depth_of,
    depth_to_string,
    depth_from_string,
)
from .storage import Allocation, OwnedStorage, BorrowedStorage
from .tensor import Tensor
from .formatter import (
    BraceSet,
    FormatState,
    FormatCursor,
    TensorFormatter,
    converter_for,
    format_tensor,
    write_tensor,
    step,
)

__all__ = [
    "Point",
    "Size",
    "Rect",
    "Depth",
    "MatShape",
    "MatStrides",
    "depth_dtype",
    "depth_size",
    "depth_of",
    "depth_to_string",
    "depth_from_string",
    "Allocation",
    "OwnedStorage",
    "BorrowedStorage",
    "Tensor",
    "BraceSet",
    "FormatState",
    "FormatCursor",
    "TensorFormatter",
    "converter_for",
    "format_tensor",
    "write_tensor",
    "step",
]
