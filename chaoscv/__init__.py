# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
ChaosCV: reference-counted NCHW tensors

A small numeric core: 4-axis tensors over owned or borrowed byte regions,
aliasing views of sub-rectangles, packed deep copies, bounds-checked typed
element access and incremental text rendering.

Example:
    import chaoscv as cv

    t = cv.Tensor.from_values([[1, 2, 3], [4, 5, 6]], [1, 1, 2, 3], cv.Depth.Float32)
    print(t)  # [[1 2 3],[4 5 6]]
"""

__version__ = "0.1.0"
__author__ = "Wahyu Ardiansyah"

from .core import (
    Point,
    Size,
    Rect,
    Depth,
    MatShape,
    MatStrides,
    Tensor,
    BraceSet,
    TensorFormatter,
    depth_size,
    depth_of,
    format_tensor,
    write_tensor,
)

# Observability
from .observability import LogSeverity, get_logger, set_level, init_logging

# Configuration
from .config import ChaosConfig, get_config, set_config
from .flags import FLAGS, parse_command_line_flags

# Errors
from .errors import (
    ChaosError,
    CheckFailedError,
    ShapeMismatchError,
    OutOfRangeError,
    UnknownDepthError,
    ReleaseError,
    FormatterStateError,
    ConfigurationError,
    FlagError,
)

__all__ = [
    # Core types
    "Point",
    "Size",
    "Rect",
    "Depth",
    "MatShape",
    "MatStrides",
    "Tensor",
    "BraceSet",
    "TensorFormatter",
    "depth_size",
    "depth_of",
    "format_tensor",
    "write_tensor",
    # Observability
    "LogSeverity",
    "get_logger",
    "set_level",
    "init_logging",
    # Configuration
    "ChaosConfig",
    "get_config",
    "set_config",
    "FLAGS",
    "parse_command_line_flags",
    # Errors
    "ChaosError",
    "CheckFailedError",
    "ShapeMismatchError",
    "OutOfRangeError",
    "UnknownDepthError",
    "ReleaseError",
    "FormatterStateError",
    "ConfigurationError",
    "FlagError",
]
