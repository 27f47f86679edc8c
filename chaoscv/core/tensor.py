# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Reference-counted, strided NCHW tensor.

A Tensor is a handle onto a byte region. Handles created by share(),
assign() or view() refer to the same region; element writes through any of
them are visible through all of them. The region of an owning tensor is
freed when the last handle referring to it is released. Tensors wrapping
caller memory never free it.

Shape is the logical extent of a handle. Strides describe the storage: a
view keeps the strides of the tensor it was cut from, so row, slice and
block steps still skip over the columns outside the view.

Example:
    t = Tensor([1, 1, 4, 4], Depth.Float32).load(range(16))
    v = t.view(Rect(Point(1, 1), Point(3, 3)))
    assert v.get(0, 0, 0, 0) == t.get(0, 0, 1, 1)
    packed = v.clone()
"""

import logging
import numbers
from typing import Iterable, Iterator, Optional, Sequence, Union

import numpy as np

from ..checks import check
from ..errors import (
    CheckFailedError,
    OutOfRangeError,
    UnknownDepthError,
    format_index_error,
)
from .geometry import Point, Rect, Size
from .storage import Allocation, BorrowedStorage, OwnedStorage, Storage
from .types import (
    Depth,
    MatShape,
    MatStrides,
    depth_dtype,
    depth_from_string,
    depth_of,
    depth_size,
    depth_to_string,
)

logger = logging.getLogger("chaoscv.core.tensor")

ShapeLike = Union[MatShape, Size, Sequence[int]]
DepthLike = Union[Depth, str, type, np.dtype]

_AXES = ("count", "channels", "height", "width")
_MISSING = object()


def _coerce_depth(depth: DepthLike) -> Depth:
    if isinstance(depth, Depth):
        resolved = depth
    elif isinstance(depth, str):
        resolved = depth_from_string(depth)
    else:
        resolved = depth_of(depth)
    check(
        resolved != Depth.Unknown,
        f"no depth stores {depth!r}",
        error=UnknownDepthError,
        stacklevel=3,
    )
    return resolved


def _flatten(values) -> Iterator:
    if isinstance(values, np.ndarray):
        yield from values.ravel().tolist()
        return
    for value in values:
        if isinstance(value, (list, tuple, np.ndarray)):
            yield from _flatten(value)
        else:
            yield value


class Tensor:
    """
    NCHW numeric tensor over an owned or borrowed byte region.

    Args:
        shape: MatShape, 2-D Size or 4-element sequence. None makes an
            empty handle.
        depth: Element kind (Depth, name such as "float32" / "32F", or a
            numpy dtype).
        data: Optional caller-owned buffer to wrap instead of allocating.
            It must be C-contiguous, writable and hold at least shape.numel()
            elements.
    """

    def __init__(
        self,
        shape: Optional[ShapeLike] = None,
        depth: DepthLike = Depth.Float32,
        data=None,
    ):
        self._storage: Optional[Storage] = None
        self._offset = 0
        self._shape = MatShape()
        self._strides = MatStrides()
        self._depth = Depth.UInt8
        self._is_submatrix = False

        if shape is None:
            return

        self._shape = MatShape.of(shape)
        self._strides = MatStrides.from_shape(self._shape)
        self._depth = _coerce_depth(depth)

        nbytes = self._shape.numel() * depth_size(self._depth)
        if data is None:
            self._storage = OwnedStorage(Allocation(nbytes))
            return

        storage = BorrowedStorage.wrap(data)
        check(
            storage.region.flags.writeable,
            "wrapped buffer is read-only; tensors write through their storage",
            error=CheckFailedError,
            stacklevel=2,
        )
        check(
            storage.region.nbytes >= nbytes,
            f"wrapped buffer holds {storage.region.nbytes} bytes, "
            f"{self._shape!r} of {depth_to_string(self._depth)} needs {nbytes}",
            error=OutOfRangeError,
            stacklevel=2,
        )
        self._storage = storage

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_size(
        cls, width: int, height: int, depth: DepthLike = Depth.Float32, data=None
    ) -> "Tensor":
        """Single-plane tensor of width x height elements."""
        return cls(Size(width, height), depth, data)

    @classmethod
    def typed(cls, kind, dims: ShapeLike, data=None) -> "Tensor":
        """Tensor whose depth is looked up from a numpy dtype or scalar type."""
        return cls(dims, _coerce_depth(kind), data)

    @classmethod
    def zeros(cls, shape: ShapeLike, depth: DepthLike = Depth.Float32) -> "Tensor":
        return cls(shape, depth)

    @classmethod
    def ones(cls, shape: ShapeLike, depth: DepthLike = Depth.Float32) -> "Tensor":
        return cls.full(shape, depth, 1)

    @classmethod
    def full(cls, shape: ShapeLike, depth: DepthLike, value) -> "Tensor":
        out = cls(shape, depth)
        out.to_numpy()[...] = np.asarray(value).astype(out.dtype)
        return out

    @classmethod
    def from_values(
        cls, values: Iterable, shape: ShapeLike, depth: DepthLike = Depth.Float32
    ) -> "Tensor":
        """Allocate a tensor and fill it in NCHW order from values."""
        return cls(shape, depth).load(values)

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    @property
    def shape(self) -> MatShape:
        return self._shape

    @property
    def strides(self) -> MatStrides:
        """Storage strides, in elements."""
        return self._strides

    @property
    def depth(self) -> Depth:
        return self._depth

    @property
    def dtype(self) -> np.dtype:
        return depth_dtype(self._depth)

    @property
    def element_size(self) -> int:
        return depth_size(self._depth)

    @property
    def is_submatrix(self) -> bool:
        return self._is_submatrix

    @property
    def storage(self) -> Optional[Storage]:
        return self._storage

    @property
    def data(self) -> Optional[np.ndarray]:
        """The whole byte region this handle refers to."""
        if self._storage is None:
            return None
        return self._storage.region

    @property
    def data_start(self) -> int:
        """Byte offset of element (0, 0, 0, 0) inside data."""
        return self._offset

    @property
    def ref_count(self) -> Optional[int]:
        """Shared reference count, None for borrowed or empty handles."""
        if self._storage is None:
            return None
        return self._storage.ref_count

    @property
    def owns_data(self) -> bool:
        return isinstance(self._storage, OwnedStorage)

    @property
    def is_empty(self) -> bool:
        return self._storage is None

    @property
    def nbytes(self) -> int:
        """Bytes of the visible elements."""
        return self._shape.numel() * self.element_size

    @property
    def total_bytes(self) -> int:
        """Bytes of the whole region, including parts outside a view."""
        region = self.data
        return 0 if region is None else region.nbytes

    # ------------------------------------------------------------------
    # Handles
    # ------------------------------------------------------------------

    def share(self) -> "Tensor":
        """New handle onto the same region (reference count + 1)."""
        return Tensor().assign(self)

    def assign(self, other: "Tensor") -> "Tensor":
        """
        Make this handle refer to what other refers to.

        The previous storage of this handle is released. The source is read
        and retained before that release, so assigning a handle onto itself
        or onto another handle of the same allocation never frees data that
        is about to be adopted.
        """
        if other is self:
            return self

        storage = other._storage
        offset = other._offset
        shape = other._shape
        strides = other._strides
        depth = other._depth
        is_submatrix = other._is_submatrix

        if isinstance(storage, OwnedStorage):
            storage.allocation.retain()

        self.release()

        self._storage = storage
        self._offset = offset
        self._shape = shape
        self._strides = strides
        self._depth = depth
        self._is_submatrix = is_submatrix
        return self

    def release(self) -> None:
        """
        Drop this handle's reference.

        An owning handle becomes empty and the region is freed if no other
        handle refers to it. Wrapping handles are left untouched.
        """
        storage = self._storage
        if not isinstance(storage, OwnedStorage):
            return

        self._storage = None
        self._offset = 0
        self._shape = MatShape()
        self._strides = MatStrides()
        self._is_submatrix = False
        storage.allocation.release()

    def __copy__(self) -> "Tensor":
        return self.share()

    def __deepcopy__(self, memo) -> "Tensor":
        return self.clone()

    def __enter__(self) -> "Tensor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def __del__(self):
        storage = getattr(self, "_storage", None)
        if isinstance(storage, OwnedStorage):
            self._storage = None
            storage.allocation.release()

    # ------------------------------------------------------------------
    # Views and copies
    # ------------------------------------------------------------------

    def view(self, rect: Rect) -> "Tensor":
        """
        Handle onto the elements inside rect of every slice.

        Both corners must lie within (0, 0)..(width, height) of this
        tensor; the bottom-right corner is exclusive.
        """
        bounds = Rect(Point(0, 0), self._shape.size.to_point())
        check(
            bounds.contains(rect.tl) and bounds.contains(rect.br),
            f"view {rect} is outside {bounds}",
            error=OutOfRangeError,
            stacklevel=2,
        )

        left, top = int(rect.tl.x), int(rect.tl.y)
        out = self.share()
        out._offset = self._offset + (top * self._strides.row + left) * self.element_size
        out._shape = self._shape.replace_plane(int(rect.height), int(rect.width))
        out._is_submatrix = True
        logger.debug(f"View {rect} of {self._shape!r} at byte offset {out._offset}")
        return out

    def clone(self) -> "Tensor":
        """
        Deep copy of the visible elements into a new packed tensor.

        Rows are copied one at a time from the view's storage layout, so
        the clone of a view has row stride == width.
        """
        out = Tensor(self._shape, self._depth)
        if self._shape.numel() == 0:
            return out

        src = self.data
        dst = out.data
        esize = self.element_size
        row_bytes = self._shape.width * esize
        channels = self._shape.channels
        strides = self._strides

        pos = 0
        for s in range(self._shape.count * channels):
            n, c = divmod(s, channels)
            slice_start = self._offset + (n * strides.block + c * strides.slice) * esize
            for row in range(self._shape.height):
                start = slice_start + row * strides.row * esize
                dst[pos : pos + row_bytes] = src[start : start + row_bytes]
                pos += row_bytes

        logger.debug(f"Cloned {self._shape!r} ({pos} bytes)")
        return out

    # ------------------------------------------------------------------
    # Element access
    # ------------------------------------------------------------------

    def _element_offset(self, n: int, c: int, h: int, w: int, stacklevel: int) -> int:
        indices = []
        for axis, index, extent in zip(_AXES, (n, c, h, w), self._shape):
            check(
                isinstance(index, numbers.Integral),
                f"index {index!r} on axis '{axis}' is not an integer",
                error=OutOfRangeError,
                stacklevel=stacklevel + 1,
            )
            index = int(index)
            indices.append(index)
            check(
                0 <= index < extent,
                format_index_error(axis, index, extent),
                error=OutOfRangeError,
                expression=f"0 <= {index} < {extent}",
                stacklevel=stacklevel + 1,
            )
        n, c, h, w = indices
        strides = self._strides
        element = n * strides.block + c * strides.slice + h * strides.row + w
        return self._offset + element * self.element_size

    def at(
        self, n: int, c: int, h: int, w: int, depth: Optional[DepthLike] = None
    ) -> np.ndarray:
        """
        Bounds-checked typed slot for one element.

        Returns a 0-d numpy array aliasing the element; read it with
        ``slot.item()`` and write it with ``slot[()] = value``. If depth is
        given it must match the tensor's depth.
        """
        if depth is not None:
            check(
                _coerce_depth(depth) == self._depth,
                f"tensor of {depth_to_string(self._depth)} accessed as {depth!r}",
                error=CheckFailedError,
                stacklevel=2,
            )
        offset = self._element_offset(n, c, h, w, stacklevel=2)
        return np.ndarray(shape=(), dtype=self.dtype, buffer=self.data, offset=offset)

    def get(self, n: int, c: int, h: int, w: int):
        """Value of one element as a Python scalar."""
        offset = self._element_offset(n, c, h, w, stacklevel=2)
        return np.ndarray(shape=(), dtype=self.dtype, buffer=self.data, offset=offset).item()

    def set(self, n: int, c: int, h: int, w: int, value) -> None:
        """
        Write one element.

        The value is cast to the tensor's depth the way numpy's unsafe cast
        does: floats are truncated toward zero and integers wrap, so 300
        stored as UInt8 reads back as 44.
        """
        offset = self._element_offset(n, c, h, w, stacklevel=2)
        slot = np.ndarray(shape=(), dtype=self.dtype, buffer=self.data, offset=offset)
        slot[()] = np.asarray(value).astype(self.dtype)

    def __getitem__(self, key):
        if isinstance(key, Rect):
            return self.view(key)
        if isinstance(key, tuple) and len(key) == 4:
            return self.get(*key)
        raise TypeError(f"Tensor indices must be a Rect or (n, c, h, w), not {key!r}")

    def __setitem__(self, key, value) -> None:
        if isinstance(key, tuple) and len(key) == 4:
            self.set(*key, value)
            return
        raise TypeError(f"Tensor indices must be (n, c, h, w), not {key!r}")

    def load(self, values: Iterable) -> "Tensor":
        """
        Write values in NCHW order through the checked accessor.

        Nested lists are flattened. Fewer values than elements leave the
        rest untouched; more values than elements is fatal.
        """
        it = _flatten(values)
        for index in np.ndindex(*self._shape.as_tuple()):
            value = next(it, _MISSING)
            if value is _MISSING:
                return self
            self.set(*index, value)

        check(
            next(it, _MISSING) is _MISSING,
            f"more values than the {self._shape.numel()} elements of {self._shape!r}",
            error=OutOfRangeError,
            stacklevel=2,
        )
        return self

    def to_numpy(self) -> np.ndarray:
        """
        Strided numpy view of the visible elements, shaped (n, c, h, w).

        The result aliases the tensor's storage.
        """
        if self._shape.numel() == 0 or self._storage is None:
            return np.empty(self._shape.as_tuple(), dtype=self.dtype)

        esize = self.element_size
        strides = self._strides
        return np.ndarray(
            shape=self._shape.as_tuple(),
            dtype=self.dtype,
            buffer=self.data,
            offset=self._offset,
            strides=(strides.block * esize, strides.slice * esize, strides.row * esize, esize),
        )

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        from ..config import get_config
        from .formatter import BraceSet, format_tensor

        return format_tensor(self, braces=BraceSet.named(get_config().braces))

    def __repr__(self) -> str:
        if self._storage is None:
            ownership = "empty"
        elif self.owns_data:
            ownership = f"owned, refcount={self.ref_count}"
        else:
            ownership = "borrowed"
        view = ", view" if self._is_submatrix else ""
        return (
            f"Tensor(shape={self._shape.as_tuple()}, "
            f"depth={depth_to_string(self._depth)}, {ownership}{view})"
        )
