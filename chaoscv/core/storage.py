# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Tensor storage: owned, reference-counted allocations and borrowed memory.

A tensor handle holds exactly one of:

- OwnedStorage: a reference to a shared Allocation. Every handle that
  refers to the allocation accounts for one reference; the byte region is
  dropped when the last reference is released.
- BorrowedStorage: a byte view over memory owned by the caller. There is
  no reference count and the tensor never frees it.
- None: an empty handle.

Regions are flat numpy uint8 arrays; typed element views are built over
them with explicit offsets and strides.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from ..checks import check
from ..errors import ReleaseError

logger = logging.getLogger("chaoscv.core.storage")


class Allocation:
    """
    A zero-initialized byte region shared by one or more tensor handles.

    Thread Safety: retain and release are protected by a lock. Element
    access through the region is not synchronized.
    """

    def __init__(self, nbytes: int):
        self._region: Optional[np.ndarray] = np.zeros(nbytes, dtype=np.uint8)
        self._nbytes = nbytes
        self._refcount = 1
        self._lock = threading.Lock()
        logger.debug(f"Allocated {nbytes} bytes at {id(self):#x}")

    @property
    def region(self) -> Optional[np.ndarray]:
        """The byte region, or None once freed."""
        return self._region

    @property
    def nbytes(self) -> int:
        return self._nbytes

    @property
    def refcount(self) -> int:
        return self._refcount

    @property
    def freed(self) -> bool:
        return self._region is None

    def retain(self) -> None:
        """Account for one more handle."""
        with self._lock:
            check(
                self._region is not None,
                "retain on a freed allocation",
                error=ReleaseError,
                stacklevel=2,
            )
            self._refcount += 1

    def release(self) -> bool:
        """
        Drop one handle's reference.

        Returns:
            True if this call freed the region.
        """
        with self._lock:
            check(
                self._refcount > 0,
                f"allocation at {id(self):#x} released more often than retained",
                error=ReleaseError,
                expression=f"{self._refcount} > 0",
                stacklevel=2,
            )
            self._refcount -= 1
            if self._refcount > 0:
                return False
            self._region = None

        logger.debug(f"Freed {self._nbytes} bytes at {id(self):#x}")
        return True

    def __repr__(self) -> str:
        state = "freed" if self.freed else f"refcount={self._refcount}"
        return f"Allocation(nbytes={self._nbytes}, {state})"


@dataclass(frozen=True)
class OwnedStorage:
    """Storage backed by a reference-counted Allocation."""

    allocation: Allocation

    @property
    def region(self) -> np.ndarray:
        return self.allocation.region

    @property
    def ref_count(self) -> Optional[int]:
        return self.allocation.refcount


@dataclass(frozen=True)
class BorrowedStorage:
    """Storage over caller-owned memory; never freed by a tensor."""

    region: np.ndarray

    @property
    def ref_count(self) -> Optional[int]:
        return None

    @classmethod
    def wrap(cls, data) -> "BorrowedStorage":
        """
        View any C-contiguous buffer (bytearray, numpy array, memoryview)
        as bytes without copying.
        """
        view = memoryview(data)
        if view.format != "B" or view.ndim != 1:
            view = view.cast("B")
        return cls(np.frombuffer(view, dtype=np.uint8))


Storage = Union[OwnedStorage, BorrowedStorage]
