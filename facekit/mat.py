"""A three-dimensional tensor with channel-aligned storage."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

_SCALAR_DTYPES = {
    4: np.dtype(np.float32),
    2: np.dtype(np.float16),
    1: np.dtype(np.uint8),
}
_DTYPE_ELEMSIZES = {dtype: size for size, dtype in _SCALAR_DTYPES.items()}


def align_size(size: int, n: int) -> int:
    """Round ``size`` up to the nearest multiple of ``n`` (a power of two)."""
    if n <= 0 or n & (n - 1):
        raise ValueError(f"alignment must be a positive power of two, got {n}")
    return (size + n - 1) & -n


@dataclass(frozen=True)
class Shape:
    """Plain shape description: rank and extents (0 means empty or variable)."""

    dims: int = 0
    w: int = 0
    h: int = 0
    c: int = 0


def _scalar_dtype(elemsize: int, elempack: int) -> np.dtype:
    if elempack <= 0 or elemsize % elempack:
        raise ValueError(f"elemsize {elemsize} is not divisible by elempack {elempack}")
    scalar = elemsize // elempack
    try:
        return _SCALAR_DTYPES[scalar]
    except KeyError:
        raise ValueError(f"unsupported scalar size {scalar} bytes") from None


class Mat:
    """Up to three-dimensional matrix; each channel starts on a 16-byte boundary.

    ``data`` is a flat numpy array holding ``total() * elempack`` scalars,
    or ``None`` when nothing is allocated.
    """

    def __init__(
        self,
        w: Optional[int] = None,
        h: Optional[int] = None,
        c: Optional[int] = None,
        elemsize: int = 4,
        elempack: int = 1,
    ) -> None:
        self._reset()
        if w is not None:
            self.create(w, h, c, elemsize, elempack)

    def _reset(self) -> None:
        self.data: Optional[np.ndarray] = None
        self.elemsize = 0
        self.elempack = 0
        self.dims = 0
        self.w = 0
        self.h = 0
        self.c = 0
        self.cstep = 0

    @classmethod
    def from_array(cls, array) -> "Mat":
        """Build a Mat from a 1-D (w), 2-D (h, w) or 3-D (c, h, w) array."""
        arr = np.asarray(array)
        dtype = arr.dtype if arr.dtype in _DTYPE_ELEMSIZES else np.dtype(np.float32)
        arr = arr.astype(dtype, copy=False)
        elemsize = _DTYPE_ELEMSIZES[dtype]
        if arr.ndim == 1:
            mat = cls(arr.shape[0], elemsize=elemsize)
        elif arr.ndim == 2:
            mat = cls(arr.shape[1], arr.shape[0], elemsize=elemsize)
        elif arr.ndim == 3:
            mat = cls(arr.shape[2], arr.shape[1], arr.shape[0], elemsize=elemsize)
        else:
            raise ValueError(f"expected an array of 1 to 3 dimensions, got {arr.ndim}")
        if mat.data is not None:
            plane = mat.w * mat.h
            mat.data.reshape(mat.c, mat.cstep)[:, :plane] = arr.reshape(mat.c, plane)
        return mat

    def to_array(self) -> np.ndarray:
        """Return a copy of the contents without channel padding.

        The result has shape (w,), (h, w) or (c, h, w), with a trailing
        pack axis when ``elempack`` is greater than one.
        """
        if self.data is None or self.dims == 0:
            return np.empty(0, dtype=np.float32)
        pack = self.elempack
        plane = self.w * self.h * pack
        channels = self.data.reshape(self.c, self.cstep * pack)[:, :plane]
        if self.dims == 1:
            shape: tuple = (self.w,)
        elif self.dims == 2:
            shape = (self.h, self.w)
        else:
            shape = (self.c, self.h, self.w)
        if pack > 1:
            shape = shape + (pack,)
        return channels.reshape(shape).copy()

    def create(
        self,
        w: int,
        h: Optional[int] = None,
        c: Optional[int] = None,
        elemsize: int = 4,
        elempack: int = 1,
    ) -> None:
        """Allocate storage; a Mat that already has this layout is left as is."""
        dims = 1 if h is None else (2 if c is None else 3)
        h = 1 if h is None else h
        c = 1 if c is None else c
        if min(w, h, c) < 0:
            raise ValueError("dimensions must not be negative")
        dtype = _scalar_dtype(elemsize, elempack)
        if (
            self.dims == dims
            and self.w == w
            and self.h == h
            and self.c == c
            and self.elemsize == elemsize
            and self.elempack == elempack
        ):
            return

        self._reset()
        self.elemsize = elemsize
        self.elempack = elempack
        self.dims = dims
        self.w, self.h, self.c = w, h, c
        if dims == 3:
            self.cstep = align_size(w * h * elemsize, 16) // elemsize
        else:
            self.cstep = w * h
        if self.total() > 0:
            self.data = np.zeros(self.total() * elempack, dtype=dtype)

    def create_like(self, other: "Mat") -> None:
        """Allocate with the same layout as ``other``."""
        if other.dims == 1:
            self.create(other.w, None, None, other.elemsize, other.elempack)
        elif other.dims == 2:
            self.create(other.w, other.h, None, other.elemsize, other.elempack)
        elif other.dims == 3:
            self.create(other.w, other.h, other.c, other.elemsize, other.elempack)

    def fill(self, value) -> None:
        """Set every element, channel padding included, to ``value``."""
        if self.data is not None:
            self.data[:] = value

    def clone(self) -> "Mat":
        """Deep copy."""
        if self.empty():
            return Mat()
        copy = Mat()
        copy.create_like(self)
        copy.data[:] = self.data
        return copy

    def empty(self) -> bool:
        return self.data is None or self.total() == 0

    def total(self) -> int:
        """Number of elements including channel padding."""
        return self.cstep * self.c

    def shape(self) -> Shape:
        return Shape(self.dims, self.w, self.h, self.c)

    def substract_mean_normalize(
        self,
        mean_vals: Optional[Sequence[float]],
        norm_vals: Optional[Sequence[float]],
    ) -> None:
        """Per channel, subtract the mean then multiply by the norm; ``None`` skips either."""
        if self.empty() or (mean_vals is None and norm_vals is None):
            return
        for name, values in (("mean", mean_vals), ("norm", norm_vals)):
            if values is not None and len(values) < self.c:
                raise ValueError(f"{name} values cover {len(values)} of {self.c} channels")
        plane = self.w * self.h * self.elempack
        channels = self.data.reshape(self.c, self.cstep * self.elempack)
        for q, chan in enumerate(channels):
            view = chan[:plane]
            if mean_vals is not None:
                view -= view.dtype.type(mean_vals[q])
            if norm_vals is not None:
                view *= view.dtype.type(norm_vals[q])

    def __getitem__(self, index: int):
        if self.data is None:
            raise IndexError("Mat is empty")
        return self.data[index]

    def __setitem__(self, index: int, value) -> None:
        if self.data is None:
            raise IndexError("Mat is empty")
        self.data[index] = value

    def __repr__(self) -> str:
        return (
            f"Mat(dims={self.dims}, w={self.w}, h={self.h}, c={self.c}, "
            f"elemsize={self.elemsize}, elempack={self.elempack}, cstep={self.cstep})"
        )