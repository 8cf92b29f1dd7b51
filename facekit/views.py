"""Views into a :class:`~facekit.mat.Mat` that share its storage.

Every function here returns something backed by the same numpy buffer as the
source matrix, so writes through a view are visible in the source and the
other way round.
"""

from __future__ import annotations

import numpy as np

from facekit.mat import Mat, align_size


def _storage(mat: Mat) -> np.ndarray:
    if mat.data is None:
        raise ValueError("Mat is empty")
    return mat.data


def _slice(mat: Mat, start: int, count: int) -> np.ndarray:
    """Return ``count`` elements of ``mat`` starting at element ``start``."""
    data = _storage(mat)
    if start < 0 or count < 0:
        raise IndexError("view start and size must not be negative")
    pack = mat.elempack
    begin = start * pack
    end = (start + count) * pack
    if end > data.shape[0]:
        raise IndexError(
            f"view of {count} elements at {start} exceeds storage of "
            f"{data.shape[0] // pack} elements"
        )
    return data[begin:end]


def _header(mat: Mat, data: np.ndarray, dims: int, w: int, h: int, c: int, cstep: int) -> Mat:
    view = Mat()
    view.data = data
    view.elemsize = mat.elemsize
    view.elempack = mat.elempack
    view.dims = dims
    view.w, view.h, view.c = w, h, c
    view.cstep = cstep
    return view


def channel(mat: Mat, index: int) -> Mat:
    """Return channel ``index`` as a two-dimensional Mat sharing ``mat``'s data."""
    if not 0 <= index < mat.c:
        raise IndexError(f"channel {index} out of range for {mat.c} channels")
    plane = mat.w * mat.h
    data = _slice(mat, mat.cstep * index, plane)
    return _header(mat, data, 2, mat.w, mat.h, 1, plane)


def row(mat: Mat, y: int) -> np.ndarray:
    """Return row ``y`` (counted from the start of the storage) as a numpy view."""
    if y < 0:
        raise IndexError(f"row {y} must not be negative")
    return _slice(mat, mat.w * y, mat.w)


def channel_range(mat: Mat, c: int, channels: int) -> Mat:
    """Return ``channels`` consecutive channels starting at ``c`` as a 3-D Mat."""
    if c < 0 or channels < 0 or c + channels > mat.c:
        raise IndexError(f"channels {c}..{c + channels} out of range for {mat.c} channels")
    elemsize = mat.elemsize
    cstep = align_size(mat.w * mat.h * elemsize, 16) // elemsize
    data = _slice(mat, mat.cstep * c, cstep * channels)
    return _header(mat, data, 3, mat.w, mat.h, channels, cstep)


def row_range(mat: Mat, y: int, rows: int) -> Mat:
    """Return ``rows`` consecutive rows starting at ``y`` as a 2-D Mat."""
    data = _slice(mat, mat.w * y, mat.w * rows)
    return _header(mat, data, 2, mat.w, rows, 1, mat.w * rows)


def range_of(mat: Mat, x: int, n: int) -> Mat:
    """Return ``n`` consecutive elements starting at ``x`` as a 1-D Mat."""
    data = _slice(mat, x, n)
    return _header(mat, data, 1, n, 1, 1, n)