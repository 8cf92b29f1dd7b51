"""Reshaping of :class:`~facekit.mat.Mat` objects.

The data is shared with the source where the memory layout allows it. Otherwise
it is copied, which drops or adds the per-channel alignment padding.
"""

from __future__ import annotations

from typing import Optional

from facekit.mat import Mat, align_size


def _share(mat: Mat, dims: int, w: int, h: int, c: int, cstep: int) -> Mat:
    """Return a new header over ``mat``'s storage with a different layout."""
    view = Mat()
    view.data = mat.data
    view.elemsize = mat.elemsize
    view.elempack = mat.elempack
    view.dims = dims
    view.w, view.h, view.c = w, h, c
    view.cstep = cstep
    return view


def _flatten_into(mat: Mat, target: Mat) -> Mat:
    """Copy every channel of ``mat``, without padding, into the start of ``target``."""
    if mat.data is not None and target.data is not None:
        plane = mat.w * mat.h * mat.elempack
        channels = mat.data.reshape(mat.c, mat.cstep * mat.elempack)[:, :plane]
        target.data[: mat.c * plane] = channels.reshape(-1)
    return target


def _flatten(mat: Mat, w: int, h: Optional[int]) -> Mat:
    target = Mat(w, h, None, mat.elemsize, mat.elempack)
    return _flatten_into(mat, target)


def _align_channels(mat: Mat, w: int, h: int, c: int) -> Mat:
    """Spread densely packed data of ``mat`` over padded channels."""
    target = Mat(w, h, c, mat.elemsize, mat.elempack)
    if mat.data is not None and target.data is not None:
        plane = w * h * mat.elempack
        src = mat.data[: c * plane].reshape(c, plane)
        dst = target.data.reshape(c, target.cstep * target.elempack)
        dst[:, :plane] = src
    return target


def reshape(mat: Mat, w: int, h: Optional[int] = None, c: Optional[int] = None) -> Mat:
    """Reshape ``mat`` to a vector (w), an image (w, h) or a volume (w, h, c).

    Raises ``ValueError`` when the element counts of the two layouts differ.
    """
    if h is None and c is not None:
        raise ValueError("a channel count needs a height")
    new_h = 1 if h is None else h
    new_c = 1 if c is None else c
    if mat.w * mat.h * mat.c != w * new_h * new_c:
        raise ValueError(
            f"cannot reshape {mat.w}x{mat.h}x{mat.c} into {w}x{new_h}x{new_c}: "
            "element counts differ"
        )

    if c is None:
        dims = 1 if h is None else 2
        if mat.dims == 3 and mat.cstep != mat.w * mat.h:
            return _flatten(mat, w, h)
        return _share(mat, dims, w, new_h, 1, w * new_h)

    if mat.dims < 3:
        if w * h != align_size(w * h * mat.elemsize, 16) // mat.elemsize:
            return _align_channels(mat, w, h, c)
    elif mat.c != c:
        flat = reshape(mat, w * h * c)
        return reshape(flat, w, h, c)

    cstep = align_size(w * h * mat.elemsize, 16) // mat.elemsize if mat.elemsize else 0
    return _share(mat, 3, w, h, c, cstep)