"""Face detection post-processing: prior anchors, box decoding, NMS and alignment."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from facekit.geometry import Point, Size
from facekit.mat import Mat

STEPS = (8, 16, 32, 64)
MIN_SIZES = ((10, 16, 24), (32, 48), (64, 96), (128, 192, 256))
CENTER_VARIANCE = 0.1
SIZE_VARIANCE = 0.2
DEFAULT_MEAN_VALS = (104.0, 117.0, 123.0)

ALIGNED_SIZE = Size(112, 112)
REFERENCE_LANDMARKS = (
    Point(38.2946, 51.6963),
    Point(73.5318, 51.5014),
    Point(56.0252, 71.7366),
    Point(41.5493, 92.3655),
    Point(70.7299, 92.2041),
)
"""Where the eyes, nose tip and mouth corners land in a 112x112 aligned face."""


def _default_points() -> Tuple[Point, ...]:
    return tuple(Point(0.0, 0.0) for _ in range(5))


@dataclass(frozen=True)
class Anchor:
    """A prior box: centre and size, relative to the image."""

    cx: float
    cy: float
    sx: float
    sy: float


@dataclass(frozen=True)
class FaceBox:
    """A detected face: corners, confidence and five landmarks."""

    x1: float
    y1: float
    x2: float
    y2: float
    score: float
    points: Tuple[Point, ...] = field(default_factory=_default_points)


def create_anchors(width: int, height: int) -> List[Anchor]:
    """Prior boxes for an input of ``width`` x ``height`` pixels, coarsest level last."""
    if width <= 0 or height <= 0:
        raise ValueError("image size must be positive")
    anchors: List[Anchor] = []
    for step, min_sizes in zip(STEPS, MIN_SIZES):
        rows = math.ceil(height / step)
        cols = math.ceil(width / step)
        for i in range(rows):
            for j in range(cols):
                cx = (j + 0.5) * step / width
                cy = (i + 0.5) * step / height
                anchors.extend(
                    Anchor(cx, cy, size / width, size / height) for size in min_sizes
                )
    return anchors


def _to_array(values, columns: int, name: str) -> np.ndarray:
    if isinstance(values, Mat):
        values = values.to_array()
    arr = np.asarray(values, dtype=np.float64)
    if arr.size % columns:
        raise ValueError(f"{name} holds {arr.size} values, not a multiple of {columns}")
    return arr.reshape(-1, columns)


def decode(loc, conf, landms, anchors: Sequence[Anchor], threshold: float) -> List[FaceBox]:
    """Turn raw network outputs into boxes for every anchor whose face score exceeds ``threshold``.

    ``loc`` has four offsets per anchor, ``conf`` two class scores and
    ``landms`` ten landmark offsets. Box corners are clipped to [0, 1].
    """
    loc_arr = _to_array(loc, 4, "loc")
    conf_arr = _to_array(conf, 2, "conf")
    landm_arr = _to_array(landms, 10, "landms")
    count = len(anchors)
    for name, arr in (("loc", loc_arr), ("conf", conf_arr), ("landms", landm_arr)):
        if len(arr) < count:
            raise ValueError(f"{name} covers {len(arr)} of {count} anchors")

    boxes: List[FaceBox] = []
    for anchor, offsets, scores, marks in zip(anchors, loc_arr, conf_arr, landm_arr):
        score = scores[1]
        if not score > threshold:
            continue
        cx = anchor.cx + offsets[0] * CENTER_VARIANCE * anchor.sx
        cy = anchor.cy + offsets[1] * CENTER_VARIANCE * anchor.sy
        sx = anchor.sx * math.exp(offsets[2] * SIZE_VARIANCE)
        sy = anchor.sy * math.exp(offsets[3] * SIZE_VARIANCE)
        points = tuple(
            Point(
                float(anchor.cx + dx * CENTER_VARIANCE * anchor.sx),
                float(anchor.cy + dy * CENTER_VARIANCE * anchor.sy),
            )
            for dx, dy in marks.reshape(5, 2)
        )
        boxes.append(
            FaceBox(
                x1=float(max(cx - sx / 2, 0.0)),
                y1=float(max(cy - sy / 2, 0.0)),
                x2=float(min(cx + sx / 2, 1.0)),
                y2=float(min(cy + sy / 2, 1.0)),
                score=float(score),
                points=points,
            )
        )
    return boxes


def _area(box: FaceBox, img_w: int, img_h: int) -> float:
    return (box.x2 * img_w - box.x1 * img_w + 1) * (box.y2 * img_h - box.y1 * img_h + 1)


def nms(boxes: Sequence[FaceBox], img_w: int, img_h: int, threshold: float) -> List[FaceBox]:
    """Greedy non-maximum suppression in the given order.

    A box is dropped when its overlap ratio with an earlier kept box reaches
    ``threshold``. Coordinates are scaled to pixels before comparing.
    """
    kept: List[Tuple[FaceBox, float]] = []
    for box in boxes:
        area = _area(box, img_w, img_h)
        suppressed = False
        for other, other_area in kept:
            xx1 = max(other.x1 * img_w, box.x1 * img_w)
            yy1 = max(other.y1 * img_h, box.y1 * img_h)
            xx2 = min(other.x2 * img_w, box.x2 * img_w)
            yy2 = min(other.y2 * img_h, box.y2 * img_h)
            inter = max(0.0, xx2 - xx1 + 1) * max(0.0, yy2 - yy1 + 1)
            if inter / (other_area + area - inter) >= threshold:
                suppressed = True
                break
        if not suppressed:
            kept.append((box, area))
    return [box for box, _ in kept]


def _affine_from_points(src: Sequence[Point], dst: Sequence[Point]) -> np.ndarray:
    """The 2x3 affine matrix mapping the first three ``src`` points onto ``dst``."""
    a = np.array([[p.x, p.y, 1.0] for p in src[:3]], dtype=np.float64)
    b = np.array([[p.x, p.y] for p in dst[:3]], dtype=np.float64)
    if abs(np.linalg.det(a)) < 1e-12:
        raise ValueError("landmarks are collinear; no affine transform exists")
    return np.linalg.solve(a, b).T


def _warp_affine(image: np.ndarray, matrix: np.ndarray, size: Size) -> np.ndarray:
    """Bilinear warp with a zero border, in the manner of a forward affine map."""
    squeeze = image.ndim == 2
    work = image[:, :, None] if squeeze else image
    src = work.astype(np.float64)
    height, width = src.shape[:2]

    full = np.vstack([matrix, [0.0, 0.0, 1.0]])
    inverse = np.linalg.inv(full)
    ys, xs = np.mgrid[0 : size.height, 0 : size.width].astype(np.float64)
    sx = inverse[0, 0] * xs + inverse[0, 1] * ys + inverse[0, 2]
    sy = inverse[1, 0] * xs + inverse[1, 1] * ys + inverse[1, 2]

    x0 = np.floor(sx).astype(np.int64)
    y0 = np.floor(sy).astype(np.int64)
    fx = (sx - x0)[:, :, None]
    fy = (sy - y0)[:, :, None]

    def sample(yi: np.ndarray, xi: np.ndarray) -> np.ndarray:
        inside = (xi >= 0) & (xi < width) & (yi >= 0) & (yi < height)
        values = src[np.clip(yi, 0, height - 1), np.clip(xi, 0, width - 1)]
        return np.where(inside[:, :, None], values, 0.0)

    out = (
        sample(y0, x0) * (1 - fx) * (1 - fy)
        + sample(y0, x0 + 1) * fx * (1 - fy)
        + sample(y0 + 1, x0) * (1 - fx) * fy
        + sample(y0 + 1, x0 + 1) * fx * fy
    )
    if squeeze:
        out = out[:, :, 0]
    if np.issubdtype(image.dtype, np.integer):
        info = np.iinfo(image.dtype)
        return np.clip(np.rint(out), info.min, info.max).astype(image.dtype)
    return out.astype(image.dtype)


def align_face(image, face_box: FaceBox) -> np.ndarray:
    """Warp ``image`` (H, W) or (H, W, C) so the landmarks meet the reference positions.

    The transform is fixed by the first three landmarks; the result is 112x112.
    """
    arr = np.asarray(image)
    if arr.ndim not in (2, 3):
        raise ValueError(f"expected a 2-D or 3-D image, got {arr.ndim} dimensions")
    if len(face_box.points) < 3:
        raise ValueError("at least three landmarks are needed")
    matrix = _affine_from_points(face_box.points, REFERENCE_LANDMARKS)
    return _warp_affine(arr, matrix, ALIGNED_SIZE)


Forward = Callable[[Mat], Tuple[object, object, object]]


class Detector:
    """Runs a face network through ``forward`` and post-processes its outputs.

    ``forward`` receives the normalised input Mat and returns the location,
    class-score and landmark outputs, one row per anchor.
    """

    def __init__(
        self,
        forward: Forward,
        threshold: float = 0.6,
        nms_threshold: float = 0.4,
        mean_vals: Optional[Sequence[float]] = DEFAULT_MEAN_VALS,
    ) -> None:
        self.forward = forward
        self.threshold = threshold
        self.nms_threshold = nms_threshold
        self.mean_vals = None if mean_vals is None else tuple(mean_vals)

    def detect(self, image: Mat) -> List[FaceBox]:
        """Detect faces, best score first. The image is mean-subtracted in place."""
        image.substract_mean_normalize(self.mean_vals, None)
        loc, conf, landms = self.forward(image)
        anchors = create_anchors(image.w, image.h)
        boxes = decode(loc, conf, landms, anchors, self.threshold)
        boxes.sort(key=lambda box: box.score, reverse=True)
        return nms(boxes, image.w, image.h, self.nms_threshold)