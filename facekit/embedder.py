"""Face embeddings and the distances used to compare them."""

from __future__ import annotations

import math
from typing import Callable, List, Optional, Sequence

import numpy as np

from facekit.mat import Mat

DEFAULT_MEAN_VALS = (104.0, 117.0, 123.0)


def l2_similarity(v1: Sequence[float], v2: Sequence[float]) -> float:
    """One minus the dot product of two unit vectors, or 0 when the product is negative."""
    if len(v1) != len(v2):
        raise ValueError("Wrong size")
    mul = sum(a * b for a, b in zip(v1, v2))
    if mul < 0:
        return 0.0
    return 1.0 - mul


def cosine_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """One minus the cosine of the angle between ``a`` and ``b``."""
    if len(a) != len(b):
        raise ValueError("Vector A and Vector B are not the same size")
    if len(a) < 1:
        raise ValueError("Vector A and Vector B are empty")
    mul = sum(x * y for x, y in zip(a, b))
    d_a = sum(x * x for x in a)
    d_b = sum(y * y for y in b)
    if d_a == 0.0 or d_b == 0.0:
        raise ValueError(
            "cosine similarity is not defined whenever one or both "
            "input vectors are zero-vectors."
        )
    return 1.0 - mul / (math.sqrt(d_a) * math.sqrt(d_b))


def normalize(vector: Sequence[float]) -> List[float]:
    """Return ``vector`` scaled to unit length."""
    magnitude = math.sqrt(sum(x * x for x in vector))
    if magnitude == 0:
        raise ValueError("The input vector is a zero vector")
    return [x / magnitude for x in vector]


class Embedder:
    """Computes face embeddings with a network reached through ``forward``.

    ``forward`` receives the input Mat and returns the embedding vector.
    """

    def __init__(
        self,
        forward: Callable[[Mat], object],
        mean_vals: Optional[Sequence[float]] = DEFAULT_MEAN_VALS,
    ) -> None:
        self.forward = forward
        self.mean_vals = None if mean_vals is None else tuple(mean_vals)

    def embed(self, image: Mat, normalize: bool = True) -> List[float]:
        """Embed ``image``; with ``normalize`` its channel means are subtracted in place first."""
        if normalize:
            image.substract_mean_normalize(self.mean_vals, None)
        out = self.forward(image)
        if isinstance(out, Mat):
            out = out.to_array()
        return [float(v) for v in np.asarray(out, dtype=np.float32).ravel()]