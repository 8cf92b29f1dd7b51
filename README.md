# facekit

This package holds the parts of a face recognition pipeline that come before
and after the neural networks. It generates prior anchors and decodes boxes
for a detector with five landmarks. It runs non-maximum suppression, aligns a
face to a 112×112 crop from its landmarks, and compares embedding vectors.
It also has a small channel-aligned tensor type, `Mat`, that is used to pass
images to the networks.

The networks are not part of the package. You pass in a callable that runs
your model with whatever inference runtime you use.

## Installation

```
pip install facekit
```

The only runtime dependency is numpy.

## Detection

`facekit.detector.Detector(forward, threshold=0.6, nms_threshold=0.4, mean_vals=(104.0, 117.0, 123.0))`
wraps a detection network. `forward` receives the input `Mat` and returns a
tuple `(loc, conf, landms)`. These hold four box offsets, two class scores and
ten landmark offsets per anchor, as numpy arrays, sequences or `Mat`s.

`Detector.detect(image)` works in these steps:

1. Subtracts `mean_vals` from each channel of `image`, in place.
2. Calls `forward`.
3. Builds anchors for `image.w` × `image.h`.
4. Decodes the outputs and keeps the boxes whose face score (the second class
   score) is above `threshold`.
5. Sorts them by score, best first, and applies NMS.

```python
from facekit.detector import Detector

detector = Detector(forward=run_detection_model)
faces = detector.detect(image)   # image is a facekit.mat.Mat (c, h, w)
for face in faces:
    print(face.x1, face.y1, face.x2, face.y2, face.score, face.points)
```

Each result is a frozen `FaceBox` with corners `x1, y1, x2, y2`, a `score`,
and five landmark `points` (`facekit.geometry.Point`). All coordinates are
relative to the image. The corners are clipped to the range 0 to 1.

The steps are also available on their own:

- `create_anchors(width, height)` returns the list of `Anchor(cx, cy, sx, sy)`
  prior boxes. It uses steps 8, 16, 32 and 64 with the minimum sizes
  (10, 16, 24), (32, 48), (64, 96) and (128, 192, 256). It raises `ValueError`
  when the size is not positive.
- `decode(loc, conf, landms, anchors, threshold)` turns raw outputs into
  `FaceBox`es. It raises `ValueError` when an output covers fewer anchors than
  it is given.
- `nms(boxes, img_w, img_h, threshold)` does greedy suppression in the order
  the boxes are given. A box is dropped when its overlap ratio with a box
  already kept reaches `threshold`.

### Alignment

`align_face(image, face_box)` takes a numpy image of shape (H, W) or (H, W, C).
It returns a 112×112 crop, warped bilinearly with a zero border. The affine
transform maps the first three landmarks of `face_box` onto fixed reference
positions, which are in `REFERENCE_LANDMARKS`.

The landmarks are used as pixel coordinates. A box from `detect` has relative
landmarks, so scale them to pixels first:

```python
from facekit.detector import FaceBox, align_face
from facekit.geometry import Point

h, w = image_array.shape[:2]
pixel_face = FaceBox(
    face.x1, face.y1, face.x2, face.y2, face.score,
    tuple(Point(p.x * w, p.y * h) for p in face.points),
)
crop = align_face(image_array, pixel_face)
```

If the three landmarks are collinear, `align_face` raises `ValueError`.

## Embeddings

`facekit.embedder.Embedder(forward, mean_vals=(104.0, 117.0, 123.0))` wraps an
embedding network. `Embedder.embed(image, normalize=True)` works as follows:

- When `normalize` is true, it first subtracts the channel means in place.
- It then calls `forward(image)`.
- It returns the output, flattened, as a list of floats.

```python
from facekit.embedder import Embedder, cosine_distance, l2_similarity, normalize

embedder = Embedder(forward=run_embedding_model)
a = normalize(embedder.embed(face_a))
b = normalize(embedder.embed(face_b))
print(cosine_distance(a, b), l2_similarity(a, b))
```

- `normalize(vector)` returns the vector scaled to unit length. It raises
  `ValueError` on a zero vector.
- `cosine_distance(a, b)` returns one minus the cosine of the angle between the
  vectors. It raises `ValueError` when the lengths differ, when the vectors are
  empty, or when either is a zero vector.
- `l2_similarity(v1, v2)` returns one minus the dot product, or 0 when the
  product is negative. It raises `ValueError` when the lengths differ.

## Tensors

`facekit.mat.Mat(w, h=None, c=None, elemsize=4, elempack=1)` is a 1-, 2- or
3-dimensional matrix. Its storage is a flat numpy array in `data`. In three
dimensions, each channel starts on a 16-byte boundary, and `cstep` is the
channel stride in elements. Element sizes of 4, 2 and 1 bytes map to float32,
float16 and uint8.

- `Mat.from_array(array)` builds a Mat from a (w,), (h, w) or (c, h, w) array.
  Arrays of other dtypes are converted to float32.
- `to_array()` returns a copy without the channel padding.
- `create`, `create_like`, `fill`, `clone`, `empty`, `total` and `shape`
  manage the storage. `shape()` returns a `Shape`.
- `substract_mean_normalize(mean_vals, norm_vals)` subtracts a mean from each
  channel and then multiplies by a norm. Pass `None` to skip either step.
- Indexing a Mat reads and writes its flat storage.

`align_size(size, n)` rounds a size up to a multiple of a power of two.

`facekit.reshape.reshape(mat, w, h=None, c=None)` reshapes a Mat. It shares the
storage when the layout allows it and copies otherwise. It raises `ValueError`
when the element counts differ.

`facekit.views` gives views that share storage with the source Mat:

- `channel(mat, index)`
- `row(mat, y)`, which returns a numpy view
- `channel_range(mat, c, channels)`
- `row_range(mat, y, rows)`
- `range_of(mat, x, n)`

A view that falls outside the storage raises `IndexError`.

## Geometry and layer types

`facekit.geometry` provides frozen `Size`, `Point` and `Rect` values.

- `Rect.area()` returns width times height.
- `a & b` is the intersection of two rects. It is an empty `Rect()` when they do
  not overlap.
- `a | b` is the smallest rect that contains both.

`facekit.layer_type.LayerType` is an `IntEnum` of the built-in layer types with
their registry indices, from `AbsVal = 0` to `Noop = 68`.

- `LayerType.from_name(name)` looks a type up by its exact name. It raises
  `ValueError` for an unknown name.
- `LayerType.is_custom(index)` tells whether an index has the custom-layer bit
  (`CUSTOM_BIT`, 256) set.

## What the package does not do

- It does not load or run neural networks; that is the job of the `forward`
  callables you supply.
- It does not read, decode or capture images.
- It has no command-line tool.

## Running the tests

```
pip install -e .[test]
pytest
```