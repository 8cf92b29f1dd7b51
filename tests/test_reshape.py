import numpy as np
import pytest

from facekit.mat import Mat
from facekit.reshape import reshape


def test_image_to_vector_preserves_values():
    src = Mat.from_array(np.arange(6, dtype=np.float32).reshape(2, 3))
    out = reshape(src, 6)
    assert out.dims == 1
    assert (out.w, out.h, out.c) == (6, 1, 1)
    np.testing.assert_array_equal(out.to_array(), np.arange(6, dtype=np.float32))


def test_image_to_vector_shares_storage():
    src = Mat.from_array(np.arange(6, dtype=np.float32).reshape(2, 3))
    out = reshape(src, 6)
    out.data[0] = 42.0
    assert src.to_array()[0, 0] == 42.0


def test_padded_volume_to_vector_copies():
    values = np.arange(6, dtype=np.float32).reshape(2, 1, 3)
    src = Mat.from_array(values)
    assert src.cstep != src.w * src.h
    out = reshape(src, 6)
    np.testing.assert_array_equal(out.to_array(), values.reshape(-1))
    out.data[0] = 99.0
    np.testing.assert_array_equal(src.to_array(), values)


def test_unpadded_volume_to_vector_shares():
    values = np.arange(8, dtype=np.float32).reshape(2, 2, 2)
    src = Mat.from_array(values)
    assert src.cstep == src.w * src.h
    out = reshape(src, 8)
    np.testing.assert_array_equal(out.to_array(), values.reshape(-1))
    out.data[0] = -1.0
    assert src.to_array()[0, 0, 0] == -1.0


def test_padded_volume_to_image():
    values = np.arange(6, dtype=np.float32).reshape(2, 1, 3)
    src = Mat.from_array(values)
    out = reshape(src, 2, 3)
    assert out.dims == 2
    np.testing.assert_array_equal(out.to_array(), values.reshape(3, 2))


def test_image_to_image():
    values = np.arange(6, dtype=np.float32).reshape(2, 3)
    out = reshape(Mat.from_array(values), 2, 3)
    assert (out.w, out.h) == (2, 3)
    np.testing.assert_array_equal(out.to_array(), values.reshape(3, 2))


def test_vector_to_volume_adds_alignment():
    values = np.arange(6, dtype=np.float32)
    out = reshape(Mat.from_array(values), 3, 1, 2)
    assert out.dims == 3
    assert out.cstep >= out.w * out.h
    np.testing.assert_array_equal(out.to_array(), values.reshape(2, 1, 3))


def test_vector_to_aligned_volume_shares():
    values = np.arange(8, dtype=np.float32)
    src = Mat.from_array(values)
    out = reshape(src, 2, 2, 2)
    np.testing.assert_array_equal(out.to_array(), values.reshape(2, 2, 2))
    out.data[7] = 100.0
    assert src.to_array()[7] == 100.0


def test_volume_channel_change():
    values = np.arange(6, dtype=np.float32).reshape(2, 1, 3)
    out = reshape(Mat.from_array(values), 1, 1, 6)
    assert (out.w, out.h, out.c) == (1, 1, 6)
    np.testing.assert_array_equal(out.to_array(), values.reshape(6, 1, 1))


def test_volume_same_channels_shares():
    values = np.arange(12, dtype=np.float32).reshape(2, 2, 3)
    src = Mat.from_array(values)
    out = reshape(src, 3, 2, 2)
    np.testing.assert_array_equal(out.to_array(), values.reshape(2, 2, 3))
    assert out.data is src.data


def test_round_trip_volume_vector_volume():
    values = np.arange(30, dtype=np.float32).reshape(3, 2, 5)
    src = Mat.from_array(values)
    back = reshape(reshape(src, 30), 5, 2, 3)
    np.testing.assert_array_equal(back.to_array(), values)


def test_element_type_kept():
    values = np.arange(6, dtype=np.uint8).reshape(2, 1, 3)
    out = reshape(Mat.from_array(values), 6)
    assert out.elemsize == 1
    assert out.to_array().dtype == np.uint8
    np.testing.assert_array_equal(out.to_array(), values.reshape(-1))


@pytest.mark.parametrize(
    "shape",
    [(5, None, None), (2, 2, None), (1, 1, 7), (3, 3, 3)],
)
def test_mismatched_count_raises(shape):
    src = Mat.from_array(np.arange(6, dtype=np.float32).reshape(2, 3))
    with pytest.raises(ValueError):
        reshape(src, *shape)


def test_channels_without_height_raises():
    src = Mat.from_array(np.arange(6, dtype=np.float32))
    with pytest.raises(ValueError):
        reshape(src, 3, None, 2)