import pytest

from facekit.geometry import Point, Rect, Size


def _contains(outer: Rect, inner: Rect) -> bool:
    return (
        outer.x <= inner.x
        and outer.y <= inner.y
        and outer.x + outer.width >= inner.x + inner.width
        and outer.y + outer.height >= inner.y + inner.height
    )


def test_defaults_are_zero():
    assert Size() == Size(0, 0)
    assert Point() == Point(0, 0)
    assert Rect() == Rect(0, 0, 0, 0)


def test_area_of_empty_rect_is_zero():
    assert Rect().area() == 0


def test_area_of_square():
    assert Rect(2, 3, 4, 4).area() == 16


def test_overlapping_intersection():
    assert Rect(0, 0, 10, 10) & Rect(5, 5, 10, 10) == Rect(5, 5, 5, 5)


def test_disjoint_intersection_is_empty():
    assert Rect(0, 0, 2, 2) & Rect(10, 10, 2, 2) == Rect()


def test_touching_edges_intersection_is_empty():
    assert Rect(0, 0, 4, 4) & Rect(4, 0, 4, 4) == Rect()


@pytest.mark.parametrize(
    "a,b",
    [
        (Rect(0, 0, 10, 10), Rect(5, 5, 10, 10)),
        (Rect(1, 2, 3, 4), Rect(-2, 0, 4, 9)),
        (Rect(0.5, 0.5, 2.0, 3.0), Rect(1.0, 0.0, 5.0, 1.5)),
        (Rect(0, 0, 2, 2), Rect(7, 7, 1, 1)),
    ],
)
def test_intersection_and_union_invariants(a, b):
    inter = a & b
    union = a | b
    assert inter == b & a
    assert union == b | a
    assert _contains(union, a)
    assert _contains(union, b)
    if inter != Rect():
        assert _contains(a, inter)
        assert _contains(b, inter)
    assert inter.area() <= min(a.area(), b.area())
    assert union.area() >= max(a.area(), b.area())


def test_self_intersection_and_union_are_identity():
    r = Rect(3, 4, 5, 6)
    assert r & r == r
    assert r | r == r


def test_union_of_disjoint_rects():
    assert Rect(0, 0, 2, 2) | Rect(8, 8, 2, 2) == Rect(0, 0, 10, 10)


def test_operators_reject_other_types():
    with pytest.raises(TypeError):
        Rect(0, 0, 1, 1) & (0, 0, 1, 1)
    with pytest.raises(TypeError):
        Rect(0, 0, 1, 1) | 5


def test_rect_is_immutable():
    r = Rect(1, 1, 1, 1)
    with pytest.raises(AttributeError):
        r.x = 5
    assert r == Rect(1, 1, 1, 1)
    assert r.area() == 1