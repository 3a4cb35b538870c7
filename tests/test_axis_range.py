import pytest

from iftkit.axis_range import AxisRange


def test_intersection():
    a = AxisRange.range(1, 4)
    b = AxisRange.range(5, 9)
    assert not a.intersects(b)
    assert not b.intersects(a)

    c = AxisRange.range(1, 5)
    d = AxisRange.range(5, 9)
    assert c.intersects(d)
    assert d.intersects(c)

    e = AxisRange.range(1, 8)
    f = AxisRange.range(3, 6)
    assert e.intersects(f)
    assert f.intersects(e)

    g = AxisRange.range(5, 5)
    assert not a.intersects(g)
    assert not g.intersects(a)

    assert c.intersects(g)
    assert g.intersects(c)

    assert f.intersects(g)
    assert g.intersects(f)


def test_creation():
    point = AxisRange.point(1.5)
    assert point.start == 1.5
    assert point.end == 1.5

    r = AxisRange.range(2.5, 3.5)
    assert r.start == 2.5
    assert r.end == 3.5

    r = AxisRange.range(2, 2)
    assert r.start == 2
    assert r.end == 2

    with pytest.raises(ValueError):
        AxisRange.range(3, 2)


def test_point_and_range_flags():
    assert AxisRange.point(4).is_point()
    assert not AxisRange.point(4).is_range()
    assert AxisRange.range(1, 2).is_range()
    assert not AxisRange.range(1, 2).is_point()


def test_default_is_zero_point():
    default = AxisRange()
    assert default == AxisRange.point(0)
    assert default.is_point()


def test_equality_and_hash():
    assert AxisRange.range(100, 900) == AxisRange.range(100, 900)
    assert AxisRange.range(100, 900) != AxisRange.range(75, 100)
    mapping = {AxisRange.range(1, 2): "x"}
    assert mapping[AxisRange.range(1.0, 2.0)] == "x"


def test_str():
    assert str(AxisRange.range(1, 4)) == "[1, 4]"
    assert str(AxisRange.point(1.5)) == "[1.5, 1.5]"


def test_error_message_names_bounds():
    with pytest.raises(ValueError, match=r"end \(2\) is less than start \(3\)"):
        AxisRange.range(3, 2)