from sparkium.curve import Curve, Hair


def _curve(offset):
    return Curve((offset, 0, 0), (offset, 1, 0), (offset, 2, 0), (offset, 3, 0))


def test_empty_hair():
    assert Hair().curves == ()


def test_add_curve_keeps_order():
    hair = Hair([_curve(0)])
    hair.add_curve(_curve(1))
    hair.add_curve(_curve(2))
    assert [c.p0[0] for c in hair.curves] == [0, 1, 2]


def test_init_copies_input():
    source = [_curve(0)]
    hair = Hair(source)
    source.append(_curve(5))
    assert len(hair.curves) == 1
    assert hair.curves[0] == _curve(0)


def test_curve_points():
    c = _curve(4)
    assert c.p0 == (4, 0, 0)
    assert c.p3 == (4, 3, 0)