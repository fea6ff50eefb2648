import pytest

from sparkium.vertex import Vertex


def test_defaults():
    v = Vertex()
    assert v.position == (0.0, 0.0, 0.0)
    assert v.tex_coord == (0.0, 0.0)
    assert v.signal == 1.0


def test_ordering_by_position_first():
    a = Vertex(position=(0, 5, 5), normal=(9, 9, 9))
    b = Vertex(position=(1, 0, 0))
    assert a < b
    assert not b < a


def test_ordering_falls_through_to_later_fields():
    a = Vertex(tex_coord=(0.0, 0.1))
    b = Vertex(tex_coord=(0.0, 0.2))
    assert a < b
    c = Vertex(signal=-1.0)
    assert c < Vertex()


def test_equality_and_hash():
    a = Vertex(position=[1, 2, 3], tex_coord=[0.5, 0.5])
    b = Vertex(position=(1.0, 2.0, 3.0), tex_coord=(0.5, 0.5))
    assert a == b
    assert {a: 1}[b] == 1
    assert a != Vertex(position=(1, 2, 3), tex_coord=(0.5, 0.25))


def test_sort_is_stable_order():
    vs = [Vertex(position=(2, 0, 0)), Vertex(position=(1, 0, 0)), Vertex(position=(1, -1, 0))]
    assert [v.position for v in sorted(vs)] == [(1, -1, 0), (1, 0, 0), (2, 0, 0)]


def test_wrong_component_count_raises():
    with pytest.raises(ValueError):
        Vertex(position=(1, 2))


def test_str_format():
    v = Vertex(position=(1, 2, 3), tex_coord=(0.5, 0.25))
    assert str(v) == (
        "Vertex: {position: 1, 2, 3, normal: 0, 0, 0, tangent: 0, 0, 0, "
        "tex_coord: 0.5, 0.25, signal: 1}"
    )