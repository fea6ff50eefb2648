"""Cubic Bezier curves and hair made of them."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

Vec3 = tuple[float, float, float]


@dataclass(frozen=True)
class Curve:
    """A cubic Bezier curve: start point, two control points, end point."""

    p0: Vec3
    p1: Vec3
    p2: Vec3
    p3: Vec3


class Hair:
    """An ordered collection of curves."""

    def __init__(self, curves: Iterable[Curve] = ()) -> None:
        self._curves: list[Curve] = list(curves)

    def add_curve(self, curve: Curve) -> None:
        self._curves.append(curve)

    @property
    def curves(self) -> tuple[Curve, ...]:
        return tuple(self._curves)