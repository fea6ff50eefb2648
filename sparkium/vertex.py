"""Mesh vertex record."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass


def _vec(values: Sequence[float], size: int) -> tuple[float, ...]:
    result = tuple(float(v) for v in values)
    if len(result) != size:
        raise ValueError(f"expected {size} components, got {len(result)}")
    return result


def _fmt(values: Sequence[float]) -> str:
    return ", ".join(format(v, "g") for v in values)


@dataclass(frozen=True, order=True)
class Vertex:
    """A vertex, ordered lexicographically by position, normal, tangent, tex_coord, signal."""

    position: tuple[float, float, float] = (0.0, 0.0, 0.0)
    normal: tuple[float, float, float] = (0.0, 0.0, 0.0)
    tangent: tuple[float, float, float] = (0.0, 0.0, 0.0)
    tex_coord: tuple[float, float] = (0.0, 0.0)
    signal: float = 1.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", _vec(self.position, 3))
        object.__setattr__(self, "normal", _vec(self.normal, 3))
        object.__setattr__(self, "tangent", _vec(self.tangent, 3))
        object.__setattr__(self, "tex_coord", _vec(self.tex_coord, 2))
        object.__setattr__(self, "signal", float(self.signal))

    def __str__(self) -> str:
        return (
            "Vertex: {"
            f"position: {_fmt(self.position)}, "
            f"normal: {_fmt(self.normal)}, "
            f"tangent: {_fmt(self.tangent)}, "
            f"tex_coord: {_fmt(self.tex_coord)}, "
            f"signal: {format(self.signal, 'g')}"
            "}"
        )