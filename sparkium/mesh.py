"""Triangle meshes: OBJ I/O, procedural shapes, normals and tangent frames."""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import replace
from pathlib import Path

from sparkium.texture import AddressMode, Texture
from sparkium.vertex import Vertex

Vec3 = tuple[float, float, float]

_ZERO: Vec3 = (0.0, 0.0, 0.0)
_X_AXIS: Vec3 = (1.0, 0.0, 0.0)
_Y_AXIS: Vec3 = (0.0, 1.0, 0.0)


def _add(a: Sequence[float], b: Sequence[float]) -> Vec3:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def _sub(a: Sequence[float], b: Sequence[float]) -> Vec3:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def _mul(a: Sequence[float], s: float) -> Vec3:
    return (a[0] * s, a[1] * s, a[2] * s)


def _dot(a: Sequence[float], b: Sequence[float]) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def _cross(a: Sequence[float], b: Sequence[float]) -> Vec3:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def _length(a: Sequence[float]) -> float:
    return math.sqrt(_dot(a, a))


def _normalize(a: Sequence[float]) -> Vec3:
    """Unit vector along ``a``; a zero or non-finite vector yields zero."""
    length = _length(a)
    if not (length > 0.0) or not math.isfinite(length):
        return _ZERO
    return (a[0] / length, a[1] / length, a[2] / length)


def _triangles(indices: Sequence[int]) -> Iterator[tuple[int, int, int]]:
    it = iter(indices)
    return zip(it, it, it)


def calculate_normals(vertices: Sequence[Vertex], indices: Sequence[int]) -> list[Vertex]:
    """Return the vertices with area-weighted smooth normals from the triangles."""
    normals = [_ZERO] * len(vertices)
    weights = [0.0] * len(vertices)
    for a, b, c in _triangles(indices):
        p0 = vertices[a].position
        normal = _cross(_sub(vertices[b].position, p0), _sub(vertices[c].position, p0))
        weight = _length(normal)
        for k in (a, b, c):
            normals[k] = _add(normals[k], normal)
            weights[k] += weight
    return [
        replace(vertex, normal=_normalize(normal) if weight > 0.0 else _ZERO)
        for vertex, normal, weight in zip(vertices, normals, weights)
    ]


def _tangent_frames(corners: Sequence[Vertex]) -> list[tuple[Vec3 | None, float]]:
    """Per-corner tangent and handedness, smoothed over corners sharing attributes."""
    sums: dict[tuple, list[Vec3]] = {}
    for v0, v1, v2 in _triangles(corners):
        e1 = _sub(v1.position, v0.position)
        e2 = _sub(v2.position, v0.position)
        du1 = v1.tex_coord[0] - v0.tex_coord[0]
        dv1 = v1.tex_coord[1] - v0.tex_coord[1]
        du2 = v2.tex_coord[0] - v0.tex_coord[0]
        dv2 = v2.tex_coord[1] - v0.tex_coord[1]
        det = du1 * dv2 - du2 * dv1
        if abs(det) < 1e-20 or not math.isfinite(det):
            tangent, bitangent = _ZERO, _ZERO
        else:
            tangent = _mul(_sub(_mul(e1, dv2), _mul(e2, dv1)), 1.0 / det)
            bitangent = _mul(_sub(_mul(e2, du1), _mul(e1, du2)), 1.0 / det)
        for vertex in (v0, v1, v2):
            key = (vertex.position, vertex.normal, vertex.tex_coord)
            acc = sums.setdefault(key, [_ZERO, _ZERO])
            acc[0] = _add(acc[0], tangent)
            acc[1] = _add(acc[1], bitangent)

    frames: list[tuple[Vec3 | None, float]] = []
    for vertex in corners:
        tangent_sum, bitangent_sum = sums[(vertex.position, vertex.normal, vertex.tex_coord)]
        normal = _normalize(vertex.normal)
        ortho = _sub(tangent_sum, _mul(normal, _dot(normal, tangent_sum)))
        length = _length(ortho)
        if not (length > 1e-8) or not math.isfinite(length):
            frames.append((None, 1.0))
            continue
        tangent = _mul(ortho, 1.0 / length)
        sign = -1.0 if _dot(_cross(normal, tangent), bitangent_sum) < 0.0 else 1.0
        frames.append((tangent, sign))
    return frames


def _fallback_tangent(normal: Vec3) -> Vec3:
    tangent = _cross(normal, _X_AXIS)
    if _length(tangent) < 1e-4:
        tangent = _cross(normal, _Y_AXIS)
    return _normalize(tangent)


def _parse_index(token: str, count: int) -> int:
    value = int(token)
    if value > 0:
        index = value - 1
    elif value < 0:
        index = count + value
    else:
        raise ValueError("OBJ indices start at 1")
    if not 0 <= index < count:
        raise ValueError(f"index {value} out of range")
    return index


def _parse_obj(text: str) -> list[list[Vertex]]:
    """Parse OBJ text into polygons of vertices with missing normals set to zero."""
    positions: list[Vec3] = []
    normals: list[Vec3] = []
    tex_coords: list[tuple[float, float]] = []
    faces: list[list[Vertex]] = []
    for line_number, raw in enumerate(text.splitlines(), 1):
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue
        key, *fields = line.split()
        try:
            if key == "v":
                if len(fields) < 3:
                    raise ValueError("vertex needs three coordinates")
                positions.append(tuple(float(f) for f in fields[:3]))
            elif key == "vn":
                if len(fields) < 3:
                    raise ValueError("normal needs three coordinates")
                normals.append(tuple(float(f) for f in fields[:3]))
            elif key == "vt":
                if not fields:
                    raise ValueError("texture coordinate needs a value")
                u = float(fields[0])
                v = float(fields[1]) if len(fields) > 1 else 0.0
                tex_coords.append((u, v))
            elif key == "f":
                if len(fields) < 3:
                    raise ValueError("face needs at least three vertices")
                face = []
                for token in fields:
                    parts = token.split("/")
                    position = positions[_parse_index(parts[0], len(positions))]
                    tex_coord = (0.0, 0.0)
                    normal = _ZERO
                    if len(parts) > 1 and parts[1]:
                        tex_coord = tex_coords[_parse_index(parts[1], len(tex_coords))]
                    if len(parts) > 2 and parts[2]:
                        normal = normals[_parse_index(parts[2], len(normals))]
                    face.append(Vertex(position=position, normal=normal, tex_coord=tex_coord))
                faces.append(face)
        except ValueError as exc:
            raise ValueError(f"OBJ line {line_number}: {exc}") from exc
    return faces


def _fmt(value: float) -> str:
    return format(value, "g")


class Mesh:
    """An indexed triangle mesh whose vertices carry normals and tangent frames."""

    def __init__(self, vertices: Iterable[Vertex] = (), indices: Iterable[int] = ()) -> None:
        self._vertices: list[Vertex] = list(vertices)
        self._indices: list[int] = [int(i) for i in indices]
        if len(self._indices) % 3:
            raise ValueError("index count must be a multiple of three")
        for index in self._indices:
            if not 0 <= index < len(self._vertices):
                raise IndexError(f"vertex index {index} out of range")
        self._build_tangent()

    @property
    def vertices(self) -> tuple[Vertex, ...]:
        return tuple(self._vertices)

    @property
    def indices(self) -> tuple[int, ...]:
        return tuple(self._indices)

    def _merge_vertices(self) -> None:
        lookup: dict[Vertex, int] = {}
        merged: list[Vertex] = []
        indices: list[int] = []
        for index in self._indices:
            vertex = self._vertices[index]
            slot = lookup.get(vertex)
            if slot is None:
                slot = lookup[vertex] = len(merged)
                merged.append(vertex)
            indices.append(slot)
        self._vertices = merged
        self._indices = indices

    def _build_normal(self) -> None:
        """Fill in normals shorter than 0.5 from the faces that use the vertex."""
        normals = [vertex.normal for vertex in self._vertices]
        missing = [_length(n) < 0.5 for n in normals]
        for a, b, c in _triangles(self._indices):
            if not (missing[a] or missing[b] or missing[c]):
                continue
            p0 = self._vertices[a].position
            face = _cross(
                _sub(self._vertices[b].position, p0), _sub(self._vertices[c].position, p0)
            )
            length = _length(face)
            if not (length > 0.0) or not math.isfinite(length):
                continue
            face = _mul(face, 1.0 / length)
            for k in (a, b, c):
                if missing[k]:
                    normals[k] = _add(normals[k], face)
        self._vertices = [
            replace(vertex, normal=_normalize(normal)) if flag else vertex
            for vertex, normal, flag in zip(self._vertices, normals, missing)
        ]

    def _build_tangent(self) -> None:
        if not self._indices or not self._vertices:
            return
        self._build_normal()
        corners = [self._vertices[i] for i in self._indices]
        self._indices = list(range(len(corners)))
        vertices = []
        for vertex, (tangent, sign) in zip(corners, _tangent_frames(corners)):
            if tangent is None or abs(_dot(vertex.normal, tangent)) > 1e-4:
                tangent = _fallback_tangent(vertex.normal)
            vertices.append(replace(vertex, tangent=tangent, signal=sign))
        self._vertices = vertices
        self._merge_vertices()

    def load_obj_file(self, obj_file_path: str) -> None:
        """Replace the mesh with the triangulated contents of an OBJ file."""
        text = Path(obj_file_path).read_text(encoding="utf-8", errors="replace")
        vertices: list[Vertex] = []
        indices: list[int] = []
        for face in _parse_obj(text):
            first = face[0]
            for second, third in zip(face[1:], face[2:]):
                corners = [first, second, third]
                geometry_normal = _normalize(
                    _cross(
                        _sub(second.position, first.position),
                        _sub(third.position, first.position),
                    )
                )
                for corner in corners:
                    if corner.normal == _ZERO:
                        corner = replace(corner, normal=geometry_normal)
                    elif _dot(geometry_normal, corner.normal) < 0.0:
                        corner = replace(corner, normal=_mul(corner.normal, -1.0))
                    indices.append(len(vertices))
                    vertices.append(corner)
        self._vertices = vertices
        self._indices = indices
        self._build_tangent()

    def save_obj_file(self, obj_file_path: str) -> None:
        """Write positions, normals, texture coordinates and faces as OBJ."""
        lines = [f"v {' '.join(_fmt(c) for c in v.position)}" for v in self._vertices]
        lines += [f"vn {' '.join(_fmt(c) for c in v.normal)}" for v in self._vertices]
        lines += [f"vt {' '.join(_fmt(c) for c in v.tex_coord)}" for v in self._vertices]
        lines += [
            "f " + " ".join(f"{i + 1}/{i + 1}/{i + 1}" for i in triangle)
            for triangle in _triangles(self._indices)
        ]
        with open(obj_file_path, "w", encoding="utf-8") as handle:
            handle.writelines(line + "\n" for line in lines)

    def load_from_height_map(self, height_map: Texture, precision: float = 1.0,
                             height_scale: float = 1.0, height_offset: float = 0.0) -> None:
        """Build a unit-square terrain grid whose heights are the map's luminance."""
        width = int(height_map.width * precision)
        height = int(height_map.height * precision)
        if width <= 0 or height <= 0:
            raise ValueError("height map grid must be at least 1x1")
        inv_width = 1.0 / width
        inv_height = 1.0 / height

        def grid_vertex(i: int, j: int) -> Vertex:
            u, v = i * inv_width, j * inv_height
            color = height_map.sample(u, v, AddressMode.BLACK_BORDER)
            h = float(color[0]) * 0.299 + float(color[1]) * 0.587 + float(color[2]) * 0.114
            return Vertex(position=(u, h * height_scale + height_offset, v), tex_coord=(u, v))

        vertices = [grid_vertex(i, j) for j in range(height + 1) for i in range(width + 1)]
        indices: list[int] = []
        for j in range(height):
            for i in range(width):
                top = j * (width + 1) + i
                bottom = (j + 1) * (width + 1) + i
                indices += [top, bottom, top + 1, bottom + 1, top + 1, bottom]
        self._vertices = calculate_normals(vertices, indices)
        self._indices = indices
        self._build_tangent()

    def create_sphere(self, position: Sequence[float], radius: float = 1.0,
                      num_segments: int = 16, num_rings: int = 16) -> None:
        """Replace the mesh with a UV sphere centred at ``position``."""
        if num_segments < 1 or num_rings < 1:
            raise ValueError("a sphere needs at least one segment and one ring")
        center = tuple(float(c) for c in position)
        vertices = []
        for y in range(num_rings + 1):
            theta = y / num_rings * math.pi
            for x in range(num_segments + 1):
                phi = x / num_segments * 2.0 * math.pi
                offset = (
                    radius * math.cos(phi) * math.sin(theta),
                    radius * math.cos(theta),
                    radius * math.sin(phi) * math.sin(theta),
                )
                vertices.append(Vertex(position=_add(offset, center)))
        indices: list[int] = []
        for y in range(num_rings):
            for x in range(num_segments):
                first = y * (num_segments + 1) + x
                second = first + num_segments + 1
                indices += [first, second, first + 1, second, second + 1, first + 1]
        self._vertices = calculate_normals(vertices, indices)
        self._indices = indices
        self._build_tangent()

    def _mean_distance(self) -> float:
        if not self._vertices:
            raise ValueError("mesh has no vertices")
        distance = sum(_length(v.position) for v in self._vertices) / len(self._vertices)
        if distance == 0.0:
            raise ValueError("mesh vertices all lie at the origin")
        return distance

    def scale(self, scale: float = 1.0) -> None:
        """Scale positions so their mean distance from the origin becomes ``scale``."""
        factor = scale / self._mean_distance()
        self._vertices = [replace(v, position=_mul(v.position, factor)) for v in self._vertices]

    def scale_by_index(self, scale: Sequence[float]) -> None:
        """Per-axis variant of :meth:`scale`."""
        distance = self._mean_distance()
        factors = tuple(float(s) / distance for s in scale)
        self._vertices = [
            replace(v, position=tuple(p * f for p, f in zip(v.position, factors)))
            for v in self._vertices
        ]

    def translate(self, translation: Sequence[float] = _ZERO) -> None:
        self._vertices = [replace(v, position=_add(v.position, translation)) for v in self._vertices]

    def rotate(self, angle: float, axis: Sequence[float] = _Y_AXIS) -> None:
        """Rotate positions by ``angle`` degrees about ``axis`` (normals are kept)."""
        x, y, z = _normalize(axis)
        if (x, y, z) == _ZERO:
            raise ValueError("rotation axis must be non-zero")
        radians = math.radians(angle)
        c, s = math.cos(radians), math.sin(radians)
        k = 1.0 - c
        columns = (
            (c + x * x * k, x * y * k - z * s, x * z * k + y * s),
            (y * x * k + z * s, c + y * y * k, y * z * k - x * s),
            (z * x * k - y * s, z * y * k + x * s, c + z * z * k),
        )

        def apply(p: Sequence[float]) -> Vec3:
            return _add(_add(_mul(columns[0], p[0]), _mul(columns[1], p[1])),
                        _mul(columns[2], p[2]))

        self._vertices = [replace(v, position=apply(v.position)) for v in self._vertices]