"""Scene entities, their GPU metadata, and the environment map settings."""

from __future__ import annotations

import struct
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import Union

import numpy as np

from sparkium.material import Material

Binding = Union[Callable[[int], int], Mapping[int, int]]

_METADATA_SCALARS = struct.Struct("<6I2f4f")
_ENVMAP_LAYOUT = struct.Struct("<2fIi")


def _identity() -> np.ndarray:
    return np.identity(4)


def _column_major(matrix: np.ndarray) -> bytes:
    array = np.asarray(matrix, dtype="<f4")
    if array.shape != (4, 4):
        raise ValueError(f"expected a 4x4 matrix, got shape {array.shape}")
    return array.T.tobytes()


def _resolver(binding: Binding) -> Callable[[int], int]:
    """Turn a mapping or a callable into an id -> binding id function."""
    if isinstance(binding, Mapping):
        return binding.__getitem__
    if callable(binding):
        return binding
    raise TypeError("binding must be a mapping or a callable")


@dataclass(eq=False)
class EntityMetadata:
    """Per-entity data shared with the GPU; the transform is indexed [row, column]."""

    transform: np.ndarray = field(default_factory=_identity)
    entity_id: int = 0
    mesh_id: int = 0
    albedo_texture_id: int = 0
    roughness_texture_id: int = 0
    normal_texture_id: int = 0
    albedo_detail_texture_id: int = 0
    emission_cdf: float = 0.0
    padding0: float = 0.0
    detail_scale_offset: Sequence[float] = (10.0, 10.0, 0.0, 0.0)

    def pack(self) -> bytes:
        """Serialise to the 16-byte-aligned GPU layout (column-major transform)."""
        scale_offset = tuple(float(v) for v in self.detail_scale_offset)
        if len(scale_offset) != 4:
            raise ValueError("detail_scale_offset needs four components")
        return _column_major(self.transform) + _METADATA_SCALARS.pack(
            int(self.entity_id),
            int(self.mesh_id),
            int(self.albedo_texture_id),
            int(self.roughness_texture_id),
            int(self.normal_texture_id),
            int(self.albedo_detail_texture_id),
            float(self.emission_cdf),
            float(self.padding0),
            *scale_offset,
        )


class Entity:
    """A renderable object: a mesh reference, textures, a transform and a material."""

    def __init__(self, entity_id: int) -> None:
        self.material = Material()
        self.metadata = EntityMetadata(entity_id=entity_id)

    @property
    def entity_id(self) -> int:
        return self.metadata.entity_id

    @property
    def mesh_id(self) -> int:
        return self.metadata.mesh_id

    @property
    def transform(self) -> np.ndarray:
        return self.metadata.transform

    @property
    def emission_cdf(self) -> float:
        return self.metadata.emission_cdf

    @emission_cdf.setter
    def emission_cdf(self, cdf: float) -> None:
        self.metadata.emission_cdf = float(cdf)

    def translated_metadata(self, texture_binding: Binding,
                            mesh_binding: Binding) -> EntityMetadata:
        """A copy of the metadata with albedo textures and mesh mapped to binding ids."""
        texture = _resolver(texture_binding)
        mesh = _resolver(mesh_binding)
        return replace(
            self.metadata,
            transform=np.array(self.metadata.transform, copy=True),
            albedo_texture_id=texture(self.metadata.albedo_texture_id),
            albedo_detail_texture_id=texture(self.metadata.albedo_detail_texture_id),
            mesh_id=mesh(self.metadata.mesh_id),
        )


@dataclass
class EnvMapSettings:
    """Environment map parameters shared with the GPU."""

    offset: float = 0.0
    scale: float = 1.0
    envmap_id: int = 0
    reflect: int = 0

    def pack(self) -> bytes:
        return _ENVMAP_LAYOUT.pack(
            float(self.offset), float(self.scale), int(self.envmap_id), int(self.reflect)
        )


class EnvMap:
    """The scene's environment map selection and settings."""

    def __init__(self, settings: EnvMapSettings | None = None) -> None:
        self.settings = settings if settings is not None else EnvMapSettings()

    def set_envmap_texture(self, envmap_id: int) -> None:
        self.settings.envmap_id = envmap_id

    def translated_settings(self, texture_binding: Binding) -> EnvMapSettings:
        """A copy of the settings with the texture id mapped to its binding id."""
        texture = _resolver(texture_binding)
        return replace(self.settings, envmap_id=texture(self.settings.envmap_id))