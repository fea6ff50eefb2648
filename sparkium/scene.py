"""A scene: entities, camera, environment map and per-frame settings."""

from __future__ import annotations

import itertools
from collections.abc import Callable, Iterator, Mapping
from dataclasses import replace
from typing import Optional, Union

import numpy as np

from sparkium.camera import Camera
from sparkium.entity import Entity, EnvMap
from sparkium.settings import SceneSettings

AreaLookup = Union[Callable[[int], float], Mapping[int, float]]
UpdateCallback = Callable[["Scene", float], None]


def _area_resolver(mesh_areas: AreaLookup) -> Callable[[int], float]:
    if isinstance(mesh_areas, Mapping):
        return mesh_areas.__getitem__
    if callable(mesh_areas):
        return mesh_areas
    raise TypeError("mesh_areas must be a mapping or a callable")


def _stretch_factor(transform: np.ndarray) -> float:
    """Product of the two largest singular values of the linear part of a transform."""
    linear = np.asarray(transform, dtype=float)[:3, :3]
    singular_values = np.sort(np.abs(np.linalg.svd(linear, compute_uv=False)))
    return float(singular_values[2] * singular_values[1])


class Scene:
    """Holds entities in creation order together with the camera and environment map."""

    def __init__(self, max_entities: int) -> None:
        if max_entities < 1:
            raise ValueError("max_entities must be positive")
        self.max_entities = int(max_entities)
        self.camera = Camera()
        self.envmap = EnvMap()
        self.settings = SceneSettings()
        self._entities: dict[int, Entity] = {}
        self._ids = itertools.count()
        self._update_callback: Optional[UpdateCallback] = None

    def create_entity(self) -> Entity:
        """Add a new entity with the next free id and return it."""
        if len(self._entities) >= self.max_entities:
            raise RuntimeError(f"scene is full ({self.max_entities} entities)")
        entity_id = next(self._ids)
        entity = Entity(entity_id)
        self._entities[entity_id] = entity
        return entity

    def entity(self, entity_id: int) -> Entity:
        """The entity with this id; raises KeyError if there is none."""
        try:
            return self._entities[entity_id]
        except KeyError:
            raise KeyError(f"no entity with id {entity_id}") from None

    def get_entity(self, entity_id: int) -> Entity | None:
        """The entity with this id, or None."""
        return self._entities.get(entity_id)

    def entities(self) -> Iterator[Entity]:
        """Entities in ascending id order."""
        return iter([self._entities[key] for key in sorted(self._entities)])

    def __len__(self) -> int:
        return len(self._entities)

    def set_update_callback(self, callback: UpdateCallback | None) -> None:
        self._update_callback = callback

    def update(self, delta_time: float) -> None:
        """Run the update callback unless the image is set to persist fully."""
        if self._update_callback is not None and self.settings.persistence != 1.0:
            self._update_callback(self, delta_time)

    def update_emission(self, mesh_areas: AreaLookup) -> float:
        """Set each entity's emission CDF and the total emitted energy; return the total.

        An entity's energy is its peak emitted radiance times its mesh area
        stretched by the two largest singular values of its transform.
        """
        area_of = _area_resolver(mesh_areas)
        entities = list(self.entities())
        total_energy = 0.0
        for entity in entities:
            material = entity.material
            density = max(c * material.emission_strength for c in material.emission)
            energy = 0.0
            if density > 0.0:
                area = float(area_of(entity.mesh_id))
                energy = _stretch_factor(entity.transform) * area * density
            total_energy += energy
            entity.emission_cdf = total_energy
        for entity in entities:
            entity.emission_cdf = entity.emission_cdf / total_energy if total_energy > 0.0 else 0.0
        self.settings.total_emission_energy = total_energy
        self.settings.num_entity = len(entities)
        return total_energy

    def camera_settings(self, aspect: float) -> tuple[SceneSettings, SceneSettings]:
        """Settings for the near and far depth ranges, with camera matrices filled in."""
        view = self.camera.view()
        inv_view = np.linalg.inv(view)
        near_projection = self.camera.projection(aspect)
        far_projection = self.camera.projection_far(aspect)
        near = replace(
            self.settings,
            view=view,
            inv_view=inv_view,
            projection=near_projection,
            inv_projection=np.linalg.inv(near_projection),
        )
        far = replace(
            near,
            view=view.copy(),
            inv_view=inv_view.copy(),
            projection=far_projection,
            inv_projection=np.linalg.inv(far_projection),
        )
        return near, far

    def finish_frame(self) -> None:
        """Account for the samples taken by one ray-traced frame."""
        self.settings.accumulated_sample += self.settings.num_sample