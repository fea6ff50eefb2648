"""Global scene settings and renderer capacity limits."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

import numpy as np

MAX_TEXTURES = 8192
MAX_MESHES = 8192
MAX_ENTITIES = 8192

_SCALARS = struct.Struct("<3f3I2f2I6f")


def _identity() -> np.ndarray:
    return np.identity(4)


def _column_major(matrix: np.ndarray) -> bytes:
    return np.asarray(matrix, dtype="<f4").T.tobytes()


@dataclass(eq=False)
class SceneSettings:
    """Per-frame scene parameters; matrices are 4x4 arrays indexed [row, column]."""

    projection: np.ndarray = field(default_factory=_identity)
    inv_projection: np.ndarray = field(default_factory=_identity)
    view: np.ndarray = field(default_factory=_identity)
    inv_view: np.ndarray = field(default_factory=_identity)
    gamma: float = 2.2
    exposure: float = 1.0
    persistence: float = 0.9
    accumulated_sample: int = 0
    num_sample: int = 10
    num_bounces: int = 32
    clamp_value: float = 100.0
    total_emission_energy: float = 0.0
    num_entity: int = 0
    enable_direct_lighting: int = 1
    padding: tuple[float, ...] = (0.0,) * 6

    def pack(self) -> bytes:
        """Serialise to the 64-byte-aligned GPU layout (column-major matrices)."""
        matrices = b"".join(
            _column_major(m)
            for m in (self.projection, self.inv_projection, self.view, self.inv_view)
        )
        scalars = _SCALARS.pack(
            self.gamma,
            self.exposure,
            self.persistence,
            self.accumulated_sample,
            self.num_sample,
            self.num_bounces,
            self.clamp_value,
            self.total_emission_energy,
            self.num_entity,
            self.enable_direct_lighting,
            *self.padding,
        )
        return matrices + scalars