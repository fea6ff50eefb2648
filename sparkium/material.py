"""Material parameters and type identifiers."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum

Vec3 = tuple[float, float, float]

_LAYOUT = struct.Struct("<" + "4f" * 8 + "3fI" * 3)


class MaterialType(IntEnum):
    LAMBERTIAN = 0
    SPECULAR = 1
    RETRACTIVE = 2
    ISOTROPIC_RETRACTIVE = 4
    METAL = 5
    VOLUME = 6
    MULTILAYER = 7
    NONMETAL = 8
    COLORED_RETRACTIVE = 9


class SpectrumType(IntEnum):
    D65 = 100
    D75 = 101
    D50 = 102
    SODIUM = 103


class IlluminantType(IntEnum):
    LAMBERTIAN = 200
    PARALLEL = 201


@dataclass
class Material:
    """Surface and volume parameters of an entity; ``a`` defaults to ``ior``."""

    base_color: Vec3 = (1.0, 1.0, 1.0)
    subsurface: float = 0.0
    subsurface_radius: Vec3 = (1.0, 1.0, 1.0)
    metallic: float = 0.0
    subsurface_color: Vec3 = (1.0, 1.0, 1.0)
    specular: float = 0.0
    specular_tint: float = 0.0
    roughness: float = 0.05
    anisotropic: float = 0.0
    anisotropic_rotation: float = 0.0
    sheen: float = 0.0
    sheen_tint: float = 0.0
    clearcoat: float = 0.0
    clearcoat_roughness: float = 0.0
    ior: float = 1.15
    transmission: float = 0.0
    transmission_roughness: float = 0.0
    emission_strength: float = 0.0
    emission: Vec3 = (1.0, 1.0, 1.0)
    alpha: float = 0.0
    sigma_a: float = 0.0
    sigma_s: float = 0.0
    g: float = 0.0
    volume_emission_strength: float = 0.0
    a: float | None = None
    b: float = 0.0
    c: float = 0.0
    spectrum_type: int = 0
    illuminant_dir: Vec3 = (0.5, 0.5, 1.0)
    illuminant_type: int = 0
    normal: Vec3 = (0.5, 0.5, 1.0)
    type: int = MaterialType.LAMBERTIAN

    def __post_init__(self) -> None:
        if self.a is None:
            self.a = self.ior

    def pack(self) -> bytes:
        """Serialise to the 16-byte-aligned GPU layout."""
        return _LAYOUT.pack(
            *self.base_color, self.subsurface,
            *self.subsurface_radius, self.metallic,
            *self.subsurface_color, self.specular,
            self.specular_tint, self.roughness, self.anisotropic,
            self.anisotropic_rotation,
            self.sheen, self.sheen_tint, self.clearcoat, self.clearcoat_roughness,
            self.ior, self.transmission, self.transmission_roughness,
            self.emission_strength,
            *self.emission, self.alpha,
            self.sigma_a, self.sigma_s, self.g, self.volume_emission_strength,
            self.a, self.b, self.c, int(self.spectrum_type),
            *self.illuminant_dir, int(self.illuminant_type),
            *self.normal, int(self.type),
        )