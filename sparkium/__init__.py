"""Meshes, textures, camera, materials and scene data for a path tracer."""

__version__ = "0.1.0"