# sparkium

Building blocks for a physically based path tracer: triangle meshes, RGBA
float textures, a perspective camera, materials, and a scene that keeps
entities and works out how emitted light is distributed among them.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `sparkium.mesh` – `Mesh` holds a list of `Vertex` objects and triangle
  indices (`vertices`, `indices`). Constructing a mesh, or loading one, fills
  in missing normals, computes a tangent and tangent sign for every vertex
  from its texture coordinates, and merges identical vertices.
  - `load_obj_file(path)` reads a Wavefront OBJ file (`v`, `vn`, `vt`, `f`,
    negative indices allowed), splits polygons into triangle fans, gives
    corners without a normal the face normal and flips normals that face
    away from it. Malformed lines raise `ValueError`.
  - `save_obj_file(path)` writes positions, normals, texture coordinates and
    faces.
  - `load_from_height_map(texture, precision, height_scale, height_offset)`
    builds a grid over the unit square whose heights are the luminance of
    the texture.
  - `create_sphere(position, radius, num_segments, num_rings)` builds a UV
    sphere.
  - `scale(s)` rescales positions so their mean distance from the origin is
    `s`; `scale_by_index((sx, sy, sz))` does the same per axis;
    `translate(offset)`; `rotate(angle_degrees, axis)` rotates positions
    only.
  - `calculate_normals(vertices, indices)` returns the vertices with
    area-weighted smooth normals.
- `sparkium.vertex` – `Vertex`, a frozen record of position, normal, tangent,
  texture coordinate and tangent sign (`signal`). Vertices compare and order
  field by field.
- `sparkium.texture` – `Texture(width, height, color)` or
  `Texture.from_pixels(width, height, pixels)`, with pixels read and written
  as `texture[x, y]` and available as a `(height, width, 4)` numpy array via
  `pixels`.
  - `fetch(x, y, address_mode)` resolves out-of-range coordinates with an
    `AddressMode` (`REPEAT`, `CLAMP_TO_EDGE`, `MIRROR_REPEAT`,
    `BLACK_BORDER`, `WHITE_BORDER`); `sample(u, v, address_mode)` is a
    bilinear lookup.
  - `load_from_file` reads Radiance `.hdr` files directly and other images
    through Pillow, linearising colour with the chosen `LDRColorSpace`
    (`SRGB` or `UNORM`). `load_roughness_from_file` reads a grey image;
    `load_normal_from_file` decodes a normal map to unit vectors.
  - `save_to_file` writes `.hdr`, `.png`, `.bmp`, `.tga` or `.jpg` by
    extension and raises `ValueError` for any other.
  - `float_to_byte` and `convert_texture` quantise to 8 bits;
    `sample_sky_box(faces, direction)` looks up a direction in a five-face
    sky box (below the horizon is white), and `sky_box_to_envmap(faces,
    height)` resamples one into a `2*height × height` equirectangular
    texture.
- `sparkium.camera` – `Camera` with `euler_angles` (pitch, yaw, roll in
  radians), `position`, `fov`, `near`, `far` and `speed`. `inverse_view()` and
  `view()` return 4×4 matrices; `projection(aspect)` covers depths from
  `near` to `sqrt(near*far)` and `projection_far(aspect)` from there to
  `far`.
- `sparkium.material` – the `Material` dataclass and the `MaterialType`,
  `SpectrumType` and `IlluminantType` enumerations.
- `sparkium.entity` – `Entity` (a `material` and `metadata`), `EntityMetadata`,
  `EnvMap` and `EnvMapSettings`. `translated_metadata` and
  `translated_settings` map texture and mesh ids to binding ids through a
  mapping or a callable.
- `sparkium.scene` – `Scene(max_entities)` creates entities
  (`create_entity`, `entity`, `get_entity`, `entities`), runs an update
  callback unless `settings.persistence` is 1, computes each emitter's
  emission CDF and the total emitted energy from mesh areas
  (`update_emission`), returns near and far `SceneSettings` with the camera
  matrices filled in (`camera_settings`), and counts accumulated samples
  (`finish_frame`).
- `sparkium.settings` – `SceneSettings` and the limits `MAX_TEXTURES`,
  `MAX_MESHES` and `MAX_ENTITIES`.
- `sparkium.curve` – `Curve` (a cubic Bézier curve) and `Hair`, an ordered
  collection of curves.
- `sparkium.file_probe` – `FileProbe`, which returns the first search prefix
  plus file name that is a regular file, and `find_assets_file`, which uses a
  shared probe over the working directory, the assets directory (set by
  `SPARKIUM_ASSETS_DIR`), `./`, `../` and `../../`. A missing file gives
  `None`.

`SceneSettings`, `Material`, `EntityMetadata` and `EnvMapSettings` each have a
`pack()` method that returns their bytes in the aligned little-endian layout a
GPU buffer expects, with matrices in column-major order.

## Example

```python
from sparkium.mesh import Mesh
from sparkium.scene import Scene
from sparkium.texture import AddressMode, Texture

sphere = Mesh()
sphere.create_sphere((0.0, 0.0, 0.0), radius=1.0)
sphere.save_obj_file("sphere.obj")

grey = Texture(2, 2, (0.5, 0.5, 0.5, 1.0))
print(grey.sample(0.25, 0.75, AddressMode.REPEAT))

scene = Scene(max_entities=16)
lamp = scene.create_entity()
lamp.material.emission_strength = 5.0
total = scene.update_emission({lamp.mesh_id: 12.566})
print(total, lamp.emission_cdf)

near, far = scene.camera_settings(16 / 9)
buffer = near.pack()
```

## What the package does not do

The package prepares the data a renderer needs; it does not render. There is
no GPU code, no ray tracing or rasterising, no window or interactive viewer,
no scene file loader and no command-line program. Meshes and textures are not
stored by the scene itself: `Scene.update_emission` takes mesh areas from the
caller, and entities refer to meshes and textures only by id.