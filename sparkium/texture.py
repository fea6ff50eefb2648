"""RGBA float textures: sampling, image file I/O and sky box conversion."""

from __future__ import annotations

import math
from collections.abc import Sequence
from enum import Enum
from pathlib import Path

import numpy as np
from PIL import Image

Color = Sequence[float]

_HDR_MAGICS = (b"#?RADIANCE", b"#?RGBE")
_HDR_FORMAT = b"FORMAT=32-bit_rle_rgbe"


class AddressMode(Enum):
    REPEAT = "repeat"
    CLAMP_TO_EDGE = "clamp_to_edge"
    MIRROR_REPEAT = "mirror_repeat"
    BLACK_BORDER = "black_border"
    WHITE_BORDER = "white_border"


class LDRColorSpace(Enum):
    SRGB = "srgb"
    UNORM = "unorm"


_BLACK = np.array([0.0, 0.0, 0.0, 1.0], dtype=np.float32)
_WHITE = np.ones(4, dtype=np.float32)


def _read_hdr(data: bytes) -> np.ndarray:
    """Decode a Radiance RGBE image into a (height, width, 4) float array."""
    pos = 0

    def next_line() -> bytes:
        nonlocal pos
        end = data.find(b"\n", pos)
        if end < 0:
            raise ValueError("truncated HDR header")
        line = data[pos:end]
        pos = end + 1
        return line

    if next_line() not in _HDR_MAGICS:
        raise ValueError("not a Radiance HDR file")
    valid_format = False
    while True:
        line = next_line()
        if not line:
            break
        if line == _HDR_FORMAT:
            valid_format = True
    if not valid_format:
        raise ValueError("unsupported HDR format")

    tokens = next_line().split()
    if len(tokens) != 4 or tokens[0] != b"-Y" or tokens[2] != b"+X":
        raise ValueError("unsupported HDR resolution line")
    height, width = int(tokens[1]), int(tokens[3])
    if width <= 0 or height <= 0:
        raise ValueError("invalid HDR dimensions")

    rle = (
        8 <= width < 32768
        and data[pos:pos + 2] == b"\x02\x02"
        and len(data) > pos + 3
        and not data[pos + 2] & 0x80
    )
    try:
        if rle:
            rgbe = np.empty((height, width, 4), dtype=np.uint8)
            for row in rgbe:
                if data[pos] != 2 or data[pos + 1] != 2:
                    raise ValueError("invalid HDR scanline")
                if (data[pos + 2] << 8 | data[pos + 3]) != width:
                    raise ValueError("HDR scanline width mismatch")
                pos += 4
                for channel in range(4):
                    i = 0
                    while i < width:
                        count = data[pos]
                        pos += 1
                        if count > 128:
                            count -= 128
                            if i + count > width:
                                raise ValueError("bad HDR run length")
                            row[i:i + count, channel] = data[pos]
                            pos += 1
                        else:
                            if count == 0 or i + count > width:
                                raise ValueError("bad HDR dump length")
                            chunk = data[pos:pos + count]
                            if len(chunk) < count:
                                raise ValueError("truncated HDR data")
                            row[i:i + count, channel] = np.frombuffer(chunk, np.uint8)
                            pos += count
                        i += count
        else:
            size = width * height * 4
            chunk = data[pos:pos + size]
            if len(chunk) < size:
                raise ValueError("truncated HDR data")
            rgbe = np.frombuffer(chunk, np.uint8).reshape(height, width, 4)
    except IndexError as exc:
        raise ValueError("truncated HDR data") from exc

    exponent = rgbe[..., 3].astype(np.int32)
    scale = np.where(exponent > 0, np.ldexp(1.0, exponent - 136), 0.0)
    pixels = np.ones((height, width, 4), dtype=np.float32)
    pixels[..., :3] = rgbe[..., :3] * scale[..., None]
    return pixels


def _write_hdr(path: str, pixels: np.ndarray) -> None:
    height, width = pixels.shape[:2]
    rgb = pixels[..., :3].astype(np.float32)
    peak = rgb.max(axis=-1)
    mantissa, exponent = np.frexp(peak)
    visible = peak >= 1e-32
    with np.errstate(divide="ignore", invalid="ignore"):
        normalize = np.where(visible, mantissa * 256.0 / peak, 0.0)
    rgbe = np.zeros((height, width, 4), dtype=np.uint8)
    rgbe[..., :3] = np.clip(rgb * normalize[..., None], 0, 255).astype(np.uint8)
    rgbe[..., 3] = np.clip(np.where(visible, exponent + 128, 0), 0, 255)
    header = f"#?RADIANCE\nFORMAT=32-bit_rle_rgbe\n\n-Y {height} +X {width}\n"
    with open(path, "wb") as handle:
        handle.write(header.encode("ascii"))
        handle.write(rgbe.tobytes())


def _to_bytes(values: np.ndarray, ldr_color_space: LDRColorSpace) -> np.ndarray:
    values = np.asarray(values, dtype=np.float32)
    with np.errstate(invalid="ignore", over="ignore"):
        if ldr_color_space is LDRColorSpace.SRGB:
            values = np.power(values, np.float32(1.0 / 2.2))
        scaled = np.nan_to_num(values * np.float32(255.0), nan=0.0)
    return np.trunc(np.clip(scaled, 0.0, 255.0)).astype(np.uint8)


class Texture:
    """A width x height grid of RGBA float pixels, addressed as (x, y)."""

    def __init__(self, width: int = 1, height: int = 1,
                 color: Color = (1.0, 1.0, 1.0, 1.0)) -> None:
        self._width = int(width)
        self._height = int(height)
        self._pixels = np.empty((self._height, self._width, 4), dtype=np.float32)
        self._pixels[...] = np.asarray(color, dtype=np.float32)

    @classmethod
    def from_pixels(cls, width: int, height: int, pixels) -> Texture:
        """Build a texture from width*height RGBA values in row-major order."""
        array = np.asarray(pixels, dtype=np.float32)
        if array.size != width * height * 4:
            raise ValueError(
                f"expected {width * height} RGBA pixels, got {array.size / 4:g}"
            )
        texture = cls(width, height)
        texture._pixels = array.reshape(height, width, 4).copy()
        return texture

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def pixels(self) -> np.ndarray:
        """The (height, width, 4) pixel array; writes go to the texture."""
        return self._pixels

    def _replace(self, pixels: np.ndarray) -> None:
        self._height, self._width = pixels.shape[:2]
        self._pixels = np.ascontiguousarray(pixels, dtype=np.float32)

    def load_from_file(self, file_path: str,
                       ldr_color_space: LDRColorSpace = LDRColorSpace.SRGB) -> None:
        """Load an HDR or LDR image; LDR colour channels are linearised."""
        data = Path(file_path).read_bytes()
        if data.split(b"\n", 1)[0] in _HDR_MAGICS:
            self._replace(_read_hdr(data))
            return
        with Image.open(file_path) as image:
            raw = np.asarray(image.convert("RGBA"), dtype=np.float32) / np.float32(255.0)
        gamma = 2.2 if ldr_color_space is LDRColorSpace.SRGB else 1.0
        raw[..., :3] = np.power(raw[..., :3], np.float32(gamma))
        self._replace(raw)

    def load_roughness_from_file(self, file_path: str) -> None:
        """Load a single-channel image into RGB, alpha set to one."""
        with Image.open(file_path) as image:
            grey = np.asarray(image.convert("L"), dtype=np.float32) / np.float32(255.0)
        pixels = np.ones(grey.shape + (4,), dtype=np.float32)
        pixels[..., :3] = grey[..., None]
        self._replace(pixels)

    def load_normal_from_file(self, file_path: str) -> None:
        """Load a normal map, decoding each texel to a unit vector."""
        with Image.open(file_path) as image:
            rgb = np.asarray(image.convert("RGB"), dtype=np.float32) / np.float32(255.0)
        vectors = rgb * np.float32(2.0) - np.float32(1.0)
        with np.errstate(invalid="ignore", divide="ignore"):
            vectors = vectors / np.linalg.norm(vectors, axis=-1, keepdims=True)
        pixels = np.ones(rgb.shape[:2] + (4,), dtype=np.float32)
        pixels[..., :3] = vectors
        self._replace(pixels)

    def save_to_file(self, file_path: str,
                     ldr_color_space: LDRColorSpace = LDRColorSpace.SRGB) -> None:
        """Write .hdr, .png, .bmp, .tga or .jpg, chosen by extension."""
        if file_path.endswith(".hdr"):
            _write_hdr(file_path, self._pixels)
            return
        formats = {".png": "PNG", ".bmp": "BMP", ".tga": "TGA", ".jpg": "JPEG"}
        fmt = formats.get(file_path[-4:]) if len(file_path) >= 4 else None
        if fmt is None:
            raise ValueError(f"unsupported image extension: {file_path}")
        data = _to_bytes(self._pixels, ldr_color_space)
        image = Image.fromarray(data)
        if fmt == "JPEG":
            image.convert("RGB").save(file_path, format=fmt, quality=100)
        else:
            image.save(file_path, format=fmt)

    def _check(self, x: int, y: int) -> None:
        if not (0 <= x < self._width and 0 <= y < self._height):
            raise IndexError(f"pixel ({x}, {y}) outside {self._width}x{self._height}")

    def __getitem__(self, xy: tuple[int, int]) -> np.ndarray:
        x, y = xy
        self._check(x, y)
        return self._pixels[y, x].copy()

    def __setitem__(self, xy: tuple[int, int], value: Color) -> None:
        x, y = xy
        self._check(x, y)
        self._pixels[y, x] = np.asarray(value, dtype=np.float32)

    def fetch(self, x: int, y: int,
              address_mode: AddressMode = AddressMode.CLAMP_TO_EDGE) -> np.ndarray:
        """Read one texel, resolving out-of-range coordinates by address mode."""
        width, height = self._width, self._height
        if not (0 <= x < width and 0 <= y < height):
            if address_mode is AddressMode.REPEAT:
                x %= width
                y %= height
            elif address_mode is AddressMode.CLAMP_TO_EDGE:
                x = min(max(x, 0), width - 1)
                y = min(max(y, 0), height - 1)
            elif address_mode is AddressMode.MIRROR_REPEAT:
                x %= 2 * width
                y %= 2 * height
                if x >= width:
                    x = 2 * width - 1 - x
                if y >= height:
                    y = 2 * height - 1 - y
            elif address_mode is AddressMode.BLACK_BORDER:
                return _BLACK.copy()
            else:
                return _WHITE.copy()
        return self._pixels[y, x].copy()

    def sample(self, u: float, v: float,
               address_mode: AddressMode = AddressMode.CLAMP_TO_EDGE) -> np.ndarray:
        """Bilinearly filtered lookup at normalised coordinates (u, v)."""
        u = u * self._width - 0.5
        v = v * self._height - 0.5
        x, y = math.floor(u), math.floor(v)
        rx, ry = u - x, v - y
        return (
            self.fetch(x, y, address_mode) * ((1.0 - rx) * (1.0 - ry))
            + self.fetch(x + 1, y, address_mode) * (rx * (1.0 - ry))
            + self.fetch(x, y + 1, address_mode) * ((1.0 - rx) * ry)
            + self.fetch(x + 1, y + 1, address_mode) * (rx * ry)
        ).astype(np.float32)


def float_to_byte(value: float, ldr_color_space: LDRColorSpace) -> int:
    """Quantise one channel to 0..255, gamma-encoding first for sRGB."""
    return int(_to_bytes(np.array([value]), ldr_color_space)[0])


def convert_texture(texture: Texture, ldr_color_space: LDRColorSpace) -> bytes:
    """Quantise a texture to row-major RGBA8 bytes."""
    return _to_bytes(texture.pixels, ldr_color_space).tobytes()


def sample_sky_box(sky_box: Sequence[Texture], direction: Sequence[float]) -> np.ndarray:
    """Look up a direction in a five-face sky box; below the horizon is white."""
    dx, dy, dz = (float(c) for c in direction)
    if dy < 0.0:
        return _WHITE.copy()
    dim, sig, max_val = 0, (-1 if dx < 0 else 1), abs(dx)
    if abs(dy) > max_val:
        dim, sig, max_val = 1, (-1 if dy < 0 else 1), abs(dy)
    if abs(dz) > max_val:
        dim, sig, max_val = 2, (-1 if dz < 0 else 1), abs(dz)
    if max_val == 0.0:
        raise ValueError("direction must be non-zero")
    x, y, z = dx / max_val, dy / max_val, dz / max_val
    scale = 2.0

    def side(face: int, a: float, b: float) -> np.ndarray:
        return sky_box[face].sample(a * 0.5 + 0.5, (b * 0.5 + 0.5) * scale)

    if dim == 0:
        return side(1, z, -y) if sig > 0 else side(3, -z, -y)
    if dim == 1:
        if sig > 0:
            return sky_box[4].sample(x * 0.5 + 0.5, -z * 0.5 + 0.5)
        return _WHITE.copy()
    return side(2, -x, -y) if sig > 0 else side(0, x, -y)


def sky_box_to_envmap(sky_box: Sequence[Texture], height: int) -> Texture:
    """Resample a sky box into an equirectangular map of size 2*height x height."""
    result = Texture(height * 2, height)
    step = math.pi / height
    for y in range(height):
        theta = step * (y + 0.5)
        for x in range(height * 2):
            phi = step * (x + 0.5)
            direction = (
                -math.sin(phi) * math.sin(theta),
                math.cos(theta),
                math.cos(phi) * math.sin(theta),
            )
            result[x, y] = sample_sky_box(sky_box, direction)
    return result