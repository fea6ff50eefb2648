"""Locating asset files across a list of search directories."""

from __future__ import annotations

import functools
import os
from collections.abc import Iterable
from pathlib import Path

ASSETS_DIR = os.environ.get(
    "SPARKIUM_ASSETS_DIR",
    str(Path(__file__).resolve().parent.parent / "assets") + os.sep,
)


class FileProbe:
    """Searches an ordered list of path prefixes for a regular file."""

    def __init__(self, search_paths: Iterable[str] = ()) -> None:
        self._search_paths: list[str] = list(search_paths)

    @property
    def search_paths(self) -> tuple[str, ...]:
        return tuple(self._search_paths)

    def add_search_path(self, path: str) -> None:
        self._search_paths.append(path)

    def find_file(self, filename: str) -> str | None:
        """Return the first prefix + filename that is a regular file, else None."""
        for path in self._search_paths:
            full_path = path + filename
            if os.path.isfile(full_path):
                return full_path
        return None

    def __str__(self) -> str:
        lines = ["Search paths:", "-------------", *self._search_paths]
        return "\n".join(lines) + "\n"


@functools.lru_cache(maxsize=None)
def default_probe() -> FileProbe:
    """The shared probe searching the working directory and the assets directory."""
    return FileProbe(["", ASSETS_DIR, "./", "../", "../../"])


def find_assets_file(filename: str) -> str | None:
    return default_probe().find_file(filename)