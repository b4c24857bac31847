"""Resource errors and checks on built resource layouts."""

from __future__ import annotations

import os
from pathlib import Path

IMAGE_FILE = "image.tar"
WIDGET_MAIN_FILE = "index.js"


class ResourceError(Exception):
    """Base class for resource errors."""

    default_message = "resource error"

    def __init__(self, detail: str | None = None):
        self.detail = detail
        message = self.default_message if not detail else f"{self.default_message}: {detail}"
        super().__init__(message)


class BuildError(ResourceError):
    default_message = "build failed"


class RunnerError(ResourceError):
    default_message = "runner failed"


class FileSystemOperationError(ResourceError):
    default_message = "file system operation failed"


class InvalidResourceTypeError(ResourceError):
    default_message = "invalid resource type"


class InvalidStructureError(ResourceError):
    default_message = "invalid resource structure"


class InvalidPathError(ResourceError):
    default_message = "invalid path"


class CacheOperationError(ResourceError):
    default_message = "cache operation failed"


class UnsupportedOperationError(ResourceError):
    default_message = "unsupported operation"


def _require(path: Path) -> Path:
    try:
        os.stat(path)
    except FileNotFoundError as exc:
        raise InvalidStructureError(f"{path} does not exist") from exc
    return path


def validate_image_structure(dist_dir: str | os.PathLike[str]) -> Path:
    """Check that an image-based build directory holds the image; return its path."""
    return _require(Path(dist_dir) / IMAGE_FILE)


def validate_widget_structure(dist_dir: str | os.PathLike[str]) -> Path:
    """Check that a widget build directory holds its main file; return its path."""
    return _require(Path(dist_dir) / WIDGET_MAIN_FILE)


def validate_package(path: str | os.PathLike[str]) -> Path:
    """Check that a package archive exists; return its path."""
    return _require(Path(path))