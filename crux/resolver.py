"""Module resolution rules applied while bundling widgets."""

from __future__ import annotations

import enum
import logging
import os
import stat
from dataclasses import dataclass
from typing import Iterable

logger = logging.getLogger(__name__)

PLUGIN_NAME = "crux-internal-es-plugin"
DEPENDENCIES_DIR_NAME = "node_modules"
DEFAULT_EXTERNALS = ("@cruciblehq/ui", "@cruciblehq/ui-web", "react", "react-reconciler")


class ResolveKind(enum.Enum):
    ENTRY_POINT = "entry-point"
    IMPORT = "import"


@dataclass(frozen=True)
class ResolveResult:
    path: str
    external: bool = False
    side_effects: bool = True


def resolve_module(
    path: str,
    resolve_dir: str,
    kind: ResolveKind = ResolveKind.IMPORT,
    externals: Iterable[str] = DEFAULT_EXTERNALS,
    working_dir: str | None = None,
) -> ResolveResult:
    """Resolve an import or entry point according to its kind."""
    logger.debug("resolving module '%s' in '%s'", path, resolve_dir)
    if kind is ResolveKind.ENTRY_POINT:
        return resolve_entry_point(path)
    return resolve_import(path, resolve_dir, externals, working_dir)


def resolve_entry_point(path: str) -> ResolveResult:
    """Entry points are passed through unchanged."""
    return ResolveResult(path=path)


def resolve_import(
    path: str,
    resolve_dir: str,
    externals: Iterable[str] = DEFAULT_EXTERNALS,
    working_dir: str | None = None,
) -> ResolveResult:
    """Resolve an import: externals stay unbundled, others map to files on disk."""
    for ext in externals:
        if path == ext or path.startswith(ext + "/"):
            return ResolveResult(path=path, external=True, side_effects=False)

    if path.startswith("./") or path.startswith("../"):
        target = os.path.normpath(os.path.join(resolve_dir, path))
    else:
        root = working_dir or os.getcwd()
        target = os.path.normpath(os.path.join(root, DEPENDENCIES_DIR_NAME, path))

    try:
        info = os.lstat(target)
    except OSError:
        candidate = target + ".js"
        if os.path.lexists(candidate):
            target = candidate
    else:
        if stat.S_ISDIR(info.st_mode):
            target = os.path.join(target, "index.js")

    return ResolveResult(path=target, external=False, side_effects=True)