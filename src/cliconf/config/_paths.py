"""Filesystem lookups used to resolve config roots."""

from __future__ import annotations

import logging
from pathlib import Path

from ._settings import Settings
from ._types import InvalidProjectWorkspaceError

logger = logging.getLogger(__name__)


def traverse_for_file(start: Path, filename: str) -> Path | None:
    """Walk up from *start* and return the first directory holding *filename*."""
    current = start.resolve()
    for directory in (current, *current.parents):
        if (directory / filename).is_file():
            return directory
    return None


def resolve_project_path(settings: Settings, start: Path | str | None = None) -> Path:
    """Return the project root containing the project marker file.

    Raises ``InvalidProjectWorkspaceError`` when no directory between *start*
    (the working directory by default) and the filesystem root has one.
    """
    origin = Path(start) if start is not None else Path.cwd()
    project_root = traverse_for_file(origin, settings.project_marker)
    if project_root is None:
        raise InvalidProjectWorkspaceError(origin, settings.project_marker)
    logger.debug("Resolved project root %s from %s", project_root, origin)
    return project_root
