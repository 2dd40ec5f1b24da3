"""
View file lookup following the Yii2 directory conventions.

A view name passed to ``render()`` comes in three flavours:
- ``//site/error`` - application view, relative to the application views root
- ``/site/error`` - module view, relative to the current module views root
- ``index`` - controller view, under ``views/<controller-id>/``

The controller file location gives no reliable signal of which project
layout is in use, so several templates are probed in a fixed order and the
first existing file wins.
"""

from __future__ import annotations

import logging
import os
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_VIEW_EXTENSION = ".php"
CONTROLLER_SUFFIX = "Controller"


class ViewNameKind(str, Enum):
    """How a view name is anchored."""

    APPLICATION = "application"  # "//path"
    MODULE = "module"  # "/path"
    CONTROLLER = "controller"  # "path"


def classify_view_name(view_name: str) -> tuple[ViewNameKind, str]:
    """Split a raw view name into its anchoring kind and the unprefixed rest."""
    if view_name.startswith("//"):
        return ViewNameKind.APPLICATION, view_name[2:]
    if view_name.startswith("/"):
        return ViewNameKind.MODULE, view_name[1:]
    return ViewNameKind.CONTROLLER, view_name


def controller_view_dir(controller_path: str | os.PathLike[str]) -> str:
    """
    Name of the view subdirectory owned by a controller.

    ``PostController.php`` -> ``post``, ``SiteController.php`` -> ``site``.
    """
    name = Path(controller_path).stem
    if name.endswith(CONTROLLER_SUFFIX):
        name = name[: -len(CONTROLLER_SUFFIX)]
    return name[:1].lower() + name[1:]


def view_candidates(
    controller_path: str | os.PathLike[str],
    view_name: str,
    extension: str = DEFAULT_VIEW_EXTENSION,
) -> list[Path]:
    """
    Build the ordered list of files a view name may refer to.

    Args:
        controller_path: Absolute path of the controller making the call
        view_name: Raw view name as written in the render() call
        extension: View file extension

    Returns:
        Normalised candidate paths in probe order.
    """
    controller_dir = os.path.dirname(os.fspath(controller_path))
    kind, rest = classify_view_name(view_name)
    file_name = f"{rest}{extension}"

    if kind is ViewNameKind.CONTROLLER:
        subdir = controller_view_dir(controller_path)
        templates = [
            (controller_dir, "..", "views", subdir, file_name),
            (controller_dir, "..", "..", "views", subdir, file_name),
            (controller_dir, "..", "views", file_name),
            # controllers nested one level deeper inside a module
            (controller_dir, "..", "..", "..", "views", subdir, file_name),
        ]
    else:
        templates = [
            (controller_dir, "..", "views", file_name),
            (controller_dir, "..", "..", "views", file_name),
        ]

    return [Path(os.path.normpath(os.path.join(*parts))) for parts in templates]


def existing_candidates(
    controller_path: str | os.PathLike[str],
    view_name: str,
    extension: str = DEFAULT_VIEW_EXTENSION,
) -> list[Path]:
    """Every candidate that exists on disk, in probe order."""
    try:
        return [p for p in view_candidates(controller_path, view_name, extension) if p.exists()]
    except (OSError, ValueError) as e:
        logger.error(f"Error resolving view path: {e}")
        return []


def locate_view(
    controller_path: str | os.PathLike[str],
    view_name: str,
    extension: str = DEFAULT_VIEW_EXTENSION,
) -> Path | None:
    """
    Find the view file referenced from a controller.

    Returns:
        The first existing candidate, or None if none exists or the
        filesystem could not be queried.
    """
    found = existing_candidates(controller_path, view_name, extension)
    if not found:
        return None
    if len(found) > 1:
        others = ", ".join(str(p) for p in found[1:])
        logger.debug(f"View '{view_name}' also matches: {others}")
    return found[0]
