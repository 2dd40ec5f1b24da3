"""
Conversions between editor ``file://`` URIs and native filesystem paths.

Both directions are pure string transforms. The separator is a parameter
so Windows-style paths can be produced or consumed on any host.
"""

from __future__ import annotations

import os
import re
from urllib.parse import quote, unquote

FILE_SCHEME = "file://"

# "/C:/..." as it appears after the scheme in a Windows file URI
_SLASHED_DRIVE = re.compile(r"^/[a-zA-Z]:")
_DRIVE = re.compile(r"^[a-zA-Z]:")


def is_file_uri(uri: str) -> bool:
    """True for ``file://`` URIs; ``untitled:`` and other schemes have no path."""
    return uri.startswith(FILE_SCHEME)


def uri_to_path(uri: str, sep: str = os.sep) -> str:
    """
    Convert a file URI to a native path.

    Args:
        uri: URI such as ``file:///home/me/app/controllers/SiteController.php``
        sep: Separator of the target platform

    Returns:
        The decoded path using ``sep`` as separator.
    """
    path = uri[len(FILE_SCHEME) :] if uri.startswith(FILE_SCHEME) else uri
    path = unquote(path)
    if _SLASHED_DRIVE.match(path):
        path = path[1:]
    return path.replace("/", sep)


def path_to_uri(path: str | os.PathLike[str], sep: str = os.sep) -> str:
    """
    Convert a native path to a file URI.

    Args:
        path: Absolute path on the platform described by ``sep``
        sep: Separator used in ``path``

    Returns:
        A ``file://`` URI with forward slashes.
    """
    posix = os.fspath(path).replace(sep, "/")
    if _DRIVE.match(posix):
        posix = "/" + posix
    return FILE_SCHEME + quote(posix, safe="/:")
