from __future__ import annotations

import re

_SEPARATORS = "/\\"
_DRIVE_ROOT = re.compile(r"^[A-Za-z]:[\\/]?$")


def is_root(path: str) -> bool:
    """True for ``/``, ``\\`` and drive roots such as ``C:\\`` or ``C:``."""
    return path in ("/", "\\") or _DRIVE_ROOT.match(path) is not None


def parent_path(path: str) -> str | None:
    """Parent of *path* using the last ``/`` or ``\\``; ``None`` at a root."""
    if not path or is_root(path):
        return None
    trimmed = path.rstrip(_SEPARATORS)
    if not trimmed or is_root(trimmed):
        return None
    idx = max(trimmed.rfind("/"), trimmed.rfind("\\"))
    if idx < 0:
        return None
    parent = trimmed[: idx + 1]
    if is_root(parent):
        return parent
    return parent.rstrip(_SEPARATORS) or parent[0]

