# editagent: Filesystem helpers for the local tools: path normalization, path-safety checks and size formatting.

import os
import pathlib
import posixpath
from typing import Optional

# Absolute prefixes tools must never touch.
BLOCKED_PREFIXES = ("/etc", "/usr", "/bin", "/sbin", "/boot", "/dev", "/proc", "/sys")

PATH_NOT_ALLOWED = "Path not allowed for security reasons"


def _normalized_absolute(raw: str) -> Optional[str]:
    """POSIX form of an absolute path with `.` segments and repeated slashes collapsed, else None."""
    posix = os.path.expanduser(raw).replace("\\", "/")
    if not posix.startswith("/"):
        return None
    # normpath keeps a leading "//"
    return "/" + posixpath.normpath(posix).lstrip("/")


def is_unsafe_path(raw: str) -> bool:
    """
    Return True when a tool must refuse the path.

    Rules:
      - any `..` segment (checked on the raw text, before resolution)
      - absolute paths that normalize to a system directory in BLOCKED_PREFIXES
    """
    posix = raw.replace("\\", "/")
    if ".." in posix.split("/"):
        return True
    normalized = _normalized_absolute(raw)
    if normalized is None:
        return False
    return any(normalized == prefix or normalized.startswith(prefix + "/") for prefix in BLOCKED_PREFIXES)


def resolve_tool_path(raw: str, base: Optional[pathlib.Path] = None) -> pathlib.Path:
    """Resolve a tool path: absolute paths are kept, relative ones are joined onto base (default: cwd)."""
    p = pathlib.Path(os.path.expanduser(raw))
    if not p.is_absolute():
        p = (base or pathlib.Path.cwd()) / p
    normalized = os.path.normpath(str(p))
    if normalized.startswith("//"):
        normalized = "/" + normalized.lstrip("/")
    return pathlib.Path(normalized)


def format_size(num_bytes: int) -> str:
    """Render a byte count as bytes / KB / MB / GB with one decimal."""
    if num_bytes < 1024:
        return f"{num_bytes} bytes"
    if num_bytes < 1024 * 1024:
        return f"{num_bytes / 1024:.1f} KB"
    if num_bytes < 1024 * 1024 * 1024:
        return f"{num_bytes / (1024 * 1024):.1f} MB"
    return f"{num_bytes / (1024 * 1024 * 1024):.1f} GB"


def count_lines(s: str) -> int:
    """Return the number of lines in a string, handling trailing newline gracefully."""
    if not s:
        return 0
    return s.count("\n") + (0 if s.endswith("\n") else 1)
