# domain/paths.py

import re
from pathlib import PurePath

_DRIVE_PREFIX = re.compile(r"^([A-Za-z]:)/")


def to_workspace_relative_path(path: str, workspace_root: str | PurePath) -> str:
    """
    Convert a violation path into a workspace-relative, forward-slash path.

    Both `/` and `\\` are treated as separators. Paths outside the workspace
    come back `..`-prefixed and inner `..` segments are resolved first.
    Already-relative paths are only slash-normalised and collapsed, which makes
    the function idempotent on its own output. A path equal to the workspace
    root yields its last segment.

    Args:
        path (str): Path reported by ModularGuard, usually absolute.
        workspace_root (str | PurePath): Root of the checked-out repository.

    Returns:
        str: The relative path using `/` separators.
    """
    normalised = _to_slashes(str(path))
    root = _to_slashes(str(workspace_root))

    path_anchor, path_parts = _split_anchor(normalised)
    root_anchor, root_parts = _split_anchor(root)

    if path_anchor is None:
        return "/".join(path_parts)

    # no relative path exists across drives or from a relative root
    if root_anchor is None or path_anchor.lower() != root_anchor.lower():
        return normalised

    common = _common_prefix_length(path_parts, root_parts)
    parts = [".."] * (len(root_parts) - common) + path_parts[common:]

    if not parts:
        return path_parts[-1] if path_parts else normalised

    return "/".join(parts)


def _to_slashes(path: str) -> str:
    return path.replace("\\", "/")


def _split_anchor(path: str) -> tuple[str | None, list[str]]:
    """
    Split a slash-normalised path into its anchor and its segments.

    The anchor is `/` for POSIX roots, the drive (e.g. `C:`) for Windows
    roots and None for relative paths. Empty and `.` segments are dropped and
    `..` collapses the segment before it; a leading `..` is kept for relative
    paths and dropped at a root.

    Returns:
        tuple[str | None, list[str]]: The anchor and the remaining segments.
    """
    match = _DRIVE_PREFIX.match(path)
    if match:
        anchor, rest = match.group(1), path[match.end() :]
    elif path.startswith("/"):
        anchor, rest = "/", path
    else:
        anchor, rest = None, path

    return anchor, _collapse(rest.split("/"), keep_leading_parent=anchor is None)


def _common_prefix_length(left: list[str], right: list[str]) -> int:
    count = 0
    for a, b in zip(left, right):
        if a != b:
            break
        count += 1
    return count


def _collapse(segments: list[str], *, keep_leading_parent: bool) -> list[str]:
    parts: list[str] = []

    for segment in segments:
        if segment in ("", "."):
            continue
        if segment != "..":
            parts.append(segment)
        elif parts and parts[-1] != "..":
            parts.pop()
        elif keep_leading_parent:
            parts.append(segment)

    return parts
