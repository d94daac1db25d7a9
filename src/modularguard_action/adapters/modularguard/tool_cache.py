# modularguard/tool_cache.py

import logging
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)


def find_tool(tool: str, version: str, arch: str, *, root: Path) -> Path | None:
    """
    Look up a previously cached tool directory.

    Uses the runner tool cache layout `<root>/<tool>/<version>/<arch>`, which
    only counts as cached once the sibling `<arch>.complete` marker exists.

    Args:
        tool (str): Tool name, e.g. `modularguard`.
        version (str): Resolved version, without a `v` prefix.
        arch (str): Architecture identifier, e.g. `x64`.
        root (Path): Root of the tool cache.

    Returns:
        Path | None: The cached directory, or None on a cache miss.
    """
    directory = _tool_dir(tool, version, arch, root)

    if directory.is_dir() and _marker(directory).is_file():
        return directory

    return None


def cache_dir(
    source: Path,
    tool: str,
    version: str,
    arch: str,
    *,
    root: Path,
) -> Path:
    """
    Copy a directory into the tool cache and mark it complete.

    Any partial entry left by an interrupted earlier run is replaced.

    Returns:
        Path: The cached directory.
    """
    directory = _tool_dir(tool, version, arch, root)
    marker = _marker(directory)

    marker.unlink(missing_ok=True)
    if directory.exists():
        shutil.rmtree(directory)

    directory.parent.mkdir(parents=True, exist_ok=True)
    shutil.copytree(source, directory)
    marker.write_text("")

    logger.debug("Cached %s %s (%s) in %s", tool, version, arch, directory)
    return directory


def _tool_dir(tool: str, version: str, arch: str, root: Path) -> Path:
    return root / tool / version / arch


def _marker(directory: Path) -> Path:
    return directory.with_name(f"{directory.name}.complete")
