# modularguard/download.py

import logging
import platform
import sys
import tarfile
import zipfile
from pathlib import Path
from tempfile import TemporaryDirectory
from typing import Literal

import httpx

from modularguard_action.adapters.github import get_latest_release_tag
from modularguard_action.config import ModularGuardConfig
from modularguard_action.errors import AcquisitionError

from .tool_cache import cache_dir, find_tool

logger = logging.getLogger(__name__)

_config = ModularGuardConfig()

Platform = Literal["linux", "osx", "win"]
Arch = Literal["x64", "arm64"]

_ARCH_ALIASES: dict[str, Arch] = {
    "x64": "x64",
    "x86_64": "x64",
    "amd64": "x64",
    "arm64": "arm64",
    "aarch64": "arm64",
}


async def download_modularguard(
    client: httpx.AsyncClient,
    version: str,
    *,
    cache_root: Path,
    system: str | None = None,
    machine: str | None = None,
) -> Path:
    """
    Return the path of a ModularGuard binary for the current platform,
    downloading and caching it when the tool cache has no copy.

    `latest` is resolved to the newest release first, so an already cached
    release never triggers a second download.

    Args:
        client (httpx.AsyncClient): Client used for the API and the download.
        version (str): Semantic version or the literal `latest`.
        cache_root (Path): Root of the tool cache.
        system (str | None): Platform override, defaults to sys.platform.
        machine (str | None): Architecture override, defaults to
            platform.machine().

    Returns:
        Path: Path to the executable binary.

    Raises:
        AcquisitionError: If the platform is unsupported or the version
            cannot be resolved, downloaded or extracted.
    """
    platform_id = get_platform(system)
    arch = get_arch(machine)
    resolved = await resolve_version(client, version)

    cached = find_tool(_config.tool_name, resolved, arch, root=cache_root)
    if cached:
        try:
            binary = _locate_binary(cached, platform_id)
        except AcquisitionError:
            logger.warning(
                "Cached ModularGuard %s has no binary, downloading again",
                resolved,
            )
        else:
            logger.info("Using cached ModularGuard binary from %s", cached)
            return binary

    url = release_asset_url(resolved, platform_id, arch)
    logger.info("Downloading ModularGuard from %s", url)

    try:
        with TemporaryDirectory() as temp_dir:
            archive = Path(temp_dir) / url.rsplit("/", 1)[-1]
            extracted = Path(temp_dir) / "extracted"

            await _stream_to_file(client, url, archive)
            _extract(archive, extracted, platform_id)

            binary = _locate_binary(extracted, platform_id)
            if platform_id != "win":
                binary.chmod(0o755)

            cached = cache_dir(
                extracted,
                _config.tool_name,
                resolved,
                arch,
                root=cache_root,
            )
    except (httpx.HTTPError, OSError, tarfile.TarError, zipfile.BadZipFile) as error:
        raise AcquisitionError(f"Failed to download ModularGuard: {error}") from error

    logger.info("Cached ModularGuard binary to %s", cached)
    return cached / binary.relative_to(extracted)


async def resolve_version(client: httpx.AsyncClient, version: str) -> str:
    """
    Resolve a requested version to a concrete release version.

    Explicit versions are returned without their optional `v` prefix and
    without any network call.

    Returns:
        str: Version string without a `v` prefix.

    Raises:
        AcquisitionError: If the latest release cannot be fetched.
    """
    if version != "latest":
        return version.removeprefix("v")

    try:
        tag = await get_latest_release_tag(
            client,
            _config.upstream_owner,
            _config.upstream_repo,
        )
    except (httpx.HTTPError, KeyError, ValueError) as error:
        raise AcquisitionError(
            f"Failed to fetch latest ModularGuard version: {error}",
        ) from error

    return tag.removeprefix("v")


def release_asset_url(version: str, platform_id: Platform, arch: Arch) -> str:
    """
    Build the download URL of the release archive for a platform.

    Returns:
        str: URL of `modularguard-<platform>-<arch>.<zip|tar.gz>`.
    """
    ext = "zip" if platform_id == "win" else "tar.gz"
    filename = f"modularguard-{platform_id}-{arch}.{ext}"
    return _config.download_url_template.format(version=version, filename=filename)


def binary_name(platform_id: Platform) -> str:
    return "modularguard.exe" if platform_id == "win" else "modularguard"


def get_platform(system: str | None = None) -> Platform:
    """
    Map the running operating system onto a ModularGuard platform id.

    Returns:
        Platform: `linux`, `osx` or `win`.

    Raises:
        AcquisitionError: For any other operating system.
    """
    value = sys.platform if system is None else system

    if value.startswith("linux"):
        return "linux"
    if value == "darwin":
        return "osx"
    if value in ("win32", "cygwin"):
        return "win"

    raise AcquisitionError(f"Unsupported platform: {value}")


def get_arch(machine: str | None = None) -> Arch:
    """
    Map the machine architecture onto a ModularGuard architecture id.

    Returns:
        Arch: `x64` or `arm64`.

    Raises:
        AcquisitionError: For any other architecture.
    """
    value = platform.machine() if machine is None else machine

    try:
        return _ARCH_ALIASES[value.lower()]
    except KeyError:
        raise AcquisitionError(f"Unsupported architecture: {value}") from None


async def _stream_to_file(
    client: httpx.AsyncClient,
    url: str,
    destination: Path,
) -> None:
    async with client.stream("GET", url) as response:
        response.raise_for_status()

        with destination.open("wb") as f:
            async for chunk in response.aiter_bytes(chunk_size=65536):
                f.write(chunk)


def _extract(archive: Path, destination: Path, platform_id: Platform) -> None:
    """
    Extract a release archive: zip on Windows, gzipped tar elsewhere.

    Returns:
        None
    """
    destination.mkdir(parents=True, exist_ok=True)

    if platform_id == "win":
        with zipfile.ZipFile(archive) as zf:
            zf.extractall(destination)
        return

    with tarfile.open(archive, "r:gz") as tf:
        tf.extractall(destination, filter="data")


def _locate_binary(directory: Path, platform_id: Platform) -> Path:
    """
    Find the ModularGuard executable inside an extracted or cached directory.

    The archive root is checked first, then any nested directory.

    Returns:
        Path: Path to the binary.

    Raises:
        AcquisitionError: If the directory does not contain the binary.
    """
    name = binary_name(platform_id)

    candidate = directory / name
    if candidate.is_file():
        return candidate

    nested = next((p for p in sorted(directory.rglob(name)) if p.is_file()), None)
    if nested is None:
        raise AcquisitionError(f"ModularGuard archive does not contain {name}")

    return nested
