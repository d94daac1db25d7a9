# modularguard/test_download.py

import io
import os
import tarfile
import zipfile
from pathlib import Path

import httpx
import pytest

from modularguard_action.adapters.modularguard.download import (
    download_modularguard,
    get_arch,
    get_platform,
    release_asset_url,
    resolve_version,
)
from modularguard_action.adapters.modularguard.tool_cache import cache_dir
from modularguard_action.errors import AcquisitionError

pytestmark = pytest.mark.unit

_RELEASES_URL = "https://github.com/n2jsoft-public-org/ModularGuard/releases/download"


def _tar_gz_bytes(files: dict[str, bytes]) -> bytes:
    """
    Build a gzipped tar archive in memory.
    """
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tf:
        for name, content in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(content)
            info.mode = 0o644
            tf.addfile(info, io.BytesIO(content))
    return buffer.getvalue()


def _zip_bytes(files: dict[str, bytes]) -> bytes:
    """
    Build a zip archive in memory.
    """
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in files.items():
            zf.writestr(name, content)
    return buffer.getvalue()


def _client(handler: object) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url="https://api.github.com",
        transport=httpx.MockTransport(handler),
    )


# --- get_platform / get_arch ---


@pytest.mark.parametrize(
    ("system", "expected"),
    [("linux", "linux"), ("darwin", "osx"), ("win32", "win")],
)
def test_get_platform_maps_supported_systems(system: str, expected: str) -> None:
    """
    ARRANGE: supported sys.platform value
    ACT:     get_platform
    ASSERT:  mapped to the ModularGuard platform id
    """
    assert get_platform(system) == expected


def test_get_platform_rejects_unsupported_system() -> None:
    """
    ARRANGE: unsupported sys.platform value
    ACT:     get_platform
    ASSERT:  AcquisitionError raised
    """
    with pytest.raises(AcquisitionError, match="Unsupported platform: freebsd14"):
        get_platform("freebsd14")


@pytest.mark.parametrize(
    ("machine", "expected"),
    [("x86_64", "x64"), ("AMD64", "x64"), ("aarch64", "arm64"), ("arm64", "arm64")],
)
def test_get_arch_maps_supported_machines(machine: str, expected: str) -> None:
    """
    ARRANGE: supported platform.machine() value
    ACT:     get_arch
    ASSERT:  mapped to the ModularGuard architecture id
    """
    assert get_arch(machine) == expected


def test_get_arch_rejects_unsupported_machine() -> None:
    """
    ARRANGE: 32-bit ARM machine
    ACT:     get_arch
    ASSERT:  AcquisitionError raised
    """
    with pytest.raises(AcquisitionError, match="Unsupported architecture: armv7l"):
        get_arch("armv7l")


# --- release_asset_url ---


def test_release_asset_url_linux() -> None:
    """
    ARRANGE: linux x64 at 1.2.0
    ACT:     release_asset_url
    ASSERT:  tar.gz asset under the v-prefixed tag
    """
    actual = release_asset_url("1.2.0", "linux", "x64")

    assert actual == f"{_RELEASES_URL}/v1.2.0/modularguard-linux-x64.tar.gz"


def test_release_asset_url_windows() -> None:
    """
    ARRANGE: win arm64 at 1.2.0
    ACT:     release_asset_url
    ASSERT:  zip asset
    """
    actual = release_asset_url("1.2.0", "win", "arm64")

    assert actual == f"{_RELEASES_URL}/v1.2.0/modularguard-win-arm64.zip"


# --- resolve_version ---


async def test_resolve_version_explicit_skips_network() -> None:
    """
    ARRANGE: client that fails any request
    ACT:     resolve_version with an explicit version
    ASSERT:  version returned without a v prefix
    """

    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("unexpected request")

    async with _client(handler) as client:
        actual = await resolve_version(client, "v2.0.1")

    assert actual == "2.0.1"


async def test_resolve_version_latest_strips_tag_prefix() -> None:
    """
    ARRANGE: latest release tagged v1.5.0
    ACT:     resolve_version("latest")
    ASSERT:  returns 1.5.0
    """

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/repos/n2jsoft-public-org/ModularGuard/releases/latest"
        return httpx.Response(200, json={"tag_name": "v1.5.0"})

    async with _client(handler) as client:
        actual = await resolve_version(client, "latest")

    assert actual == "1.5.0"


async def test_resolve_version_latest_failure_raises() -> None:
    """
    ARRANGE: releases endpoint returns 404
    ACT:     resolve_version("latest")
    ASSERT:  AcquisitionError raised
    """

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"message": "Not Found"})

    async with _client(handler) as client:
        with pytest.raises(AcquisitionError, match="Failed to fetch latest"):
            await resolve_version(client, "latest")


# --- download_modularguard ---


async def test_download_modularguard_extracts_and_caches_tarball(
    tmp_path: Path,
) -> None:
    """
    ARRANGE: tar.gz asset containing the binary
    ACT:     download_modularguard on linux x64
    ASSERT:  executable binary placed in the tool cache
    """
    archive = _tar_gz_bytes({"modularguard": b"#!/bin/sh\n"})
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        return httpx.Response(200, content=archive)

    async with _client(handler) as client:
        actual = await download_modularguard(
            client,
            "1.2.0",
            cache_root=tmp_path,
            system="linux",
            machine="x86_64",
        )

    assert requested == [f"{_RELEASES_URL}/v1.2.0/modularguard-linux-x64.tar.gz"]
    assert actual == tmp_path / "modularguard" / "1.2.0" / "x64" / "modularguard"
    assert actual.read_bytes() == b"#!/bin/sh\n"
    if os.name == "posix":
        assert os.access(actual, os.X_OK)


async def test_download_modularguard_extracts_zip_on_windows(tmp_path: Path) -> None:
    """
    ARRANGE: zip asset containing modularguard.exe
    ACT:     download_modularguard on win x64
    ASSERT:  exe returned from the tool cache
    """
    archive = _zip_bytes({"modularguard.exe": b"MZ"})

    def handler(request: httpx.Request) -> httpx.Response:
        assert str(request.url).endswith("modularguard-win-x64.zip")
        return httpx.Response(200, content=archive)

    async with _client(handler) as client:
        actual = await download_modularguard(
            client,
            "1.2.0",
            cache_root=tmp_path,
            system="win32",
            machine="AMD64",
        )

    assert actual.name == "modularguard.exe"
    assert actual.read_bytes() == b"MZ"


async def test_download_modularguard_finds_nested_binary(tmp_path: Path) -> None:
    """
    ARRANGE: archive with the binary inside a subdirectory
    ACT:     download_modularguard
    ASSERT:  nested binary located
    """
    archive = _tar_gz_bytes({"modularguard-linux-x64/modularguard": b"bin"})

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=archive)

    async with _client(handler) as client:
        actual = await download_modularguard(
            client,
            "1.2.0",
            cache_root=tmp_path,
            system="linux",
            machine="x86_64",
        )

    assert actual.parent.name == "modularguard-linux-x64"
    assert actual.read_bytes() == b"bin"


async def test_download_modularguard_cache_hit_skips_download(tmp_path: Path) -> None:
    """
    ARRANGE: 1.2.0 already cached for x64
    ACT:     download_modularguard
    ASSERT:  cached binary returned without any request
    """
    source = tmp_path / "src"
    source.mkdir()
    (source / "modularguard").write_text("cached")
    cache_root = tmp_path / "cache"
    cache_dir(source, "modularguard", "1.2.0", "x64", root=cache_root)

    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("unexpected request")

    async with _client(handler) as client:
        actual = await download_modularguard(
            client,
            "1.2.0",
            cache_root=cache_root,
            system="linux",
            machine="x86_64",
        )

    assert actual.read_text() == "cached"


async def test_download_modularguard_cache_without_binary_downloads_again(
    tmp_path: Path,
) -> None:
    """
    ARRANGE: 1.2.0 marked complete in the cache but missing its binary
    ACT:     download_modularguard
    ASSERT:  archive downloaded again and the cache entry repaired
    """
    source = tmp_path / "src"
    source.mkdir()
    (source / "README.md").write_text("no binary here")
    cache_root = tmp_path / "cache"
    cache_dir(source, "modularguard", "1.2.0", "x64", root=cache_root)

    archive = _tar_gz_bytes({"modularguard": b"fresh"})
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        return httpx.Response(200, content=archive)

    async with _client(handler) as client:
        actual = await download_modularguard(
            client,
            "1.2.0",
            cache_root=cache_root,
            system="linux",
            machine="x86_64",
        )

    assert requested == [f"{_RELEASES_URL}/v1.2.0/modularguard-linux-x64.tar.gz"]
    assert actual == cache_root / "modularguard" / "1.2.0" / "x64" / "modularguard"
    assert actual.read_bytes() == b"fresh"


async def test_download_modularguard_latest_uses_resolved_cache_key(
    tmp_path: Path,
) -> None:
    """
    ARRANGE: latest resolves to 1.2.0 which is already cached
    ACT:     download_modularguard("latest")
    ASSERT:  only the release lookup is requested
    """
    source = tmp_path / "src"
    source.mkdir()
    (source / "modularguard").write_text("cached")
    cache_root = tmp_path / "cache"
    cache_dir(source, "modularguard", "1.2.0", "arm64", root=cache_root)
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(request.url.path)
        return httpx.Response(200, json={"tag_name": "v1.2.0"})

    async with _client(handler) as client:
        actual = await download_modularguard(
            client,
            "latest",
            cache_root=cache_root,
            system="darwin",
            machine="arm64",
        )

    assert requested == ["/repos/n2jsoft-public-org/ModularGuard/releases/latest"]
    assert actual.read_text() == "cached"


async def test_download_modularguard_http_error_raises(tmp_path: Path) -> None:
    """
    ARRANGE: asset download returns 404
    ACT:     download_modularguard
    ASSERT:  AcquisitionError raised, nothing cached
    """

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404)

    async with _client(handler) as client:
        with pytest.raises(AcquisitionError, match="Failed to download ModularGuard"):
            await download_modularguard(
                client,
                "9.9.9",
                cache_root=tmp_path,
                system="linux",
                machine="x86_64",
            )

    assert not (tmp_path / "modularguard").exists()


async def test_download_modularguard_corrupt_archive_raises(tmp_path: Path) -> None:
    """
    ARRANGE: asset that is not a tar.gz
    ACT:     download_modularguard
    ASSERT:  AcquisitionError raised
    """

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>not an archive</html>")

    async with _client(handler) as client:
        with pytest.raises(AcquisitionError):
            await download_modularguard(
                client,
                "1.2.0",
                cache_root=tmp_path,
                system="linux",
                machine="x86_64",
            )


async def test_download_modularguard_archive_without_binary_raises(
    tmp_path: Path,
) -> None:
    """
    ARRANGE: archive missing the binary
    ACT:     download_modularguard
    ASSERT:  AcquisitionError names the binary
    """
    archive = _tar_gz_bytes({"README.md": b"hello"})

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=archive)

    async with _client(handler) as client:
        with pytest.raises(AcquisitionError, match="does not contain modularguard"):
            await download_modularguard(
                client,
                "1.2.0",
                cache_root=tmp_path,
                system="linux",
                machine="x86_64",
            )
