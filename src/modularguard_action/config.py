# modularguard_action/config.py

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .errors import ContextError


@dataclass(frozen=True, slots=True)
class ModularGuardConfig:
    """
    Immutable configuration for the upstream ModularGuard project and the
    GitHub endpoints the action talks to.

    Centralises the URL patterns used to resolve and download the binary so
    there is a single source of truth for them.

    Returns:
        ModularGuardConfig: Immutable configuration object.
    """

    # name used for the tool cache directory and the binary itself
    tool_name: str = "modularguard"

    # upstream repository publishing the release archives
    upstream_owner: str = "n2jsoft-public-org"
    upstream_repo: str = "ModularGuard"

    # release archive download URL, formatted with version and filename
    download_url_template: str = (
        "https://github.com/n2jsoft-public-org/ModularGuard/releases/download/"
        "v{version}/{filename}"
    )

    # defaults used outside of a GitHub Actions runner
    default_api_url: str = "https://api.github.com"
    default_server_url: str = "https://github.com"


@dataclass(frozen=True)
class ActionInputs:
    """
    Values supplied through the action's `with:` block.
    """

    token: str
    directory: str = "."
    modularguard_version: str = "latest"
    config_path: str | None = None


@dataclass(frozen=True)
class RunContext:
    """
    Workflow run context, resolved once at start-up and passed explicitly to
    everything that needs it.
    """

    owner: str
    repo: str
    sha: str
    workspace: Path
    api_url: str
    server_url: str
    tool_cache_dir: Path
    run_url: str | None = None
    output_path: Path | None = None
    summary_path: Path | None = None


def get_input(environ: Mapping[str, str], name: str) -> str:
    """
    Read an action input the way the Actions runner exposes it.

    Spaces in the input name become underscores and the name is upper-cased;
    hyphens are kept, so `modularguard-version` is read from
    `INPUT_MODULARGUARD-VERSION`.

    Returns:
        str: The stripped input value, or an empty string when unset.
    """
    key = f"INPUT_{name.replace(' ', '_').upper()}"
    return environ.get(key, "").strip()


def load_inputs(environ: Mapping[str, str] | None = None) -> ActionInputs:
    """
    Build ActionInputs from `INPUT_*` environment variables.

    Returns:
        ActionInputs: The resolved inputs with defaults applied.

    Raises:
        ContextError: If the required token input is missing.
    """
    env = os.environ if environ is None else environ

    token = get_input(env, "token")
    if not token:
        raise ContextError("Input required and not supplied: token")

    return ActionInputs(
        token=token,
        directory=get_input(env, "directory") or ".",
        modularguard_version=get_input(env, "modularguard-version") or "latest",
        config_path=get_input(env, "config-path") or None,
    )


def load_context(
    environ: Mapping[str, str] | None = None,
    config: ModularGuardConfig | None = None,
) -> RunContext:
    """
    Build the RunContext from the default environment variables set by the
    Actions runner.

    GITHUB_REPOSITORY and GITHUB_SHA are required; everything else falls back
    to a sensible default so the action can also be run locally.

    Returns:
        RunContext: The resolved run context.

    Raises:
        ContextError: If a required variable is absent or malformed.
    """
    env = os.environ if environ is None else environ
    cfg = config or ModularGuardConfig()

    owner, repo = _split_repository(_require(env, "GITHUB_REPOSITORY"))
    sha = _require(env, "GITHUB_SHA")

    server_url = (env.get("GITHUB_SERVER_URL") or cfg.default_server_url).rstrip("/")
    run_id = env.get("GITHUB_RUN_ID")

    return RunContext(
        owner=owner,
        repo=repo,
        sha=sha,
        workspace=Path(env.get("GITHUB_WORKSPACE") or Path.cwd()),
        api_url=(env.get("GITHUB_API_URL") or cfg.default_api_url).rstrip("/"),
        server_url=server_url,
        tool_cache_dir=_tool_cache_dir(env),
        run_url=(
            f"{server_url}/{owner}/{repo}/actions/runs/{run_id}" if run_id else None
        ),
        output_path=_optional_path(env, "GITHUB_OUTPUT"),
        summary_path=_optional_path(env, "GITHUB_STEP_SUMMARY"),
    )


def _require(environ: Mapping[str, str], name: str) -> str:
    value = environ.get(name)
    if not value:
        raise ContextError(f"{name} is required")
    return value


def _split_repository(value: str) -> tuple[str, str]:
    """
    Split an `owner/repo` string into its two parts.

    Returns:
        tuple[str, str]: The owner and the repository name.
    """
    owner, _, repo = value.partition("/")
    if not owner:
        raise ContextError("GITHUB_REPOSITORY must have an owner part")
    if not repo:
        raise ContextError("GITHUB_REPOSITORY must have a repo part")
    return owner, repo


def _tool_cache_dir(environ: Mapping[str, str]) -> Path:
    cache_root = environ.get("RUNNER_TOOL_CACHE")
    if cache_root:
        return Path(cache_root)
    return Path.home() / ".cache" / "modularguard-action" / "tool-cache"


def _optional_path(environ: Mapping[str, str], name: str) -> Path | None:
    value = environ.get(name)
    return Path(value) if value else None
