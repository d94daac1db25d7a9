# modularguard_action/cli.py

import argparse
import asyncio
import logging
import os
from collections.abc import Mapping, Sequence

from .adapters.github import make_client
from .config import ActionInputs, RunContext, load_context, load_inputs
from .domain import RunOutcome, run
from .errors import ModularGuardActionError
from .workflow import configure_logging

logger = logging.getLogger(__name__)

# CLI flag -> action input name
_INPUT_FLAGS: dict[str, str] = {
    "directory": "directory",
    "token": "token",
    "modularguard_version": "modularguard-version",
    "config_path": "config-path",
}


def main(
    argv: Sequence[str] | None = None,
    environ: Mapping[str, str] | None = None,
) -> int:
    """
    Entry point of the action.

    Inputs come from `INPUT_*` environment variables, as set by the Actions
    runner, and can be overridden on the command line.

    Returns:
        int: 0 on success, 1 when violations were found or a fatal error
            occurred.
    """
    env = os.environ if environ is None else environ
    args = _build_parser().parse_args(argv)

    configure_logging(verbose=args.verbose or env.get("RUNNER_DEBUG") == "1")

    try:
        inputs = load_inputs(_with_flag_overrides(env, args))
        context = load_context(env)
        outcome = asyncio.run(_run(inputs, context))
    except ModularGuardActionError as error:
        logger.debug("Run aborted", exc_info=True)
        logger.error("%s", error)
        return 1

    if outcome.failed:
        logger.error("%s", outcome.message)
        return 1

    return 0


async def _run(inputs: ActionInputs, context: RunContext) -> RunOutcome:
    async with make_client(inputs.token, context.api_url) as client:
        return await run(inputs, context, client)


def _with_flag_overrides(
    environ: Mapping[str, str],
    args: argparse.Namespace,
) -> dict[str, str]:
    """
    Overlay command line flags onto the environment as `INPUT_*` variables.

    Returns:
        dict[str, str]: A copy of the environment with overrides applied.
    """
    overlaid = dict(environ)

    for attribute, input_name in _INPUT_FLAGS.items():
        value = getattr(args, attribute)
        if value:
            overlaid[f"INPUT_{input_name.upper()}"] = value

    return overlaid


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="modularguard-action",
        description=(
            "Run ModularGuard and publish its results as a pull request "
            "comment and check run."
        ),
    )
    parser.add_argument(
        "--directory",
        help="Directory to analyse (input: directory, default: .).",
    )
    parser.add_argument(
        "--token",
        help="GitHub token (input: token).",
    )
    parser.add_argument(
        "--modularguard-version",
        help="ModularGuard version or 'latest' (input: modularguard-version).",
    )
    parser.add_argument(
        "--config-path",
        help="ModularGuard configuration file (input: config-path).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Enable debug logging.",
    )
    return parser
