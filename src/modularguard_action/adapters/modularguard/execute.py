# modularguard/execute.py

import asyncio
import logging
from pathlib import Path

from pydantic import ValidationError

from modularguard_action.errors import ExecutionError, OutputError
from modularguard_action.schemas import ModularGuardResult

logger = logging.getLogger(__name__)


def build_arguments(directory: str, config_path: str | None = None) -> list[str]:
    """
    Build the command line arguments for a JSON `check` run.

    Returns:
        list[str]: Arguments, excluding the binary itself.
    """
    args = ["check", directory, "--format", "json", "--quiet"]

    if config_path:
        args.extend(["--config", config_path])

    return args


async def execute_modularguard(
    binary_path: Path,
    directory: str,
    config_path: str | None = None,
) -> ModularGuardResult:
    """
    Run ModularGuard against a directory and parse its JSON report.

    The exit code is only logged: a non-zero exit with a valid report is a
    normal run with violations. Output is buffered in full since it is a
    single JSON document.

    Args:
        binary_path (Path): Path to the ModularGuard executable.
        directory (str): Directory to analyse.
        config_path (str | None): Optional ModularGuard configuration file.

    Returns:
        ModularGuardResult: The validated report.

    Raises:
        ExecutionError: If the process cannot be started.
        OutputError: If stdout is empty or not a valid report.
    """
    args = build_arguments(directory, config_path)
    logger.debug("Running %s %s", binary_path, " ".join(args))

    try:
        process = await asyncio.create_subprocess_exec(
            str(binary_path),
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout_bytes, stderr_bytes = await process.communicate()
    except OSError as error:
        raise ExecutionError(f"Failed to execute ModularGuard: {error}") from error

    stdout = stdout_bytes.decode("utf-8", errors="replace")
    stderr = stderr_bytes.decode("utf-8", errors="replace")

    logger.debug("ModularGuard exit code: %s", process.returncode)
    if stderr:
        logger.debug("ModularGuard stderr: %s", stderr)

    return parse_result(stdout, stderr)


def parse_result(stdout: str, stderr: str = "") -> ModularGuardResult:
    """
    Validate ModularGuard stdout against the report schema.

    This is the only gate between the external binary and the formatters:
    missing sections, unknown fields and wrongly typed values are rejected.
    Raw stdout and stderr are logged when validation fails.

    Returns:
        ModularGuardResult: The validated report.

    Raises:
        OutputError: If stdout is empty or does not match the schema.
    """
    if not stdout.strip():
        _log_raw_output(stdout, stderr)
        raise OutputError("ModularGuard produced no output")

    try:
        return ModularGuardResult.model_validate_json(stdout)
    except ValidationError as error:
        logger.error("Failed to parse ModularGuard output")
        _log_raw_output(stdout, stderr)
        raise OutputError(
            f"Failed to parse ModularGuard output: {_describe(error)}",
        ) from error


def _describe(error: ValidationError) -> str:
    """
    Summarise a validation error by its first problem.

    Returns:
        str: `<location>: <message>`, plus a count of further problems.
    """
    problems = error.errors()
    first = problems[0]
    location = ".".join(str(part) for part in first["loc"]) or "<root>"

    description = f"{location}: {first['msg']}"
    if len(problems) > 1:
        description += f" (and {len(problems) - 1} more)"

    return description


def _log_raw_output(stdout: str, stderr: str) -> None:
    logger.error("stdout: %s", stdout)
    logger.error("stderr: %s", stderr)
