# modularguard_action/workflow.py

import logging
import sys
import uuid
from pathlib import Path

logger = logging.getLogger(__name__)

_PACKAGE_LOGGER = "modularguard_action"

_COMMANDS_BY_LEVEL: tuple[tuple[int, str], ...] = (
    (logging.ERROR, "error"),
    (logging.WARNING, "warning"),
    (logging.INFO, ""),
    (logging.DEBUG, "debug"),
)


class WorkflowCommandFormatter(logging.Formatter):
    """
    Render log records as GitHub Actions workflow commands.

    Debug records become `::debug::`, warnings `::warning::` and errors
    `::error::`, so they show up as annotations on the run. Info records are
    printed as plain lines.
    """

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        command = _command_for(record.levelno)

        if not command:
            return message

        return f"::{command}::{escape_data(message)}"


def escape_data(value: str) -> str:
    """
    Escape a workflow command message the same way the Actions toolkit does.

    Returns:
        str: Value with `%`, CR and LF percent-encoded.
    """
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def configure_logging(*, verbose: bool = False) -> logging.Logger:
    """
    Configure the package logger to write workflow commands to stdout,
    where the runner picks them up.

    Handlers are reset first so repeated calls do not duplicate output.

    Returns:
        logging.Logger: The configured package logger.
    """
    level = logging.DEBUG if verbose else logging.INFO
    package_logger = logging.getLogger(_PACKAGE_LOGGER)
    package_logger.setLevel(level)
    package_logger.propagate = False

    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setLevel(level)
    stream_handler.setFormatter(WorkflowCommandFormatter("%(message)s"))
    package_logger.addHandler(stream_handler)

    return package_logger


def set_output(name: str, value: object, path: Path | None) -> None:
    """
    Set a step output by appending to the file named by GITHUB_OUTPUT.

    Uses the heredoc form with a random delimiter so any value is safe.
    Without an output file the value is only logged.

    Returns:
        None
    """
    text = str(value)

    if path is None:
        logger.info("Output %s=%s", name, text)
        return

    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    with path.open("a", encoding="utf-8") as f:
        f.write(f"{name}<<{delimiter}\n{text}\n{delimiter}\n")


def append_step_summary(markdown: str, path: Path | None) -> None:
    """
    Append markdown to the job summary named by GITHUB_STEP_SUMMARY, if any.

    Returns:
        None
    """
    if path is None:
        return

    with path.open("a", encoding="utf-8") as f:
        f.write(markdown)
        if not markdown.endswith("\n"):
            f.write("\n")


def _command_for(levelno: int) -> str:
    return next(
        (command for level, command in _COMMANDS_BY_LEVEL if levelno >= level),
        "debug",
    )
