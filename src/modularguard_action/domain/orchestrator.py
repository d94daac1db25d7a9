# domain/orchestrator.py

import logging
from collections.abc import Sequence
from pathlib import Path

import httpx

from modularguard_action.adapters.github import (
    create_check_run,
    list_pull_requests_for_commit,
)
from modularguard_action.adapters.modularguard import (
    download_modularguard,
    execute_modularguard,
)
from modularguard_action.config import ActionInputs, RunContext
from modularguard_action.errors import ModularGuardActionError, PublicationError
from modularguard_action.schemas import ModularGuardResult
from modularguard_action.workflow import append_step_summary, set_output

from .comments import publish_comment
from .formatting import build_check_run, format_comment
from .models import RunOutcome
from .paths import to_workspace_relative_path

logger = logging.getLogger(__name__)


async def run(
    inputs: ActionInputs,
    context: RunContext,
    client: httpx.AsyncClient,
) -> RunOutcome:
    """
    Run ModularGuard for the current commit and publish its results.

    Steps, strictly in sequence: discover associated pull requests, acquire
    the binary, execute it, rewrite violation paths relative to the
    workspace, publish a check run and one comment per pull request, then
    set the step outputs.

    Without an associated pull request the analysis still runs and is
    reported in the log and job summary; only publication is skipped.
    Publication and job summary failures are logged, never raised.

    Args:
        inputs (ActionInputs): Action inputs.
        context (RunContext): Workflow run context.
        client (httpx.AsyncClient): Authenticated GitHub API client.

    Returns:
        RunOutcome: Counts, status and whether the job should fail.

    Raises:
        ModularGuardActionError: On any fatal error before publication, or
            when the step outputs cannot be written.
    """
    pull_numbers = await _find_pull_requests(client, context)

    logger.info("Downloading ModularGuard binary...")
    binary_path = await download_modularguard(
        client,
        inputs.modularguard_version,
        cache_root=context.tool_cache_dir,
    )
    logger.info("Binary downloaded to: %s", binary_path)

    logger.info("Executing ModularGuard analysis...")
    result = await execute_modularguard(
        binary_path,
        inputs.directory,
        inputs.config_path,
    )
    _log_summary(result)

    result = with_relative_paths(result, context.workspace)

    comment_body = format_comment(result, context.run_url)
    _write_step_summary(comment_body, context.summary_path)

    failures: tuple[str, ...] = ()
    if pull_numbers:
        failures = await _publish(client, context, result, comment_body, pull_numbers)

    outcome = decide_outcome(result, pull_numbers, failures)
    _set_outputs(outcome, context.output_path)

    return outcome


def with_relative_paths(
    result: ModularGuardResult,
    workspace: Path,
) -> ModularGuardResult:
    """
    Return a copy of the result with every violation path made relative to
    the workspace.

    Returns:
        ModularGuardResult: A new result; the input is left untouched.
    """
    violations = tuple(
        violation.model_copy(
            update={
                "file_path": to_workspace_relative_path(violation.file_path, workspace),
            },
        )
        for violation in result.violations
    )
    return result.model_copy(update={"violations": violations})


def decide_outcome(
    result: ModularGuardResult,
    pull_numbers: Sequence[int] = (),
    publication_failures: Sequence[str] = (),
) -> RunOutcome:
    """
    Decide how the run ends.

    Any violation, warning or error, fails the job. The `status` output
    stays error-driven, so a warnings-only run reports `success` there while
    still failing.

    Returns:
        RunOutcome: The outcome of the run.
    """
    summary = result.summary
    violations_count = len(result.violations)
    failed = violations_count > 0

    message = None
    if failed:
        message = (
            "ModularGuard analysis failed: found "
            f"{summary.error_count} error(s) and {summary.warning_count} warning(s)"
        )

    return RunOutcome(
        violations_count=violations_count,
        error_count=summary.error_count,
        warning_count=summary.warning_count,
        status="failure" if summary.error_count > 0 else "success",
        failed=failed,
        message=message,
        pull_requests=tuple(pull_numbers),
        publication_failures=tuple(publication_failures),
    )


async def publish_check_run(
    client: httpx.AsyncClient,
    context: RunContext,
    result: ModularGuardResult,
) -> None:
    """
    Create the ModularGuard check run for the current commit. Sent once.

    Raises:
        PublicationError: If the API call fails.
    """
    try:
        await create_check_run(
            client,
            context.owner,
            context.repo,
            context.sha,
            build_check_run(result),
        )
    except (httpx.HTTPError, ValueError) as error:
        raise PublicationError(f"Failed to create check run: {error}") from error


async def _find_pull_requests(
    client: httpx.AsyncClient,
    context: RunContext,
) -> tuple[int, ...]:
    logger.info("Finding associated pull requests...")

    try:
        pulls = await list_pull_requests_for_commit(
            client,
            context.owner,
            context.repo,
            context.sha,
        )
    except (httpx.HTTPError, ValueError) as error:
        raise ModularGuardActionError(
            f"Failed to list pull requests for commit {context.sha}: {error}",
        ) from error

    if not pulls:
        logger.info(
            "No associated pull requests found. "
            "Running in standalone mode; results will not be published.",
        )

    for pull in pulls:
        logger.info("Associated pull request: %s", pull.get("html_url", pull["number"]))

    return tuple(pull["number"] for pull in pulls)


async def _publish(
    client: httpx.AsyncClient,
    context: RunContext,
    result: ModularGuardResult,
    comment_body: str,
    pull_numbers: Sequence[int],
) -> tuple[str, ...]:
    """
    Publish the check run and one comment per pull request.

    Each publication is isolated: a failure is logged and recorded, and the
    remaining publications still go ahead.

    Returns:
        tuple[str, ...]: One message per failed publication.
    """
    failures: list[str] = []

    logger.info("Creating check run with annotations...")
    try:
        await publish_check_run(client, context, result)
    except PublicationError as error:
        logger.error("%s", error)
        failures.append(str(error))

    logger.info("Posting results to pull request(s)...")
    for number in pull_numbers:
        try:
            action = await publish_comment(
                client,
                context.owner,
                context.repo,
                number,
                comment_body,
            )
        except PublicationError as error:
            logger.error("PR #%d: %s", number, error)
            failures.append(f"PR #{number}: {error}")
            continue

        logger.info("Comment %s on PR #%d", action, number)

    return tuple(failures)


def _log_summary(result: ModularGuardResult) -> None:
    summary = result.summary
    logger.info("Analysis complete:")
    logger.info("  Total modules: %d", summary.total_modules)
    logger.info("  Total projects: %d", summary.total_projects)
    logger.info("  Errors: %d", summary.error_count)
    logger.info("  Warnings: %d", summary.warning_count)


def _set_outputs(outcome: RunOutcome, output_path: Path | None) -> None:
    try:
        set_output("violations-count", outcome.violations_count, output_path)
        set_output("error-count", outcome.error_count, output_path)
        set_output("warning-count", outcome.warning_count, output_path)
        set_output("status", outcome.status, output_path)
    except OSError as error:
        raise ModularGuardActionError(
            f"Failed to write step outputs: {error}",
        ) from error


def _write_step_summary(markdown: str, summary_path: Path | None) -> None:
    try:
        append_step_summary(markdown, summary_path)
    except OSError as error:
        logger.warning("Failed to write job summary: %s", error)
