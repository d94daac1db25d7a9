# domain/formatting.py

import re
from collections.abc import Iterable

from modularguard_action.schemas import (
    AnnotationLevel,
    CheckRunAnnotation,
    CheckRunOutput,
    CheckRunPayload,
    ModularGuardResult,
    ModularGuardSummary,
    ModularGuardViolation,
)

# Hidden first line of every posted comment, used to find it again next run.
COMMENT_MARKER = "<!-- modularguard-results -->"

# Hard limit imposed by the Checks API per request
MAX_ANNOTATIONS = 50

# Longest description rendered in a violations table row
MAX_DESCRIPTION_LENGTH = 100

CHECK_RUN_NAME = "ModularGuard"
CHECK_RUN_TITLE = "ModularGuard Analysis"

_LINE_BREAKS = re.compile(r"[\r\n]+")

_SEVERITY_ICONS: dict[str, str] = {
    "error": "🔴",
    "warning": "⚠️",
}
_DEFAULT_SEVERITY_ICON = "ℹ️"

_ANNOTATION_LEVELS: dict[str, AnnotationLevel] = {
    "error": "failure",
    "warning": "warning",
}


def format_comment(result: ModularGuardResult, run_url: str | None = None) -> str:
    """
    Render a ModularGuard result as the markdown body of a pull request
    comment.

    The body always starts with the reconciliation marker, followed by a
    heading, a status line, the summary counters, and, when present, the
    violations table, the suggestions block and a link to the workflow run.

    Args:
        result (ModularGuardResult): Result with workspace-relative paths.
        run_url (str | None): URL of the workflow run, if known.

    Returns:
        str: The markdown comment body.
    """
    parts = [
        f"{COMMENT_MARKER}\n\n",
        "## ModularGuard Analysis Results\n\n",
        _status_line(result.summary),
        _summary_block(result.summary),
    ]

    if result.violations:
        parts.append(_violations_table(result.violations))
        parts.append(_suggestions_block(result.violations))

    if run_url:
        parts.append(f"---\n\n[View detailed results]({run_url})\n")

    return "".join(parts)


def build_check_run(result: ModularGuardResult) -> CheckRunPayload:
    """
    Build the check run payload for a ModularGuard result.

    At most MAX_ANNOTATIONS violations become annotations; the summary states
    how many were left out. The conclusion depends on errors only.

    Args:
        result (ModularGuardResult): Result with workspace-relative paths.

    Returns:
        CheckRunPayload: Name, conclusion and output of the check run.
    """
    annotations = tuple(
        _to_annotation(violation)
        for violation in result.violations[:MAX_ANNOTATIONS]
    )

    return CheckRunPayload(
        name=CHECK_RUN_NAME,
        conclusion="failure" if result.summary.error_count > 0 else "success",
        output=CheckRunOutput(
            title=CHECK_RUN_TITLE,
            summary=_check_run_summary(result),
            annotations=annotations,
        ),
    )


def map_severity_to_level(severity: str | None) -> AnnotationLevel:
    """
    Map a ModularGuard severity onto a check run annotation level.

    Matching is case-insensitive; unknown or missing severities map to
    `notice`.

    Returns:
        AnnotationLevel: One of `failure`, `warning` or `notice`.
    """
    return _ANNOTATION_LEVELS.get((severity or "").lower(), "notice")


def _status_line(summary: ModularGuardSummary) -> str:
    if summary.error_count > 0:
        return "❌ **Analysis Failed**\n\n"
    if summary.warning_count > 0:
        return "⚠️ **Analysis Passed with Warnings**\n\n"
    return "✅ **Analysis Passed**\n\n"


def _summary_block(summary: ModularGuardSummary) -> str:
    return (
        "### Summary\n\n"
        f"- **Total Modules:** {summary.total_modules}\n"
        f"- **Total Projects:** {summary.total_projects}\n"
        f"- **Errors:** {summary.error_count}\n"
        f"- **Warnings:** {summary.warning_count}\n\n"
    )


def _violations_table(violations: Iterable[ModularGuardViolation]) -> str:
    """
    Render violations as a five-column markdown table.

    Returns:
        str: Heading, header row, separator and one row per violation.
    """
    rows = [
        "### Violations\n\n",
        "| Severity | File:Line | Project | Invalid Reference | Description |\n",
        "|----------|-----------|---------|-------------------|-------------|\n",
    ]

    for violation in violations:
        icon = _SEVERITY_ICONS.get(violation.severity.lower(), _DEFAULT_SEVERITY_ICON)
        cells = (
            f"{icon} {_table_cell(violation.severity)}",
            f"`{_table_cell(violation.file_path)}:{violation.line_number}`",
            _table_cell(violation.project_name),
            _table_cell(violation.invalid_reference),
            _description_cell(violation.description),
        )
        rows.append(f"| {' | '.join(cells)} |\n")

    rows.append("\n")
    return "".join(rows)


def _suggestions_block(violations: Iterable[ModularGuardViolation]) -> str:
    """
    Render a collapsible block listing every violation that carries a
    suggestion.

    Returns:
        str: The block, or an empty string when no violation has one.
    """
    with_suggestions = [violation for violation in violations if violation.suggestion]
    if not with_suggestions:
        return ""

    entries = "".join(
        f"**{violation.project_name} → {violation.invalid_reference}**\n"
        f"{violation.suggestion}\n\n"
        for violation in with_suggestions
    )
    return f"<details>\n<summary>💡 Suggestions</summary>\n\n{entries}</details>\n\n"


def _table_cell(text: str) -> str:
    """
    Make text safe for a single markdown table cell.

    Returns:
        str: Text on one line with pipes escaped.
    """
    return _LINE_BREAKS.sub(" ", text).replace("|", "\\|")


def _description_cell(description: str) -> str:
    """
    Collapse a description onto one line and cap it at MAX_DESCRIPTION_LENGTH
    characters before escaping.

    Returns:
        str: The truncated, escaped description.
    """
    single_line = _LINE_BREAKS.sub(" ", description)
    if len(single_line) > MAX_DESCRIPTION_LENGTH:
        single_line = single_line[: MAX_DESCRIPTION_LENGTH - 1] + "…"
    return single_line.replace("|", "\\|")


def _check_run_summary(result: ModularGuardResult) -> str:
    summary, violations = result.summary, result.violations

    text = (
        "## ModularGuard Analysis\n\n"
        f"**Total Modules:** {summary.total_modules}\n"
        f"**Total Projects:** {summary.total_projects}\n"
        f"**Errors:** {summary.error_count}\n"
        f"**Warnings:** {summary.warning_count}\n\n"
    )

    if violations:
        text += (
            f"Found {len(violations)} violation(s).\n\n"
            "See annotations on the Files Changed tab for details."
        )
    else:
        text += "No violations found! 🎉"

    omitted = len(violations) - MAX_ANNOTATIONS
    if omitted > 0:
        text += (
            f"\n\n⚠️ Note: Only showing the first {MAX_ANNOTATIONS} annotations. "
            f"{omitted} additional violation(s) not shown."
        )

    return text


def _to_annotation(violation: ModularGuardViolation) -> CheckRunAnnotation:
    title = (
        f"{violation.rule_name}: "
        f"{violation.project_name} → {violation.invalid_reference}"
    )

    return CheckRunAnnotation(
        path=violation.file_path,
        start_line=violation.line_number,
        end_line=violation.line_number,
        start_column=violation.column_number,
        end_column=violation.column_number,
        annotation_level=map_severity_to_level(violation.severity),
        # the Checks API rejects empty messages
        message=violation.description or title,
        title=title,
        raw_details=_raw_details(violation),
    )


def _raw_details(violation: ModularGuardViolation) -> str | None:
    details = [
        text
        for text in (
            violation.suggestion and f"Suggestion: {violation.suggestion}",
            violation.documentation_url
            and f"Documentation: {violation.documentation_url}",
        )
        if text
    ]
    return "\n".join(details) or None
