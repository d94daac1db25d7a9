# domain/__init__.py

from .comments import create_or_update_comment, find_existing_comment, publish_comment
from .formatting import (
    COMMENT_MARKER,
    MAX_ANNOTATIONS,
    build_check_run,
    format_comment,
    map_severity_to_level,
)
from .models import RunOutcome
from .orchestrator import decide_outcome, run, with_relative_paths
from .paths import to_workspace_relative_path

__all__ = [
    # comments
    "create_or_update_comment",
    "find_existing_comment",
    "publish_comment",
    # formatting
    "COMMENT_MARKER",
    "MAX_ANNOTATIONS",
    "build_check_run",
    "format_comment",
    "map_severity_to_level",
    # orchestration
    "RunOutcome",
    "decide_outcome",
    "run",
    "with_relative_paths",
    # paths
    "to_workspace_relative_path",
]
