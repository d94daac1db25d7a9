# modularguard_action/__init__.py

__version__ = "1.0.0"

from .domain import (  # noqa: E402
    RunOutcome,
    build_check_run,
    format_comment,
    run,
    to_workspace_relative_path,
)
from .schemas import ModularGuardResult, ModularGuardViolation  # noqa: E402

__all__ = [
    "__version__",
    "build_check_run",
    "format_comment",
    "run",
    "to_workspace_relative_path",
    "ModularGuardResult",
    "ModularGuardViolation",
    "RunOutcome",
]
