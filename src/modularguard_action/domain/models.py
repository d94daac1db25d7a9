# domain/models.py

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class RunOutcome:
    """
    Everything a run reports back to the workflow.
    """

    violations_count: int
    error_count: int
    warning_count: int
    # coarse status output, driven by errors only
    status: Literal["success", "failure"]
    # whether the job fails, driven by any violation
    failed: bool
    message: str | None = None
    pull_requests: tuple[int, ...] = ()
    publication_failures: tuple[str, ...] = ()
