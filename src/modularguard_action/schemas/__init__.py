# schemas/__init__.py

from .check_run import (
    AnnotationLevel,
    CheckRunAnnotation,
    CheckRunConclusion,
    CheckRunOutput,
    CheckRunPayload,
)
from .result import (
    ModularGuardModule,
    ModularGuardProject,
    ModularGuardResult,
    ModularGuardSummary,
    ModularGuardViolation,
)

__all__ = [
    # check run
    "AnnotationLevel",
    "CheckRunAnnotation",
    "CheckRunConclusion",
    "CheckRunOutput",
    "CheckRunPayload",
    # result
    "ModularGuardModule",
    "ModularGuardProject",
    "ModularGuardResult",
    "ModularGuardSummary",
    "ModularGuardViolation",
]
