# schemas/result.py

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# ModularGuard emits camelCase keys; undocumented keys and mistyped values are
# rejected. Validate from JSON so arrays can populate the tuple fields.
_RESULT_MODEL_CONFIG = ConfigDict(
    strict=True,
    frozen=True,
    extra="forbid",
    alias_generator=to_camel,
    populate_by_name=True,
)


class ModularGuardSummary(BaseModel):
    """
    Aggregate counters reported by ModularGuard.

    `is_valid` is taken as reported; it is never recomputed from the counts.
    """

    model_config = _RESULT_MODEL_CONFIG

    total_modules: int = Field(ge=0)
    total_projects: int = Field(ge=0)
    error_count: int = Field(ge=0)
    warning_count: int = Field(ge=0)
    is_valid: bool


class ModularGuardProject(BaseModel):
    """
    A single project discovered inside a module.
    """

    model_config = _RESULT_MODEL_CONFIG

    name: str
    type: str
    file_path: str
    references: tuple[str, ...]


class ModularGuardModule(BaseModel):
    """
    A module and the projects classified into it.
    """

    model_config = _RESULT_MODEL_CONFIG

    module_name: str
    projects: tuple[ModularGuardProject, ...]


class ModularGuardViolation(BaseModel):
    """
    One architectural rule breach, located at a project file.
    """

    model_config = _RESULT_MODEL_CONFIG

    severity: str
    project_name: str
    invalid_reference: str
    rule_name: str
    description: str
    suggestion: str | None = None
    documentation_url: str | None = None
    file_path: str
    line_number: int = Field(ge=1)
    column_number: int = Field(ge=1)


class ModularGuardResult(BaseModel):
    """
    Complete output of a `modularguard check --format json` run.
    """

    model_config = _RESULT_MODEL_CONFIG

    summary: ModularGuardSummary
    modules: tuple[ModularGuardModule, ...]
    violations: tuple[ModularGuardViolation, ...]
