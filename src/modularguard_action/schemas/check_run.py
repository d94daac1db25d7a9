# schemas/check_run.py

from typing import Literal

from pydantic import BaseModel, ConfigDict

AnnotationLevel = Literal["failure", "warning", "notice"]
CheckRunConclusion = Literal["success", "failure"]


class CheckRunAnnotation(BaseModel):
    """
    A single inline annotation, shaped as the GitHub Checks API expects it.
    """

    model_config = ConfigDict(strict=True, frozen=True)

    path: str
    start_line: int
    end_line: int
    start_column: int
    end_column: int
    annotation_level: AnnotationLevel
    message: str
    title: str
    raw_details: str | None = None


class CheckRunOutput(BaseModel):
    """
    The `output` object of a check run.
    """

    model_config = ConfigDict(strict=True, frozen=True)

    title: str
    summary: str
    annotations: tuple[CheckRunAnnotation, ...]


class CheckRunPayload(BaseModel):
    """
    Everything needed to create a completed check run, apart from the
    repository coordinates and head SHA.
    """

    model_config = ConfigDict(strict=True, frozen=True)

    name: str
    conclusion: CheckRunConclusion
    output: CheckRunOutput
