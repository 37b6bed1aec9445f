from __future__ import annotations

import logging
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from .markup.normalizer import normalize

logger = logging.getLogger(__name__)


class _Model(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
        coerce_numbers_to_str=True,
    )


class SolutionStep(_Model):
    id: Union[str, int] = ""
    title: str = ""
    content: str = ""
    explanation: str = ""


class Solution(_Model):
    problem: str = ""
    subject: str = ""
    difficulty: str = ""
    steps: list[SolutionStep] = Field(default_factory=list)
    final_answer: str = ""


class ValidationIssue(_Model):
    code: str
    field: str
    message: str


class ValidationResult(_Model):
    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def field_names(self) -> list[str]:
        return [issue.field for issue in self.issues]


SolutionLike = Union[Solution, dict, None]


def _text(value: Any) -> str:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value.strip() if isinstance(value, str) else ""


def _field_path(loc: tuple) -> str:
    """('steps', 1, 'content') -> 'steps[1].content'"""
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else str(part)
    return path


def _as_dict(solution: SolutionLike) -> Optional[dict]:
    if solution is None:
        return None
    if isinstance(solution, Solution):
        return solution.model_dump()
    if isinstance(solution, dict):
        return solution
    raise TypeError(f"expected Solution or dict, got {type(solution).__name__}")


def validate_solution(solution: SolutionLike, *, require_metadata: bool = False) -> ValidationResult:
    """
    Check that a solution document has what the renderer needs.

    Every problem is reported, each with the field it concerns (``steps[2].content``),
    instead of stopping at the first one. The final answer may be left out when the
    answers live in the steps.
    """
    data = _as_dict(solution)
    issues: list[ValidationIssue] = []

    def issue(code: str, field: str, message: str) -> None:
        issues.append(ValidationIssue(code=code, field=field, message=message))

    if data is None:
        issue("missing-problem", "solution", "No solution data was provided.")
        return ValidationResult(is_valid=False, issues=issues)

    if not _text(data.get("problem")):
        issue("missing-problem", "problem", "The original problem statement is missing.")

    if require_metadata:
        if not _text(data.get("subject")):
            issue("missing-subject", "subject", "The subject is missing.")
        if not _text(data.get("difficulty")):
            issue("missing-difficulty", "difficulty", "The difficulty level is missing.")

    steps = data.get("steps")
    if not isinstance(steps, list) or not steps:
        issue("missing-steps", "steps", "The solution does not contain any steps.")
        steps = []
    for idx, step in enumerate(steps):
        step = step if isinstance(step, dict) else {}
        for name in ("id", "title"):
            if not _text(step.get(name)):
                issue("missing-step-field", f"steps[{idx}].{name}", f"Step {idx + 1} is missing its {name}.")
        if not _text(step.get("content")):
            issue("empty-step-content", f"steps[{idx}].content", f"Step {idx + 1} is missing an explanation.")

    final_answer = data.get("final_answer", data.get("finalAnswer"))
    if not steps and not _text(final_answer):
        issue("missing-final-answer", "final_answer", "A final answer was not provided.")

    # Whatever the checks above let through must also load as a Solution.
    if not issues:
        try:
            Solution.model_validate(data)
        except ValidationError as e:
            for err in e.errors():
                issue("invalid-field-type", _field_path(err["loc"]), err["msg"])

    if issues:
        logger.info("Solution failed validation: %s", ", ".join(i.field for i in issues))
    return ValidationResult(is_valid=not issues, issues=issues)


def format_solution(solution: Union[Solution, dict], *, decimals: bool = False) -> Solution:
    """Normalize every text field that is shown to the student."""
    model = solution if isinstance(solution, Solution) else Solution.model_validate(solution)

    def fmt(value: str) -> str:
        return normalize(value, decimals=decimals) if value else value

    return model.model_copy(
        update={
            "problem": fmt(model.problem),
            "steps": [
                step.model_copy(
                    update={
                        "title": fmt(step.title),
                        "content": fmt(step.content),
                        "explanation": fmt(step.explanation),
                    }
                )
                for step in model.steps
            ],
            "final_answer": fmt(model.final_answer),
        }
    )
