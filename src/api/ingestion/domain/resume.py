"""Structured resume produced by the AI structuring step.

Model output is parsed leniently: any prose or code fences around the
JSON object are ignored, keys match case-insensitively, and entries
written with a single ``description`` string instead of ``points`` are
split into points.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any

from portfolios.domain.aggregates import Section
from portfolios.domain.value_objects import SectionType

_BULLET = re.compile(r"^\s*(?:[-*•·]|\d+[.)])\s*")
_SENTENCE_BREAK = re.compile(r"(?<=[.!?])\s+(?=[A-Z0-9])")


class ResumeFormatError(ValueError):
    """Model output is not a resume object of the expected shape."""


def _lower_keys(mapping: dict[str, Any]) -> dict[str, Any]:
    return {str(key).lower(): value for key, value in mapping.items()}


def _text(value: Any, field: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise ResumeFormatError(f"'{field}' must be a string")


def _string_list(value: Any, field: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return tuple(part.strip() for part in value.split(",") if part.strip())
    if not isinstance(value, list):
        raise ResumeFormatError(f"'{field}' must be a list of strings")
    return tuple(text for text in (_text(v, field) for v in value) if text)


def _object_list(value: Any, field: str) -> list[dict[str, Any]]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, dict) for v in value):
        raise ResumeFormatError(f"'{field}' must be a list of objects")
    return [_lower_keys(v) for v in value]


def split_points(description: str) -> tuple[str, ...]:
    """Split a free-text description into bullet points.

    Lines are split first, then sentences within each line. Leading
    bullet markers are dropped.
    """
    points: list[str] = []
    for line in description.splitlines():
        line = _BULLET.sub("", line).strip()
        if not line:
            continue
        points.extend(s.strip() for s in _SENTENCE_BREAK.split(line) if s.strip())
    return tuple(points)


def _points(entry: dict[str, Any], field: str) -> tuple[str, ...]:
    if entry.get("points") is not None:
        return _string_list(entry["points"], f"{field}.points")
    description = entry.get("description")
    if isinstance(description, list):
        return _string_list(description, f"{field}.description")
    return split_points(_text(description, f"{field}.description"))


@dataclass(frozen=True)
class ExperienceEntry:
    company: str
    role: str
    points: tuple[str, ...] = ()

    @classmethod
    def from_mapping(cls, entry: dict[str, Any]) -> ExperienceEntry:
        return cls(
            company=_text(entry.get("company"), "experience.company"),
            role=_text(entry.get("role"), "experience.role"),
            points=_points(entry, "experience"),
        )


@dataclass(frozen=True)
class ProjectEntry:
    name: str
    tech_stack: str
    points: tuple[str, ...] = ()

    @classmethod
    def from_mapping(cls, entry: dict[str, Any]) -> ProjectEntry:
        stack = entry.get("techstack", entry.get("tech_stack"))
        if isinstance(stack, list):
            stack = ", ".join(_string_list(stack, "projects.techStack"))
        return cls(
            name=_text(entry.get("name"), "projects.name"),
            tech_stack=_text(stack, "projects.techStack"),
            points=_points(entry, "projects"),
        )


@dataclass(frozen=True)
class StructuredResume:
    """Resume content in the shape portfolios render."""

    summary: str
    skills: tuple[str, ...] = ()
    experience: tuple[ExperienceEntry, ...] = ()
    projects: tuple[ProjectEntry, ...] = ()

    @classmethod
    def from_json(cls, raw: str) -> StructuredResume:
        """Parse model output into a StructuredResume.

        Args:
            raw: Model output; the JSON object between the first ``{`` and
                the last ``}`` is used

        Raises:
            ResumeFormatError: If no JSON object can be read or it has the
                wrong shape
        """
        start, end = raw.find("{"), raw.rfind("}")
        if start == -1 or end < start:
            raise ResumeFormatError("Model output contains no JSON object")

        try:
            data = json.loads(raw[start : end + 1])
        except json.JSONDecodeError as e:
            raise ResumeFormatError(f"Model output is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ResumeFormatError("Model output must be a JSON object")
        data = _lower_keys(data)

        return cls(
            summary=_text(data.get("summary"), "summary"),
            skills=_string_list(data.get("skills"), "skills"),
            experience=tuple(
                ExperienceEntry.from_mapping(e)
                for e in _object_list(data.get("experience"), "experience")
            ),
            projects=tuple(
                ProjectEntry.from_mapping(p)
                for p in _object_list(data.get("projects"), "projects")
            ),
        )

    def to_sections(self) -> list[Section]:
        """Map the resume onto the portfolio sections it replaces."""
        return [
            Section.create(SectionType.ABOUT, 1, {"content": self.summary}),
            Section.create(SectionType.SKILLS, 2, {"items": list(self.skills)}),
            Section.create(
                SectionType.TIMELINE,
                3,
                {
                    "items": [
                        {
                            "company": e.company,
                            "role": e.role,
                            "points": list(e.points),
                        }
                        for e in self.experience
                    ]
                },
            ),
            Section.create(
                SectionType.PROJECTS,
                4,
                {
                    "items": [
                        {
                            "name": p.name,
                            "techStack": p.tech_stack,
                            "points": list(p.points),
                        }
                        for p in self.projects
                    ]
                },
            ),
        ]
