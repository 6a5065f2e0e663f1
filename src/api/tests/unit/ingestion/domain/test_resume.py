"""Unit tests for parsing structured resumes out of model output."""

import json

import pytest

from ingestion.domain.resume import (
    ExperienceEntry,
    ProjectEntry,
    ResumeFormatError,
    StructuredResume,
    split_points,
)
from portfolios.domain.value_objects import SectionType

RESUME = {
    "summary": "Backend engineer.",
    "skills": ["Python", "PostgreSQL"],
    "experience": [
        {"company": "Acme", "role": "Engineer", "points": ["Built APIs"]},
    ],
    "projects": [
        {"name": "Folio", "techStack": "FastAPI, SQLAlchemy", "points": ["Shipped"]},
    ],
}


class TestFromJson:
    """Tests for StructuredResume.from_json."""

    def test_parses_plain_json(self):
        """A bare JSON object is read field by field."""
        resume = StructuredResume.from_json(json.dumps(RESUME))

        assert resume.summary == "Backend engineer."
        assert resume.skills == ("Python", "PostgreSQL")
        assert resume.experience == (
            ExperienceEntry(company="Acme", role="Engineer", points=("Built APIs",)),
        )
        assert resume.projects == (
            ProjectEntry(
                name="Folio", tech_stack="FastAPI, SQLAlchemy", points=("Shipped",)
            ),
        )

    def test_ignores_code_fences_and_prose(self):
        """Text around the JSON object is discarded."""
        raw = f"Here you go:\n```json\n{json.dumps(RESUME)}\n```\nHope it helps!"

        assert StructuredResume.from_json(raw).summary == "Backend engineer."

    def test_keys_are_case_insensitive(self):
        """Upper-cased keys are accepted."""
        raw = json.dumps({"Summary": "Hi", "SKILLS": ["Go"], "Experience": []})

        resume = StructuredResume.from_json(raw)

        assert resume.summary == "Hi"
        assert resume.skills == ("Go",)

    def test_missing_sections_default_to_empty(self):
        """Only known keys are read, missing ones are empty."""
        resume = StructuredResume.from_json('{"summary": "Hi"}')

        assert resume.skills == ()
        assert resume.experience == ()
        assert resume.projects == ()

    def test_comma_separated_skills(self):
        """A skills string is split on commas."""
        resume = StructuredResume.from_json('{"skills": "Python, Go , ,Rust"}')

        assert resume.skills == ("Python", "Go", "Rust")

    def test_description_is_split_into_points(self):
        """Entries with a description instead of points get split."""
        raw = json.dumps(
            {
                "experience": [
                    {
                        "company": "Acme",
                        "role": "Lead",
                        "description": "Led a team. Shipped v2.\n- Hired 3 engineers",
                    }
                ]
            }
        )

        entry = StructuredResume.from_json(raw).experience[0]

        assert entry.points == ("Led a team.", "Shipped v2.", "Hired 3 engineers")

    def test_tech_stack_list_is_joined(self):
        """A list tech stack is rendered as one string."""
        raw = json.dumps({"projects": [{"name": "X", "techStack": ["Go", "Redis"]}]})

        assert StructuredResume.from_json(raw).projects[0].tech_stack == "Go, Redis"

    @pytest.mark.parametrize(
        "raw",
        [
            "no json here",
            "{not valid json}",
            "[1, 2, 3]",
            '{"skills": {"a": 1}}',
            '{"experience": ["Acme"]}',
            '{"summary": ["a", "b"]}',
        ],
    )
    def test_malformed_output_is_rejected(self, raw):
        """Anything that is not a resume object raises ResumeFormatError."""
        with pytest.raises(ResumeFormatError):
            StructuredResume.from_json(raw)

    def test_format_error_is_value_error(self):
        """Callers catching ValueError also catch format errors."""
        assert issubclass(ResumeFormatError, ValueError)


class TestSplitPoints:
    """Tests for split_points."""

    def test_strips_bullets_and_numbering(self):
        """Bullet markers and list numbers are dropped."""
        assert split_points("- one\n* two\n1. three\n2) four") == (
            "one",
            "two",
            "three",
            "four",
        )

    def test_blank_input(self):
        """Empty descriptions give no points."""
        assert split_points("  \n ") == ()

    def test_lower_case_continuation_is_not_split(self):
        """Sentence breaks need a capital or digit after them."""
        assert split_points("Used e.g. caching. Then scaled") == (
            "Used e.g. caching.",
            "Then scaled",
        )


class TestToSections:
    """Tests for StructuredResume.to_sections."""

    def test_maps_to_four_ordered_sections(self):
        """About, Skills, Timeline and Projects are produced in order."""
        sections = StructuredResume.from_json(json.dumps(RESUME)).to_sections()

        assert [s.section_type for s in sections] == [
            SectionType.ABOUT,
            SectionType.SKILLS,
            SectionType.TIMELINE,
            SectionType.PROJECTS,
        ]
        assert [s.sort_order for s in sections] == [1, 2, 3, 4]
        assert all(s.is_visible for s in sections)

    def test_section_content(self):
        """Section content carries the resume fields."""
        about, skills, timeline, projects = StructuredResume.from_json(
            json.dumps(RESUME)
        ).to_sections()

        assert about.content == {"content": "Backend engineer."}
        assert skills.content == {"items": ["Python", "PostgreSQL"]}
        assert timeline.content == {
            "items": [{"company": "Acme", "role": "Engineer", "points": ["Built APIs"]}]
        }
        assert projects.content["items"][0]["techStack"] == "FastAPI, SQLAlchemy"

    def test_each_call_generates_new_section_ids(self):
        """Sections are new entities every time."""
        resume = StructuredResume(summary="Hi")

        first = {s.id for s in resume.to_sections()}
        second = {s.id for s in resume.to_sections()}

        assert first.isdisjoint(second)
