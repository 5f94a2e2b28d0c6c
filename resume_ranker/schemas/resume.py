from __future__ import annotations

import math
from typing import Any, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator

SkillCategory = Literal["technical", "soft", "domain", "language", "tool", "framework", "other"]
ProficiencyLevel = Literal["beginner", "intermediate", "advanced", "expert"]
ActivityType = Literal[
    "leadership",
    "volunteer",
    "achievement",
    "award",
    "certification",
    "project",
    "publication",
    "other",
]

SKILL_CATEGORIES: frozenset[str] = frozenset(get_args(SkillCategory))
PROFICIENCY_LEVELS: frozenset[str] = frozenset(get_args(ProficiencyLevel))
ACTIVITY_TYPES: frozenset[str] = frozenset(get_args(ActivityType))


def _optional_text(value: Any) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        value = str(value)
    if not isinstance(value, str):
        return None
    text = value.strip()
    return text or None


def _enum_or_default(value: Any, allowed: frozenset[str], default: str) -> str:
    if not isinstance(value, str):
        return default
    normalized = value.strip().lower()
    return normalized if normalized in allowed else default


class _ResumeSection(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class EducationEntry(_ResumeSection):
    institution: str | None = None
    degree: str | None = None
    field_of_study: str | None = Field(default=None, alias="fieldOfStudy")
    gpa: str | None = None
    start_date: str | None = Field(default=None, alias="startDate")
    end_date: str | None = Field(default=None, alias="endDate")

    @field_validator("institution", "degree", "field_of_study", "gpa", "start_date", "end_date", mode="before")
    @classmethod
    def _clean_text(cls, value: Any) -> str | None:
        return _optional_text(value)


class ExperienceEntry(_ResumeSection):
    company: str | None = None
    position: str | None = None
    description: str | None = None
    start_date: str | None = Field(default=None, alias="startDate")
    end_date: str | None = Field(default=None, alias="endDate")
    duration_months: float | None = Field(default=None, alias="durationMonths", ge=0)

    @field_validator("company", "position", "description", "start_date", "end_date", mode="before")
    @classmethod
    def _clean_text(cls, value: Any) -> str | None:
        return _optional_text(value)

    @field_validator("duration_months", mode="before")
    @classmethod
    def _clean_duration(cls, value: Any) -> float | None:
        if value is None or isinstance(value, bool):
            return None
        if not isinstance(value, (int, float, str)):
            return None
        try:
            months = float(value.strip() if isinstance(value, str) else value)
        except (OverflowError, ValueError):
            return None
        if not math.isfinite(months) or months < 0:
            return None
        return months


class SkillEntry(_ResumeSection):
    skill_name: str = Field(alias="skillName", min_length=1)
    category: SkillCategory = "other"
    proficiency_level: ProficiencyLevel = Field(default="intermediate", alias="proficiencyLevel")

    @field_validator("skill_name", mode="before")
    @classmethod
    def _clean_name(cls, value: Any) -> str:
        return _optional_text(value) or ""

    @field_validator("category", mode="before")
    @classmethod
    def _coerce_category(cls, value: Any) -> str:
        return _enum_or_default(value, SKILL_CATEGORIES, "other")

    @field_validator("proficiency_level", mode="before")
    @classmethod
    def _coerce_level(cls, value: Any) -> str:
        return _enum_or_default(value, PROFICIENCY_LEVELS, "intermediate")


class ActivityEntry(_ResumeSection):
    activity_name: str | None = Field(default=None, alias="activityName")
    activity_type: ActivityType = Field(default="other", alias="activityType")
    description: str | None = None
    date: str | None = None

    @field_validator("activity_name", "description", "date", mode="before")
    @classmethod
    def _clean_text(cls, value: Any) -> str | None:
        return _optional_text(value)

    @field_validator("activity_type", mode="before")
    @classmethod
    def _coerce_type(cls, value: Any) -> str:
        return _enum_or_default(value, ACTIVITY_TYPES, "other")


class StructuredResume(_ResumeSection):
    education: list[EducationEntry] = Field(default_factory=list)
    experience: list[ExperienceEntry] = Field(default_factory=list)
    skills: list[SkillEntry] = Field(default_factory=list)
    activities: list[ActivityEntry] = Field(default_factory=list)

    def section_counts(self) -> dict[str, int]:
        return {
            "education": len(self.education),
            "experience": len(self.experience),
            "skills": len(self.skills),
            "activities": len(self.activities),
        }
