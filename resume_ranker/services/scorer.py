from __future__ import annotations

import math

from resume_ranker.core.scoring import get_scoring_value
from resume_ranker.schemas.analysis import ScoreSet
from resume_ranker.schemas.resume import StructuredResume

_TECHNICAL_CATEGORIES = frozenset({"technical", "language", "tool", "framework"})
_ADVANCED_LEVELS = frozenset({"advanced", "expert"})
_LEADERSHIP_TYPES = frozenset({"leadership", "achievement", "award"})

_DEFAULT_WEIGHTS = {"education": 0.25, "experience": 0.35, "skills": 0.25, "activities": 0.15}


def round_half_up(value: float) -> int:
    """Round .5 toward positive infinity, unlike Python's banker's rounding."""
    return int(math.floor(value + 0.5))


def _rule(path: str, default: float) -> float:
    value = get_scoring_value(path, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return value


def score_weights() -> dict[str, float]:
    weights = {name: float(_rule(f"weights.{name}", default)) for name, default in _DEFAULT_WEIGHTS.items()}
    if not math.isclose(sum(weights.values()), 1.0, abs_tol=1e-9):
        raise RuntimeError(f"Scoring weights must sum to 1.0, got {sum(weights.values())}")
    return weights


def education_score(resume: StructuredResume) -> float:
    entries = resume.education
    if not entries:
        return 0.0
    score = _rule("education.base", 40)
    if any(entry.degree for entry in entries):
        score += _rule("education.degree_bonus", 20)
    if any(entry.gpa for entry in entries):
        score += _rule("education.gpa_bonus", 20)
    if any(entry.field_of_study for entry in entries):
        score += _rule("education.field_of_study_bonus", 20)
    return float(min(score, 100))


def experience_score(resume: StructuredResume) -> float:
    entries = resume.experience
    if not entries:
        return 0.0
    total_months = sum(entry.duration_months or 0 for entry in entries)
    score = min(
        _rule("experience.base", 40) + (total_months / 12) * _rule("experience.points_per_year", 10),
        _rule("experience.tenure_cap", 80),
    )
    min_chars = _rule("experience.description_min_chars", 20)
    if any(entry.description and len(entry.description) > min_chars for entry in entries):
        score += _rule("experience.description_bonus", 20)
    return float(min(score, 100))


def skills_score(resume: StructuredResume) -> float:
    entries = resume.skills
    if not entries:
        return 0.0
    technical = sum(1 for skill in entries if skill.category in _TECHNICAL_CATEGORIES)
    soft = sum(1 for skill in entries if skill.category == "soft")
    advanced = sum(1 for skill in entries if skill.proficiency_level in _ADVANCED_LEVELS)
    score = (
        _rule("skills.base", 30)
        + technical * _rule("skills.technical_points", 5)
        + soft * _rule("skills.soft_points", 2)
        + advanced * _rule("skills.advanced_points", 3)
    )
    return float(min(score, 100))


def activities_score(resume: StructuredResume) -> float:
    entries = resume.activities
    if not entries:
        return 0.0
    leadership = sum(1 for activity in entries if activity.activity_type in _LEADERSHIP_TYPES)
    certifications = sum(1 for activity in entries if activity.activity_type == "certification")
    score = (
        _rule("activities.base", 20)
        + leadership * _rule("activities.leadership_points", 15)
        + certifications * _rule("activities.certification_points", 10)
    )
    return float(min(score, 100))


def overall_score(education: int, experience: int, skills: int, activities: int) -> int:
    weights = score_weights()
    return round_half_up(
        education * weights["education"]
        + experience * weights["experience"]
        + skills * weights["skills"]
        + activities * weights["activities"]
    )


def score_resume(resume: StructuredResume) -> ScoreSet:
    education = round_half_up(education_score(resume))
    experience = round_half_up(experience_score(resume))
    skills = round_half_up(skills_score(resume))
    activities = round_half_up(activities_score(resume))
    overall = overall_score(education, experience, skills, activities)
    return ScoreSet(
        overall_score=str(overall),
        education_score=str(education),
        experience_score=str(experience),
        skills_score=str(skills),
        activities_score=str(activities),
    )
