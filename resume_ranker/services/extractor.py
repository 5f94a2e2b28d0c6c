from __future__ import annotations

import logging
import re
from typing import Any

from pydantic import BaseModel, ValidationError

from resume_ranker.llm.types import JsonCompleter
from resume_ranker.schemas.resume import (
    ActivityEntry,
    EducationEntry,
    ExperienceEntry,
    SkillEntry,
    StructuredResume,
)

logger = logging.getLogger(__name__)

MAX_PROMPT_CHARS = 8000
TRUNCATION_MARKER = "\n[... truncated ...]"

_EDUCATION_KEYWORDS = ("university", "college", "bachelor", "master", "phd", "degree", "gpa")
_EXPERIENCE_KEYWORDS = ("experience", "worked", "company", "position", "role", "job")
_SKILL_KEYWORDS = ("skill", "proficient", "expert", "language", "framework", "tool")
_DEGREE_RE = re.compile(r"\b(bachelor|master|phd|b\.?s\.?|m\.?s\.?|b\.?a\.?|m\.?a\.?)", re.IGNORECASE)
_CAPITALIZED_RUN_RE = re.compile(r"\b([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)\b")
_WINDOW = 3

_SYSTEM_PROMPT = "You are a resume parsing expert. Always return valid JSON."

_USER_PROMPT_TEMPLATE = """You are a resume parsing expert. Extract structured information from the following resume text.

Resume Text:
{resume_text}

Extract the following information and return it as JSON:
1. Education: List all educational institutions, degrees, fields of study, GPAs, and dates
2. Experience: List all work experience with company names, positions, descriptions, dates, and duration in months
3. Skills: Extract all skills mentioned, categorize them (technical, soft, domain, language, tool, framework, other), and estimate proficiency level (beginner, intermediate, advanced, expert)
4. Activities: Extract extracurricular activities, achievements, awards, certifications, projects, publications, etc.

Return ONLY valid JSON in this exact format:
{{
  "education": [{{"institution": "...", "degree": "...", "fieldOfStudy": "...", "gpa": "...", "startDate": "...", "endDate": "..."}}],
  "experience": [{{"company": "...", "position": "...", "description": "...", "startDate": "...", "endDate": "...", "durationMonths": 0}}],
  "skills": [{{"skillName": "...", "category": "technical|soft|domain|language|tool|framework|other", "proficiencyLevel": "beginner|intermediate|advanced|expert"}}],
  "activities": [{{"activityName": "...", "activityType": "leadership|volunteer|achievement|award|certification|project|publication|other", "description": "...", "date": "..."}}]
}}

If a field is not found, use an empty array. Be thorough and extract all relevant information."""

_SECTION_MODELS: dict[str, type[BaseModel]] = {
    "education": EducationEntry,
    "experience": ExperienceEntry,
    "skills": SkillEntry,
    "activities": ActivityEntry,
}


def truncate_for_prompt(text: str, limit: int = MAX_PROMPT_CHARS) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + TRUNCATION_MARKER


def build_extraction_prompt(raw_text: str) -> str:
    return _USER_PROMPT_TEMPLATE.format(resume_text=truncate_for_prompt(raw_text))


def _contains_any(text: str, markers: tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(marker in lowered for marker in markers)


def _coerce_section(name: str, value: Any) -> list[Any]:
    if not isinstance(value, list):
        return []
    model = _SECTION_MODELS[name]
    entries: list[Any] = []
    for index, item in enumerate(value):
        if not isinstance(item, dict):
            continue
        try:
            entries.append(model.model_validate(item))
        except ValidationError as exc:
            logger.debug("resume_extraction_entry_dropped section=%s index=%s: %s", name, index, exc)
    return entries


def coerce_structured_resume(payload: dict[str, Any]) -> StructuredResume:
    """Normalise a loosely shaped LLM payload; malformed sections become empty lists."""
    return StructuredResume(
        education=_coerce_section("education", payload.get("education")),
        experience=_coerce_section("experience", payload.get("experience")),
        skills=_coerce_section("skills", payload.get("skills")),
        activities=_coerce_section("activities", payload.get("activities")),
    )


def extract_basic_info(text: str) -> StructuredResume:
    """Keyword and regex extraction used when no LLM answer is available.

    Each matching line opens a window of itself plus the next two lines. The
    first window line is taken as the institution or company; skills are the
    capitalised word runs of the matching line. Activities are never produced.
    """
    lines = [line.strip() for line in (text or "").split("\n")]
    lines = [line for line in lines if line]

    education: list[EducationEntry] = []
    experience: list[ExperienceEntry] = []
    skills: list[SkillEntry] = []

    for index, line in enumerate(lines):
        window = lines[index : index + _WINDOW]

        if _contains_any(line, _EDUCATION_KEYWORDS):
            degree = next((candidate for candidate in window if _DEGREE_RE.search(candidate)), "Degree")
            education.append(EducationEntry(institution=window[0] or "Unknown", degree=degree))

        if _contains_any(line, _EXPERIENCE_KEYWORDS):
            position = window[1] if len(window) > 1 else "Position"
            experience.append(ExperienceEntry(company=window[0] or "Unknown", position=position))

        if _contains_any(line, _SKILL_KEYWORDS):
            for name in _CAPITALIZED_RUN_RE.findall(line):
                if 2 < len(name) < 30:
                    skills.append(SkillEntry(skill_name=name, category="technical", proficiency_level="intermediate"))

    return StructuredResume(education=education, experience=experience, skills=skills, activities=[])


class ResumeExtractor:
    """Turns raw resume text into a StructuredResume and never raises.

    The LLM path runs only when a client was supplied; any miss falls through to
    :func:`extract_basic_info` over the same text.
    """

    def __init__(self, llm: JsonCompleter | None = None, *, max_output_tokens: int = 4000):
        self._llm = llm
        self._max_output_tokens = max_output_tokens

    def extract(self, raw_text: str) -> StructuredResume:
        text = raw_text if isinstance(raw_text, str) else str(raw_text or "")
        if self._llm is None:
            logger.warning("resume_extraction_fallback reason=llm_unconfigured")
            return extract_basic_info(text)

        structured = self._try_llm(text)
        if structured is None:
            logger.warning("resume_extraction_fallback reason=llm_unavailable text_len=%s", len(text))
            return extract_basic_info(text)
        return structured

    def _try_llm(self, text: str) -> StructuredResume | None:
        try:
            payload = self._llm.complete_json(
                system_prompt=_SYSTEM_PROMPT,
                user_prompt=build_extraction_prompt(text),
                max_output_tokens=self._max_output_tokens,
                purpose="resume_extraction",
            )
            if not isinstance(payload, dict):
                return None
            return coerce_structured_resume(payload)
        except Exception as exc:  # noqa: BLE001
            logger.warning("resume_extraction_llm_failed: %s", exc)
            return None
