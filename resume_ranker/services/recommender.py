from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from resume_ranker.core.scoring import get_scoring_value
from resume_ranker.llm.types import JsonCompleter
from resume_ranker.schemas.analysis import Priority, Recommendation, RecommendationType, ScoreSet
from resume_ranker.schemas.resume import StructuredResume

logger = logging.getLogger(__name__)

_SYSTEM_PROMPT = "You are a career advisor. Always return valid JSON with specific, actionable recommendations."


@dataclass(frozen=True)
class _Rule:
    score_key: str
    type: RecommendationType
    title: str
    description: str
    priority: Priority
    estimated_impact: str


_RULES: tuple[_Rule, ...] = (
    _Rule(
        score_key="education",
        type="education",
        title="Enhance Education Section",
        description=(
            "Consider adding more details about your education, including GPA, "
            "relevant coursework, or academic achievements."
        ),
        priority="high",
        estimated_impact="+10%",
    ),
    _Rule(
        score_key="experience",
        type="experience",
        title="Quantify Your Achievements",
        description=(
            "Add specific metrics and numbers to your work experience. For example: "
            "'Increased sales by 30%' or 'Managed team of 10 people'."
        ),
        priority="high",
        estimated_impact="+12%",
    ),
    _Rule(
        score_key="skills",
        type="skill_gap",
        title="Add More Technical Skills",
        description="Consider adding programming languages, frameworks, tools, or technologies relevant to your field.",
        priority="high",
        estimated_impact="+15%",
    ),
    _Rule(
        score_key="activities",
        type="activity",
        title="Include Leadership Experience",
        description=(
            "Add any volunteer work, side projects, or leadership roles. "
            "These demonstrate soft skills and initiative."
        ),
        priority="medium",
        estimated_impact="+8%",
    ),
    _Rule(
        score_key="overall",
        type="career_advice",
        title="Optimize Resume Structure",
        description=(
            "Ensure your resume follows a clear, professional format with consistent "
            "formatting and clear sections."
        ),
        priority="medium",
        estimated_impact="+5%",
    ),
)

_DEFAULT_THRESHOLDS = {"education": 60, "experience": 60, "skills": 60, "activities": 50, "overall": 70}

_KEEP_UPDATED = Recommendation(
    type="career_advice",
    title="Keep Resume Updated",
    description=(
        "Regularly update your resume with new skills, experiences, and achievements "
        "to maintain a competitive profile."
    ),
    priority="low",
    estimated_impact="+3%",
)


def _max_items() -> int:
    value = get_scoring_value("recommendations.max_items", 5)
    return value if isinstance(value, int) and 1 <= value <= 5 else 5


def _threshold(score_key: str) -> float:
    value = get_scoring_value(f"recommendations.thresholds.{score_key}", _DEFAULT_THRESHOLDS[score_key])
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return _DEFAULT_THRESHOLDS[score_key]
    return value


def default_recommendations(scores: ScoreSet) -> list[Recommendation]:
    """Rule table fallback; every rule is checked independently, in table order."""
    values = scores.as_numbers()
    recommendations = [
        Recommendation(
            type=rule.type,
            title=rule.title,
            description=rule.description,
            priority=rule.priority,
            estimated_impact=rule.estimated_impact,
        )
        for rule in _RULES
        if values[rule.score_key] < _threshold(rule.score_key)
    ]
    if not recommendations:
        recommendations.append(_KEEP_UPDATED.model_copy())
    return recommendations[: _max_items()]


def build_recommendation_prompt(fields: StructuredResume, scores: ScoreSet) -> str:
    counts = fields.section_counts()
    return f"""You are a career advisor analyzing a resume. Based on the following data, provide 3-5 specific, actionable recommendations to improve the resume.

Resume Data:
Education: {counts["education"]} entries
Experience: {counts["experience"]} entries
Skills: {counts["skills"]} entries
Activities: {counts["activities"]} entries

Current Scores:
Overall: {scores.overall_score}/100
Education: {scores.education_score}/100
Experience: {scores.experience_score}/100
Skills: {scores.skills_score}/100
Activities: {scores.activities_score}/100

Provide recommendations that are:
1. Specific and actionable
2. Prioritized by potential impact
3. Include estimated impact percentage

Return ONLY valid JSON in this exact format:
{{
  "recommendations": [
    {{
      "type": "skill_gap|education|experience|certification|activity|career_advice",
      "title": "Brief title",
      "description": "Detailed description of the recommendation",
      "priority": "low|medium|high",
      "estimatedImpact": "+X%"
    }}
  ]
}}"""


def coerce_recommendations(items: list[Any], limit: int) -> list[Recommendation]:
    recommendations: list[Recommendation] = []
    for item in items:
        if len(recommendations) >= limit:
            break
        if not isinstance(item, dict):
            continue
        try:
            recommendations.append(Recommendation.model_validate(item))
        except ValidationError as exc:
            logger.debug("recommendation_entry_dropped: %s", exc)
    return recommendations


class RecommendationGenerator:
    def __init__(self, llm: JsonCompleter | None = None, *, max_output_tokens: int = 2000):
        self._llm = llm
        self._max_output_tokens = max_output_tokens

    def recommend(self, fields: StructuredResume, scores: ScoreSet) -> list[Recommendation]:
        if self._llm is None:
            logger.warning("recommendation_fallback reason=llm_unconfigured")
            return default_recommendations(scores)

        try:
            payload = self._llm.complete_json(
                system_prompt=_SYSTEM_PROMPT,
                user_prompt=build_recommendation_prompt(fields, scores),
                max_output_tokens=self._max_output_tokens,
                purpose="recommendations",
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning("recommendation_llm_failed: %s", exc)
            payload = None

        items = payload.get("recommendations") if isinstance(payload, dict) else None
        if not isinstance(items, list):
            logger.warning("recommendation_fallback reason=llm_unavailable")
            return default_recommendations(scores)

        try:
            recommendations = coerce_recommendations(items, _max_items())
        except Exception as exc:  # noqa: BLE001
            logger.warning("recommendation_coercion_failed: %s", exc)
            recommendations = []
        if not recommendations:
            logger.warning("recommendation_fallback reason=empty_llm_list")
            return default_recommendations(scores)
        return recommendations
