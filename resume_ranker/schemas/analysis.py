from __future__ import annotations

import math
import re
from datetime import datetime
from typing import Any, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .resume import StructuredResume

RecommendationType = Literal["skill_gap", "education", "experience", "certification", "activity", "career_advice"]
Priority = Literal["low", "medium", "high"]

RECOMMENDATION_TYPES: frozenset[str] = frozenset(get_args(RecommendationType))
PRIORITIES: frozenset[str] = frozenset(get_args(Priority))

_SCORE_RE = re.compile(r"^\d{1,3}$")
_IMPACT_RE = re.compile(r"^\+?\s*(\d+(?:\.\d+)?)\s*%?$")


class _AliasedModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ScoreSet(_AliasedModel):
    overall_score: str = Field(alias="overallScore")
    education_score: str = Field(alias="educationScore")
    experience_score: str = Field(alias="experienceScore")
    skills_score: str = Field(alias="skillsScore")
    activities_score: str = Field(alias="activitiesScore")

    @field_validator("overall_score", "education_score", "experience_score", "skills_score", "activities_score")
    @classmethod
    def _validate_score(cls, value: str) -> str:
        if not _SCORE_RE.match(value) or int(value) > 100:
            raise ValueError("scores must be integer strings between 0 and 100")
        return value

    @property
    def overall(self) -> int:
        return int(self.overall_score)

    def as_numbers(self) -> dict[str, int]:
        return {
            "overall": int(self.overall_score),
            "education": int(self.education_score),
            "experience": int(self.experience_score),
            "skills": int(self.skills_score),
            "activities": int(self.activities_score),
        }


class RankResult(_AliasedModel):
    global_rank: int = Field(alias="globalRank", ge=1)
    global_percentile: int = Field(alias="globalPercentile", ge=0, le=100)
    total_resumes_ranked: int = Field(alias="totalResumesRanked", ge=1)


class Recommendation(_AliasedModel):
    type: RecommendationType = "career_advice"
    title: str = Field(min_length=1)
    description: str = ""
    priority: Priority = "medium"
    estimated_impact: str = Field(default="+0%", alias="estimatedImpact")

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, value: Any) -> str:
        normalized = str(value or "").strip().lower()
        return normalized if normalized in RECOMMENDATION_TYPES else "career_advice"

    @field_validator("priority", mode="before")
    @classmethod
    def _coerce_priority(cls, value: Any) -> str:
        normalized = str(value or "").strip().lower()
        return normalized if normalized in PRIORITIES else "medium"

    @field_validator("title", "description", mode="before")
    @classmethod
    def _clean_text(cls, value: Any) -> str:
        return str(value).strip() if value is not None else ""

    @field_validator("estimated_impact", mode="before")
    @classmethod
    def _format_impact(cls, value: Any) -> str:
        if isinstance(value, bool):
            return "+0%"
        if isinstance(value, (int, float)):
            percent: Any = value
        else:
            match = _IMPACT_RE.match(str(value or "").strip())
            if not match:
                return "+0%"
            percent = match.group(1)
        try:
            number = float(percent)
        except (OverflowError, ValueError):
            return "+0%"
        if not math.isfinite(number):
            return "+0%"
        return f"+{int(round(number))}%"


class AnalysisResult(_AliasedModel):
    structured_fields: StructuredResume = Field(alias="structuredFields")
    scores: ScoreSet
    ranking: RankResult | None = None
    recommendations: list[Recommendation] = Field(default_factory=list, max_length=5)


class ResumeTextRequest(BaseModel):
    resume_text: str = Field(min_length=1, max_length=50000)
    file_name: str = Field(default="resume.txt", min_length=1, max_length=255)


class ResumeScoreRecord(_AliasedModel):
    resume_id: str = Field(alias="resumeId")
    file_name: str = Field(alias="fileName")
    scores: ScoreSet
    ranking: RankResult
    structured_fields: StructuredResume = Field(alias="structuredFields")
    recommendations: list[Recommendation] = Field(default_factory=list)
    scored_at: datetime = Field(alias="scoredAt")


class LeaderboardEntry(_AliasedModel):
    resume_id: str = Field(alias="resumeId")
    file_name: str = Field(alias="fileName")
    scores: ScoreSet
    ranking: RankResult
    scored_at: datetime = Field(alias="scoredAt")


class ScoreBucket(_AliasedModel):
    range: str
    count: int = Field(ge=0)
    percentage: float = Field(ge=0.0, le=100.0)


class LeaderboardStats(_AliasedModel):
    total: int = 0
    avg_score: float = Field(default=0.0, alias="avgScore")
    top_score: float = Field(default=0.0, alias="topScore")
    score_distribution: list[ScoreBucket] = Field(default_factory=list, alias="scoreDistribution")


class LeaderboardResponse(LeaderboardStats):
    rankings: list[LeaderboardEntry] = Field(default_factory=list)
