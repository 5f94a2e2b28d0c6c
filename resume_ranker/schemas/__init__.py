from .analysis import (
    AnalysisResult,
    LeaderboardEntry,
    LeaderboardResponse,
    LeaderboardStats,
    RankResult,
    Recommendation,
    ResumeScoreRecord,
    ResumeTextRequest,
    ScoreBucket,
    ScoreSet,
)
from .resume import ActivityEntry, EducationEntry, ExperienceEntry, SkillEntry, StructuredResume

__all__ = [
    "ActivityEntry",
    "EducationEntry",
    "ExperienceEntry",
    "SkillEntry",
    "StructuredResume",
    "ScoreSet",
    "RankResult",
    "Recommendation",
    "AnalysisResult",
    "ResumeTextRequest",
    "ResumeScoreRecord",
    "LeaderboardEntry",
    "LeaderboardStats",
    "LeaderboardResponse",
    "ScoreBucket",
]
