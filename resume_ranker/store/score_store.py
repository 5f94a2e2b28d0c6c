from __future__ import annotations

import json
import logging
import os
import sqlite3
import threading
import uuid
from datetime import datetime, timezone
from typing import Any

from resume_ranker.core.config import settings
from resume_ranker.core.scoring import get_scoring_value
from resume_ranker.schemas.analysis import (
    AnalysisResult,
    LeaderboardEntry,
    LeaderboardStats,
    RankResult,
    Recommendation,
    ResumeScoreRecord,
    ScoreBucket,
    ScoreSet,
)
from resume_ranker.schemas.resume import StructuredResume
from resume_ranker.services.ranker import rank_score
from resume_ranker.services.scorer import round_half_up

logger = logging.getLogger(__name__)

_conn: sqlite3.Connection | None = None
_conn_lock = threading.Lock()

_SELECT_COLUMNS = """
    resume_id, file_name, overall_score, education_score, experience_score, skills_score,
    activities_score, global_percentile, global_rank, total_resumes_ranked, structured_json,
    recommendations_json, scored_at
"""

_DEFAULT_DISTRIBUTION = (
    {"label": "90-100", "min": 90, "max": 100},
    {"label": "80-89", "min": 80, "max": 89},
    {"label": "70-79", "min": 70, "max": 79},
    {"label": "60-69", "min": 60, "max": 69},
    {"label": "50-59", "min": 50, "max": 59},
    {"label": "0-49", "min": 0, "max": 49},
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _get_connection() -> sqlite3.Connection:
    global _conn
    with _conn_lock:
        if _conn is not None:
            return _conn

        db_path = settings.scores_db_path
        directory = os.path.dirname(db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        _conn = sqlite3.connect(
            db_path,
            check_same_thread=False,
            timeout=5,
            isolation_level=None,
        )
        _conn.execute("PRAGMA journal_mode=WAL;")
        _conn.execute("PRAGMA synchronous=NORMAL;")
        _conn.execute("PRAGMA busy_timeout=5000;")
        _conn.execute(
            """
            CREATE TABLE IF NOT EXISTS resume_scores (
                resume_id TEXT PRIMARY KEY,
                file_name TEXT NOT NULL,
                overall_score TEXT NOT NULL,
                education_score TEXT NOT NULL,
                experience_score TEXT NOT NULL,
                skills_score TEXT NOT NULL,
                activities_score TEXT NOT NULL,
                global_percentile TEXT NOT NULL,
                global_rank INTEGER NOT NULL,
                total_resumes_ranked INTEGER NOT NULL,
                structured_json TEXT NOT NULL,
                recommendations_json TEXT NOT NULL,
                scored_at TEXT NOT NULL
            );
            """
        )
        _conn.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_resume_scores_scored_at
            ON resume_scores (scored_at);
            """
        )
        return _conn


def init_store() -> None:
    _get_connection()


def close_store() -> None:
    global _conn
    with _conn_lock:
        if _conn is not None:
            _conn.close()
            _conn = None


def _parse_score(raw: Any) -> float | None:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if value != value or value <= 0:
        return None
    return value


def _row_to_record(row: tuple[Any, ...]) -> ResumeScoreRecord:
    return ResumeScoreRecord(
        resume_id=row[0],
        file_name=row[1],
        scores=ScoreSet(
            overall_score=row[2],
            education_score=row[3],
            experience_score=row[4],
            skills_score=row[5],
            activities_score=row[6],
        ),
        ranking=RankResult(
            global_percentile=int(row[7]),
            global_rank=row[8],
            total_resumes_ranked=row[9],
        ),
        structured_fields=StructuredResume.model_validate(json.loads(row[10]) if row[10] else {}),
        recommendations=[Recommendation.model_validate(item) for item in json.loads(row[11] or "[]")],
        scored_at=datetime.fromisoformat(row[12]),
    )


def list_overall_scores() -> list[float]:
    """Every stored overall score; non-numeric and non-positive values are skipped."""
    conn = _get_connection()
    with _conn_lock:
        rows = conn.execute("SELECT overall_score FROM resume_scores").fetchall()
    scores = (_parse_score(row[0]) for row in rows)
    return [score for score in scores if score is not None]


def save_resume_analysis(*, file_name: str, analysis: AnalysisResult) -> ResumeScoreRecord:
    ranking = analysis.ranking
    if ranking is None:
        ranking = rank_score(analysis.scores.overall, list_overall_scores())

    conn = _get_connection()
    resume_id = uuid.uuid4().hex
    scored_at = _utc_now()
    scores = analysis.scores
    structured_json = json.dumps(analysis.structured_fields.model_dump(by_alias=True), ensure_ascii=False)
    recommendations_json = json.dumps(
        [item.model_dump(by_alias=True) for item in analysis.recommendations],
        ensure_ascii=False,
    )

    with _conn_lock:
        conn.execute(
            """
            INSERT INTO resume_scores (
                resume_id, file_name, overall_score, education_score, experience_score, skills_score,
                activities_score, global_percentile, global_rank, total_resumes_ranked, structured_json,
                recommendations_json, scored_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                resume_id,
                file_name,
                scores.overall_score,
                scores.education_score,
                scores.experience_score,
                scores.skills_score,
                scores.activities_score,
                str(ranking.global_percentile),
                ranking.global_rank,
                ranking.total_resumes_ranked,
                structured_json,
                recommendations_json,
                scored_at.isoformat(),
            ),
        )
        conn.commit()

    return ResumeScoreRecord(
        resume_id=resume_id,
        file_name=file_name,
        scores=scores,
        ranking=ranking,
        structured_fields=analysis.structured_fields,
        recommendations=analysis.recommendations,
        scored_at=scored_at,
    )


def get_resume_score(resume_id: str) -> ResumeScoreRecord | None:
    conn = _get_connection()
    with _conn_lock:
        row = conn.execute(
            f"SELECT {_SELECT_COLUMNS} FROM resume_scores WHERE resume_id = ?",
            (resume_id,),
        ).fetchone()
    if not row:
        return None
    return _row_to_record(row)


def get_global_rankings(limit: int = 100, offset: int = 0) -> list[LeaderboardEntry]:
    conn = _get_connection()
    with _conn_lock:
        rows = conn.execute(
            f"""
            SELECT {_SELECT_COLUMNS}
            FROM resume_scores
            ORDER BY CAST(overall_score AS REAL) DESC, scored_at ASC
            LIMIT ? OFFSET ?
            """,
            (max(0, int(limit)), max(0, int(offset))),
        ).fetchall()

    entries: list[LeaderboardEntry] = []
    for row in rows:
        try:
            record = _row_to_record(row)
        except ValueError as exc:
            logger.warning("resume_score_row_skipped resume_id=%s: %s", row[0], exc)
            continue
        entries.append(
            LeaderboardEntry(
                resume_id=record.resume_id,
                file_name=record.file_name,
                scores=record.scores,
                ranking=record.ranking,
                scored_at=record.scored_at,
            )
        )
    return entries


def _distribution_ranges() -> list[dict[str, Any]]:
    ranges = get_scoring_value("leaderboard.distribution", None)
    if not isinstance(ranges, list) or not all(
        isinstance(item, dict) and {"label", "min", "max"} <= set(item) for item in ranges
    ):
        return [dict(item) for item in _DEFAULT_DISTRIBUTION]
    return ranges


def get_leaderboard_stats() -> LeaderboardStats:
    scores = list_overall_scores()
    if not scores:
        return LeaderboardStats()

    total = len(scores)
    distribution: list[ScoreBucket] = []
    for bucket in _distribution_ranges():
        count = sum(1 for score in scores if bucket["min"] <= score <= bucket["max"])
        distribution.append(
            ScoreBucket(
                range=str(bucket["label"]),
                count=count,
                percentage=round_half_up(count / total * 1000) / 10,
            )
        )

    return LeaderboardStats(
        total=total,
        avg_score=round_half_up(sum(scores) / total * 10) / 10,
        top_score=round_half_up(max(scores) * 10) / 10,
        score_distribution=distribution,
    )


def clear_resume_scores() -> None:
    conn = _get_connection()
    with _conn_lock:
        conn.execute("DELETE FROM resume_scores")
        conn.commit()
