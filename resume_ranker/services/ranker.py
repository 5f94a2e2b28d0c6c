from __future__ import annotations

from typing import Iterable

from resume_ranker.schemas.analysis import RankResult
from resume_ranker.services.scorer import round_half_up


def rank_score(overall_score: float, prior_scores: Iterable[float]) -> RankResult:
    """Rank a new overall score against a snapshot of every earlier one.

    Ties go to the new score: it takes the position of the first prior score it
    is greater than or equal to. Percentile is the share of the corpus,
    including this resume, that it outranks or ties.
    """
    ordered = sorted(prior_scores, reverse=True)
    rank = len(ordered) + 1
    for index, prior in enumerate(ordered):
        if overall_score >= prior:
            rank = index + 1
            break

    total = len(ordered) + 1
    percentile = round_half_up(((total - rank) / total) * 100)
    return RankResult(global_rank=rank, global_percentile=percentile, total_resumes_ranked=total)
