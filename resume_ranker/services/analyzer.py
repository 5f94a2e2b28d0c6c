from __future__ import annotations

import logging
from functools import lru_cache
from typing import Callable, Iterable

from resume_ranker.llm.client import build_llm_client
from resume_ranker.llm.config import load_llm_config
from resume_ranker.parsing.pdf import ResumeTextError
from resume_ranker.schemas.analysis import AnalysisResult
from resume_ranker.services.extractor import ResumeExtractor
from resume_ranker.services.ranker import rank_score
from resume_ranker.services.recommender import RecommendationGenerator
from resume_ranker.services.scorer import score_resume

logger = logging.getLogger(__name__)

CorpusReader = Callable[[], Iterable[float]]


class ResumeAnalyzer:
    """Runs extract -> score -> rank -> recommend for one resume, in sequence.

    Only a missing or blank input text is fatal; the extractor and the
    recommendation generator degrade to deterministic fallbacks on their own.
    """

    def __init__(self, extractor: ResumeExtractor, recommender: RecommendationGenerator):
        self._extractor = extractor
        self._recommender = recommender

    def analyze(self, raw_text: str, *, prior_scores: CorpusReader | None = None) -> AnalysisResult:
        if not isinstance(raw_text, str) or not raw_text.strip():
            raise ResumeTextError("No text could be extracted from the resume.")

        logger.info("resume_analysis_started text_len=%s", len(raw_text))
        fields = self._extractor.extract(raw_text)
        counts = fields.section_counts()
        logger.info(
            "resume_analysis_extracted education=%s experience=%s skills=%s activities=%s",
            counts["education"],
            counts["experience"],
            counts["skills"],
            counts["activities"],
        )

        scores = score_resume(fields)
        logger.info("resume_analysis_scored overall=%s", scores.overall_score)

        ranking = None
        if prior_scores is not None:
            ranking = rank_score(scores.overall, list(prior_scores()))
            logger.info(
                "resume_analysis_ranked rank=%s total=%s percentile=%s",
                ranking.global_rank,
                ranking.total_resumes_ranked,
                ranking.global_percentile,
            )

        recommendations = self._recommender.recommend(fields, scores)
        logger.info("resume_analysis_completed recommendations=%s", len(recommendations))
        return AnalysisResult(
            structured_fields=fields,
            scores=scores,
            ranking=ranking,
            recommendations=recommendations,
        )


@lru_cache(maxsize=1)
def get_resume_analyzer() -> ResumeAnalyzer:
    llm = build_llm_client(load_llm_config())
    return ResumeAnalyzer(ResumeExtractor(llm), RecommendationGenerator(llm))
