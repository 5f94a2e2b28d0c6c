from fastapi import APIRouter

from resume_ranker.llm.config import load_llm_config
from resume_ranker.store.score_store import list_overall_scores

router = APIRouter()


@router.get("/health", summary="Health Check", description="Report service status, LLM availability and corpus size.")
def health_check():
    return {
        "status": "healthy",
        "llmConfigured": load_llm_config().is_configured,
        "resumesRanked": len(list_overall_scores()),
    }
