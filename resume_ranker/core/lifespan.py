from contextlib import asynccontextmanager
import logging

from resume_ranker.core.config import settings
from resume_ranker.core.scoring import get_scoring_config
from resume_ranker.services.scorer import score_weights
from resume_ranker.store.score_store import close_store, init_store

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    get_scoring_config()
    score_weights()
    init_store()
    logger.info("resume_store_ready path=%s", settings.scores_db_path)
    try:
        yield
    finally:
        close_store()
