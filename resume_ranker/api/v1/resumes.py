import logging

from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, UploadFile, status
from starlette.concurrency import run_in_threadpool

from resume_ranker.core.config import settings
from resume_ranker.core.rate_limit import rate_limit
from resume_ranker.parsing.pdf import ResumeTextError, UploadValidationError, extract_text_from_pdf, validate_pdf_upload
from resume_ranker.schemas.analysis import LeaderboardResponse, ResumeScoreRecord, ResumeTextRequest
from resume_ranker.services.analyzer import ResumeAnalyzer, get_resume_analyzer
from resume_ranker.store import score_store

logger = logging.getLogger(__name__)

router = APIRouter()

_READ_CHUNK_BYTES = 64 * 1024


def _analyze_and_store(analyzer: ResumeAnalyzer, text: str, file_name: str) -> ResumeScoreRecord:
    analysis = analyzer.analyze(text, prior_scores=score_store.list_overall_scores)
    record = score_store.save_resume_analysis(file_name=file_name, analysis=analysis)
    logger.info(
        "resume_scored resume_id=%s overall=%s rank=%s total=%s",
        record.resume_id,
        record.scores.overall_score,
        record.ranking.global_rank,
        record.ranking.total_resumes_ranked,
    )
    return record


def _extract_and_store(analyzer: ResumeAnalyzer, content: bytes, file_name: str) -> ResumeScoreRecord:
    text = extract_text_from_pdf(content)
    return _analyze_and_store(analyzer, text, file_name)


async def _read_upload(file: UploadFile) -> bytes:
    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await file.read(_READ_CHUNK_BYTES)
        if not chunk:
            break
        total += len(chunk)
        if total > settings.max_upload_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"File too large. Maximum allowed size is {settings.max_upload_bytes // (1024 * 1024)} MB.",
            )
        chunks.append(chunk)
    return b"".join(chunks)


@router.post("/resumes/upload", response_model=ResumeScoreRecord)
@rate_limit(settings.upload_rate_limit)
async def upload_resume(
    request: Request,
    file: UploadFile = File(...),
    analyzer: ResumeAnalyzer = Depends(get_resume_analyzer),
):
    _ = request
    filename = file.filename or "resume.pdf"
    content = await _read_upload(file)
    try:
        validate_pdf_upload(filename, content, settings.max_upload_bytes)
        return await run_in_threadpool(_extract_and_store, analyzer, content, filename)
    except UploadValidationError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    except ResumeTextError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.post("/resumes/analyze", response_model=ResumeScoreRecord)
@rate_limit()
async def analyze_resume_text(
    request: Request,
    payload: ResumeTextRequest,
    analyzer: ResumeAnalyzer = Depends(get_resume_analyzer),
):
    _ = request
    try:
        return await run_in_threadpool(_analyze_and_store, analyzer, payload.resume_text, payload.file_name)
    except ResumeTextError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.get("/resumes/{resume_id}", response_model=ResumeScoreRecord)
def get_resume(resume_id: str):
    record = score_store.get_resume_score(resume_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resume not found.")
    return record


@router.get("/leaderboard", response_model=LeaderboardResponse)
def leaderboard(
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
):
    stats = score_store.get_leaderboard_stats()
    rankings = score_store.get_global_rankings(limit=limit, offset=offset)
    return LeaderboardResponse(**stats.model_dump(), rankings=rankings)
