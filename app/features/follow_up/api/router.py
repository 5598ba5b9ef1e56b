"""
Follow-up question routes.

Usage:
    1. POST /follow-up/generate - Rank the question bank against recent entries
    2. GET /follow-up/current-week - This ISO week's delivered questions
    3. GET /follow-up/pending - Delivered questions not yet answered
    4. POST /follow-up/{question_id}/complete - Link a question to its answer entry
    5. POST /follow-up/weekly-run - Cron trigger for the weekly batch
    6. GET /follow-up/weekly-run/status - Last batch run summary
"""

import hmac
from datetime import UTC, datetime, timedelta

from fastapi import APIRouter, Depends, Header, HTTPException, status
from fastapi.responses import JSONResponse

from app.auth.verify import auth_dependency
from app.config import settings
from app.features.follow_up.domain.models import GenerationSkipped
from app.features.follow_up.jobs.weekly_question_job import (
    WeeklyQuestionJob,
    WeeklyQuestionJobError,
    weekly_question_job,
)
from app.features.follow_up.services.completion_service import (
    CompletionError,
    CompletionService,
    completion_service,
)
from app.features.follow_up.services.generation_service import (
    QuestionGenerationError,
    QuestionGenerationService,
    question_generation_service,
)
from app.infrastructure.observability.logging import get_logger

from .schemas import (
    CompleteQuestionRequest,
    CompleteQuestionResponse,
    DeliveredQuestionResponse,
    GenerateQuestionsRequest,
    GenerateQuestionsResponse,
    QuestionListResponse,
    WeeklyRunResponse,
)

router = APIRouter(prefix="/follow-up", tags=["follow-up"])
logger = get_logger(__name__)


def get_generation_service() -> QuestionGenerationService:
    return question_generation_service


def get_completion_service() -> CompletionService:
    return completion_service


def get_weekly_job() -> WeeklyQuestionJob:
    return weekly_question_job


def _require_user_id(claims: dict) -> str:
    user_id = claims.get("sub")
    if not user_id:
        logger.error("No user ID in JWT claims", claims=claims)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token: missing user ID"
        )
    return user_id


def verify_cron_secret(x_cron_secret: str | None = Header(default=None)) -> None:
    """Reject batch triggers without the shared secret. Open when CRON_SECRET is unset."""
    expected = settings.CRON_SECRET
    if not expected:
        return

    if x_cron_secret is None or not hmac.compare_digest(x_cron_secret, expected):
        logger.warning("Unauthorized weekly run trigger")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


@router.post("/generate", response_model=GenerateQuestionsResponse)
async def generate_questions(
    body: GenerateQuestionsRequest | None = None,
    claims: dict = Depends(auth_dependency),
    service: QuestionGenerationService = Depends(get_generation_service),
):
    """
    Generate this week's follow-up questions for the authenticated user.

    Raises:
        400: Not enough entries to rank against
        401: Invalid authentication token
        502: Entry fetch or save failed
    """
    user_id = _require_user_id(claims)
    body = body or GenerateQuestionsRequest()

    try:
        outcome = await service.generate_for_user(
            user_id,
            timedelta(days=body.lookback_days),
            most_recent_entries=body.most_recent_entries,
        )
    except QuestionGenerationError as e:
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"error": "Failed to fetch journal entries", "details": str(e)},
        )

    if isinstance(outcome, GenerationSkipped):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": "Insufficient entries",
                "details": f"Need at least {outcome.required} journal entries to generate questions",
                "currentEntries": outcome.entries_found,
                "required": outcome.required,
            },
        )

    saved = False
    if body.save_to_database:
        try:
            saved = await service.store.upsert_question_set(outcome)
        except Exception as e:
            logger.error(
                "Failed to save generated questions",
                user_id=user_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return JSONResponse(
                status_code=status.HTTP_502_BAD_GATEWAY,
                content={"error": "Failed to save questions", "details": str(e)},
            )

        if not saved:
            logger.info(
                "Question set already exists for this week, keeping stored set",
                user_id=user_id,
                week_number=outcome.week_number,
                year=outcome.year,
            )

    return GenerateQuestionsResponse.from_question_set(outcome, saved=saved)


@router.get("/current-week", response_model=QuestionListResponse)
async def get_current_week_questions(
    claims: dict = Depends(auth_dependency),
    service: CompletionService = Depends(get_completion_service),
):
    user_id = _require_user_id(claims)
    try:
        questions = await service.list_current_week(user_id)
    except Exception as e:
        logger.error("Failed to load current week questions", user_id=user_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to load questions"
        ) from e

    return QuestionListResponse(
        questions=[DeliveredQuestionResponse.from_domain(q) for q in questions],
        count=len(questions),
    )


@router.get("/pending", response_model=QuestionListResponse)
async def get_pending_questions(
    claims: dict = Depends(auth_dependency),
    service: CompletionService = Depends(get_completion_service),
):
    user_id = _require_user_id(claims)
    try:
        questions = await service.list_pending(user_id)
    except Exception as e:
        logger.error("Failed to load pending questions", user_id=user_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to load questions"
        ) from e

    return QuestionListResponse(
        questions=[DeliveredQuestionResponse.from_domain(q) for q in questions],
        count=len(questions),
    )


@router.post("/{question_id}/complete", response_model=CompleteQuestionResponse)
async def complete_question(
    question_id: str,
    body: CompleteQuestionRequest,
    claims: dict = Depends(auth_dependency),
    service: CompletionService = Depends(get_completion_service),
):
    """
    Mark a delivered question as answered by a journal entry.

    Completing an already completed question returns 200 with status
    "already_completed".

    Raises:
        400: Linked entry does not exist
        403: Question or linked entry belongs to another user
        404: Question not found
        502: Store failure
    """
    user_id = _require_user_id(claims)

    try:
        result = await service.mark_completed(question_id, body.entry_id, user_id)
    except CompletionError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to update question"
        ) from e

    if result == "not_found":
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Question not found")
    if result == "entry_not_found":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Entry not found")
    if result == "forbidden":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Question or entry belongs to another user",
        )

    return CompleteQuestionResponse(question_id=question_id, status=result)


@router.post(
    "/weekly-run",
    response_model=WeeklyRunResponse,
    dependencies=[Depends(verify_cron_secret)],
)
async def trigger_weekly_run(job: WeeklyQuestionJob = Depends(get_weekly_job)):
    """Run the weekly batch synchronously and return its summary."""
    try:
        result = await job.run_once()
    except WeeklyQuestionJobError as e:
        logger.error("Weekly run trigger failed", error=str(e), operation=e.operation)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Weekly question job failed", "details": str(e)},
        )

    if result is None:
        return WeeklyRunResponse(
            message="Weekly question job already running",
            timestamp=datetime.now(UTC),
            results={"skipped": True, "reason": "already_running"},
        )

    return WeeklyRunResponse(
        message="Weekly question generation complete",
        timestamp=datetime.now(UTC),
        results=result.to_dict(),
    )


@router.get("/weekly-run/status", dependencies=[Depends(verify_cron_secret)])
async def get_weekly_run_status(job: WeeklyQuestionJob = Depends(get_weekly_job)) -> dict:
    return job.get_job_status()
