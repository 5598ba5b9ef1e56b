"""
Weekly Question Job - generates a fresh question set for every active user.

Triggered by a platform cron (HTTP) or the worker process. Each user is
processed independently inside a bounded worker pool; one user's failure
never aborts the run.
"""

import asyncio
import time
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Literal

from app.config import settings
from app.db.pool import db_pool
from app.features.follow_up.domain.models import BatchRunResult, GenerationSkipped, SkipReason
from app.features.follow_up.repository.store import FollowUpStore, PostgresFollowUpStore
from app.features.follow_up.services.completion_service import CompletionService
from app.features.follow_up.services.generation_service import (
    QuestionGenerationError,
    QuestionGenerationService,
)
from app.infrastructure.observability.logging import get_logger, log_job_summary

logger = get_logger(__name__)

JOB_NAME = "weekly_questions"


class WeeklyQuestionJobError(Exception):
    """Raised when the run as a whole cannot proceed (e.g. users cannot be listed)."""

    def __init__(self, message: str, operation: str | None = None, recoverable: bool = True):
        super().__init__(message)
        self.operation = operation
        self.recoverable = recoverable


@dataclass(frozen=True, slots=True)
class UserOutcome:
    """What happened to one user. Produced by workers, folded in by the coordinator."""

    user_id: str
    status: Literal["success", "skipped", "failed"]
    skip_reason: SkipReason | None = None
    error: str | None = None
    created: bool = False


class WeeklyQuestionJob:
    """
    Batch orchestrator for weekly question generation.

    Workers never touch the BatchRunResult; they return a UserOutcome and
    the coordinating coroutine records it, so the aggregate has one writer.
    """

    def __init__(
        self,
        store: FollowUpStore | None = None,
        generation_service: QuestionGenerationService | None = None,
        completion_service: CompletionService | None = None,
        *,
        max_concurrency: int | None = None,
        user_timeout_seconds: float | None = None,
        deadline_seconds: float | None = None,
    ):
        self.store = store or PostgresFollowUpStore()
        self.generation_service = generation_service or QuestionGenerationService(self.store)
        self.completion_service = completion_service or CompletionService(self.store)

        self.max_concurrency = max_concurrency or settings.get_batch_concurrency()
        self.user_timeout_seconds = user_timeout_seconds or settings.BATCH_USER_TIMEOUT_SECONDS
        self.deadline_seconds = deadline_seconds or settings.BATCH_DEADLINE_SECONDS
        self.lookback = timedelta(days=settings.QUESTION_LOOKBACK_DAYS)
        self.activity_window = timedelta(days=settings.ACTIVITY_WINDOW_DAYS)
        self.min_completed = settings.QUESTION_MIN_COMPLETED
        self.top_k = settings.QUESTION_TOP_K

        self.is_running = False
        self.last_run_time: datetime | None = None
        self.last_result: BatchRunResult | None = None

        self._validate_config()

    def _validate_config(self) -> None:
        if self.max_concurrency < 1:
            raise WeeklyQuestionJobError("max_concurrency must be at least 1", recoverable=False)

        if self.user_timeout_seconds >= self.deadline_seconds:
            logger.warning(
                "Per-user timeout is not shorter than the run deadline",
                user_timeout_seconds=self.user_timeout_seconds,
                deadline_seconds=self.deadline_seconds,
            )

    async def run_once(self, now: datetime | None = None) -> BatchRunResult | None:
        """
        Run one weekly batch.

        Returns:
            BatchRunResult, or None if a run is already in progress on this instance

        Raises:
            WeeklyQuestionJobError: If eligible users cannot be determined
        """
        if self.is_running:
            logger.warning("Weekly question job already running, skipping this trigger")
            return None

        now = now or datetime.now(UTC)
        result = BatchRunResult(started_at=now)
        started = time.monotonic()

        try:
            self.is_running = True
            logger.info(
                "Starting weekly question job",
                max_concurrency=self.max_concurrency,
                deadline_seconds=self.deadline_seconds,
            )

            # One deadline covers both listing and processing
            deadline = asyncio.get_running_loop().time() + self.deadline_seconds

            user_ids = await self._get_eligible_users(now, deadline)
            result.total_users = len(user_ids)

            if user_ids:
                await self._process_users(user_ids, now, result, deadline)
            else:
                logger.info("No active users to process")

            result.duration_seconds = time.monotonic() - started
            self.last_run_time = datetime.now(UTC)
            self.last_result = result

            log_job_summary(JOB_NAME, result.to_dict())
            return result

        finally:
            self.is_running = False

    async def _get_eligible_users(self, now: datetime, deadline: float) -> list[str]:
        """Users with at least one entry inside the activity window."""
        listing = asyncio.timeout_at(deadline)
        try:
            async with listing:
                user_ids = await self.store.fetch_active_user_ids(now - self.activity_window)
        except Exception as e:
            deadline_expired = isinstance(e, TimeoutError) and listing.expired()
            if deadline_expired:
                message = (
                    f"Run deadline of {self.deadline_seconds}s expired while listing active users"
                )
            else:
                message = f"Failed to fetch active users: {e}"
            logger.error(
                "Failed to fetch active users",
                error=str(e),
                error_type=type(e).__name__,
                deadline_expired=deadline_expired,
            )
            raise WeeklyQuestionJobError(message, operation="get_eligible_users") from e

        # Keep first-seen order, drop duplicates
        return list(dict.fromkeys(user_ids))

    async def _process_users(
        self, user_ids: list[str], now: datetime, result: BatchRunResult, deadline: float
    ) -> None:
        semaphore = asyncio.Semaphore(self.max_concurrency)
        tasks = [
            asyncio.create_task(self._process_user_with_semaphore(semaphore, user_id, now))
            for user_id in user_ids
        ]
        recorded: set[str] = set()

        try:
            async with asyncio.timeout_at(deadline):
                for next_done in asyncio.as_completed(tasks):
                    outcome = await next_done
                    self._record(result, outcome)
                    recorded.add(outcome.user_id)

        except TimeoutError:
            result.timed_out = True
            for task in tasks:
                task.cancel()
            finished = await asyncio.gather(*tasks, return_exceptions=True)

            # Users that finished right at the deadline still count
            for outcome in finished:
                if isinstance(outcome, UserOutcome) and outcome.user_id not in recorded:
                    self._record(result, outcome)
                    recorded.add(outcome.user_id)

            result.deferred = result.total_users - len(recorded)
            logger.warning(
                "Weekly question job hit its deadline",
                deadline_seconds=self.deadline_seconds,
                processed=len(recorded),
                deferred=result.deferred,
            )

    def _record(self, result: BatchRunResult, outcome: UserOutcome) -> None:
        if outcome.status == "success":
            result.record_success()
        elif outcome.status == "skipped":
            result.record_skip(outcome.skip_reason)
        else:
            result.record_failure(outcome.user_id, outcome.error or "Unknown error")

    async def _process_user_with_semaphore(
        self, semaphore: asyncio.Semaphore, user_id: str, now: datetime
    ) -> UserOutcome:
        async with semaphore:
            return await self._process_user(user_id, now)

    async def _process_user(self, user_id: str, now: datetime) -> UserOutcome:
        """Run one user's pipeline, turning every failure into a recorded outcome."""
        start_time = time.time()
        user_deadline = asyncio.timeout(self.user_timeout_seconds)

        try:
            async with user_deadline:
                outcome = await self._run_user_pipeline(user_id, now)
        except TimeoutError as e:
            if user_deadline.expired():
                error = f"Timed out after {self.user_timeout_seconds}s"
            else:
                # Raised by the store itself, e.g. a socket timeout
                error = f"Unexpected error: {type(e).__name__}: {e}"
            outcome = UserOutcome(user_id=user_id, status="failed", error=error)
        except QuestionGenerationError as e:
            outcome = UserOutcome(user_id=user_id, status="failed", error=str(e))
        except Exception as e:
            outcome = UserOutcome(
                user_id=user_id,
                status="failed",
                error=f"Unexpected error: {type(e).__name__}: {e}",
            )

        duration_ms = round((time.time() - start_time) * 1000, 1)
        if outcome.status == "failed":
            logger.warning(
                "Weekly question generation failed for user",
                user_id=user_id,
                error=outcome.error,
                duration_ms=duration_ms,
                job_run=JOB_NAME,
            )
        else:
            logger.debug(
                "Weekly question generation finished for user",
                user_id=user_id,
                status=outcome.status,
                skip_reason=outcome.skip_reason,
                created=outcome.created,
                duration_ms=duration_ms,
                job_run=JOB_NAME,
            )
        return outcome

    async def _run_user_pipeline(self, user_id: str, now: datetime) -> UserOutcome:
        completed = await self.completion_service.get_historical_completed_count(user_id)
        if completed < self.min_completed:
            return UserOutcome(
                user_id=user_id, status="skipped", skip_reason="insufficient_engagement"
            )

        generated = await self.generation_service.generate_for_user(
            user_id, self.lookback, self.top_k, now=now
        )
        if isinstance(generated, GenerationSkipped):
            return UserOutcome(user_id=user_id, status="skipped", skip_reason=generated.reason)

        created = await self.store.upsert_question_set(generated)
        return UserOutcome(user_id=user_id, status="success", created=created)

    def get_job_status(self) -> dict:
        return {
            "job_name": JOB_NAME,
            "is_running": self.is_running,
            "last_run_time": self.last_run_time.isoformat() if self.last_run_time else None,
            "max_concurrency": self.max_concurrency,
            "user_timeout_seconds": self.user_timeout_seconds,
            "deadline_seconds": self.deadline_seconds,
            "last_run_result": self.last_result.to_dict() if self.last_result else None,
        }


# Singleton instance for application use
weekly_question_job = WeeklyQuestionJob()


async def run_weekly_question_job() -> dict:
    """Run a single iteration of the weekly question job."""
    result = await weekly_question_job.run_once()
    if result is None:
        return {"skipped": True, "reason": "already_running"}
    return result.to_dict()


async def run_weekly_question_worker() -> None:
    """
    One-shot worker entry point for an external cron.

    Opens the database pool, runs a single batch, and closes the pool.
    """
    await db_pool.initialize()
    try:
        await run_weekly_question_job()
    finally:
        await db_pool.close()


async def start_weekly_question_scheduler() -> None:
    """
    Long-running scheduler loop for deployments without a platform cron.
    """
    interval_seconds = settings.WEEKLY_JOB_INTERVAL_HOURS * 3600
    logger.info(
        "Starting weekly question job scheduler",
        interval_hours=settings.WEEKLY_JOB_INTERVAL_HOURS,
    )

    await db_pool.initialize()
    try:
        while True:
            try:
                await run_weekly_question_job()
                await asyncio.sleep(interval_seconds)
            except WeeklyQuestionJobError as e:
                logger.error(
                    "Weekly question job run failed", error=str(e), operation=e.operation
                )
                # Wait a bit before retrying to avoid tight error loops
                await asyncio.sleep(300)
            except Exception as e:
                logger.error(
                    "Error in weekly question job scheduler",
                    error=str(e),
                    error_type=type(e).__name__,
                )
                # Wait a bit before retrying to avoid tight error loops
                await asyncio.sleep(300)
    finally:
        await db_pool.close()
