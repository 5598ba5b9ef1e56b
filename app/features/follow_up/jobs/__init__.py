"""
Job runners for the follow-up question feature.

The singleton lives in `weekly_question_job.weekly_question_job`; it is not
re-exported here so the submodule name stays importable.
"""

from .weekly_question_job import (
    WeeklyQuestionJob,
    WeeklyQuestionJobError,
    run_weekly_question_job,
    run_weekly_question_worker,
    start_weekly_question_scheduler,
)

__all__ = [
    "WeeklyQuestionJob",
    "WeeklyQuestionJobError",
    "run_weekly_question_job",
    "run_weekly_question_worker",
    "start_weekly_question_scheduler",
]
