"""Turns terminal job statuses into caller-facing outcomes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from ..models.schemas import JobResult, JobState, JobStatus

logger = logging.getLogger(__name__)


PHOTO_GUIDANCE = (
    "Please try uploading different photos with clear face, good lighting, "
    "and single person per photo."
)
FAILED_MESSAGE = f"Generation failed. Some photos may not be suitable. {PHOTO_GUIDANCE}"
EMPTY_RESULT_MESSAGE = f"Generation completed but no images were created. {PHOTO_GUIDANCE}"

EMPTY_RESULT_RAW = "completed but produced nothing"
DEFAULT_ERROR_RAW = "Generation failed"

# Lower-cased substrings that mark a backend error as a bulk generation failure.
BULK_FAILURE_MARKERS = ("all batch items failed", "failed")

STAGE_TEXT = {
    "queued": "Queued...",
    "running": "Generating avatars...",
    "uploading": "Uploading results...",
    "done": "Complete!",
    "error": "Error occurred",
}


@dataclass(frozen=True)
class Success:
    job_id: str
    payload: JobResult


@dataclass(frozen=True)
class SoftFailure:
    """The job finished without producing anything usable."""

    job_id: str
    message: str
    raw_message: str
    payload: Optional[JobResult] = None


@dataclass(frozen=True)
class HardFailure:
    """The backend reported an explicit job error."""

    job_id: str
    message: str
    raw_message: str


@dataclass(frozen=True)
class TimedOut:
    """The deadline elapsed; the job may still finish server-side."""

    job_id: str
    last_status: Optional[JobStatus] = None


Outcome = Union[Success, SoftFailure, HardFailure, TimedOut]


def user_facing_message(raw: str) -> str:
    """Rewrite raw backend error text into something a user can act on.

    Any message mentioning a failure is replaced by photo guidance; other
    messages pass through verbatim.
    """

    lowered = raw.lower()
    if any(marker in lowered for marker in BULK_FAILURE_MARKERS):
        return FAILED_MESSAGE
    return raw


def describe_stage(stage: Optional[str]) -> str:
    return STAGE_TEXT.get((stage or "").strip().lower(), "Processing...")


def interpret(status: JobStatus) -> Outcome:
    """Classify a terminal status as Success, SoftFailure or HardFailure."""

    if not status.is_terminal:
        raise ValueError(f"Job {status.job_id} is not terminal (state={status.state.value})")

    if status.state is JobState.ERROR:
        raw = status.error or DEFAULT_ERROR_RAW
        logger.warning("Job %s failed: %s", status.job_id, raw)
        return HardFailure(job_id=status.job_id, message=user_facing_message(raw), raw_message=raw)

    result = status.result
    if result is None and status.error:
        logger.warning("Job %s done without result: %s", status.job_id, status.error)
        return HardFailure(
            job_id=status.job_id,
            message=user_facing_message(status.error),
            raw_message=status.error,
        )

    produced = result.produced_count() if result is not None else None
    if produced:
        return Success(job_id=status.job_id, payload=result)

    raw = status.error or EMPTY_RESULT_RAW
    logger.warning("Job %s completed with no output (produced=%s): %s", status.job_id, produced, raw)
    return SoftFailure(
        job_id=status.job_id,
        message=EMPTY_RESULT_MESSAGE,
        raw_message=raw,
        payload=result,
    )
