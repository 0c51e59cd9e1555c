"""Exception types raised by the job client."""
from __future__ import annotations

from typing import Optional


class JobClientError(Exception):
    """Base class for every error raised by this package."""


class SubmissionError(JobClientError):
    """A job could not be created on the backend."""


class InvalidInputError(SubmissionError):
    """The request violated a client-side constraint; nothing was sent."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class SubmissionTransportError(SubmissionError):
    """The submission request never produced an HTTP response."""


class ServerRejectedError(SubmissionError):
    """The backend answered with a non-2xx status or an unusable body."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"HTTP {status_code}: {body[:400]}")
        self.status_code = status_code
        self.body = body


class PaymentRequiredError(ServerRejectedError):
    """Subscription inactive or credits exhausted (HTTP 402)."""

    def __init__(self, status_code: int = 402, body: str = "") -> None:
        super().__init__(status_code, body)


class StatusUnavailableError(JobClientError):
    """A single status poll failed; the job itself may still be running."""


class PollTimeoutError(JobClientError):
    """The deadline elapsed before any status could be observed."""

    def __init__(self, job_id: str, deadline: float, last_error: Optional[BaseException] = None) -> None:
        super().__init__(f"Polling timeout after {deadline:g} seconds for job {job_id}")
        self.job_id = job_id
        self.deadline = deadline
        self.last_error = last_error


class PollCancelledError(JobClientError):
    """The caller cancelled polling before a terminal state was observed."""

    def __init__(self, job_id: str) -> None:
        super().__init__(f"Polling cancelled for job {job_id}")
        self.job_id = job_id
