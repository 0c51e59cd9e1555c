"""Client package bootstrap hooks."""
from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv


_ROOT_DIR = Path(__file__).resolve().parent.parent

# Load base env first, then allow .env.local to override for developer-specific tweaks.
load_dotenv(_ROOT_DIR / ".env")
load_dotenv(_ROOT_DIR / ".env.local", override=True)

from .client import JobClient  # noqa: E402
from .errors import (  # noqa: E402
    InvalidInputError,
    JobClientError,
    PaymentRequiredError,
    PollCancelledError,
    PollTimeoutError,
    ServerRejectedError,
    SubmissionError,
    SubmissionTransportError,
)
from .models.schemas import (  # noqa: E402
    AvatarBatchRequest,
    ImageToImageRequest,
    JobHandle,
    JobState,
    JobStatus,
    PollConfig,
    TextToImageRequest,
    VideoFilterRequest,
)
from .services.interpreter import (  # noqa: E402
    HardFailure,
    Outcome,
    SoftFailure,
    Success,
    TimedOut,
    interpret,
)

__all__ = [
    "AvatarBatchRequest",
    "HardFailure",
    "ImageToImageRequest",
    "InvalidInputError",
    "JobClient",
    "JobClientError",
    "JobHandle",
    "JobState",
    "JobStatus",
    "Outcome",
    "PaymentRequiredError",
    "PollCancelledError",
    "PollConfig",
    "PollTimeoutError",
    "ServerRejectedError",
    "SoftFailure",
    "SubmissionError",
    "SubmissionTransportError",
    "Success",
    "TextToImageRequest",
    "TimedOut",
    "VideoFilterRequest",
    "interpret",
]
