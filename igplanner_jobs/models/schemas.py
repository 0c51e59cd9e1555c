"""Pydantic models describing job requests, status payloads and poll settings."""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..errors import InvalidInputError

MIN_BATCH_SOURCES = 15
MAX_BATCH_SOURCES = 50
MIN_VARIANTS_PER_IMAGE = 1
MAX_VARIANTS_PER_IMAGE = 4

AI_STATUS_PATH = "/ai/status"
MEDIA_STATUS_PATH = "/media/filter/status"


class JobState(str, Enum):
    """Backend job lifecycle state; wire values are matched case-insensitively."""

    PENDING = "PENDING"
    RUNNING = "RUNNING"
    DONE = "DONE"
    ERROR = "ERROR"

    @classmethod
    def _missing_(cls, value: object) -> Optional["JobState"]:
        if isinstance(value, str):
            normalized = value.strip().upper()
            for member in cls:
                if member.value == normalized:
                    return member
        return None

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.DONE, JobState.ERROR)


class GenerationMeta(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    model: Optional[str] = None
    aspect_ratio: Optional[str] = None
    seed: Optional[int] = None


class BatchItem(BaseModel):
    """Outcome for one source photo inside an avatar batch."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    source_image_url: str
    generated_images: List[str] = Field(default_factory=list)
    meta: Optional[GenerationMeta] = None
    error: Optional[str] = None


class BatchSummary(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    count_sources: int = 0
    variants_per_image: int = 0
    total_generated: int = 0


class JobResult(BaseModel):
    """Terminal payload of a job.

    The backend reuses one object for every job kind: single generations fill
    ``images``, avatar batches fill ``items`` and ``summary``, and media jobs
    fill ``output_url`` (with ``progress`` and ``stage`` while running).
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    images: Optional[List[str]] = None
    provider: Optional[str] = None
    meta: Optional[GenerationMeta] = None
    items: Optional[List[BatchItem]] = None
    summary: Optional[BatchSummary] = None
    output_url: Optional[str] = None
    progress: Optional[int] = None
    stage: Optional[str] = None

    def produced_count(self) -> Optional[int]:
        """Aggregate number of produced outputs, or None for an unrecognised shape."""

        if self.summary is not None:
            return self.summary.total_generated
        if self.images is not None:
            return len(self.images)
        if self.items is not None:
            return sum(len(item.generated_images) for item in self.items)
        if self.output_url:
            return 1
        return None

    def output_urls(self) -> List[str]:
        urls: List[str] = list(self.images or [])
        for item in self.items or []:
            urls.extend(item.generated_images)
        if self.output_url:
            urls.append(self.output_url)
        return urls

    def failed_items(self) -> List[BatchItem]:
        return [item for item in self.items or [] if item.error]


class JobStatus(BaseModel):
    """One decoded response from a status endpoint."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    ok: bool = True
    job_id: str
    kind: Optional[str] = None
    state: JobState = Field(alias="status")
    stage: Optional[str] = None
    result: Optional[JobResult] = None
    error: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _normalize_wire(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        raw_state = data.get("status")
        if isinstance(raw_state, str):
            data = {**data, "status": raw_state.strip().upper()}
        # Media jobs report their stage inside the result object.
        if not data.get("stage"):
            result = data.get("result")
            if isinstance(result, dict) and result.get("stage"):
                data = {**data, "stage": result["stage"]}
        return data

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal


class SubmitResponse(BaseModel):
    """Body returned by every job-creation endpoint."""

    model_config = ConfigDict(extra="ignore")

    ok: bool = True
    job_id: str = Field(..., min_length=1)
    status_url: Optional[str] = None


@dataclass(frozen=True, slots=True)
class JobHandle:
    """Identifies one submitted job for the lifetime of its poll loop."""

    id: str
    status_path: str = AI_STATUS_PATH
    status_url: Optional[str] = None
    kind: str = "job"
    submitted_at: float = field(default_factory=time.monotonic)


class PollConfig(BaseModel):
    """Fixed-interval polling parameters, in seconds.

    There is no backoff or jitter; every tick waits exactly ``interval``.
    The deadline counts from poll-loop entry unless ``measure_from_submission``
    is set, in which case it counts from ``JobHandle.submitted_at``.
    """

    model_config = ConfigDict(frozen=True)

    interval: float = Field(2.0, gt=0)
    deadline: float = Field(300.0, gt=0)
    measure_from_submission: bool = False


class JobRequest(BaseModel):
    """Base class for job-creation requests.

    Constraints checked by ``ensure_valid`` are deliberately not enforced at
    construction so the submitter can reject them with ``InvalidInputError``.
    """

    kind: ClassVar[str] = "job"
    submit_path: ClassVar[str] = ""
    status_path: ClassVar[str] = AI_STATUS_PATH

    def ensure_valid(self) -> None:
        """Raise InvalidInputError when a client-side constraint is violated."""

    def to_body(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class TextToImageRequest(JobRequest):
    kind: ClassVar[str] = "text_to_image"
    submit_path: ClassVar[str] = "/ai/generate/text"

    prompt: str
    aspect_ratio: str = "1:1"
    steps: Optional[int] = None
    seed: Optional[int] = None

    def ensure_valid(self) -> None:
        if not self.prompt.strip():
            raise InvalidInputError("prompt must not be empty")


class ImageToImageRequest(JobRequest):
    kind: ClassVar[str] = "image_to_image"
    submit_path: ClassVar[str] = "/ai/generate/image"

    image_url: str
    prompt: str
    strength: Optional[float] = None
    aspect_ratio: str = "3:4"
    steps: Optional[int] = None
    seed: Optional[int] = None

    def ensure_valid(self) -> None:
        if not self.image_url.strip():
            raise InvalidInputError("image_url must not be empty")
        if not self.prompt.strip():
            raise InvalidInputError("prompt must not be empty")


class AvatarBatchRequest(JobRequest):
    """Generate avatar variants from a set of source photos."""

    kind: ClassVar[str] = "avatar_batch"
    submit_path: ClassVar[str] = "/ai/generate/batch"

    image_urls: List[str]
    prompt: str
    strength: Optional[float] = None
    aspect_ratio: str = "1:1"
    steps: Optional[int] = None
    variants_per_image: int = 1
    seed: Optional[int] = None
    gender: Optional[str] = None

    def ensure_valid(self) -> None:
        count = len(self.image_urls)
        if count < MIN_BATCH_SOURCES or count > MAX_BATCH_SOURCES:
            raise InvalidInputError(
                f"image_urls must contain {MIN_BATCH_SOURCES}-{MAX_BATCH_SOURCES} URLs (got {count})"
            )
        if not MIN_VARIANTS_PER_IMAGE <= self.variants_per_image <= MAX_VARIANTS_PER_IMAGE:
            raise InvalidInputError(
                f"variants_per_image must be {MIN_VARIANTS_PER_IMAGE}-{MAX_VARIANTS_PER_IMAGE} "
                f"(got {self.variants_per_image})"
            )

    def final_prompt(self) -> str:
        if self.gender:
            return f"{self.prompt}, {self.gender.strip().lower()} portrait"
        return self.prompt

    def to_body(self) -> Dict[str, Any]:
        body = self.model_dump(exclude_none=True, exclude={"gender"})
        body["prompt"] = self.final_prompt()
        return body


class VideoFilterRequest(JobRequest):
    kind: ClassVar[str] = "video_filter"
    submit_path: ClassVar[str] = "/media/filter/video"
    status_path: ClassVar[str] = MEDIA_STATUS_PATH

    url: str
    preset: str
    intensity: float = 0.7

    def ensure_valid(self) -> None:
        if not self.url.strip():
            raise InvalidInputError("url must not be empty")
        if not 0.0 <= self.intensity <= 1.0:
            raise InvalidInputError(f"intensity must be between 0 and 1 (got {self.intensity:g})")


class SubscriptionStatus(BaseModel):
    model_config = ConfigDict(extra="ignore")

    ok: bool = True
    is_active: bool = False
    plan_type: Optional[str] = None
    credits_remaining: int = 0
    daily_credits_used: int = 0
    daily_limit: int = 0
    can_generate_avatar_batch: bool = False
    expires_at: Optional[str] = None
    reset_at: Optional[str] = None


class CreditsCheck(BaseModel):
    model_config = ConfigDict(extra="ignore")

    ok: bool = True
    can_proceed: bool
    credits_needed: int = 0
    credits_remaining: int = 0
    daily_limit_reached: bool = False
    reason: Optional[str] = None


class CreditsBalance(BaseModel):
    model_config = ConfigDict(extra="ignore")

    ok: bool = True
    credits_remaining: int = 0
    daily_credits_used: int = 0
    daily_limit: int = 0
    is_active: bool = False
