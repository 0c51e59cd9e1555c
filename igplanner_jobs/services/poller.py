"""Fixed-interval status polling for submitted jobs."""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import AsyncIterator, Awaitable, Callable, Optional

import httpx

from ..errors import PollCancelledError, PollTimeoutError, StatusUnavailableError
from ..models.schemas import JobHandle, JobStatus, PollConfig

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]
StatusCallback = Callable[[JobStatus], None]


@dataclass(slots=True)
class _LoopState:
    polls: int = 0
    cancelled: bool = False
    last_error: Optional[StatusUnavailableError] = None


class JobPoller:
    """Polls one job at a time until a terminal state, the deadline, or cancellation.

    Cancellation is cooperative through an ``asyncio.Event``: it is checked
    before each request and before each sleep, never mid-request. A request
    already in flight completes and its response is discarded.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ):
        self._client = client
        self._clock = clock
        self._sleep = sleep

    async def fetch_status(self, handle: JobHandle) -> JobStatus:
        """Issue a single status GET; any failure raises StatusUnavailableError."""

        try:
            resp = await self._client.get(handle.status_path, params={"job_id": handle.id})
        except httpx.RequestError as exc:
            raise StatusUnavailableError(f"GET {handle.status_path} failed: {exc}") from exc

        if not resp.is_success:
            raise StatusUnavailableError(f"HTTP {resp.status_code}: {resp.text[:400]}")
        try:
            return JobStatus.model_validate(resp.json())
        except ValueError as exc:
            raise StatusUnavailableError(f"Undecodable status payload: {exc}") from exc

    async def _iterate(
        self,
        handle: JobHandle,
        config: PollConfig,
        cancel_event: Optional[asyncio.Event],
        state: _LoopState,
    ) -> AsyncIterator[JobStatus]:
        started = handle.submitted_at if config.measure_from_submission else self._clock()

        def cancelled() -> bool:
            if cancel_event is not None and cancel_event.is_set():
                state.cancelled = True
            return state.cancelled

        while self._clock() - started < config.deadline:
            if cancelled():
                return
            state.polls += 1
            try:
                status: Optional[JobStatus] = await self.fetch_status(handle)
            except StatusUnavailableError as exc:
                logger.warning("Status poll for job %s failed; retrying: %s", handle.id, exc)
                state.last_error = exc
                status = None

            if cancelled():
                return
            if status is not None:
                logger.debug("Job %s state=%s stage=%s", handle.id, status.state.value, status.stage)
                yield status
                if status.is_terminal:
                    return

            if cancelled():
                return
            await self._sleep(config.interval)

    async def statuses(
        self,
        handle: JobHandle,
        config: PollConfig,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> AsyncIterator[JobStatus]:
        """Yield every observed status; ends after a terminal one, on deadline, or on cancel."""

        async for status in self._iterate(handle, config, cancel_event, _LoopState()):
            yield status

    async def poll(
        self,
        handle: JobHandle,
        config: PollConfig,
        cancel_event: Optional[asyncio.Event] = None,
        on_status: Optional[StatusCallback] = None,
    ) -> JobStatus:
        """Return the terminal status, or the last observed one when the deadline elapses."""

        state = _LoopState()
        last_status: Optional[JobStatus] = None
        async for status in self._iterate(handle, config, cancel_event, state):
            last_status = status
            if on_status is not None:
                on_status(status)

        if state.cancelled:
            logger.info("Polling cancelled for job %s after %d request(s)", handle.id, state.polls)
            raise PollCancelledError(handle.id)

        if last_status is None:
            logger.warning("Job %s produced no status within %gs", handle.id, config.deadline)
            raise PollTimeoutError(handle.id, config.deadline, state.last_error)

        if last_status.is_terminal:
            logger.info("Job %s finished with state %s", handle.id, last_status.state.value)
        else:
            logger.warning(
                "Job %s still %s after %gs; returning last status",
                handle.id,
                last_status.state.value,
                config.deadline,
            )
        return last_status
