"""High-level client wiring submission, polling and interpretation together."""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Optional

import httpx

from .config import normalize_base_url, settings
from .errors import PollTimeoutError
from .models.schemas import JobHandle, JobRequest, JobStatus, PollConfig
from .services.credits import CreditsClient
from .services.interpreter import Outcome, TimedOut, interpret
from .services.poller import Clock, JobPoller, Sleep, StatusCallback
from .services.submitter import JobSubmitter

logger = logging.getLogger(__name__)


class JobClient:
    """Submits backend jobs and waits for their outcome.

    Each ``run`` owns only its handle and last status, so independent runs can
    be awaited concurrently on one client.
    """

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ):
        if http_client is None:
            http_client = httpx.AsyncClient(
                base_url=normalize_base_url(base_url),
                timeout=timeout or settings.request_timeout,
                headers={"Accept": "application/json"},
            )
            self._owns_client = True
        else:
            self._owns_client = False
        self._http = http_client
        self.submitter = JobSubmitter(http_client, clock=clock)
        self.poller = JobPoller(http_client, clock=clock, sleep=sleep)
        self.credits = CreditsClient(http_client)

    async def __aenter__(self) -> "JobClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    @staticmethod
    def default_poll_config() -> PollConfig:
        return PollConfig(interval=settings.poll_interval, deadline=settings.poll_deadline)

    async def submit(self, request: JobRequest) -> JobHandle:
        return await self.submitter.submit(request)

    async def poll(
        self,
        handle: JobHandle,
        config: Optional[PollConfig] = None,
        cancel_event: Optional[asyncio.Event] = None,
        on_status: Optional[StatusCallback] = None,
    ) -> JobStatus:
        return await self.poller.poll(handle, config or self.default_poll_config(), cancel_event, on_status)

    async def wait(
        self,
        handle: JobHandle,
        config: Optional[PollConfig] = None,
        cancel_event: Optional[asyncio.Event] = None,
        on_status: Optional[StatusCallback] = None,
    ) -> Outcome:
        """Poll an already submitted job and interpret whatever it ends with."""

        try:
            status = await self.poll(handle, config, cancel_event, on_status)
        except PollTimeoutError:
            return TimedOut(job_id=handle.id)
        if not status.is_terminal:
            return TimedOut(job_id=handle.id, last_status=status)
        return interpret(status)

    async def run(
        self,
        request: JobRequest,
        config: Optional[PollConfig] = None,
        cancel_event: Optional[asyncio.Event] = None,
        on_status: Optional[StatusCallback] = None,
    ) -> Outcome:
        """Submit ``request``, poll it to completion and return the interpreted outcome.

        Submission errors and cancellation propagate as exceptions; every
        terminal job state, including timeout, comes back as an Outcome.
        """

        handle = await self.submit(request)
        outcome = await self.wait(handle, config, cancel_event, on_status)
        logger.info("Job %s (%s) outcome: %s", handle.id, handle.kind, type(outcome).__name__)
        return outcome
