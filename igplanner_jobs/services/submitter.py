"""Job creation against the backend's generate/enqueue endpoints."""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict

import httpx

from ..errors import (
    PaymentRequiredError,
    ServerRejectedError,
    SubmissionTransportError,
)
from ..models.schemas import JobHandle, JobRequest, SubmitResponse

logger = logging.getLogger(__name__)


def raise_for_rejection(resp: httpx.Response) -> None:
    """Map a non-2xx response onto the typed rejection errors."""

    if resp.is_success:
        return
    body = resp.text
    if resp.status_code == httpx.codes.PAYMENT_REQUIRED:
        raise PaymentRequiredError(resp.status_code, body)
    raise ServerRejectedError(resp.status_code, body)


async def post_json(client: httpx.AsyncClient, path: str, body: Dict[str, Any]) -> httpx.Response:
    """POST a JSON body once; transport failures become SubmissionTransportError."""

    try:
        resp = await client.post(path, json=body)
    except httpx.RequestError as exc:
        raise SubmissionTransportError(f"POST {path} failed: {exc}") from exc
    logger.debug("POST %s -> %s", path, resp.status_code)
    raise_for_rejection(resp)
    return resp


class JobSubmitter:
    """Creates jobs; one POST per call and no retries."""

    def __init__(self, client: httpx.AsyncClient, *, clock: Callable[[], float] = time.monotonic):
        self._client = client
        # Must share the poller clock so submitted_at and elapsed time agree.
        self._clock = clock

    async def submit(self, request: JobRequest) -> JobHandle:
        request.ensure_valid()

        logger.info("Submitting %s job to %s", request.kind, request.submit_path)
        resp = await post_json(self._client, request.submit_path, request.to_body())
        try:
            data = SubmitResponse.model_validate(resp.json())
        except ValueError as exc:  # undecodable body or missing job_id
            raise ServerRejectedError(resp.status_code, resp.text) from exc

        handle = JobHandle(
            id=data.job_id,
            status_path=request.status_path,
            status_url=data.status_url,
            kind=request.kind,
            submitted_at=self._clock(),
        )
        logger.info("Submitted %s job %s", handle.kind, handle.id)
        return handle
