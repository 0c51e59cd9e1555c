"""Subscription and credits lookups used before submitting paid jobs."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from ..errors import PaymentRequiredError, ServerRejectedError, SubmissionTransportError
from ..models.schemas import CreditsBalance, CreditsCheck, SubscriptionStatus
from .submitter import post_json, raise_for_rejection

logger = logging.getLogger(__name__)


def _user_params(user_id: Optional[str]) -> Dict[str, Any]:
    return {"user_id": user_id} if user_id else {}


class CreditsClient:
    """Reads entitlement state from the backend; purchases happen elsewhere."""

    def __init__(self, client: httpx.AsyncClient):
        self._client = client

    async def _get(self, path: str, params: Dict[str, Any]) -> httpx.Response:
        try:
            resp = await self._client.get(path, params=params or None)
        except httpx.RequestError as exc:
            raise SubmissionTransportError(f"GET {path} failed: {exc}") from exc
        raise_for_rejection(resp)
        return resp

    @staticmethod
    def _decode(resp: httpx.Response, model: type) -> Any:
        try:
            return model.model_validate(resp.json())
        except ValueError as exc:
            raise ServerRejectedError(resp.status_code, resp.text) from exc

    async def get_subscription_status(self, user_id: Optional[str] = None) -> SubscriptionStatus:
        resp = await self._get("/ai/subscription/status", _user_params(user_id))
        return self._decode(resp, SubscriptionStatus)

    async def get_balance(self, user_id: Optional[str] = None) -> CreditsBalance:
        resp = await self._get("/ai/credits/balance", _user_params(user_id))
        return self._decode(resp, CreditsBalance)

    async def check_credits(self, operation_type: str, user_id: Optional[str] = None) -> CreditsCheck:
        """Ask whether ``operation_type`` (e.g. ``avatar_batch``) may run now."""

        body: Dict[str, Any] = {"operation_type": operation_type, **_user_params(user_id)}
        resp = await post_json(self._client, "/ai/credits/check", body)
        return self._decode(resp, CreditsCheck)

    async def ensure_can_generate(self, operation_type: str, user_id: Optional[str] = None) -> CreditsCheck:
        """Raise PaymentRequiredError when the backend says the operation cannot proceed."""

        check = await self.check_credits(operation_type, user_id)
        if not check.can_proceed:
            reason = check.reason or "Subscription required or insufficient credits"
            logger.info(
                "Credits check refused %s (needed=%d remaining=%d): %s",
                operation_type,
                check.credits_needed,
                check.credits_remaining,
                reason,
            )
            raise PaymentRequiredError(body=reason)
        return check
