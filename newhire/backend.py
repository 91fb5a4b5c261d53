"""HTTP adapters for the backend functions behind the onboarding page.

Two POST endpoints live under ``BACKEND_BASE_URL``:

- ``initiateAdobeSignContract`` creates the agreement and returns
  ``{"agreementId": ..., "signingUrl": ...}``.
- ``sendOnboardingNotification`` emails one staff member.

Both answer errors with ``{"error": "..."}`` when they can; that text is what
the user or the log sees.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from newhire.collaborators import ContractHandle, ContractInitiationError, NotificationError
from newhire.config import Settings, get_settings
from newhire.logging import get_logger

logger = get_logger(__name__)

INITIATE_CONTRACT_ENDPOINT = "initiateAdobeSignContract"
NOTIFY_ENDPOINT = "sendOnboardingNotification"


class BackendCallError(Exception):
    pass


def _error_reason(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"Backend error: {resp.status_code}"


class BackendClient:
    """Thin JSON-over-POST client for the backend functions."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        settings = settings or get_settings()
        self.base_url = (base_url or settings.backend_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.backend_timeout
        self._transport = transport

    async def call(self, endpoint: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.base_url}/{endpoint}"
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                resp = await client.post(url, json=payload)
        except httpx.HTTPError as exc:
            logger.error("Error calling backend function %s: %s", endpoint, exc)
            raise BackendCallError(str(exc) or exc.__class__.__name__) from exc

        if resp.is_error:
            reason = _error_reason(resp)
            logger.error("Backend call to %s failed: %s %s", endpoint, resp.status_code, reason)
            raise BackendCallError(reason)

        try:
            body = resp.json()
        except ValueError as exc:
            raise BackendCallError(f"Invalid response from {endpoint}") from exc
        return body if isinstance(body, dict) else {}


class HttpContractInitiator:
    def __init__(self, client: Optional[BackendClient] = None) -> None:
        self.client = client or BackendClient()

    async def initiate(
        self, email: str, first_name: str, last_name: str, agreement_title: str
    ) -> ContractHandle:
        payload = {
            "email": email,
            "firstName": first_name,
            "lastName": last_name,
            "agreementName": agreement_title,
        }
        try:
            body = await self.client.call(INITIATE_CONTRACT_ENDPOINT, payload)
        except BackendCallError as exc:
            raise ContractInitiationError(str(exc)) from exc

        agreement_id = body.get("agreementId")
        signing_url = body.get("signingUrl")
        if not agreement_id or not signing_url:
            raise ContractInitiationError("Signing service returned no agreement link")
        return ContractHandle(agreement_id=str(agreement_id), signing_url=str(signing_url))


class HttpStaffNotifier:
    def __init__(self, client: Optional[BackendClient] = None) -> None:
        self.client = client or BackendClient()

    async def notify(self, recipient: str, subject: str, html_body: str) -> None:
        payload = {"recipientEmail": recipient, "subject": subject, "htmlMessage": html_body}
        try:
            await self.client.call(NOTIFY_ENDPOINT, payload)
        except BackendCallError as exc:
            raise NotificationError(str(exc)) from exc
        logger.info("Notification to %s sent: %s", recipient, subject)
