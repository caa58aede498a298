"""HTTP client for the Azure AD token endpoint and the Dev Center submission API."""

from __future__ import annotations

from typing import Any, Optional

import httpx
import structlog

from devcenter_deploy.core.config import Settings
from devcenter_deploy.core.exceptions import StoreRequestError, TokenMissingError
from devcenter_deploy.utils.metrics import STORE_CALLS


logger = structlog.get_logger()


def error_detail(exc: Exception, field: str = "code") -> Any:
    """Pick the most useful detail from a failed call.

    Prefers the structured ``field`` from the JSON body, then the HTTP
    status. Transport errors with no response fall back to the exception text.
    """
    response: Optional[httpx.Response] = getattr(exc, "response", None)
    if response is not None:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get(field):
            return body[field]
        return response.status_code
    return str(exc) or exc.__class__.__name__


def escape_upload_url(url: str) -> str:
    """Escape literal '+' in a pre-signed blob URL so it is not read as a space."""
    return url.replace("+", "%2B")


class DevCenterClient:
    """Thin async wrapper over httpx for the calls a deployment needs.

    Pass ``http_client`` to share or mock the transport; otherwise one is
    created and owned by this instance.
    """

    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self._owns_client = http_client is None
        self.http = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.request_timeout_seconds)
        )

    async def __aenter__(self) -> "DevCenterClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.http.aclose()

    def _record(self, stage: str, outcome: str) -> None:
        if self.settings.metrics_enabled:
            STORE_CALLS.labels(stage=stage, outcome=outcome).inc()

    async def _send(
        self,
        stage: str,
        failure_message: str,
        method: str,
        url: str,
        *,
        detail_field: str = "code",
        **kwargs: Any,
    ) -> httpx.Response:
        """Issue one request; any failure becomes a StoreRequestError."""
        logger.debug("Store request", stage=stage, method=method, url=url)
        try:
            response = await self.http.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            self._record(stage, "error")
            detail = error_detail(exc, detail_field)
            status_code = exc.response.status_code if isinstance(exc, httpx.HTTPStatusError) else None
            logger.warning("Store request failed", stage=stage, method=method, detail=detail)
            raise StoreRequestError(failure_message, detail, status_code) from exc
        self._record(stage, "ok")
        return response

    @staticmethod
    def _json(response: httpx.Response) -> dict:
        if not response.content:
            return {}
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    async def acquire_token(self, tenant_id: str, client_id: str, client_secret: str) -> str:
        """Exchange client credentials for a bearer token scoped to the store."""
        url = f"{self.settings.login_base_url}/{tenant_id}/oauth2/token"
        response = await self._send(
            "token",
            "Failed to fetch access token",
            "POST",
            url,
            detail_field="error",
            data={
                "grant_type": "client_credentials",
                "resource": self.settings.store_resource,
                "client_id": client_id,
                "client_secret": client_secret,
            },
        )
        token = self._json(response).get("access_token")
        if not token:
            raise TokenMissingError()
        return token

    async def authorized(
        self,
        stage: str,
        failure_message: str,
        method: str,
        url: str,
        token: str,
        json: Any = None,
    ) -> dict:
        """Call the store API with the bearer token and return the JSON body."""
        kwargs: dict = {"headers": {"Authorization": f"Bearer {token}"}}
        if json is not None:
            kwargs["json"] = json
        response = await self._send(stage, failure_message, method, url, **kwargs)
        return self._json(response)

    async def upload_blob(self, url: str, data: bytes) -> None:
        """PUT the archive to the submission's pre-signed upload URL.

        The URL's signature is the authorization, so no bearer token is sent.
        """
        await self._send(
            "upload",
            "Failed to upload package",
            "PUT",
            escape_upload_url(url),
            content=data,
            headers={"x-ms-blob-type": "BlockBlob"},
        )
