from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx
import structlog

from .errors import RemoteCallError

log = structlog.get_logger()


class AdminRpcClient:
    """
    Thin remote-procedure adapter for the admin backend.

    Posts JSON params to ``{base_url}/rest/v1/rpc/{procedure}`` and returns the
    decoded body. Every failure is raised as ``RemoteCallError``; retrying is
    left to ``ResilientInvoker``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_key: str | None = None,
        access_token: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 30,
    ):
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)
        self._headers: dict[str, str] = {"Content-Type": "application/json"}
        if api_key:
            self._headers["apikey"] = api_key
        token = access_token or api_key
        if token:
            self._headers["Authorization"] = f"Bearer {token}"

    async def close(self) -> None:
        await self._client.aclose()

    async def __call__(self, procedure: str, params: Mapping[str, Any]) -> Any:
        return await self.call(procedure, params)

    async def call(self, procedure: str, params: Mapping[str, Any]) -> Any:
        url = f"{self._base_url}/rest/v1/rpc/{procedure}"
        try:
            resp = await self._client.post(url, json=dict(params), headers=self._headers)
        except httpx.TimeoutException as e:
            raise RemoteCallError("TIMEOUT", f"Request to {procedure} timed out.") from e
        except (httpx.NetworkError, httpx.RemoteProtocolError) as e:
            raise RemoteCallError("NETWORK", f"Network error calling {procedure}: {e}") from e
        except httpx.HTTPError as e:
            # Proxy, protocol and redirect errors are terminal.
            raise RemoteCallError("TRANSPORT", f"Request to {procedure} failed: {type(e).__name__}") from e

        if resp.status_code >= 400:
            code, message = self._error_details(resp)
            log.debug("admin_rpc_error", procedure=procedure, status_code=resp.status_code, code=code)
            raise RemoteCallError(code, message)

        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise RemoteCallError("INVALID_RESPONSE", f"Malformed JSON from {procedure}.") from e

    @staticmethod
    def _error_details(resp: httpx.Response) -> tuple[str, str]:
        code = str(resp.status_code)
        message = f"Backend error {resp.status_code}."
        try:
            body = resp.json()
        except ValueError:
            return code, message
        if isinstance(body, dict):
            if body.get("code"):
                code = str(body["code"])
            if isinstance(body.get("message"), str) and body["message"]:
                message = body["message"]
        return code, message
