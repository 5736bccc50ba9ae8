"""
ApiClient - authenticated HTTP pipeline for the cliente REST API

requests does the I/O; every blocking call runs in a worker thread
(asyncio.to_thread) so several requests can be in flight at once.
"""
import asyncio
import logging
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urljoin

import requests

from saldo.config import Settings, get_settings
from saldo.infrastructure.http.errors import (
    ApiError,
    AuthExpiredError,
    NetworkError,
    classify_response,
    parse_body,
)
from saldo.infrastructure.http.guard import SessionGuard
from saldo.infrastructure.http.retry import RetryPolicy
from saldo.infrastructure.storage.token_storage import TokenStorage

logger = logging.getLogger(__name__)

CONNECTION_CHECK_PATH = "file-upload-info"

# bad API_URL: a programming error, not a transient failure
_CONFIGURATION_ERRORS = (
    requests.exceptions.InvalidURL,
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
)


class ApiClient:
    """
    HTTP client wrapper: base URL, timeout, JSON content type, plus

    - request interceptor: bearer token from TokenStorage (unless skip_auth)
    - response interceptor: error classification, 401 -> SessionGuard
    - retry: network errors / 5xx per RetryPolicy

    Each instance owns its own SessionGuard, so independent clients never
    share invalidation state.
    """

    def __init__(
        self,
        storage: TokenStorage,
        settings: Settings | None = None,
        session: requests.Session | None = None,
    ):
        self.settings = settings or get_settings()
        self.storage = storage
        self.base_url = self.settings.get_base_url()
        self.timeout = self.settings.timeout_seconds
        self.retry = RetryPolicy.from_settings(self.settings)

        self.session = session or requests.Session()
        self.session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })

        self.guard = SessionGuard(storage)
        self.guard.add_listener(self.clear_auth_token)

    # === Default headers ===

    def set_auth_token(self, token: str) -> None:
        """Install token as a default header (used after login / restore)"""
        self.session.headers["Authorization"] = f"Bearer {token}"

    def clear_auth_token(self) -> None:
        self.session.headers.pop("Authorization", None)

    # === Public API ===

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None, **kwargs) -> Any:
        return await self.request("GET", path, params=params, **kwargs)

    async def post(self, path: str, json: Any = None, **kwargs) -> Any:
        return await self.request("POST", path, json=json, **kwargs)

    async def put(self, path: str, json: Any = None, **kwargs) -> Any:
        return await self.request("PUT", path, json=json, **kwargs)

    async def delete(self, path: str, **kwargs) -> Any:
        return await self.request("DELETE", path, **kwargs)

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        files: Optional[Dict[str, Any]] = None,
        skip_auth: bool = False,
        idempotent: Optional[bool] = None,
    ) -> Any:
        """
        Send a request through the full pipeline

        Args:
            method: HTTP method
            path: path relative to API_URL ("/auth-cliente/me" or "auth-cliente/me")
            params: query parameters (None values are dropped)
            json: JSON body
            files: multipart files ({"field": (filename, content, content_type)})
            skip_auth: never attach a bearer token and never invalidate on 401
            idempotent: whether a 5xx may be retried (None decides by method)

        Returns:
            Parsed JSON body (None for empty bodies). Envelopes are not
            unwrapped here, see errors.unwrap_envelope.

        Raises:
            ApiError: one of its subclasses, see errors.py
        """
        method = method.upper()
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        attempt = 0
        while True:
            attempt += 1
            try:
                response, sent_token = await self._dispatch(
                    method, path, params=params, json=json, files=files, skip_auth=skip_auth
                )
            except NetworkError as exc:
                if self.retry.should_retry(method, exc, attempt, idempotent):
                    await self._backoff(method, path, attempt, exc)
                    continue
                logger.warning("Network error on %s %s after %d attempt(s): %s",
                               method, path, attempt, exc.__cause__ or exc)
                raise

            if response.ok:
                return parse_body(response)

            error = classify_response(response)
            logger.warning("API error %s on %s %s: %s", response.status_code, method, path, error.message)

            if isinstance(error, AuthExpiredError):
                if skip_auth:
                    raise error
                await self.guard.handle_unauthorized(sent_token, error)

            if self.retry.should_retry(method, error, attempt, idempotent):
                await self._backoff(method, path, attempt, error)
                continue
            raise error

    async def check_connection(self) -> Dict[str, Any]:
        """
        Ping a cheap endpoint to verify the API is reachable

        Returns:
            {"connected": bool, "message": str, "base_url": str, "data": ...}
        """
        try:
            data = await self.get(CONNECTION_CHECK_PATH)
        except NetworkError as exc:
            return {"connected": False, "message": exc.message, "base_url": self.base_url}
        except ApiError as exc:
            message = f"Servidor respondió con error {exc.status_code}"
            return {"connected": False, "message": message, "base_url": self.base_url}
        return {"connected": True, "message": "Conexión exitosa", "base_url": self.base_url, "data": data}

    # === Pipeline ===

    async def _dispatch(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]],
        json: Any,
        files: Optional[Dict[str, Any]],
        skip_auth: bool,
    ) -> Tuple[requests.Response, Optional[str]]:
        headers, sent_token = await self._authorize(skip_auth)
        if files:
            # let requests build the multipart boundary header
            headers["Content-Type"] = None

        url = self._url(path)
        try:
            response = await asyncio.to_thread(
                self.session.request,
                method,
                url,
                params=params,
                json=json,
                files=files,
                headers=headers,
                timeout=self.timeout,
            )
        except _CONFIGURATION_ERRORS:
            raise
        except requests.RequestException as exc:
            # any transport failure means no usable response
            raise NetworkError() from exc
        return response, sent_token

    async def _authorize(self, skip_auth: bool) -> Tuple[Dict[str, Optional[str]], Optional[str]]:
        """
        Request interceptor

        Returns:
            (per-request headers, token attached or None)
        """
        if skip_auth:
            # None removes a session-level default header for this request
            return {"Authorization": None}, None

        await self.guard.wait_idle()

        try:
            token = await asyncio.to_thread(self.storage.get)
        except Exception:
            logger.warning("Error retrieving stored token, using default header", exc_info=True)
            return {}, self._default_token()

        if not token:
            # no stored session: a leftover default header would be stale
            return {"Authorization": None}, None
        return {"Authorization": f"Bearer {token}"}, token

    async def _backoff(self, method: str, path: str, attempt: int, error: ApiError) -> None:
        delay = self.retry.delay(attempt)
        logger.info(
            "Retrying %s %s (attempt %d/%d failed: %s), next try in %.2fs",
            method, path, attempt, self.retry.attempts, type(error).__name__, delay,
        )
        await asyncio.sleep(delay)

    def _default_token(self) -> Optional[str]:
        header = self.session.headers.get("Authorization")
        if header and header.startswith("Bearer "):
            return header[len("Bearer "):]
        return None

    def _url(self, path: str) -> str:
        return urljoin(self.base_url, path.lstrip("/"))
