"""
Synchronous HTTP client for the Case Register backend API.

Uses ``httpx.Client`` (sync) because Streamlit scripts run synchronously.
"""

import logging

import httpx
import streamlit as st

from caseregister.core.config import get_settings
from caseregister.services.audio.capture import AudioBlob

logger = logging.getLogger(__name__)


class APIError(Exception):
    """User-friendly API error with categorized message.

    Categories:
        "server": the backend answered with an error payload.
        "no_response": the request went out but nothing came back.
        "request": the request could not be built or sent.
    """

    def __init__(self, message: str, category: str = "request", status_code: int | None = None) -> None:
        self.message = message
        self.category = category
        self.status_code = status_code
        super().__init__(message)


class TransportError(APIError):
    """The request was sent but no response arrived (refused, dropped, timed out)."""

    def __init__(self, message: str = "No response from server. Is the backend running?") -> None:
        super().__init__(message, category="no_response")


def _error_message(response: httpx.Response) -> str:
    """Pull the most specific message out of an error response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        return str(body.get("error") or body.get("detail") or body.get("message") or body)
    return str(body)


def _log_request(request: httpx.Request) -> None:
    logger.debug("API Request: %s %s", request.method, request.url)


def _log_response(response: httpx.Response) -> None:
    logger.debug(
        "API Response: %s %s -> %d",
        response.request.method,
        response.request.url,
        response.status_code,
    )


class APIClient:
    """Thin synchronous wrapper around httpx for calling the FastAPI backend.

    All methods return parsed values or raise ``APIError`` with
    user-friendly messages for display in the UI. Nothing is retried.
    """

    def __init__(self, base_url: str = "http://localhost:3001", timeout: float = 30.0) -> None:
        """Initialize the HTTP client.

        Args:
            base_url: Base URL of the Case Register FastAPI backend.
            timeout: Seconds to wait for a response before giving up.
        """
        self._base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self._base_url,
            timeout=timeout,
            event_hooks={"request": [_log_request], "response": [_log_response]},
        )

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Execute an HTTP request with categorized error handling.

        Args:
            method: HTTP method name ("get", "post").
            path: API endpoint path (e.g. "/api/transcribe").
            **kwargs: Passed through to httpx (files, params, timeout, etc.).

        Returns:
            The httpx Response object with a successful status code.

        Raises:
            APIError: "server" on an error status, "request" when the
                request could not be sent.
            TransportError: When no response was received.
        """
        try:
            resp = getattr(self._client, method)(path, **kwargs)
            resp.raise_for_status()
            return resp
        except httpx.HTTPStatusError as exc:
            message = _error_message(exc.response)
            logger.warning("API Response Error: %d %s", exc.response.status_code, message)
            raise APIError(
                message, category="server", status_code=exc.response.status_code
            ) from None
        except (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError) as exc:
            logger.warning("No response from %s%s: %s", self._base_url, path, exc)
            raise TransportError() from None
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("API Request Error: %s", exc)
            raise APIError(f"Error: {exc}", category="request") from None

    def close(self) -> None:
        self._client.close()

    # -- health --

    def health_check(self) -> dict:
        return self._request("get", "/health").json()

    def check_connection(self) -> tuple[bool, str]:
        """Check if the backend is reachable. Returns (ok, message)."""
        try:
            self.health_check()
            return True, "Connected"
        except APIError as exc:
            return False, exc.message

    # -- transcription --

    def transcribe(self, blob: AudioBlob) -> str:
        """Upload one recording and return its transcript.

        Raises:
            APIError: "request" for an empty blob, "server" for an error
                response or a response without a transcription.
            TransportError: When the backend does not answer in time.
        """
        if not blob.data:
            raise APIError("No audio recorded. Please record some audio first.", category="request")
        files = {"audio": (blob.filename, blob.data, blob.mime_type)}
        resp = self._request("post", "/api/transcribe", files=files)
        try:
            body = resp.json()
        except ValueError:
            raise APIError("Invalid response from server", category="server") from None
        transcription = body.get("transcription") if isinstance(body, dict) else None
        if not transcription:
            raise APIError("No transcription received from server", category="server")
        return transcription


@st.cache_resource
def get_api_client(base_url: str | None = None) -> APIClient:
    """Return a cached APIClient, keyed by base_url.

    Uses Streamlit's ``cache_resource`` to persist the client across reruns.
    When the base URL changes (e.g. user updates sidebar), a new client
    is created automatically because the cache key includes the parameter.
    """
    settings = get_settings()
    return APIClient(base_url=base_url or settings.api_base_url, timeout=settings.api_timeout)
