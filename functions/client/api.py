"""
HTTP client for the portfolio backend, plus an in-memory stand-in for tests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol

import requests

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10  # seconds


class BackendUnavailableError(Exception):
    """The backend could not be reached (connection, timeout, bad gateway)."""


@dataclass
class ContactResult:
    """The backend's answer to a contact submission."""

    success: bool
    message: str
    status_code: int = 200

    @property
    def retryable(self) -> bool:
        # 5xx means the server failed; 4xx means it will never accept this entry.
        return not self.success and self.status_code >= 500


class BackendClient(Protocol):
    def health(self) -> dict:
        ...

    def submit_contact(self, payload: dict) -> ContactResult:
        ...

    def track_view(self, payload: dict) -> None:
        ...


class HttpBackendClient:
    """Talks to the backend's JSON API with requests."""

    def __init__(
        self,
        api_base: str,
        timeout: float = REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.api_base}/{path.lstrip('/')}"

    def health(self) -> dict:
        """
        Fetch the health status.

        Raises:
            BackendUnavailableError: If the request fails or the status is not OK.
        """
        try:
            response = self.session.get(self._url("health"), timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as exc:
            raise BackendUnavailableError(str(exc)) from exc

    def submit_contact(self, payload: dict) -> ContactResult:
        try:
            response = self.session.post(
                self._url("contact"), json=payload, timeout=self.timeout
            )
        except requests.RequestException as exc:
            raise BackendUnavailableError(str(exc)) from exc

        try:
            body = response.json()
        except ValueError as exc:
            # No JSON means the API never answered, e.g. a proxy's 502 page.
            logger.warning(
                "Non-JSON reply (%s) from %s", response.status_code, response.url
            )
            raise BackendUnavailableError(
                f"Non-JSON reply with status {response.status_code}"
            ) from exc
        if not isinstance(body, dict):
            body = {}
        return ContactResult(
            success=bool(body.get("success")) and response.ok,
            message=body.get("message") or "Failed to send message",
            status_code=response.status_code,
        )

    def track_view(self, payload: dict) -> None:
        try:
            self.session.post(
                self._url("analytics/view"), json=payload, timeout=self.timeout
            )
        except requests.RequestException as exc:
            raise BackendUnavailableError(str(exc)) from exc


@dataclass
class InMemoryBackendClient:
    """Backend stand-in whose reachability can be toggled."""

    reachable: bool = True
    contacts: list[dict] = field(default_factory=list)
    views: list[dict] = field(default_factory=list)
    health_checks: int = 0
    # Answers for the next submissions: a ContactResult to return or an
    # exception to raise. Once empty, valid submissions are accepted.
    scripted_results: list = field(default_factory=list)

    def _check_reachable(self) -> None:
        if not self.reachable:
            raise BackendUnavailableError("backend unreachable")

    def health(self) -> dict:
        self.health_checks += 1
        self._check_reachable()
        return {"status": "OK", "message": "Portfolio backend is running"}

    def submit_contact(self, payload: dict) -> ContactResult:
        self._check_reachable()
        if self.scripted_results:
            scripted = self.scripted_results.pop(0)
            if isinstance(scripted, Exception):
                raise scripted
            return scripted
        for key in ("name", "email", "message"):
            if not payload.get(key):
                return ContactResult(
                    success=False,
                    message="Name, email, and message are required",
                    status_code=400,
                )
        self.contacts.append(dict(payload))
        return ContactResult(success=True, message="Thank you! Your message has been received.")

    def track_view(self, payload: dict) -> None:
        self._check_reachable()
        self.views.append(dict(payload))
