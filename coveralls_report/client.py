"""Coveralls jobs API client.

Usage:
    client = CoverallsClient()
    result = client.send(report)                                  # coveralls.io
    result = client.send(report, "https://coveralls.example.com/api/v1/jobs")
"""

import json
from typing import Any

import requests

from coveralls_report.models import CoverallsReport

DEFAULT_ENDPOINT = "https://coveralls.io/api/v1/jobs"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class CoverallsClientError(Exception):
    """Base exception for all client errors."""


class AuthenticationError(CoverallsClientError):
    """Raised on HTTP 401 — the repo token or job id was rejected."""


class NotFoundError(CoverallsClientError):
    """Raised on HTTP 404 — the endpoint or repository is unknown."""


class NetworkError(CoverallsClientError):
    """Raised on connection timeout or unreachable server."""


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class CoverallsClient:
    """Thin wrapper around the Coveralls jobs endpoint."""

    def __init__(self, timeout: int = 30) -> None:
        self._timeout = timeout
        self._session = requests.Session()

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def send(self, report: CoverallsReport, url: str = DEFAULT_ENDPOINT) -> dict:
        """Upload *report* in a single POST and return the parsed JSON response.

        Coveralls expects the report as a multipart file upload in the
        ``json_file`` field. Nothing is retried.

        Raises:
            AuthenticationError:  HTTP 401
            NotFoundError:        HTTP 404
            CoverallsClientError: Any other non-2xx response, or a report
                                  that cannot be serialized
            NetworkError:         Timeout or connection failure
        """
        try:
            body = json.dumps(report.to_dict()).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise CoverallsClientError(f"Could not serialize report: {exc}") from exc

        files = {"json_file": ("report", body, "application/octet-stream")}
        return self._post(url, files)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _post(self, url: str, files: dict[str, Any]) -> dict:
        try:
            response = self._session.post(url, files=files, timeout=self._timeout)
        except requests.exceptions.Timeout as exc:
            raise NetworkError(
                f"Request timed out after {self._timeout}s while contacting '{url}'"
            ) from exc
        except requests.exceptions.ConnectionError as exc:
            raise NetworkError(f"Unable to reach '{url}'") from exc
        except requests.exceptions.RequestException as exc:
            raise NetworkError(f"Request to '{url}' failed: {exc}") from exc

        if response.status_code == 401:
            raise AuthenticationError(
                "Authentication failed — check that your repo token is valid."
            )
        if response.status_code == 404:
            raise NotFoundError(f"Endpoint not found: {url}")
        if not response.ok:
            raise CoverallsClientError(
                f"Unexpected response {response.status_code} from {url}: {response.text[:200]}"
            )

        try:
            body = response.json()
        except ValueError:
            return {}
        # Only a JSON object carries job details
        return body if isinstance(body, dict) else {}
