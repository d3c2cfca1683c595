"""HTTP client for the application submission endpoint."""

from __future__ import annotations

import logging
from typing import Any, Mapping

import requests
from pydantic import BaseModel, ConfigDict, ValidationError

import config
from core.errors import SubmissionError

logger = logging.getLogger(__name__)


class SubmissionResponse(BaseModel):
    """Parsed endpoint answer.

    ``accepted`` reflects the HTTP status (2xx); ``message`` is shown verbatim
    in failure notifications.
    """

    model_config = ConfigDict(extra="ignore")

    accepted: bool = False
    success: bool | None = None
    message: str | None = None


class SubmissionClient:
    """POST assembled applications as JSON to ``endpoint``."""

    def __init__(
        self,
        endpoint: str | None = None,
        *,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.endpoint = endpoint or config.SUBMISSION_ENDPOINT_URL
        self.timeout = timeout if timeout is not None else config.SUBMISSION_TIMEOUT_SECONDS
        self._session = session

    def _post(self, payload: Mapping[str, Any]) -> requests.Response:
        poster = self._session.post if self._session is not None else requests.post
        return poster(
            self.endpoint,
            json=dict(payload),
            headers={"Content-Type": "application/json"},
            timeout=self.timeout,
        )

    def submit(self, payload: Mapping[str, Any]) -> SubmissionResponse:
        """Send ``payload`` and return the parsed response.

        Raises:
            SubmissionError: The endpoint was unreachable or answered with a
                body that is not a JSON object.
        """

        try:
            response = self._post(payload)
        except requests.RequestException as exc:
            logger.warning("Submission to %s failed: %s", self.endpoint, exc)
            raise SubmissionError() from exc

        try:
            body = response.json()
        except ValueError as exc:
            logger.warning("Submission endpoint returned non-JSON body (status %s)", response.status_code)
            raise SubmissionError() from exc
        if not isinstance(body, dict):
            logger.warning("Submission endpoint returned %s instead of an object", type(body).__name__)
            raise SubmissionError()

        try:
            parsed = SubmissionResponse.model_validate({**body, "accepted": response.ok})
        except ValidationError as exc:
            logger.warning("Unexpected submission response shape: %s", exc)
            raise SubmissionError() from exc
        logger.info("Submission endpoint answered %s (accepted=%s)", response.status_code, parsed.accepted)
        return parsed


__all__ = ["SubmissionClient", "SubmissionResponse"]
