"""
Client-side AI gateway.

Thin synchronous wrapper over the /v1/ai endpoints for scripts and other
Python callers. Translates error statuses into user-facing messages:
precondition bodies (400, 404) are shown verbatim because the server text is
already meant for the user; everything else gets a canned message per
endpoint.
"""
import logging
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 150  # above the server-side model timeout

NETWORK_ERROR = "Could not reach the AI service. Check your connection and try again."
UNAUTHORIZED = "Your session has expired. Please sign in again."
DAILY_LIMIT = "You have reached your daily AI limit. Try again tomorrow."

CANNED_FAILURES = {
    "generate-program": "Program generation failed. Please try again.",
    "analyze-workout": "Workout analysis failed. Please try again.",
    "weekly-digest": "Weekly digest failed. Please try again.",
}


class AIGatewayError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AIGatewayClient:
    def __init__(
        self,
        base_url: str,
        token: str,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT_S,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout

    def generate_program(
        self,
        specific_instructions: Optional[str] = None,
        feedback: Optional[str] = None,
    ) -> Dict[str, Any]:
        body = {}
        if specific_instructions:
            body["specific_instructions"] = specific_instructions
        if feedback:
            body["feedback"] = feedback
        return self._post("generate-program", body)

    def analyze_workout(self, workout_id: str) -> Dict[str, Any]:
        return self._post("analyze-workout", {"workout_id": str(workout_id)})

    def weekly_digest(self) -> Dict[str, Any]:
        return self._post("weekly-digest", {})

    def _post(self, endpoint: str, body: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}/v1/ai/{endpoint}"
        headers = {"Authorization": f"Bearer {self.token}"}
        try:
            r = self.session.post(url, json=body, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"AI gateway request to {endpoint} failed: {e}")
            raise AIGatewayError(NETWORK_ERROR)

        if r.ok:
            return r.json()

        raise AIGatewayError(self._error_message(endpoint, r), status_code=r.status_code)

    @staticmethod
    def _error_message(endpoint: str, r: requests.Response) -> str:
        try:
            payload = r.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}

        if r.status_code in (400, 404) and payload.get("error"):
            return str(payload["error"])
        if r.status_code == 401:
            return UNAUTHORIZED
        if r.status_code == 429:
            return str(payload.get("message") or DAILY_LIMIT)
        return CANNED_FAILURES.get(endpoint, "Something went wrong. Please try again.")
