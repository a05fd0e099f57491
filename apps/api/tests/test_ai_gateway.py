"""
AI gateway client: request shape and user-facing error translation.
"""
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from services.ai_gateway import (
    CANNED_FAILURES,
    DAILY_LIMIT,
    NETWORK_ERROR,
    UNAUTHORIZED,
    AIGatewayClient,
    AIGatewayError,
)


def _response(status_code, payload=None):
    r = MagicMock()
    r.status_code = status_code
    r.ok = status_code < 400
    if isinstance(payload, Exception):
        r.json.side_effect = payload
    else:
        r.json.return_value = payload
    return r


def _client(response=None, side_effect=None):
    session = MagicMock()
    if side_effect is not None:
        session.post.side_effect = side_effect
    else:
        session.post.return_value = response
    return AIGatewayClient("https://api.example.com/", "tok", session=session), session


class TestRequests:
    def test_generate_program_body_and_auth(self):
        client, session = _client(_response(200, {"program": {"id": "p1"}}))

        result = client.generate_program(specific_instructions="No squats")

        assert result == {"program": {"id": "p1"}}
        args, kwargs = session.post.call_args
        assert args[0] == "https://api.example.com/v1/ai/generate-program"
        assert kwargs["json"] == {"specific_instructions": "No squats"}
        assert kwargs["headers"] == {"Authorization": "Bearer tok"}
        assert kwargs["timeout"] == client.timeout

    def test_analyze_workout_sends_id(self):
        client, session = _client(_response(200, {"analysis": {}}))
        client.analyze_workout("abc")
        assert session.post.call_args.kwargs["json"] == {"workout_id": "abc"}

    def test_weekly_digest_empty_body(self):
        client, session = _client(_response(200, {"digest": {}}))
        client.weekly_digest()
        assert session.post.call_args.kwargs["json"] == {}


class TestErrorTranslation:
    @pytest.mark.parametrize("status", [400, 404])
    def test_precondition_message_verbatim(self, status):
        client, _ = _client(_response(status, {"error": "Complete your profile first"}))

        with pytest.raises(AIGatewayError) as exc_info:
            client.generate_program()

        assert exc_info.value.message == "Complete your profile first"
        assert exc_info.value.status_code == status

    def test_unauthorized(self):
        client, _ = _client(_response(401, {"error": "Unauthorized"}))
        with pytest.raises(AIGatewayError) as exc_info:
            client.weekly_digest()
        assert exc_info.value.message == UNAUTHORIZED

    def test_daily_limit_uses_server_message(self):
        message = "You have reached your daily AI limit (10/10). Try again tomorrow."
        client, _ = _client(_response(429, {"error": "daily_limit", "message": message}))
        with pytest.raises(AIGatewayError) as exc_info:
            client.analyze_workout("abc")
        assert exc_info.value.message == message

    def test_daily_limit_fallback(self):
        client, _ = _client(_response(429, ValueError("no body")))
        with pytest.raises(AIGatewayError) as exc_info:
            client.analyze_workout("abc")
        assert exc_info.value.message == DAILY_LIMIT

    @pytest.mark.parametrize("endpoint,call", [
        ("generate-program", lambda c: c.generate_program()),
        ("analyze-workout", lambda c: c.analyze_workout("abc")),
        ("weekly-digest", lambda c: c.weekly_digest()),
    ])
    def test_upstream_failures_are_canned(self, endpoint, call):
        client, _ = _client(_response(502, {"error": "AI returned invalid JSON. Please try again."}))
        with pytest.raises(AIGatewayError) as exc_info:
            call(client)
        assert exc_info.value.message == CANNED_FAILURES[endpoint]
        assert exc_info.value.status_code == 502

    def test_network_error(self):
        client, _ = _client(side_effect=requests.ConnectionError("refused"))
        with pytest.raises(AIGatewayError) as exc_info:
            client.weekly_digest()
        assert exc_info.value.message == NETWORK_ERROR
        assert exc_info.value.status_code is None
