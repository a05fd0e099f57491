"""
Model invoker tests: fence stripping, JSON parsing, and the bounded repair retry.
"""
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))
sys.path.insert(0, str(Path(__file__).resolve().parent))

from core.exceptions import UpstreamFormatError, UpstreamTransportError
from services.ai_invoker import (
    MAX_ATTEMPTS,
    REPAIR_INSTRUCTION,
    ModelParams,
    invoke_json,
    parse_json_object,
    strip_code_fence,
)
from services.ai_prompts import PromptBundle
from services.llm_client import LLMCompletion
from fixtures.ai_fixtures import FakeLLMClient

BUNDLE = PromptBundle(system="You are a personal sports coach.", user="TASK: do it", schema="{}")
PARAMS = ModelParams(model="test-model", temperature=0.3, max_tokens=1024)


class TestStripCodeFence:
    def test_plain_json_untouched(self):
        assert strip_code_fence('{"a": 1}') == '{"a": 1}'

    def test_json_fence(self):
        assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self):
        assert strip_code_fence('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_surrounding_whitespace(self):
        assert strip_code_fence('  \n```json\n{"a": 1}\n```\n ') == '{"a": 1}'


class TestParseJsonObject:
    def test_object(self):
        assert parse_json_object('```json\n{"summary": "ok"}\n```') == {"summary": "ok"}

    @pytest.mark.parametrize("text", ["not json", '{"a": 1', "[1, 2]", '"text"', ""])
    def test_rejects_non_objects(self, text):
        assert parse_json_object(text) is None


class TestInvokeJson:
    def test_first_attempt_success(self):
        llm = FakeLLMClient().queue({"summary": "ok"})

        result = invoke_json(llm, BUNDLE, PARAMS, "bad")

        assert result.payload == {"summary": "ok"}
        assert result.attempts == 1
        assert len(llm.calls) == 1
        call = llm.calls[0]
        assert call.user == BUNDLE.user
        assert call.system == BUNDLE.system
        assert call.temperature == 0.3
        assert call.max_tokens == 1024
        assert call.model == "test-model"

    def test_repair_retry_after_fenced_invalid_json(self):
        llm = FakeLLMClient().queue(
            LLMCompletion(text='```json\n{"summary": \n```', input_tokens=120, output_tokens=30, model="test-model"),
            LLMCompletion(text='{"summary": "ok"}', input_tokens=130, output_tokens=40, model="test-model"),
        )

        result = invoke_json(llm, BUNDLE, PARAMS, "bad")

        assert result.payload == {"summary": "ok"}
        assert result.attempts == 2
        assert len(llm.calls) == 2
        assert llm.calls[1].user == f"{BUNDLE.user}\n\n{REPAIR_INSTRUCTION}"
        # both attempts are billed
        assert result.input_tokens == 250
        assert result.output_tokens == 70

    def test_two_failures_raise_upstream_format(self):
        llm = FakeLLMClient().queue("nope", "still nope")

        with pytest.raises(UpstreamFormatError) as exc_info:
            invoke_json(llm, BUNDLE, PARAMS, "AI returned invalid analysis. Please try again.")

        assert exc_info.value.status_code == 502
        assert exc_info.value.detail == "AI returned invalid analysis. Please try again."
        assert len(llm.calls) == MAX_ATTEMPTS

    def test_array_counts_as_parse_failure(self):
        llm = FakeLLMClient().queue("[1, 2, 3]", {"ok": True})

        result = invoke_json(llm, BUNDLE, PARAMS, "bad")

        assert result.attempts == 2
        assert result.payload == {"ok": True}

    def test_transport_error_not_retried(self):
        llm = FakeLLMClient().queue(UpstreamTransportError(), {"ok": True})

        with pytest.raises(UpstreamTransportError):
            invoke_json(llm, BUNDLE, PARAMS, "bad")

        assert len(llm.calls) == 1
