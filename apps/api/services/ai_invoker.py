"""
Model invocation with a single repair retry.

At most two attempts per request. The first sends the prompt as built; if
its output does not parse as a JSON object, the second sends the same
prompt with REPAIR_INSTRUCTION appended. Token usage of both attempts is
summed so the usage ledger reflects what was actually spent.

Only parse failures are retried. Structural validation happens afterwards
in the orchestrator and fails immediately.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from core.exceptions import UpstreamFormatError
from services.ai_prompts import PromptBundle

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 2

REPAIR_INSTRUCTION = (
    "IMPORTANT: Your previous response was not valid JSON. "
    "Return ONLY a valid JSON object, no markdown fences."
)

_FENCE_OPEN_RE = re.compile(r"^```(?:json)?\n?")
_FENCE_CLOSE_RE = re.compile(r"\n?```$")


@dataclass(frozen=True)
class ModelParams:
    model: str
    temperature: float
    max_tokens: int


@dataclass
class InvocationResult:
    payload: Dict[str, Any]
    input_tokens: int
    output_tokens: int
    attempts: int
    model: str


def strip_code_fence(text: str) -> str:
    text = (text or "").strip()
    if text.startswith("```"):
        text = _FENCE_OPEN_RE.sub("", text)
        text = _FENCE_CLOSE_RE.sub("", text)
    return text.strip()


def parse_json_object(text: str) -> Optional[Dict[str, Any]]:
    """Parse model output as a JSON object. None when it is not one."""
    try:
        parsed = json.loads(strip_code_fence(text))
    except (json.JSONDecodeError, TypeError):
        return None
    if not isinstance(parsed, dict):
        return None
    return parsed


def invoke_json(client, bundle: PromptBundle, params: ModelParams, invalid_message: str) -> InvocationResult:
    """
    Call the model until it returns a JSON object, at most MAX_ATTEMPTS times.

    Raises UpstreamFormatError(invalid_message) when every attempt fails to
    parse. Transport errors from the client propagate unchanged and are not
    retried.
    """
    input_tokens = 0
    output_tokens = 0
    model = params.model

    for attempt in range(1, MAX_ATTEMPTS + 1):
        user_prompt = bundle.user if attempt == 1 else f"{bundle.user}\n\n{REPAIR_INSTRUCTION}"

        completion = client.complete(
            system=bundle.system,
            user=user_prompt,
            temperature=params.temperature,
            max_tokens=params.max_tokens,
            model=params.model,
        )
        input_tokens += completion.input_tokens
        output_tokens += completion.output_tokens
        model = completion.model or params.model

        logger.info(
            f"Model call attempt {attempt}/{MAX_ATTEMPTS}",
            extra={"extra_fields": {
                "model": model,
                "attempt": attempt,
                "input_tokens": completion.input_tokens,
                "output_tokens": completion.output_tokens,
            }},
        )

        payload = parse_json_object(completion.text)
        if payload is not None:
            return InvocationResult(
                payload=payload,
                input_tokens=input_tokens,
                output_tokens=output_tokens,
                attempts=attempt,
                model=model,
            )

        logger.warning(
            f"Model output was not a JSON object (attempt {attempt}): {completion.text[:200]!r}"
        )

    raise UpstreamFormatError(invalid_message)
