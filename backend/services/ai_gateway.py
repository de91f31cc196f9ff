# backend/services/ai_gateway.py
"""
AI Career Gateway

The only component that talks to the hosted language model. A request names
an action and carries a data object; the gateway:

1. selects the prompt template for the action and fills it from the data
2. POSTs the prompt to a streaming generation endpoint (server-sent events)
3. reads the stream to completion, concatenating every text delta
4. strips any ```json / ``` fences the model wrapped around its answer
5. parses the text as JSON and validates it against the action's schema

Every outcome is returned as an envelope, never raised:

    {"success": True,  "data": {...}}                     valid answer
    {"success": True,  "data": {"rawResponse": ..., "error": ...}}   not JSON
    {"success": False, "error": "..."}                    credential, transport
                                                          or schema failure

A model answer that is not JSON at all is treated as a data-quality issue
and handed back as a degraded payload so the caller decides what to do.
"""

import json
import logging
import os
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Iterator, Optional

import httpx

import config
from prompts.career_prompts import CareerPrompts
from services.response_schemas import validate_action_payload

logger = logging.getLogger(__name__)


MISSING_KEY_MESSAGE = "API key not configured"
INVALID_ACTION_MESSAGE = "Invalid action type"
PARSE_ERROR_MESSAGE = "Failed to parse JSON response"

_FENCE_RE = re.compile(r"```json\n?|```\n?")


class Action(str, Enum):
    PARSE_RESUME = "parse_resume"
    ANALYZE_SKILLS = "analyze_skills"
    GENERATE_LEARNING_PATH = "generate_learning_path"
    CAREER_GUIDANCE = "career_guidance"
    MOCK_INTERVIEW = "mock_interview"
    EVALUATE_ANSWER = "evaluate_answer"
    SKILL_ASSESSMENT = "skill_assessment"
    MATCH_JOBS = "match_jobs"


PROMPT_BUILDERS: Dict[Action, Callable[[Dict[str, Any]], str]] = {
    Action.PARSE_RESUME: CareerPrompts.parse_resume,
    Action.ANALYZE_SKILLS: CareerPrompts.analyze_skills,
    Action.GENERATE_LEARNING_PATH: CareerPrompts.generate_learning_path,
    Action.CAREER_GUIDANCE: CareerPrompts.career_guidance,
    Action.MOCK_INTERVIEW: CareerPrompts.mock_interview,
    Action.EVALUATE_ANSWER: CareerPrompts.evaluate_answer,
    Action.SKILL_ASSESSMENT: CareerPrompts.skill_assessment,
    Action.MATCH_JOBS: CareerPrompts.match_jobs,
}


class GatewayTransportError(Exception):
    """Non-2xx answer from the model endpoint."""


@dataclass
class GatewayResult:
    success: bool
    data: Any = None
    error: Optional[str] = None
    status_code: int = 200

    @classmethod
    def ok(cls, data: Any) -> "GatewayResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, status_code: int = 500) -> "GatewayResult":
        return cls(success=False, error=error, status_code=status_code)

    def to_envelope(self) -> Dict[str, Any]:
        if self.success:
            return {"success": True, "data": self.data}
        return {"success": False, "error": self.error}


# ---------- Stream & response helpers ----------

def _delta_text(event: Any) -> str:
    """Pull the text delta out of one `{candidates:[{content:{parts:[...]}}]}` event."""
    if not isinstance(event, dict):
        return ""
    candidates = event.get("candidates") or []
    if not isinstance(candidates, list) or not candidates:
        return ""
    content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return ""
    return "".join(
        part["text"] for part in parts
        if isinstance(part, dict) and isinstance(part.get("text"), str)
    )


def iter_sse_text(lines: Iterable[str]) -> Iterator[str]:
    """
    Yield the text deltas of an SSE stream, in arrival order.

    Only `data:` lines are read; lines whose payload is not JSON are skipped.
    """
    for line in lines:
        if not line.startswith("data:"):
            continue
        payload = line[5:].strip()
        if not payload:
            continue
        try:
            event = json.loads(payload)
        except json.JSONDecodeError:
            logger.debug(f"Skipping undecodable SSE line: {payload[:80]}")
            continue
        text = _delta_text(event)
        if text:
            yield text


def strip_code_fences(text: str) -> str:
    """
    Remove every ```json / ``` marker and trim the result.

    Markers are removed until none are left, so applying this twice gives
    the same result as applying it once.
    """
    cleaned = text or ""
    while True:
        stripped = _FENCE_RE.sub("", cleaned)
        if stripped == cleaned:
            break
        cleaned = stripped
    return cleaned.strip()


def degraded_payload(raw_text: str) -> Dict[str, Any]:
    return {"rawResponse": raw_text, "error": PARSE_ERROR_MESSAGE}


def is_degraded(data: Any) -> bool:
    return isinstance(data, dict) and data.get("error") == PARSE_ERROR_MESSAGE and "rawResponse" in data


# ---------- Gateway ----------

class AICareerGateway:
    """
    Dispatches career actions to the hosted model.

    Args:
        api_key: Model credential; read from INTEGRATIONS_API_KEY when omitted
        endpoint: Streaming generation URL
        auth_header: Header that carries "Bearer <api_key>"
        transport: Optional httpx transport (tests use httpx.MockTransport)
        timeout: Request timeout in seconds; None waits for the stream to end
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        endpoint: Optional[str] = None,
        auth_header: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key if api_key is not None else os.environ.get(config.API_KEY_ENV)
        self.endpoint = endpoint or config.AI_GATEWAY_URL
        self.auth_header = auth_header or config.AI_AUTH_HEADER
        self.timeout = timeout
        self._transport = transport

    @staticmethod
    def build_prompt(action: Action, data: Dict[str, Any]) -> str:
        prompt = PROMPT_BUILDERS[action](data)
        if not prompt or not prompt.strip():
            raise ValueError(f"Empty prompt for action {action.value}")
        return prompt

    def invoke(self, action: str, data: Optional[Dict[str, Any]] = None) -> GatewayResult:
        """
        Run one action end to end and return its envelope.

        Args:
            action: One of the Action values
            data: Template fields for the action

        Returns:
            GatewayResult; see the module docstring for the three outcomes
        """
        if not self.api_key:
            logger.error("AI gateway called without a configured API key")
            return GatewayResult.fail(MISSING_KEY_MESSAGE)

        try:
            selected = Action(action)
        except ValueError:
            logger.warning(f"Rejected unknown action '{action}'")
            return GatewayResult.fail(INVALID_ACTION_MESSAGE, status_code=400)

        if data is None:
            data = {}
        if not isinstance(data, dict):
            return GatewayResult.fail("Request data must be a JSON object", status_code=400)

        prompt = self.build_prompt(selected, data)
        logger.info(f"Invoking action '{selected.value}' (prompt {len(prompt)} chars)")

        try:
            full_text = self._stream_completion(prompt)
        except GatewayTransportError as e:
            logger.error(f"Model API rejected '{selected.value}': {e}")
            return GatewayResult.fail(str(e))
        except httpx.HTTPError as e:
            logger.exception(f"Model API request failed for '{selected.value}'")
            return GatewayResult.fail(f"Model API request failed: {e}")

        cleaned = strip_code_fences(full_text)
        logger.info(f"Accumulated {len(full_text)} chars for '{selected.value}'")

        try:
            payload = json.loads(cleaned)
        except json.JSONDecodeError:
            logger.warning(f"Model output for '{selected.value}' is not JSON: {cleaned[:200]!r}")
            return GatewayResult.ok(degraded_payload(cleaned))

        problem = validate_action_payload(selected.value, payload)
        if problem:
            logger.warning(problem)
            return GatewayResult.fail(problem)

        return GatewayResult.ok(payload)

    def _stream_completion(self, prompt: str) -> str:
        body = {
            "contents": [
                {
                    "role": "user",
                    "parts": [{"text": prompt}],
                }
            ]
        }
        headers = {
            "Content-Type": "application/json",
            self.auth_header: f"Bearer {self.api_key}",
        }

        with httpx.Client(transport=self._transport, timeout=self.timeout) as client:
            with client.stream("POST", self.endpoint, json=body, headers=headers) as response:
                if not response.is_success:
                    response.read()
                    raise GatewayTransportError(f"Model API error: {response.text}")
                return "".join(iter_sse_text(response.iter_lines()))


_gateway_instance: Optional[AICareerGateway] = None


def get_ai_gateway() -> AICareerGateway:
    """
    Get or create singleton AICareerGateway instance.

    Returns:
        Shared AICareerGateway instance
    """
    global _gateway_instance

    if _gateway_instance is None:
        _gateway_instance = AICareerGateway()

    return _gateway_instance


def reset_ai_gateway():
    """Reset the singleton instance (useful for testing)."""
    global _gateway_instance
    _gateway_instance = None
    logger.info("AICareerGateway singleton reset")
