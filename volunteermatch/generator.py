"""
External rationale generation over an OpenAI-compatible chat completions API.

Every failure mode surfaces as GeneratorError so the engine can fall back
to deterministic rationale. Calls are bounded by a timeout and never retried.
"""

import json
from typing import Any, Dict, List, Optional

import requests

from .circuit import CircuitBreaker
from .config import Settings
from .errors import GeneratorError

SYSTEM_PROMPT = (
    "You write short, supportive explanations for why a volunteer role fits a person. "
    "For each role in the input, write one or two encouraging, non-alarmist sentences "
    "that mention the local hazard risks and any matching skills. "
    "Write in the requested language if one is given. "
    'Reply with JSON only: {"rationales": ["...", "..."]} with exactly one string per role, '
    "in the same order as the input roles."
)


def _extract_rationales(body: Any, expected: int) -> List[str]:
    """Pull the rationale strings out of a chat completions response body."""
    try:
        content = body["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        raise GeneratorError("Rationale response is missing message content")
    if not isinstance(content, str):
        raise GeneratorError("Rationale response content is not text")

    try:
        parsed = json.loads(content)
    except json.JSONDecodeError as e:
        raise GeneratorError(f"Rationale response is not valid JSON: {e}")

    rationales = parsed.get("rationales") if isinstance(parsed, dict) else parsed
    if not isinstance(rationales, list):
        raise GeneratorError("Rationale response has no rationales array")
    if len(rationales) != expected:
        raise GeneratorError(
            f"Rationale response has {len(rationales)} items, expected {expected}"
        )
    if not all(isinstance(r, str) and r.strip() for r in rationales):
        raise GeneratorError("Rationale response contains empty or non-string items")
    return [r.strip() for r in rationales]


class ChatRationaleGenerator:
    """Asks a hosted language model for the batch of rationales."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        breaker: Optional[CircuitBreaker] = None,
        session: Optional[requests.Session] = None,
    ):
        defaults = Settings()
        self.api_key = api_key
        self.api_url = api_url or defaults.rationale_api_url
        self.model = model or defaults.rationale_model
        self.timeout = timeout if timeout is not None else defaults.rationale_timeout
        self.breaker = breaker or CircuitBreaker()
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> "ChatRationaleGenerator":
        return cls(
            api_key=settings.rationale_api_key,
            api_url=settings.rationale_api_url,
            model=settings.rationale_model,
            timeout=settings.rationale_timeout,
        )

    def generate(self, payload: Dict[str, Any]) -> List[str]:
        if not self.api_key:
            raise GeneratorError("Missing RATIONALE_API_KEY. Set env var to enable generated rationale.")
        return self.breaker.call(self._request, payload)

    def _request(self, payload: Dict[str, Any]) -> List[str]:
        expected = len(payload.get("roles", []))
        body = {
            "model": self.model,
            "temperature": 0.4,
            "response_format": {"type": "json_object"},
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": json.dumps(payload)},
            ],
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            resp = self.session.post(self.api_url, json=body, headers=headers, timeout=self.timeout)
            resp.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "HTTPError"
            raise GeneratorError(f"Rationale request failed ({status})") from e
        except requests.exceptions.Timeout as e:
            raise GeneratorError(f"Rationale request timed out after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            raise GeneratorError(f"Rationale request error: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise GeneratorError("Rationale response body is not JSON") from e
        return _extract_rationales(data, expected)
