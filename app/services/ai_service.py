"""AI analysis client — Hugging Face Inference API.

Thin wrapper around the hosted text-generation endpoint:
  - analyze(text) → {score, summary, strengths, weaknesses, recommendations}
  - health_check() → {healthy, model, message}

Design rules:
  - One client per process, built in the app lifespan and kept on app.state.ai
  - No retries; any transport or API failure becomes UnexpectedError
  - Scores are clamped to 0..100 whatever the model returns
  - health_check never raises; it reports the failure instead

Usage:
    client = HuggingFaceClient.from_settings(settings)
    result = await client.analyze(proposal.raw_email_content)
"""

import json
import re
from typing import Any

import httpx
from fastapi import Request
from loguru import logger

from ..config import Settings
from ..exceptions import UnexpectedError

ANALYZE_INSTRUCTION = (
    "Evaluate the following vendor proposal. Reply with JSON only, using the keys "
    '"score" (0-100), "summary", "strengths", "weaknesses", "recommendations".\n\n'
)
HEALTH_PROMPT = "Say 'OK' if you're working."

_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


def clamp_score(value: Any) -> float:
    try:
        score = float(value)
    except (TypeError, ValueError):
        return 0.0
    if score != score:  # NaN
        return 0.0
    return max(0.0, min(100.0, score))


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v is not None]
    return [str(value)]


def parse_analysis(generated: str) -> dict:
    """Pull the JSON object out of the model's text and normalize it."""
    match = _JSON_OBJECT_RE.search(generated or "")
    if not match:
        raise UnexpectedError("AI response did not contain JSON")
    try:
        raw = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise UnexpectedError("AI response was not valid JSON") from e
    if not isinstance(raw, dict):
        raise UnexpectedError("AI response was not a JSON object")
    return {
        "score": clamp_score(raw.get("score")),
        "summary": str(raw.get("summary") or ""),
        "strengths": _as_list(raw.get("strengths")),
        "weaknesses": _as_list(raw.get("weaknesses")),
        "recommendations": _as_list(raw.get("recommendations")),
    }


class HuggingFaceClient:
    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = "https://api-inference.huggingface.co/models",
        timeout: float = 60,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.model = model
        self.url = f"{base_url.rstrip('/')}/{model}"
        self._http = httpx.AsyncClient(timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls, settings: Settings, transport=None) -> "HuggingFaceClient":
        return cls(
            api_key=settings.hf_api_key,
            model=settings.hf_model,
            base_url=settings.hf_api_url,
            timeout=settings.ai_timeout_seconds,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _generate(self, prompt: str, max_new_tokens: int = 1000) -> str:
        if not self.api_key:
            raise UnexpectedError("HF_API_KEY is not configured")

        logger.debug("Sending request to {} ({} chars)", self.model, len(prompt))
        try:
            resp = await self._http.post(
                self.url,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={
                    "inputs": prompt,
                    "parameters": {
                        "max_new_tokens": max_new_tokens,
                        "temperature": 0.1,
                        "return_full_text": False,
                    },
                },
            )
        except httpx.HTTPError as e:
            logger.error("Hugging Face request failed: {}", e)
            raise UnexpectedError(f"AI request failed: {e}") from e

        if resp.status_code == 401:
            raise UnexpectedError("Invalid Hugging Face API key. Check HF_API_KEY")
        if resp.status_code == 429:
            raise UnexpectedError("Rate limit exceeded. Wait a minute and retry")
        if resp.status_code != 200:
            logger.warning("Hugging Face API {}: {}", resp.status_code, resp.text[:200])
            raise UnexpectedError(f"AI service returned HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            raise UnexpectedError("AI service returned a non-JSON body") from e
        if isinstance(data, list) and data:
            data = data[0]
        text = data.get("generated_text") if isinstance(data, dict) else None
        if not text:
            raise UnexpectedError("AI returned empty response")
        logger.debug("AI response length: {} characters", len(text))
        return text.strip()

    async def analyze(self, text: str) -> dict:
        generated = await self._generate(ANALYZE_INSTRUCTION + (text or ""))
        return parse_analysis(generated)

    async def health_check(self) -> dict:
        try:
            text = await self._generate(HEALTH_PROMPT, max_new_tokens=10)
        except UnexpectedError as e:
            logger.warning("AI health check failed: {}", e.message)
            return {"healthy": False, "model": self.model, "message": f"AI service error: {e.message}"}
        healthy = "OK" in text
        return {
            "healthy": healthy,
            "model": self.model,
            "message": "AI service is working" if healthy else "Unexpected response",
        }


def get_ai_client(request: Request) -> HuggingFaceClient:
    return request.app.state.ai
