# backend/quizboard/core/upstream.py

import json
import logging
from typing import Any, Dict, List

import httpx
import openai
from openai import AsyncOpenAI

from .config import Settings
from .errors import (
    UpstreamContentError,
    UpstreamFormatError,
    UpstreamShapeError,
    UpstreamTransportError,
)
from .prompts import PromptTemplate

logger = logging.getLogger("quiz.upstream")


# ------------------------------------------------------------
# Message building
# ------------------------------------------------------------
def build_messages(prompt: PromptTemplate, payload: Any) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": prompt.text},
        {"role": "user", "content": json.dumps(payload, ensure_ascii=False)},
    ]


# ------------------------------------------------------------
# Two-stage decode
# ------------------------------------------------------------
def _reject_constant(name: str) -> Any:
    # NaN, Infinity and -Infinity are not JSON
    raise ValueError(f"Non-standard JSON constant: {name}")


def decode_envelope(body: str) -> Dict[str, Any]:
    """First stage: the provider's HTTP body."""
    try:
        data = json.loads(body, parse_constant=_reject_constant)
    except ValueError as e:
        logger.error(f"Failed to parse provider JSON: {e}")
        raise UpstreamFormatError("Provider returned non-JSON response") from e
    if not isinstance(data, dict):
        raise UpstreamFormatError("Provider returned a JSON document that is not an object")
    return data


def extract_content(envelope: Dict[str, Any]) -> str:
    choices = envelope.get("choices")
    if not isinstance(choices, list) or not choices:
        logger.error(f"Provider response missing choices: {envelope}")
        raise UpstreamShapeError("Provider response missing message content")

    first = choices[0] if isinstance(choices[0], dict) else {}
    message = first.get("message") if isinstance(first.get("message"), dict) else {}
    content = message.get("content")
    if not isinstance(content, str) or not content:
        logger.error(f"Provider response missing message content: {envelope}")
        raise UpstreamShapeError("Provider response missing message content")
    return content


def decode_content(content: str) -> Any:
    """Second stage: the model's text output must itself be JSON. No repair is attempted."""
    try:
        return json.loads(content, parse_constant=_reject_constant)
    except ValueError as e:
        logger.error(f"Model returned invalid JSON: {content[:500]}")
        raise UpstreamContentError("Model returned invalid JSON", content) from e


# ------------------------------------------------------------
# Client
# ------------------------------------------------------------
class UpstreamClient:
    """One chat-completion call per `complete()`; no retries, no caching."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient | None = None):
        self.model = settings.model
        self._client = AsyncOpenAI(
            api_key=settings.api_key.get_secret_value(),
            base_url=settings.base_url,
            timeout=settings.timeout,
            max_retries=0,
            http_client=http_client,
        )
        logger.info(f"Upstream client configured for {settings.base_url} (model={self.model}).")

    async def complete(self, prompt: PromptTemplate, payload: Any) -> Any:
        logger.debug(f"Calling provider for {prompt.purpose.value} with payload: {payload}")

        try:
            raw = await self._client.chat.completions.with_raw_response.create(
                model=self.model,
                messages=build_messages(prompt, payload),
            )
        except openai.APIStatusError as e:
            body = e.response.text
            logger.error(f"Provider HTTP error: {e.status_code} {body}")
            raise UpstreamTransportError(e.status_code, body) from e
        except openai.APIConnectionError as e:
            logger.error(f"Provider request failed: {e}")
            raise UpstreamTransportError(None, str(e)) from e

        body = raw.http_response.text
        logger.debug(f"Provider raw response: {body}")

        envelope = decode_envelope(body)
        result = decode_content(extract_content(envelope))
        logger.debug(f"Parsed provider JSON: {result}")
        return result

    async def aclose(self) -> None:
        await self._client.close()
