"""Shared plumbing for the OpenAI-compatible chat-completions calls."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Optional

import httpx
import openai

from .base import AIResponseError
from ..core.config import Settings

log = logging.getLogger(__name__)

_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def build_openai_client(settings: Settings) -> Optional[openai.OpenAI]:
    """Construct the chat client once per app; None means "fallback only"."""
    if not settings.ai_enabled:
        log.info("AI valuation disabled (provider=%s, key set=%s)",
                 settings.MODEL_PROVIDER, bool(settings.OPENAI_API_KEY))
        return None
    return openai.OpenAI(
        api_key=settings.OPENAI_API_KEY,
        base_url=settings.OPENAI_BASE_URL,
        http_client=httpx.Client(timeout=settings.OPENAI_TIMEOUT_SECONDS),
    )


def parse_json_object(content: Optional[str]) -> Dict[str, Any]:
    """Decode a model reply that should be a single JSON object.

    Models sometimes wrap JSON in a ```json fence even when told not to,
    so the fence is stripped before decoding.
    """
    if not content or not content.strip():
        raise AIResponseError("No response from AI")
    text = content.strip()
    fenced = _FENCE.match(text)
    if fenced:
        text = fenced.group(1)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise AIResponseError("Failed to parse AI response as JSON") from exc
    if not isinstance(data, dict):
        raise AIResponseError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def chat_json(
    client: Any,
    model: str,
    system: str,
    prompt: str,
    temperature: float,
    max_tokens: int,
) -> Dict[str, Any]:
    """Run one chat completion and return its reply decoded as a JSON object.

    Parameters
    ----------
    client:
        An ``openai.OpenAI`` instance (or anything exposing
        ``chat.completions.create`` with the same shape).
    model:
        Model name passed through to the endpoint.

    Raises
    ------
    AIResponseError
        On any SDK/transport failure or when the reply is not a JSON object.
    """
    try:
        completion = client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
        )
    except openai.OpenAIError as exc:
        raise AIResponseError("Error invoking the chat completions API") from exc

    choices = getattr(completion, "choices", None) or []
    if not choices:
        raise AIResponseError("No response from AI")
    return parse_json_object(choices[0].message.content)
