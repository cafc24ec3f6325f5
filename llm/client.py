"""
Completion client for the OpenAI-compatible chat API.

Thin wrapper over the OpenAI SDK: one method for JSON-object answers,
one for free text. Every call is logged with log_llm_call. Errors
propagate; callers decide on fallbacks.
"""

import json
import time
from typing import Any, Dict, Optional

from openai import OpenAI

from core.structured_logging import get_logger, log_llm_call

# Module-level logger
_logger = get_logger("llm.client")

DEFAULT_MODEL = "gemini-2.0-flash"


class LLMResponseError(ValueError):
    """Model answered with something that is not the expected shape."""
    pass


def create_openai_client(settings) -> Optional[OpenAI]:
    """
    Build an OpenAI client from Settings.

    Returns:
        OpenAI client, or None when no API key is configured
    """
    if not settings.openai_api_key:
        _logger.info(
            "No completion API key configured, AI features disabled",
            extra={"event": "llm_disabled"},
        )
        return None
    return OpenAI(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
    )


class LLMClient:
    """
    Chat completion helper.

    Example:
        llm = LLMClient(OpenAI(api_key=...), model="gemini-2.0-flash")
        data = llm.complete_json(system_prompt, "headphones under $100")
    """

    def __init__(self, client, model: str = DEFAULT_MODEL):
        self.client = client
        self.model = model

    def _complete(
        self,
        system: str,
        user: str,
        temperature: float,
        endpoint: str,
        json_mode: bool,
        session_id: Optional[str] = None,
    ) -> str:
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "temperature": temperature,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        start = time.perf_counter()
        try:
            completion = self.client.chat.completions.create(**kwargs)
        except Exception as e:
            log_llm_call(
                model=self.model,
                endpoint=endpoint,
                latency_ms=(time.perf_counter() - start) * 1000,
                success=False,
                error=str(e),
                session_id=session_id,
            )
            raise

        usage = getattr(completion, "usage", None)
        log_llm_call(
            model=self.model,
            endpoint=endpoint,
            latency_ms=(time.perf_counter() - start) * 1000,
            tokens_used=getattr(usage, "total_tokens", None),
            session_id=session_id,
        )

        if not completion.choices:
            return ""
        return completion.choices[0].message.content or ""

    def complete_json(
        self,
        system: str,
        user: str,
        temperature: float = 0.2,
        endpoint: str = "complete_json",
        session_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Ask for a JSON object.

        Raises:
            LLMResponseError: If the answer is not valid JSON or not an object
        """
        content = self._complete(system, user, temperature, endpoint, True, session_id)
        try:
            data = json.loads(content or "{}")
        except json.JSONDecodeError as e:
            raise LLMResponseError(f"Invalid JSON from model: {e}") from e
        if not isinstance(data, dict):
            raise LLMResponseError(f"Expected a JSON object, got {type(data).__name__}")
        return data

    def complete_text(
        self,
        system: str,
        user: str,
        temperature: float = 0.7,
        endpoint: str = "complete_text",
        session_id: Optional[str] = None,
    ) -> str:
        """Ask for free text. Returns "" when the model answers with nothing."""
        return self._complete(system, user, temperature, endpoint, False, session_id).strip()
