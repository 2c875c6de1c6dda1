# core/llm_client.py
from typing import Dict, Any, Optional
import httpx
from config.settings import settings
import logging
from util.timing import timed

logger = logging.getLogger(__name__)


class CompletionTimeout(Exception):
    """The model did not answer within LLM_TIMEOUT_SECONDS."""


async def _post_json(
    url: str, headers: Dict[str, str], payload: Dict[str, Any], timeout: float
) -> Dict[str, Any]:
    """
    Make a JSON POST to `url`. Raises for non-2xx and transport errors
    (timeouts become CompletionTimeout). Returns {} when the body is not JSON.
    """
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            r = await client.post(url, headers=headers, json=payload)
            r.raise_for_status()
    except httpx.TimeoutException as e:
        raise CompletionTimeout(str(e) or type(e).__name__) from e
    try:
        data = r.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _content_text(data: Dict[str, Any]) -> str:
    """
    Pull the first text block out of a Messages API response body.
    """
    content = data.get("content") or []
    if content and isinstance(content, list):
        node = content[0]
        if isinstance(node, dict) and node.get("type") == "text":
            return node.get("text") or ""
    return ""


async def complete(
    prompt: str,
    *,
    temperature: float = 0.0,
    max_tokens: int = 800,
    timeout: Optional[float] = None,
) -> str:
    """
    Single-turn completion. The returned text is untrusted: callers parse it
    defensively.
    """
    headers = {
        "x-api-key": settings.ANTHROPIC_API_KEY,
        "anthropic-version": settings.ANTHROPIC_VERSION,
        "content-type": "application/json",
    }
    payload = {
        "model": settings.ANTHROPIC_MODEL,
        "max_tokens": max_tokens,
        "messages": [{"role": "user", "content": prompt}],
        "temperature": temperature,
    }
    with timed(logger, "ai.complete", model=settings.ANTHROPIC_MODEL, max_tokens=max_tokens):
        data = await _post_json(
            settings.ANTHROPIC_API_URL,
            headers,
            payload,
            timeout=timeout or settings.LLM_TIMEOUT_SECONDS,
        )
    text = _content_text(data)
    logger.info("ai.complete.result chars=%d stop=%s", len(text), data.get("stop_reason"))
    return text
