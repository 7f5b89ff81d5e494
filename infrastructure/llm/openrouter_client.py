# infrastructure/llm/openrouter_client.py
"""Chat-completions client for the OpenRouter text-generation service.

Transport only: the caller owns the prompt, the schema and the fallback.
"""

from typing import Any, Dict, Optional

import httpx

from domain.errors import MalformedUpstreamResponseError, UpstreamUnavailableError
from shared.logging import logger

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "openai/gpt-4o-mini"


class OpenRouterClient:
    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        referer: str = "https://quickgig.fun",
        title: str = "QUICKGIG Intent Detector",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.referer = referer
        self.title = title
        self._transport = transport

    async def complete(
        self,
        system_prompt: str,
        user_message: str,
        response_format: Optional[str] = "json",
        temperature: float = 0.3,
    ) -> str:
        """Send one system + user exchange and return the assistant content.

        Raises:
            UpstreamUnavailableError: missing API key, transport failure or a
                non-success status (401, 429, 5xx...).
            MalformedUpstreamResponseError: the body is not a chat completion.
        """
        if not self.api_key:
            raise UpstreamUnavailableError("OPENROUTER_API_KEY not configured")

        body: Dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message},
            ],
            "temperature": temperature,
        }
        if response_format == "json":
            body["response_format"] = {"type": "json_object"}

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "HTTP-Referer": self.referer,
            "X-Title": self.title,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(f"{self.base_url}/chat/completions", json=body, headers=headers)
        except httpx.HTTPError as e:
            raise UpstreamUnavailableError(f"OpenRouter request failed: {e}") from e

        if resp.status_code >= 400:
            logger.warning("OpenRouter returned error status",
                           status_code=resp.status_code,
                           model=self.model)
            raise UpstreamUnavailableError(f"OpenRouter API error: {resp.status_code} {resp.reason_phrase}")

        try:
            content = resp.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise MalformedUpstreamResponseError(f"Unexpected completion shape: {e}") from e

        if not isinstance(content, str):
            raise MalformedUpstreamResponseError("Completion content is not text")

        return strip_code_fences(content)


def strip_code_fences(content: str) -> str:
    content = content.strip()
    if not content.startswith("```"):
        return content
    lines = content.splitlines()
    end = len(lines)
    for i in range(len(lines) - 1, 0, -1):
        if lines[i].strip() == "```":
            end = i
            break
    return "\n".join(lines[1:end]).strip()
