"""
Groq chat completions client (OpenAI-compatible API) for the dengue assistant.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)


class GroqClientError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[Any] = None):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class GroqClient:
    def __init__(
        self,
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_url = api_url or settings.GROQ_API_URL
        self.api_key = api_key or settings.GROQ_API_KEY
        self.model = model or settings.GROQ_MODEL
        self.timeout = timeout or settings.ASSISTANT_TIMEOUT

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def complete(self, messages: List[Dict[str, str]]) -> str:
        """Send the conversation, return the assistant's reply text."""
        if not self.configured:
            raise GroqClientError("GROQ_API_KEY not configured")

        body = {
            "model": self.model,
            "messages": messages,
            "temperature": 0.4,
            "max_tokens": 800,
            "top_p": 0.85,
            "stream": False,
        }
        try:
            with httpx.Client(timeout=self.timeout) as client:
                r = client.post(self.api_url, headers=self._headers(), json=body)
        except httpx.RequestError as e:
            logger.exception("Groq request error")
            raise GroqClientError(str(e))

        if r.status_code >= 400:
            logger.warning("Groq error %s: %s", r.status_code, r.text[:500] if r.text else "")
            raise GroqClientError(f"Groq completion failed: {r.status_code}", status_code=r.status_code, body=r.text)

        try:
            return r.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise GroqClientError(f"Unexpected Groq response: {e}", status_code=r.status_code, body=r.text)


groq_client = GroqClient()
