"""Remote text generation over an OpenAI-compatible chat-completions API."""

from __future__ import annotations

import logging
import os
from typing import Protocol, runtime_checkable

import requests

from pianodrill.config import (
    REMOTE_API_KEY_ENV,
    REMOTE_BASE_URL,
    REMOTE_MODEL,
    REMOTE_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)

_SYSTEM_PROMPT = (
    "You are a piano teacher. Answer only with practice items, "
    "one per line, in the exact format requested."
)


class RemoteGenerationError(Exception):
    """Raised when the remote service fails or returns an unusable reply."""


@runtime_checkable
class TextGenerator(Protocol):
    """Anything that turns a prompt into free-form text."""
    def generate(self, prompt: str) -> str: ...


class ChatCompletionsClient:
    """Minimal client for ``POST {base_url}/chat/completions`` (Groq by default)."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = REMOTE_BASE_URL,
        model: str = REMOTE_MODEL,
        timeout: float = REMOTE_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ) -> None:
        self.api_key = api_key or os.environ.get(REMOTE_API_KEY_ENV)
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self._http = session or requests.Session()

        if not self.api_key:
            logger.warning("%s is not set; focused practice requests will fail", REMOTE_API_KEY_ENV)

    def generate(self, prompt: str) -> str:
        if not self.api_key:
            raise RemoteGenerationError(f"{REMOTE_API_KEY_ENV} is not set")

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": _SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": 0.7,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            response = self._http.post(
                f"{self.base_url}/chat/completions",
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as exc:
            raise RemoteGenerationError(f"Request failed: {exc}") from exc
        except ValueError as exc:
            raise RemoteGenerationError(f"Response is not JSON: {exc}") from exc

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise RemoteGenerationError(f"Unexpected response shape: {exc}") from exc

        if not isinstance(content, str):
            raise RemoteGenerationError("Response content is not text")
        return content
