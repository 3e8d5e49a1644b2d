"""
Text-generation client.

Talks to an OpenAI-compatible chat completions endpoint (OpenRouter by
default). Calls are single-shot: failures are reported, never retried.
"""

from typing import Optional

import requests

from .config import Config
from .errors import ConfigError, UpstreamError
from .utils import Timer, setup_logger, truncate_string


class LLMClient:
    """
    Handles text-generation calls.

    Responsibilities:
    - Building the chat completion request
    - Enforcing the per-call timeout
    - Mapping transport and response errors to UpstreamError
    """

    def __init__(self, config: Config, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()
        self.logger = setup_logger("llm_client", config.log_dir)

    def _headers(self) -> dict:
        if not self.config.openrouter_api_key:
            raise ConfigError("OPENROUTER_API_KEY not set")
        return {
            "Authorization": f"Bearer {self.config.openrouter_api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _model(self) -> str:
        if not self.config.openrouter_model_name:
            raise ConfigError("OPENROUTER_MODEL_NAME not set")
        return self.config.openrouter_model_name

    def complete(self, prompt: str, timeout: float) -> str:
        """
        Send a single-message prompt and return the generated text.

        Args:
            prompt: Full prompt text
            timeout: Seconds to wait for the response

        Returns:
            The content of the first choice

        Raises:
            ConfigError: If the API key or model is not configured
            UpstreamError: On transport errors, non-2xx status or bad payload
        """
        headers = self._headers()
        body = {
            "model": self._model(),
            "messages": [{"role": "user", "content": prompt}],
        }
        url = f"{self.config.openrouter_base_url.rstrip('/')}/chat/completions"

        try:
            with Timer("LLM call") as timer:
                response = self.session.post(url, json=body, headers=headers, timeout=timeout)
        except requests.exceptions.Timeout:
            self.logger.warning(f"LLM call timed out after {timeout}s")
            raise UpstreamError(f"AI model did not respond within {timeout:g}s")
        except requests.exceptions.RequestException as e:
            self.logger.error(f"LLM request failed: {e}")
            raise UpstreamError(f"Error calling AI model: {e}")

        if response.status_code != 200:
            self.logger.error(
                f"LLM call returned {response.status_code}: "
                f"{truncate_string(response.text, 200)}"
            )
            raise UpstreamError(f"AI model returned status {response.status_code}")

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            self.logger.error(f"Unexpected LLM payload: {e}")
            raise UpstreamError("AI model returned an unexpected payload")

        if content is None:
            raise UpstreamError("AI model returned an empty completion")

        self.logger.info(f"{timer} ({len(content)} chars)")
        return content
