"""
LLM Inference Wrapper
Chat-completion client for Llama API / OpenAI-compatible endpoints
"""

import requests
from typing import Dict, List, Optional
from spacerag.core.logger import logger
from spacerag.core.exception import ProviderError


class LLMClient:
    def __init__(
        self,
        api_url: str,
        api_key: Optional[str] = None,
        model: str = "llama3.2-3b",
        timeout: float = 60.0,
        temperature: float = 0.2,
        max_tokens: int = 512,
    ):
        """Initialize client without raising when the API key is missing.
        The client raises `ProviderError` when called without a configured key.
        """
        self.api_url = api_url
        self.model = model
        self.timeout = timeout
        self.temperature = temperature
        self.max_tokens = max_tokens
        if api_key:
            self.headers = {
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            }
        else:
            self.headers = None
            logger.warning("LLM_API_KEY not configured; LLMClient will be inactive until configured")

    def _build_payload(self, messages: List[Dict[str, str]]) -> Dict:
        return {
            "model": self.model,
            "messages": messages,
            "stream": False,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

    def chat(self, messages: List[Dict[str, str]]) -> str:
        if not self.headers:
            raise ProviderError("LLM_API_KEY not configured")

        payload = self._build_payload(messages)
        logger.info(f"Sending {len(messages)} messages to {self.model}")

        try:
            res = requests.post(self.api_url, headers=self.headers, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.exception("LLM request failed")
            raise ProviderError(e) from e

        if res.status_code != 200:
            logger.error(f"LLM inference failed: {res.text}")
            raise ProviderError(f"LLM Inference Error {res.status_code}")

        try:
            content = res.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.exception("Malformed LLM response")
            raise ProviderError(f"Malformed LLM response: {e}") from e

        if not isinstance(content, str):
            raise ProviderError("LLM response has no message content")

        logger.info(f"LLM returned {len(content)} chars")
        return content

    def generate(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})
        return self.chat(messages)
