#!/usr/bin/env python3
"""
Generation module for the Naapim decision backend.

This module sends prompts to the configured LLM provider and returns parsed
JSON. Supported providers:
- openai (default): OpenAI-compatible chat completions with JSON response format
- gemini: Google Generative Language API (generateContent)
"""

import json
import re
import requests
from typing import Any, Dict, Optional
from .config import Config
from ..utils.logger import get_logger

logger = get_logger()


class GenerationError(Exception):
    """Raised when the provider call fails or its reply cannot be used."""


def extract_json(text_block: str) -> Optional[Dict[str, Any]]:
    """Parse the first {...} block of a model reply, tolerating prose around it."""
    if not text_block:
        return None
    try:
        parsed = json.loads(text_block)
        if isinstance(parsed, dict):
            return parsed
    except ValueError:
        pass
    match = re.search(r"\{[\s\S]*\}", text_block)
    if not match:
        return None
    try:
        parsed = json.loads(match.group())
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


class GenerationClient:
    """Client for JSON answers from the configured LLM provider."""

    def __init__(self, provider: str = None, api_key: str = None, model: str = None):
        """Initialize the generation client.

        Raises:
            ValueError: if no API key is configured for the provider
        """
        self.provider = (provider or Config.LLM_PROVIDER).lower()
        if self.provider == "gemini":
            self.api_key = api_key or Config.GEMINI_API_KEY
            self.model = model or Config.GEMINI_MODEL
            self.api_base_url = f"https://generativelanguage.googleapis.com/v1beta/models/{self.model}:generateContent"
        else:
            self.provider = "openai"
            self.api_key = api_key or Config.OPENAI_API_KEY
            self.model = model or Config.OPENAI_MODEL
            self.api_base_url = f"{Config.OPENAI_BASE_URL.rstrip('/')}/chat/completions"

        if not self.api_key:
            raise ValueError(f"{self.provider} API key is required")

    def generate_text(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: Optional[int] = None,
        json_mode: bool = True,
    ) -> str:
        """
        Generate a raw reply.

        Args:
            system_prompt: Instructions for the model
            user_prompt: The user turn
            temperature: Sampling temperature
            max_tokens: Optional cap on the reply length
            json_mode: Ask the provider for a JSON object reply

        Returns:
            Reply text
        """
        logger.debug(f"[LLM] {self.provider}/{self.model} prompt length: {len(system_prompt) + len(user_prompt)}")
        try:
            if self.provider == "gemini":
                return self._call_gemini(system_prompt, user_prompt, temperature, max_tokens, json_mode)
            return self._call_openai(system_prompt, user_prompt, temperature, max_tokens, json_mode)
        except requests.exceptions.RequestException as e:
            if getattr(e, "response", None) is not None:
                logger.error(f"[LLM] {self.provider} error {e.response.status_code}: {e.response.text[:300]}")
            raise GenerationError(f"Error generating answer: {e}") from e
        except (KeyError, IndexError, TypeError) as e:
            raise GenerationError(f"Error parsing generation response: {e}") from e

    def generate_json(self, system_prompt: str, user_prompt: str, **kwargs) -> Dict[str, Any]:
        """Generate a reply and parse it as a JSON object."""
        raw = self.generate_text(system_prompt, user_prompt, **kwargs)
        parsed = extract_json(raw)
        if parsed is None:
            raise GenerationError(f"Model reply is not a JSON object: {raw[:200]}")
        return parsed

    def _call_openai(self, system_prompt, user_prompt, temperature, max_tokens, json_mode) -> str:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": temperature,
        }
        if max_tokens:
            payload["max_tokens"] = max_tokens
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        response = requests.post(self.api_base_url, headers=headers, json=payload, timeout=Config.LLM_TIMEOUT)
        response.raise_for_status()
        data = response.json()
        return data["choices"][0]["message"]["content"] or ""

    def _call_gemini(self, system_prompt, user_prompt, temperature, max_tokens, json_mode) -> str:
        generation_config = {"temperature": temperature}
        if max_tokens:
            generation_config["maxOutputTokens"] = max_tokens
        if json_mode:
            generation_config["responseMimeType"] = "application/json"
        payload = {
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "contents": [{"role": "user", "parts": [{"text": user_prompt}]}],
            "generationConfig": generation_config,
        }

        response = requests.post(
            self.api_base_url,
            params={"key": self.api_key},
            headers={"Content-Type": "application/json"},
            json=payload,
            timeout=Config.LLM_TIMEOUT,
        )
        response.raise_for_status()
        data = response.json()
        return data["candidates"][0]["content"]["parts"][0]["text"].strip()


def build_client() -> Optional[GenerationClient]:
    """Return a client, or None when no API key is configured."""
    try:
        return GenerationClient()
    except ValueError as e:
        logger.info(f"[LLM] Generation disabled: {e}")
        return None
