"""
LLM inference service for Memolil.

Talks to an Ollama server (settings.ollama_url, /api/chat) in JSON mode.
The model is settings.llm_model; it must be pulled in Ollama already.

Usage:
    result = await chat_json(system_prompt, user_prompt)
"""
from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from memolil.config import settings

logger = logging.getLogger(__name__)


class LLMUnavailableError(Exception):
    """Raised when no model is configured or the Ollama server cannot serve it."""


async def _resolve_ollama_model() -> str | None:
    """
    Return the configured model name if Ollama reports it as installed.
    Model tags are compared by prefix ('qwen2.5' matches 'qwen2.5:3b').
    """
    model = settings.llm_model
    if not model:
        return None
    try:
        async with httpx.AsyncClient() as client:
            res = await client.get(f"{settings.ollama_url}/api/tags", timeout=1.5)
            if res.status_code != 200:
                return None
            ollama_tags: dict[str, list] = res.json()
        installed = {m["name"] for m in ollama_tags.get("models", [])}
    except Exception as e:
        logger.info("Ollama not reachable at %s: %s", settings.ollama_url, e)
        return None

    prefixes = {name.split(":")[0] for name in installed}
    if model in installed or model.split(":")[0] in prefixes:
        return model
    return None


async def chat_json(
    system_prompt: str,
    user_prompt: str,
    max_tokens: int = 1024,
) -> Any:
    """
    Send a chat request to Ollama expecting JSON output and return it parsed.

    Raises LLMUnavailableError if no usable model is available.
    Raises json.JSONDecodeError if the model returns invalid JSON (caller handles).
    """
    ollama_model = await _resolve_ollama_model()
    if not ollama_model:
        raise LLMUnavailableError(
            "No LLM configured: set MEMOLIL_LLM_MODEL to a model installed in Ollama."
        )

    payload = {
        "model": ollama_model,
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        "format": "json",
        "stream": False,
        "options": {"num_predict": max_tokens},
    }
    try:
        async with httpx.AsyncClient() as client:
            res = await client.post(
                f"{settings.ollama_url}/api/chat",
                json=payload,
                timeout=settings.llm_timeout,
            )
            res.raise_for_status()
            content = res.json()["message"]["content"]
        return json.loads(content)
    except json.JSONDecodeError:
        raise
    except Exception as e:
        raise LLMUnavailableError(f"Ollama inference failed: {e}") from e
