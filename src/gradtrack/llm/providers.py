from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from openai import OpenAI, OpenAIError

from gradtrack.config import Settings
from gradtrack.errors import AssistantUnavailableError, ModelOutputError, ServiceError
from gradtrack.types import ModelResponse, ToolCall

logger = logging.getLogger(__name__)

_OBJECT_PATTERN = re.compile(r"\{.*\}", re.DOTALL)


@dataclass(slots=True)
class ProviderConfig:
    name: str
    base_url: str
    api_key: str
    timeout_sec: int


class LLMProvider:
    def __init__(self, config: ProviderConfig):
        self.config = config
        self.client = OpenAI(
            base_url=config.base_url,
            api_key=config.api_key,
            timeout=float(config.timeout_sec),
        )

    def complete_chat(
        self,
        *,
        model: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
    ) -> ModelResponse:
        request: dict[str, Any] = {"model": model, "messages": messages}
        if tools:
            request["tools"] = tools

        try:
            response = self.client.chat.completions.create(**request)
        except OpenAIError as exc:
            logger.error("Model request failed provider=%s error=%s", self.config.name, exc)
            raise ServiceError("Model request failed", details=str(exc)) from exc

        raw = response.model_dump() if hasattr(response, "model_dump") else {}
        if not isinstance(raw, dict):
            raw = {"raw": raw}
        return ModelResponse(
            content=self._extract_chat_text(response),
            tool_calls=self._extract_tool_calls(response),
            raw=raw,
        )

    def complete_text(self, *, model: str, prompt: str) -> ModelResponse:
        return self.complete_chat(model=model, messages=[{"role": "user", "content": prompt}])

    def complete_json(self, *, model: str, prompt: str) -> dict[str, Any]:
        text_response = self.complete_text(model=model, prompt=prompt)
        return parse_json(text_response.content)

    @staticmethod
    def _first_message(response: Any) -> Any:
        choices = getattr(response, "choices", None) or []
        if not choices:
            return None
        return getattr(choices[0], "message", None)

    @classmethod
    def _extract_chat_text(cls, response: Any) -> str:
        message = cls._first_message(response)
        if message is None:
            return ""

        content = getattr(message, "content", "")
        if isinstance(content, str):
            return content
        if content is None:
            return ""
        return str(content)

    @classmethod
    def _extract_tool_calls(cls, response: Any) -> list[ToolCall]:
        message = cls._first_message(response)
        calls: list[ToolCall] = []
        for index, item in enumerate(getattr(message, "tool_calls", None) or []):
            function = getattr(item, "function", None)
            if function is None:
                continue
            calls.append(
                ToolCall(
                    id=getattr(item, "id", None) or f"call_{index}",
                    name=function.name,
                    arguments=function.arguments or "{}",
                )
            )
        return calls


def parse_json(content: str) -> dict[str, Any]:
    """Pull a JSON object out of model output.

    Fenced ```json blocks win; otherwise the outermost ``{...}`` span is used.
    Anything that does not decode to an object raises ``ModelOutputError``.
    """
    candidate = content.strip()
    if not candidate:
        raise ModelOutputError("Model returned an empty response")

    if "```" in candidate:
        parts = candidate.split("```")
        for part in parts:
            part = part.strip()
            if part.startswith("json"):
                part = part[4:].strip()
            if part.startswith("{") and part.endswith("}"):
                candidate = part
                break

    if not (candidate.startswith("{") and candidate.endswith("}")):
        match = _OBJECT_PATTERN.search(candidate)
        if match:
            candidate = match.group(0)

    try:
        value = json.loads(candidate)
    except json.JSONDecodeError as exc:
        logger.warning("Failed to parse JSON model output")
        raise ModelOutputError(details=str(exc)) from exc

    if not isinstance(value, dict):
        raise ModelOutputError("Model output is not a JSON object")
    return value


def parse_tool_arguments(arguments: str | None) -> dict[str, Any]:
    if arguments is None or not arguments.strip():
        return {}
    return parse_json(arguments)


@lru_cache(maxsize=4)
def _cached_provider(base_url: str, api_key: str, timeout_sec: int) -> LLMProvider:
    return LLMProvider(
        ProviderConfig(name="assistant", base_url=base_url, api_key=api_key, timeout_sec=timeout_sec)
    )


def build_provider(settings: Settings) -> LLMProvider:
    if not settings.model_api_key:
        raise AssistantUnavailableError()
    return _cached_provider(settings.llm_base_url, settings.model_api_key, settings.llm_timeout_sec)
