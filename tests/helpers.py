"""Shared test helpers: relative dates and OpenAI-shaped stand-ins for the model."""

from __future__ import annotations

import json
from datetime import date, timedelta
from types import SimpleNamespace
from typing import Any

from gradtrack.llm.providers import LLMProvider, ProviderConfig


def days_from_today(days: int) -> str:
    return (date.today() + timedelta(days=days)).isoformat()


def text_reply(content: str) -> SimpleNamespace:
    message = SimpleNamespace(content=content, tool_calls=None)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def tool_reply(*calls: tuple[str, dict[str, Any]], content: str | None = None) -> SimpleNamespace:
    tool_calls = [
        SimpleNamespace(
            id=f"call_{index}",
            type="function",
            function=SimpleNamespace(name=name, arguments=json.dumps(arguments)),
        )
        for index, (name, arguments) in enumerate(calls)
    ]
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class ScriptedCompletions:
    """Returns queued replies in order and records every request it receives."""

    def __init__(self, replies: list[Any]):
        self.replies = list(replies)
        self.requests: list[dict[str, Any]] = []

    def create(self, **kwargs: Any) -> Any:
        self.requests.append(json.loads(json.dumps(kwargs, default=str)))
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return reply


class FakeClient:
    def __init__(self, completions: ScriptedCompletions):
        self.chat = SimpleNamespace(completions=completions)


def scripted_provider(*replies: Any) -> tuple[LLMProvider, ScriptedCompletions]:
    provider = LLMProvider(
        ProviderConfig(name="test", base_url="http://localhost:9999/v1", api_key="dummy", timeout_sec=5)
    )
    completions = ScriptedCompletions(list(replies))
    provider.client = FakeClient(completions)
    return provider, completions
