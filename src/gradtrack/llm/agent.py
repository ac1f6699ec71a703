from __future__ import annotations

import json
import logging
from datetime import date
from typing import Any

from gradtrack.config import Settings, get_settings
from gradtrack.llm.prompts import EMPTY_REPLY_FALLBACK, SYSTEM_PROMPT, TOOL_LIMIT_FALLBACK
from gradtrack.llm.providers import LLMProvider, parse_tool_arguments
from gradtrack.llm.tools import ToolBridge, openai_tool_schema
from gradtrack.types import ChatResult, ChatTurn, ModelResponse

logger = logging.getLogger(__name__)


class ChatAgent:
    """Runs one user turn against the model, executing tool calls until it answers in text.

    Tool rounds are capped by ``chat_max_tool_rounds``; if the model is still
    asking for tools after the last round, whatever text it produced (or a
    fixed fallback) is returned and the result is marked ``truncated``.
    """

    def __init__(self, *, provider: LLMProvider, tools: ToolBridge, settings: Settings | None = None):
        self.provider = provider
        self.tools = tools
        self.settings = settings or get_settings()
        self.tool_schema = openai_tool_schema()

    def build_messages(self, message: str, history: list[ChatTurn]) -> list[dict[str, Any]]:
        system_prompt = SYSTEM_PROMPT.format(
            target_intake=self.settings.target_intake,
            today=date.today().isoformat(),
        )
        messages: list[dict[str, Any]] = [{"role": "system", "content": system_prompt}]
        messages.extend({"role": turn.role, "content": turn.content} for turn in history)
        messages.append({"role": "user", "content": message})
        return messages

    def chat(self, message: str, history: list[ChatTurn] | None = None) -> ChatResult:
        history = list(history or [])
        messages = self.build_messages(message, history)
        executed: list[str] = []
        rounds = 0

        response = self._complete(messages)
        while response.tool_calls:
            if rounds >= self.settings.chat_max_tool_rounds:
                logger.warning(
                    "Tool round limit reached (%s); pending calls: %s",
                    rounds,
                    [call.name for call in response.tool_calls],
                )
                reply = response.content.strip() or TOOL_LIMIT_FALLBACK
                return self._finish(message, history, reply, executed, rounds, truncated=True)

            rounds += 1
            messages.append(assistant_tool_message(response))
            for call in response.tool_calls:
                arguments = parse_tool_arguments(call.arguments)
                logger.info("Executing tool %s args=%s", call.name, arguments)
                result = self.tools.execute(call.name, arguments)
                executed.append(call.name)
                messages.append(
                    {
                        "role": "tool",
                        "tool_call_id": call.id,
                        "content": json.dumps(result, ensure_ascii=False, default=str),
                    }
                )
            response = self._complete(messages)

        reply = response.content.strip() or EMPTY_REPLY_FALLBACK
        return self._finish(message, history, reply, executed, rounds)

    def _complete(self, messages: list[dict[str, Any]]) -> ModelResponse:
        return self.provider.complete_chat(
            model=self.settings.llm_model,
            messages=messages,
            tools=self.tool_schema,
        )

    @staticmethod
    def _finish(
        message: str,
        history: list[ChatTurn],
        reply: str,
        executed: list[str],
        rounds: int,
        *,
        truncated: bool = False,
    ) -> ChatResult:
        updated = history + [ChatTurn(role="user", content=message), ChatTurn(role="assistant", content=reply)]
        return ChatResult(message=reply, history=updated, tool_calls=executed, rounds=rounds, truncated=truncated)


def assistant_tool_message(response: ModelResponse) -> dict[str, Any]:
    return {
        "role": "assistant",
        "content": response.content or None,
        "tool_calls": [
            {
                "id": call.id,
                "type": "function",
                "function": {"name": call.name, "arguments": call.arguments},
            }
            for call in response.tool_calls
        ],
    }
