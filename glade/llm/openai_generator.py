"""OpenAI chat-completions adapter with native tool calling."""

from __future__ import annotations

import json
from typing import Any

import openai

from glade.llm.base import (
    GeneratorCallError,
    GeneratorConfig,
    GeneratorContext,
    Narration,
    Proposal,
    ToolCall,
    ToolResult,
)
from glade.llm.prompts import narration_instruction


class OpenAIGenerator:
    def __init__(self, config: GeneratorConfig, *, client: Any | None = None) -> None:
        self.config = config
        self._client = client or openai.OpenAI(timeout=config.timeout)

    def propose(self, context: GeneratorContext) -> Proposal:
        message = self._complete(
            messages=context.messages,
            tools=[_function_tool(tool) for tool in context.tools],
            temperature=context.temperature,
        )
        raw_calls = getattr(message, "tool_calls", None) or []
        calls = [_parse_call(call) for call in raw_calls]
        return Proposal(narration=_text(message), tool_calls=calls)

    def narrate(
        self, context: GeneratorContext, results: list[ToolResult]
    ) -> Narration:
        messages: list[dict[str, Any]] = [
            *context.messages,
            {
                "role": "assistant",
                "content": None,
                "tool_calls": [
                    {
                        "id": result.call.id,
                        "type": "function",
                        "function": {
                            "name": result.call.name,
                            "arguments": json.dumps(result.call.arguments),
                        },
                    }
                    for result in results
                ],
            },
        ]
        for result in results:
            messages.append(
                {
                    "role": "tool",
                    "tool_call_id": result.call.id,
                    "content": json.dumps(result.output, ensure_ascii=False),
                }
            )
        instruction = narration_instruction(context.mode)
        messages.append({"role": "system", "content": instruction})
        message = self._complete(messages=messages, temperature=context.temperature)
        return Narration(narration=_text(message))

    def _complete(self, **kwargs: Any) -> Any:
        if not kwargs.get("tools"):
            kwargs.pop("tools", None)
        try:
            response = self._client.chat.completions.create(
                model=self.config.model_id, **kwargs
            )
        except openai.OpenAIError as exc:
            raise GeneratorCallError(f"OpenAI request failed: {exc}") from exc
        choices = getattr(response, "choices", None) or []
        if not choices:
            raise GeneratorCallError("OpenAI response had no choices")
        return choices[0].message


def _function_tool(tool: dict[str, Any]) -> dict[str, Any]:
    return {"type": "function", "function": tool}


def _parse_call(call: Any) -> ToolCall:
    function = call.function
    raw = function.arguments or "{}"
    try:
        arguments = json.loads(raw) if isinstance(raw, str) else dict(raw)
    except json.JSONDecodeError as exc:
        raise GeneratorCallError(
            f"Tool call {function.name} had malformed arguments"
        ) from exc
    if not isinstance(arguments, dict):
        arguments = {}
    return ToolCall(id=call.id, name=function.name, arguments=arguments)


def _text(message: Any) -> str | None:
    content = getattr(message, "content", None)
    if not content:
        return None
    return str(content).strip() or None
