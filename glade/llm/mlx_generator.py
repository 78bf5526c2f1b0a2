"""mlx-lm adapter for real local runs.

Local models get the toolset in the prompt and answer with one JSON object
`{"narration": "...", "tool_calls": [{"name": "...", "arguments": {...}}]}`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from glade.llm.base import (
    GeneratorCallError,
    GeneratorConfig,
    GeneratorContext,
    Narration,
    Proposal,
    ToolCall,
    ToolResult,
)
from glade.llm.prompts import extract_json, narration_instruction


@dataclass
class MlxGenerator:
    config: GeneratorConfig
    max_tokens: int = 1024

    def __post_init__(self) -> None:
        from mlx_lm import load

        self._model, self._tokenizer = load(self.config.model_id)

    def propose(self, context: GeneratorContext) -> Proposal:
        response = self._generate(_build_propose_prompt(context))
        return parse_proposal(response)

    def narrate(
        self, context: GeneratorContext, results: list[ToolResult]
    ) -> Narration:
        response = self._generate(_build_narrate_prompt(context, results))
        text = response.strip()
        return Narration(narration=text or None)

    def _generate(self, prompt: str) -> str:
        from mlx_lm import generate

        try:
            return generate(
                self._model, self._tokenizer, prompt=prompt, max_tokens=self.max_tokens
            )
        except (RuntimeError, ValueError) as exc:
            raise GeneratorCallError(f"mlx generation failed: {exc}") from exc


def parse_proposal(text: str) -> Proposal:
    data = extract_json(text)
    if data is None:
        raise GeneratorCallError("Model output did not contain a JSON object")
    raw_calls = data.get("tool_calls") or []
    if not isinstance(raw_calls, list):
        raise GeneratorCallError("tool_calls must be a list")
    calls = []
    for index, raw in enumerate(raw_calls, start=1):
        if not isinstance(raw, dict) or not raw.get("name"):
            raise GeneratorCallError(f"Tool call {index} has no name")
        arguments = raw.get("arguments") or {}
        if isinstance(arguments, str):
            try:
                arguments = json.loads(arguments)
            except json.JSONDecodeError as exc:
                raise GeneratorCallError(f"Tool call {index} arguments") from exc
        calls.append(
            ToolCall(
                id=str(raw.get("id") or f"call-{index}"),
                name=str(raw["name"]),
                arguments=arguments if isinstance(arguments, dict) else {},
            )
        )
    narration = data.get("narration")
    return Proposal(narration=str(narration) if narration else None, tool_calls=calls)


def _build_propose_prompt(context: GeneratorContext) -> str:
    tools = json.dumps(context.tools, indent=2, ensure_ascii=True)
    return (
        f"{_render_messages(context.messages)}\n"
        "Available functions:\n"
        f"{tools}\n"
        "Return exactly one JSON object:\n"
        '{ "narration": "...", "tool_calls": [{"name": "...", "arguments": {}}] }\n'
        "Use an empty tool_calls list when nothing else needs to change.\n"
        "Only include the JSON object in the response.\n"
    )


def _build_narrate_prompt(context: GeneratorContext, results: list[ToolResult]) -> str:
    outputs: list[dict[str, Any]] = [
        {"name": result.call.name, "output": result.output} for result in results
    ]
    return (
        f"{_render_messages(context.messages)}\n"
        f"Function results:\n{json.dumps(outputs, ensure_ascii=True)}\n"
        f"{narration_instruction(context.mode)} Reply with plain text only.\n"
    )


def _render_messages(messages: list[dict[str, str]]) -> str:
    lines = [f"[{message['role']}] {message['content']}" for message in messages]
    return "\n".join(lines)
