"""Generator client interface and shared message types."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_TIMEOUT = 30.0


class GeneratorCallError(RuntimeError):
    """Transport or parse failure while talking to a generator."""


class Mode(str, Enum):
    WORLD = "world"
    DIALOGUE = "dialogue"


class ToolCall(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class ToolResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    call: ToolCall
    output: dict[str, Any]


class Proposal(BaseModel):
    model_config = ConfigDict(extra="forbid")

    narration: str | None = None
    tool_calls: list[ToolCall] = Field(default_factory=list)


class Narration(BaseModel):
    model_config = ConfigDict(extra="forbid")

    narration: str | None = None


@dataclass(frozen=True)
class GeneratorContext:
    mode: Mode
    messages: list[dict[str, str]]
    tools: list[dict[str, Any]] = field(default_factory=list)
    temperature: float = 0.8

    def with_message(self, role: str, content: str) -> "GeneratorContext":
        message = {"role": role, "content": content}
        return replace(self, messages=[*self.messages, message])


@dataclass(frozen=True)
class GeneratorConfig:
    model_id: str
    timeout: float = DEFAULT_TIMEOUT


class GeneratorClient(Protocol):
    def propose(self, context: GeneratorContext) -> Proposal:
        """Return narration and the tool calls the generator wants applied."""

    def narrate(
        self, context: GeneratorContext, results: list[ToolResult]
    ) -> Narration:
        """Return narration written after seeing the tool results."""
