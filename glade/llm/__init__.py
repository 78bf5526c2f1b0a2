"""Generator clients and the tool-calling orchestration loop."""

from glade.llm.base import (
    GeneratorCallError,
    GeneratorClient,
    GeneratorConfig,
    GeneratorContext,
    Mode,
    Narration,
    Proposal,
    ToolCall,
    ToolResult,
)
from glade.llm.fake_generator import FakeGenerator
from glade.llm.orchestration import (
    DIALOGUE_ROUNDS,
    WORLD_ROUNDS,
    OrchestrationError,
    OrchestrationLoop,
    run_dialogue_turn,
    run_world_generation,
)
from glade.llm.tools import DIALOGUE_TOOLS, WORLD_TOOLS

__all__ = [
    "DIALOGUE_ROUNDS",
    "DIALOGUE_TOOLS",
    "FakeGenerator",
    "GeneratorCallError",
    "GeneratorClient",
    "GeneratorConfig",
    "GeneratorContext",
    "Mode",
    "Narration",
    "OrchestrationError",
    "OrchestrationLoop",
    "Proposal",
    "ToolCall",
    "ToolResult",
    "WORLD_ROUNDS",
    "WORLD_TOOLS",
    "run_dialogue_turn",
    "run_world_generation",
]
