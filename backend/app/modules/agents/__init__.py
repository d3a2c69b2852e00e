"""
Agents Module - what the generation agent can see and do

- ToolRegistry: the four sandboxed file tools (writeFile, readFile, listFiles, deleteFile)
- CompletionClient: streaming model collaborator (Claude implementation)
"""

from .tool_registry import (
    ToolName,
    ToolCall,
    ToolResult,
    ToolRegistry,
    TOOL_DEFINITIONS,
)
from .completion_client import (
    CompletionClient,
    ClaudeCompletionClient,
    GenerationUnit,
    TextUnit,
    ToolCallUnit,
    FinishUnit,
    ErrorUnit,
    SYSTEM_PROMPT,
    get_completion_client,
)

__all__ = [
    "ToolName",
    "ToolCall",
    "ToolResult",
    "ToolRegistry",
    "TOOL_DEFINITIONS",
    "CompletionClient",
    "ClaudeCompletionClient",
    "GenerationUnit",
    "TextUnit",
    "ToolCallUnit",
    "FinishUnit",
    "ErrorUnit",
    "SYSTEM_PROMPT",
    "get_completion_client",
]
