"""
Orchestration Module - drives one chat turn for one project

Components:
- StreamingOrchestrator: bounded agent loop (step ceiling) that turns
  generation units into ordered wire events
- Stream events: text / tool-call / tool-result / done / error

Usage:
    from app.modules.orchestrator import StreamingOrchestrator, GenerationContext

    context = GenerationContext(project_id=project.id, user_id=user_id)
    orchestrator = StreamingOrchestrator(client, ToolRegistry.for_project(project.id), context)

    async for event in orchestrator.run(messages, request.is_disconnected):
        yield event.to_sse()  # Stream to frontend
"""

from .stream_events import (
    StreamEvent,
    StreamEventType,
    TextEvent,
    ToolCallEvent,
    ToolResultEvent,
    DoneEvent,
    ErrorEvent,
)
from .streaming_orchestrator import (
    StreamingOrchestrator,
    GenerationContext,
    GenerationState,
    InvalidTransitionError,
)

__all__ = [
    "StreamEvent",
    "StreamEventType",
    "TextEvent",
    "ToolCallEvent",
    "ToolResultEvent",
    "DoneEvent",
    "ErrorEvent",
    "StreamingOrchestrator",
    "GenerationContext",
    "GenerationState",
    "InvalidTransitionError",
]
