"""
Streaming Orchestrator - bounded agent loop with an ordered wire protocol

State machine:

    INIT ──► STEP(1) ──► STEP(2) ──► ... ──► STEP(max_steps)
               │            │                      │
               ├──► DONE    ├──► DONE              └──► DONE (ceiling)
               ├──► ERROR   ├──► ERROR
               └──► CANCELLED (client went away before the next step)

One step is one model invocation plus the tool calls it requested. Each
generation unit the completion client yields becomes exactly one wire event,
in order. A tool-result event is only emitted after its tool-call event and
after the tool has finished running. Reaching the step ceiling is not an
error: the loop ends with "done" and whatever has been written so far.
"""

import asyncio
import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Set

from app.core.config import settings
from app.core.logging_config import logger
from app.modules.agents.completion_client import (
    CompletionClient,
    ErrorUnit,
    FinishUnit,
    TextUnit,
    ToolCallUnit,
)
from app.modules.agents.tool_registry import ToolCall, ToolRegistry, ToolResult
from app.modules.orchestrator.stream_events import (
    DoneEvent,
    ErrorEvent,
    StreamEvent,
    TextEvent,
    ToolCallEvent,
    ToolResultEvent,
)


DisconnectProbe = Callable[[], Awaitable[bool]]


@dataclass(frozen=True)
class GenerationContext:
    """Request-scoped identity threaded through the orchestrator and tools"""
    project_id: str
    user_id: str
    request_id: str = ""


class GenerationState(str, Enum):
    INIT = "init"
    STEP = "step"
    DONE = "done"
    ERROR = "error"
    CANCELLED = "cancelled"


TRANSITIONS: Dict[GenerationState, Set[GenerationState]] = {
    GenerationState.INIT: {GenerationState.STEP, GenerationState.DONE, GenerationState.CANCELLED},
    GenerationState.STEP: {
        GenerationState.STEP,
        GenerationState.DONE,
        GenerationState.ERROR,
        GenerationState.CANCELLED,
    },
    GenerationState.DONE: set(),
    GenerationState.ERROR: set(),
    GenerationState.CANCELLED: set(),
}


class InvalidTransitionError(RuntimeError):
    pass


class StreamingOrchestrator:
    """
    Drives one chat turn for one project.

    Usage:
        orchestrator = StreamingOrchestrator(client, registry, context)
        async for event in orchestrator.run(messages, request.is_disconnected):
            yield event.to_sse()
    """

    def __init__(
        self,
        client: CompletionClient,
        registry: ToolRegistry,
        context: GenerationContext,
        max_steps: Optional[int] = None,
    ):
        self.client = client
        self.registry = registry
        self.context = context
        self.max_steps = max_steps if max_steps is not None else settings.MAX_AGENT_STEPS
        self.state = GenerationState.INIT
        self.steps_taken = 0
        self.tool_calls = 0

    def _transition(self, to_state: GenerationState) -> None:
        if to_state not in TRANSITIONS[self.state]:
            raise InvalidTransitionError(f"{self.state.value} -> {to_state.value}")
        self.state = to_state

    async def run(
        self,
        messages: List[Dict[str, Any]],
        is_disconnected: Optional[DisconnectProbe] = None,
    ) -> AsyncIterator[StreamEvent]:
        """
        Run the bounded loop and yield wire events.

        Args:
            messages: Conversation so far ({"role", "content"} dicts); not mutated
            is_disconnected: Polled before every step; True stops the loop
                without further model calls
        """
        history: List[Dict[str, Any]] = [dict(m) for m in messages]
        tools = self.registry.definitions()
        logger.log_agent_event(
            "Generation started",
            project_id=self.context.project_id,
            max_steps=self.max_steps,
        )

        for step in range(1, self.max_steps + 1):
            if is_disconnected is not None and await is_disconnected():
                self._transition(GenerationState.CANCELLED)
                logger.log_agent_event("Client disconnected, stopping", step=step)
                return

            self._transition(GenerationState.STEP)
            self.steps_taken = step

            text_parts: List[str] = []
            calls: List[ToolCall] = []
            results: List[ToolResult] = []
            finish: Optional[FinishUnit] = None

            units = self.client.stream(history, tools)
            try:
                async for unit in units:
                    if isinstance(unit, TextUnit):
                        text_parts.append(unit.text)
                        yield TextEvent(unit.text)

                    elif isinstance(unit, ToolCallUnit):
                        call = ToolCall(id=unit.id, name=unit.name, args=unit.args)
                        calls.append(call)
                        self.tool_calls += 1
                        yield ToolCallEvent(call.id, call.name, call.args)
                        # A started tool always finishes, even if the client goes away
                        result = await asyncio.shield(self.registry.execute(call))
                        results.append(result)
                        yield ToolResultEvent(result.call_id, result.name, result.payload)

                    elif isinstance(unit, ErrorUnit):
                        self._transition(GenerationState.ERROR)
                        logger.log_agent_event("Provider error", step=step, error=unit.message)
                        yield ErrorEvent(unit.message)
                        return

                    elif isinstance(unit, FinishUnit):
                        finish = unit
            except Exception as e:
                self._transition(GenerationState.ERROR)
                logger.log_error_with_context(e, context="orchestrator step", step=step)
                yield ErrorEvent(str(e) or type(e).__name__)
                return
            finally:
                aclose = getattr(units, "aclose", None)
                if aclose is not None:
                    await aclose()

            if not calls:
                self._transition(GenerationState.DONE)
                logger.log_agent_event(
                    "Generation finished",
                    step=step,
                    stop_reason=finish.reason if finish else None,
                    tool_calls=self.tool_calls,
                )
                yield DoneEvent()
                return

            history.append(_assistant_turn(text_parts, calls))
            history.append(_tool_results_turn(results))

        self._transition(GenerationState.DONE)
        logger.log_agent_event(
            "Step ceiling reached, finishing with partial output",
            step=self.steps_taken,
            tool_calls=self.tool_calls,
        )
        yield DoneEvent()


def _assistant_turn(text_parts: List[str], calls: List[ToolCall]) -> Dict[str, Any]:
    content: List[Dict[str, Any]] = []
    text = "".join(text_parts)
    if text:
        content.append({"type": "text", "text": text})
    for call in calls:
        content.append({"type": "tool_use", "id": call.id, "name": call.name, "input": _encodable(call.args)})
    return {"role": "assistant", "content": content}


def _encodable(value: Any) -> Any:
    """Replace lone surrogates so the turn can be sent back to the provider"""
    if isinstance(value, str):
        return value.encode("utf-8", "replace").decode("utf-8")
    if isinstance(value, dict):
        return {_encodable(k): _encodable(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_encodable(v) for v in value]
    return value


def _tool_results_turn(results: List[ToolResult]) -> Dict[str, Any]:
    return {
        "role": "user",
        "content": [
            {
                "type": "tool_result",
                "tool_use_id": result.call_id,
                "content": json.dumps(result.payload, ensure_ascii=False),
                "is_error": not result.success,
            }
            for result in results
        ],
    }
