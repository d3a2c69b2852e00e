"""
Wire events pushed to the client over Server-Sent Events.

One event per frame, strictly ordered:
    {"type": "text", "content": ...}
    {"type": "tool-call", "toolCallId": ..., "tool": ..., "args": {...}}
    {"type": "tool-result", "toolCallId": ..., "tool": ..., "result": {...}}
    {"type": "done"}
    {"type": "error", "message": ...}
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Union


class StreamEventType(str, Enum):
    TEXT = "text"
    TOOL_CALL = "tool-call"
    TOOL_RESULT = "tool-result"
    DONE = "done"
    ERROR = "error"


class _WireEvent:
    type: StreamEventType

    def to_dict(self) -> Dict[str, Any]:
        raise NotImplementedError

    def to_json(self) -> str:
        data = self.to_dict()
        text = json.dumps(data, ensure_ascii=False)
        try:
            text.encode("utf-8")
        except UnicodeEncodeError:
            # Lone surrogates from model input only survive as \u escapes
            text = json.dumps(data)
        return text

    def to_sse(self) -> str:
        """Format for Server-Sent Events"""
        return f"data: {self.to_json()}\n\n"


@dataclass
class TextEvent(_WireEvent):
    content: str
    type: StreamEventType = field(default=StreamEventType.TEXT, init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "content": self.content}


@dataclass
class ToolCallEvent(_WireEvent):
    tool_call_id: str
    tool: str
    args: Dict[str, Any]
    type: StreamEventType = field(default=StreamEventType.TOOL_CALL, init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "toolCallId": self.tool_call_id,
            "tool": self.tool,
            "args": self.args,
        }


@dataclass
class ToolResultEvent(_WireEvent):
    tool_call_id: str
    tool: str
    result: Dict[str, Any]
    type: StreamEventType = field(default=StreamEventType.TOOL_RESULT, init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "toolCallId": self.tool_call_id,
            "tool": self.tool,
            "result": self.result,
        }


@dataclass
class DoneEvent(_WireEvent):
    type: StreamEventType = field(default=StreamEventType.DONE, init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value}


@dataclass
class ErrorEvent(_WireEvent):
    message: str
    type: StreamEventType = field(default=StreamEventType.ERROR, init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "message": self.message}


StreamEvent = Union[TextEvent, ToolCallEvent, ToolResultEvent, DoneEvent, ErrorEvent]
