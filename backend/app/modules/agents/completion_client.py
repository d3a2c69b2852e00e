"""
Completion Client - the model collaborator

The orchestrator never talks to the provider SDK directly. It pulls a finite,
consume-once sequence of generation units from a CompletionClient:

    TextUnit       - a text fragment
    ToolCallUnit   - a complete tool invocation request
    FinishUnit     - the model finished this invocation (stop_reason)
    ErrorUnit      - provider/transport failure; nothing follows it

To continue a conversation the caller appends the assistant turn and the tool
results to the message history and calls stream() again.
"""

import json
from functools import lru_cache
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional, Union

import httpx
from anthropic import AsyncAnthropic, APIError

from app.core.config import settings
from app.core.logging_config import logger


SYSTEM_PROMPT = """You are a web developer that builds static websites.

You work inside a project directory and can only change it through tools:
- writeFile(path, content): create or overwrite a file
- readFile(path): read a file
- listFiles(directory?): list files
- deleteFile(path): delete a file

Rules:
- Always create index.html at the project root; it is the entry page.
- Use only relative paths such as index.html, css/style.css, js/app.js.
- Write complete files; never leave placeholders.
- Plain HTML, CSS and JavaScript only - there is no build step and no server.
- After writing files, briefly tell the user what you built."""


@dataclass
class TextUnit:
    text: str


@dataclass
class ToolCallUnit:
    id: str
    name: str
    args: Dict[str, Any] = field(default_factory=dict)


@dataclass
class FinishUnit:
    reason: str
    usage: Dict[str, int] = field(default_factory=dict)


@dataclass
class ErrorUnit:
    message: str


GenerationUnit = Union[TextUnit, ToolCallUnit, FinishUnit, ErrorUnit]


class CompletionClient(ABC):
    """Streaming completion collaborator"""

    @abstractmethod
    def stream(
        self,
        messages: List[Dict[str, Any]],
        tools: List[Dict[str, Any]],
    ) -> AsyncIterator[GenerationUnit]:
        """Yield generation units for one model invocation"""


class ClaudeCompletionClient(CompletionClient):
    """CompletionClient backed by the Anthropic Messages streaming API"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        system_prompt: str = SYSTEM_PROMPT,
    ):
        client_kwargs: Dict[str, Any] = {"api_key": api_key or settings.ANTHROPIC_API_KEY}

        # Only set base_url if it's a non-empty string with actual content
        if settings.ANTHROPIC_BASE_URL and settings.ANTHROPIC_BASE_URL.strip():
            client_kwargs["base_url"] = settings.ANTHROPIC_BASE_URL.strip()
            logger.info(f"Using custom Claude API base URL: {settings.ANTHROPIC_BASE_URL}")

        request_timeout = float(settings.CLAUDE_REQUEST_TIMEOUT)
        client_kwargs["timeout"] = httpx.Timeout(
            connect=float(settings.CLAUDE_CONNECT_TIMEOUT),
            read=request_timeout,
            write=request_timeout,
            pool=request_timeout
        )
        # Retries belong to the caller's policy, not to this layer
        client_kwargs["max_retries"] = 0

        self.async_client = AsyncAnthropic(**client_kwargs)
        self.model = model or settings.CLAUDE_MODEL
        self.system_prompt = system_prompt

        logger.info(f"Claude client initialized: timeout={request_timeout}s, model={self.model}")

    async def stream(
        self,
        messages: List[Dict[str, Any]],
        tools: List[Dict[str, Any]],
    ) -> AsyncIterator[GenerationUnit]:
        logger.info(f"Claude API: model={self.model}, messages={len(messages)}, tools={len(tools)}")

        try:
            async with self.async_client.messages.stream(
                model=self.model,
                max_tokens=settings.CLAUDE_MAX_TOKENS,
                temperature=settings.CLAUDE_TEMPERATURE,
                system=self.system_prompt,
                tools=tools,
                messages=messages
            ) as stream:
                current_tool: Optional[Dict[str, Any]] = None

                async for event in stream:
                    if event.type == "content_block_start":
                        if getattr(event.content_block, "type", None) == "tool_use":
                            current_tool = {
                                "id": event.content_block.id,
                                "name": event.content_block.name,
                                "input": ""
                            }

                    elif event.type == "content_block_delta":
                        if event.delta.type == "text_delta":
                            yield TextUnit(event.delta.text)
                        elif event.delta.type == "input_json_delta" and current_tool is not None:
                            current_tool["input"] += event.delta.partial_json

                    elif event.type == "content_block_stop" and current_tool is not None:
                        yield ToolCallUnit(
                            id=current_tool["id"],
                            name=current_tool["name"],
                            args=_parse_tool_input(current_tool["input"])
                        )
                        current_tool = None

                final_message = await stream.get_final_message()

            usage = {
                "input_tokens": final_message.usage.input_tokens,
                "output_tokens": final_message.usage.output_tokens,
            }
            logger.info(
                f"Claude API response: id={final_message.id}, stop={final_message.stop_reason}, "
                f"tokens={usage['input_tokens'] + usage['output_tokens']}"
            )
            yield FinishUnit(reason=final_message.stop_reason or "end_turn", usage=usage)

        except (APIError, httpx.HTTPError) as e:
            logger.error(
                f"Claude API error: {type(e).__name__}: {e}",
                extra={
                    "event_type": "claude_api_error",
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                }
            )
            yield ErrorUnit(message=str(e) or type(e).__name__)


def _parse_tool_input(raw: str) -> Dict[str, Any]:
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning(f"[Claude] Could not parse tool input JSON ({len(raw)} chars)")
        return {}
    return parsed if isinstance(parsed, dict) else {}


@lru_cache()
def get_completion_client() -> CompletionClient:
    """Process-wide Claude client (FastAPI dependency; overridden in tests)"""
    return ClaudeCompletionClient()
