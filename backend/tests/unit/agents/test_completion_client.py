"""
Unit Tests for the Claude completion client
Tests for: stream event → generation unit mapping, provider failures
"""
import httpx
import pytest
from types import SimpleNamespace
from unittest.mock import MagicMock

from anthropic import APIConnectionError

from app.modules.agents.completion_client import (
    ClaudeCompletionClient,
    ErrorUnit,
    FinishUnit,
    TextUnit,
    ToolCallUnit,
    _parse_tool_input,
)


def ev(type_, **kwargs):
    return SimpleNamespace(type=type_, **kwargs)


class FakeStream:
    """Stand-in for the SDK's MessageStream context manager"""

    def __init__(self, events, final_message):
        self.events = events
        self.final_message = final_message

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for event in self.events:
            yield event

    async def get_final_message(self):
        return self.final_message


def final(stop_reason="end_turn"):
    return SimpleNamespace(
        id="msg_test",
        stop_reason=stop_reason,
        usage=SimpleNamespace(input_tokens=12, output_tokens=34),
    )


@pytest.fixture
def claude():
    return ClaudeCompletionClient(api_key="test-key")


async def collect(client, messages=None):
    return [u async for u in client.stream(messages or [{"role": "user", "content": "hi"}], [])]


class TestStreamMapping:

    async def test_text_deltas(self, claude):
        claude.async_client = MagicMock()
        claude.async_client.messages.stream.return_value = FakeStream(
            [
                ev("message_start"),
                ev("content_block_start", content_block=SimpleNamespace(type="text")),
                ev("content_block_delta", delta=SimpleNamespace(type="text_delta", text="Hello ")),
                ev("content_block_delta", delta=SimpleNamespace(type="text_delta", text="world")),
                ev("content_block_stop"),
                ev("message_stop"),
            ],
            final(),
        )

        units = await collect(claude)

        assert units == [
            TextUnit("Hello "),
            TextUnit("world"),
            FinishUnit(reason="end_turn", usage={"input_tokens": 12, "output_tokens": 34}),
        ]

    async def test_tool_use_block_accumulates_json(self, claude):
        claude.async_client = MagicMock()
        claude.async_client.messages.stream.return_value = FakeStream(
            [
                ev("content_block_start", content_block=SimpleNamespace(type="tool_use", id="toolu_1", name="writeFile")),
                ev("content_block_delta", delta=SimpleNamespace(type="input_json_delta", partial_json='{"path": "index')),
                ev("content_block_delta", delta=SimpleNamespace(type="input_json_delta", partial_json='.html", "content": "<p>hi</p>"}')),
                ev("content_block_stop"),
            ],
            final("tool_use"),
        )

        units = await collect(claude)

        assert units[0] == ToolCallUnit(
            id="toolu_1", name="writeFile", args={"path": "index.html", "content": "<p>hi</p>"}
        )
        assert units[1].reason == "tool_use"

    async def test_request_uses_settings_and_tools(self, claude):
        claude.async_client = MagicMock()
        claude.async_client.messages.stream.return_value = FakeStream([], final())
        tools = [{"name": "writeFile", "description": "", "input_schema": {"type": "object"}}]

        _ = [u async for u in claude.stream([{"role": "user", "content": "build"}], tools)]

        kwargs = claude.async_client.messages.stream.call_args.kwargs
        assert kwargs["tools"] == tools
        assert kwargs["model"] == claude.model
        assert kwargs["system"] == claude.system_prompt

    async def test_no_retries_configured(self, claude):
        assert claude.async_client.max_retries == 0


class TestProviderFailures:

    async def test_api_error_becomes_error_unit(self, claude):
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        claude.async_client = MagicMock()
        claude.async_client.messages.stream.side_effect = APIConnectionError(request=request)

        units = await collect(claude)

        assert len(units) == 1
        assert isinstance(units[0], ErrorUnit)

    async def test_transport_error_mid_stream(self, claude):
        class BrokenStream(FakeStream):
            async def _iterate(self):
                yield ev("content_block_delta", delta=SimpleNamespace(type="text_delta", text="par"))
                raise httpx.ReadTimeout("read timed out")

        claude.async_client = MagicMock()
        claude.async_client.messages.stream.return_value = BrokenStream([], final())

        units = await collect(claude)

        assert units[0] == TextUnit("par")
        assert units[-1] == ErrorUnit("read timed out")


class TestParseToolInput:

    def test_empty(self):
        assert _parse_tool_input("") == {}

    def test_invalid_json(self):
        assert _parse_tool_input('{"path": ') == {}

    def test_non_object(self):
        assert _parse_tool_input("[1, 2]") == {}
