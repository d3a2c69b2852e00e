"""
Unit Tests for the Tool Registry
Tests for: dispatch, argument validation, envelopes, sequential execution
"""
import pytest
from unittest.mock import patch

from app.modules.agents.tool_registry import (
    TOOL_DEFINITIONS,
    ToolCall,
    ToolName,
    ToolRegistry,
)


@pytest.fixture
def registry(store):
    return ToolRegistry(store)


class TestDefinitions:

    def test_closed_set_of_four_tools(self, registry):
        assert registry.tool_names == ["writeFile", "readFile", "listFiles", "deleteFile"]

    def test_definitions_are_anthropic_schemas(self, registry):
        for definition in registry.definitions():
            assert set(definition) == {"name", "description", "input_schema"}
            assert definition["input_schema"]["type"] == "object"

    def test_write_file_requires_path_and_content(self):
        schema = TOOL_DEFINITIONS[ToolName.WRITE_FILE]["input_schema"]
        assert set(schema["required"]) == {"path", "content"}

    def test_list_files_has_no_required_args(self):
        schema = TOOL_DEFINITIONS[ToolName.LIST_FILES]["input_schema"]
        assert not schema.get("required")


class TestEnvelopes:
    """Success envelopes per tool"""

    async def test_write_file(self, registry, store):
        result = await registry.execute(
            ToolCall(id="t1", name="writeFile", args={"path": "index.html", "content": "<html></html>"})
        )

        assert result.call_id == "t1"
        assert result.payload == {"success": True, "path": "index.html", "message": "File index.html created"}
        assert (store.root / "index.html").read_text() == "<html></html>"

    async def test_read_file(self, registry, store):
        await store.write("about.html", "<h1>About</h1>")

        result = await registry.execute(ToolCall(id="t2", name="readFile", args={"path": "about.html"}))

        assert result.payload == {"success": True, "path": "about.html", "content": "<h1>About</h1>"}

    async def test_list_files(self, registry, store):
        await store.write("index.html", "")
        await store.write("css/style.css", "")

        result = await registry.execute(ToolCall(id="t3", name="listFiles", args={}))

        assert result.success
        assert sorted(result.payload["files"]) == ["css/style.css", "index.html"]

    async def test_list_files_subdirectory(self, registry, store):
        await store.write("index.html", "")
        await store.write("css/style.css", "")

        result = await registry.execute(ToolCall(id="t4", name="listFiles", args={"directory": "css"}))

        assert result.payload == {"success": True, "files": ["css/style.css"]}

    async def test_delete_file(self, registry, store):
        await store.write("old.html", "")

        result = await registry.execute(ToolCall(id="t5", name="deleteFile", args={"path": "old.html"}))

        assert result.payload == {"success": True, "message": "File old.html deleted"}
        assert not (store.root / "old.html").exists()


class TestFailures:
    """Tool-level failures come back as envelopes, never as exceptions"""

    async def test_unknown_tool(self, registry):
        result = await registry.execute(ToolCall(id="t1", name="runShell", args={"cmd": "rm -rf /"}))

        assert result.payload == {"success": False, "error": "Unknown tool: runShell"}
        assert result.name == "runShell"

    async def test_missing_argument(self, registry):
        result = await registry.execute(ToolCall(id="t1", name="writeFile", args={"path": "index.html"}))

        assert not result.success
        assert result.error.startswith("Invalid arguments for writeFile")
        assert "content" in result.error

    async def test_wrong_argument_type(self, registry):
        result = await registry.execute(ToolCall(id="t1", name="readFile", args={"path": ["a", "b"]}))

        assert not result.success

    async def test_sandbox_violation(self, registry, store):
        result = await registry.execute(
            ToolCall(id="t1", name="writeFile", args={"path": "../../etc/passwd", "content": "x"})
        )

        assert not result.success
        assert result.error == "Parent directory references are not allowed"
        assert not store.exists()

    async def test_absolute_path(self, registry):
        result = await registry.execute(ToolCall(id="t1", name="readFile", args={"path": "/etc/passwd"}))

        assert result.payload == {"success": False, "error": "Absolute paths are not allowed"}

    async def test_missing_file(self, registry):
        result = await registry.execute(ToolCall(id="t1", name="deleteFile", args={"path": "ghost.html"}))

        assert result.payload == {"success": False, "error": "File ghost.html does not exist"}

    async def test_missing_directory(self, registry, store):
        await store.write("index.html", "")

        result = await registry.execute(ToolCall(id="t1", name="listFiles", args={"directory": "img"}))

        assert result.payload == {"success": False, "error": "Directory img does not exist"}

    async def test_lone_surrogate_path(self, registry, store):
        result = await registry.execute(
            ToolCall(id="t1", name="writeFile", args={"path": "a\ud800.html", "content": "x"})
        )

        assert result.payload == {"success": False, "error": "Path is not valid UTF-8 text"}
        assert not store.exists()

    async def test_lone_surrogate_content(self, registry, store):
        result = await registry.execute(
            ToolCall(id="t1", name="writeFile", args={"path": "index.html", "content": "bad \ud800"})
        )

        assert not result.success
        assert "not valid UTF-8" in result.error
        assert not store.exists()

    async def test_unexpected_handler_error(self, registry, store):
        with patch.object(store, "read", side_effect=RuntimeError("disk on fire")):
            result = await registry.execute(ToolCall(id="t1", name="readFile", args={"path": "a.txt"}))

        assert result.call_id == "t1"
        assert result.payload == {"success": False, "error": "readFile failed: RuntimeError"}


class TestExecuteAll:

    async def test_runs_in_order(self, registry, store):
        calls = [
            ToolCall(id="1", name="writeFile", args={"path": "a.txt", "content": "first"}),
            ToolCall(id="2", name="readFile", args={"path": "a.txt"}),
            ToolCall(id="3", name="deleteFile", args={"path": "a.txt"}),
            ToolCall(id="4", name="readFile", args={"path": "a.txt"}),
        ]

        results = await registry.execute_all(calls)

        assert [r.call_id for r in results] == ["1", "2", "3", "4"]
        assert results[1].payload["content"] == "first"
        assert results[2].success
        assert not results[3].success

    async def test_failure_does_not_stop_later_calls(self, registry):
        calls = [
            ToolCall(id="1", name="writeFile", args={"path": "../x", "content": ""}),
            ToolCall(id="2", name="writeFile", args={"path": "ok.txt", "content": "ok"}),
        ]

        results = await registry.execute_all(calls)

        assert [r.success for r in results] == [False, True]


class TestForProject:

    async def test_bound_to_project_root(self, apps_dir, project_id):
        registry = ToolRegistry.for_project(project_id)

        await registry.execute(ToolCall(id="1", name="writeFile", args={"path": "index.html", "content": "hi"}))

        assert (apps_dir / project_id / "index.html").read_text() == "hi"

    async def test_projects_are_isolated(self, apps_dir, project_id):
        other_id = project_id + "x"
        await ToolRegistry.for_project(other_id).execute(
            ToolCall(id="1", name="writeFile", args={"path": "secret.txt", "content": "mine"})
        )

        result = await ToolRegistry.for_project(project_id).execute(
            ToolCall(id="2", name="readFile", args={"path": f"../{other_id}/secret.txt"})
        )

        assert not result.success
