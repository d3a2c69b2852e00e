"""
Tool Registry - the four file tools the generation agent can call

The set of tools is closed: writeFile, readFile, listFiles, deleteFile.
Each has a typed argument model and a handler; the dispatch table is built
once per registry (one registry per project per request), never looked up by
reflection.

Every tool answers with the same envelope:
    {"success": True, ...}  or  {"success": False, "error": "..."}
Tool-level failures (sandbox violations, missing files, I/O errors, bad
arguments) are reported in the envelope and never abort the agent's turn.
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Type

from pydantic import BaseModel, Field, ValidationError

from app.core.exceptions import VibeCodingError
from app.core.logging_config import logger
from app.modules.sandbox.file_store import ProjectFileStore


class ToolName(str, enum.Enum):
    """Wire names of the file tools"""
    WRITE_FILE = "writeFile"
    READ_FILE = "readFile"
    LIST_FILES = "listFiles"
    DELETE_FILE = "deleteFile"


# =============================================================================
# Argument models
# =============================================================================

class WriteFileArgs(BaseModel):
    path: str = Field(..., description="File path relative to the project root, e.g. index.html or css/style.css")
    content: str = Field(..., description="Complete file content")


class ReadFileArgs(BaseModel):
    path: str = Field(..., description="File path relative to the project root")


class ListFilesArgs(BaseModel):
    directory: Optional[str] = Field(default=None, description="Sub-directory to list; defaults to the project root")


class DeleteFileArgs(BaseModel):
    path: str = Field(..., description="File path relative to the project root")


# =============================================================================
# Tool definitions (Anthropic tool_use schema)
# =============================================================================

TOOL_DEFINITIONS: Dict[ToolName, Dict[str, Any]] = {
    ToolName.WRITE_FILE: {
        "name": ToolName.WRITE_FILE.value,
        "description": """Create or overwrite a file in the project directory.
Use this to generate HTML, CSS and JavaScript files.
Parent directories are created automatically.""",
        "input_schema": {
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": "File path relative to the project root, e.g. index.html or css/style.css"
                },
                "content": {
                    "type": "string",
                    "description": "Complete file content"
                }
            },
            "required": ["path", "content"]
        }
    },
    ToolName.READ_FILE: {
        "name": ToolName.READ_FILE.value,
        "description": "Read the contents of a file in the project directory.",
        "input_schema": {
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": "File path relative to the project root"
                }
            },
            "required": ["path"]
        }
    },
    ToolName.LIST_FILES: {
        "name": ToolName.LIST_FILES.value,
        "description": "List all files in the project directory (recursive, files only).",
        "input_schema": {
            "type": "object",
            "properties": {
                "directory": {
                    "type": "string",
                    "description": "Sub-directory to list; defaults to the project root"
                }
            },
            "required": []
        }
    },
    ToolName.DELETE_FILE: {
        "name": ToolName.DELETE_FILE.value,
        "description": "Delete a file from the project directory.",
        "input_schema": {
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": "File path relative to the project root"
                }
            },
            "required": ["path"]
        }
    },
}


# =============================================================================
# Calls and results
# =============================================================================

@dataclass
class ToolCall:
    """A tool invocation requested by the model; consumed exactly once"""
    id: str
    name: str
    args: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ToolResult:
    """Outcome of one ToolCall, carrying the success/error envelope"""
    call_id: str
    name: str
    payload: Dict[str, Any]

    @property
    def success(self) -> bool:
        return bool(self.payload.get("success"))

    @property
    def error(self) -> Optional[str]:
        return self.payload.get("error")


def failure(error: str) -> Dict[str, Any]:
    return {"success": False, "error": error}


Handler = Callable[[Any], Awaitable[Dict[str, Any]]]


class ToolRegistry:
    """
    File tools bound to one project's store.

    Usage:
        registry = ToolRegistry.for_project(project_id)
        result = await registry.execute(ToolCall(id="t1", name="writeFile",
                                                 args={"path": "index.html", "content": "..."}))
    """

    def __init__(self, store: ProjectFileStore):
        self.store = store
        self._table: Dict[ToolName, Tuple[Type[BaseModel], Handler]] = {
            ToolName.WRITE_FILE: (WriteFileArgs, self._write_file),
            ToolName.READ_FILE: (ReadFileArgs, self._read_file),
            ToolName.LIST_FILES: (ListFilesArgs, self._list_files),
            ToolName.DELETE_FILE: (DeleteFileArgs, self._delete_file),
        }

    @classmethod
    def for_project(cls, project_id: str) -> "ToolRegistry":
        return cls(ProjectFileStore.for_project(project_id))

    def definitions(self) -> List[Dict[str, Any]]:
        """Tool schemas to hand to the model"""
        return [TOOL_DEFINITIONS[name] for name in self._table]

    @property
    def tool_names(self) -> List[str]:
        return [name.value for name in self._table]

    async def execute(self, call: ToolCall) -> ToolResult:
        """Run one call. Never raises for tool-level failures."""
        try:
            name = ToolName(call.name)
        except ValueError:
            logger.log_tool_event(call.name, None, False, error="unknown tool", tool_call_id=call.id)
            return ToolResult(call.id, call.name, failure(f"Unknown tool: {call.name}"))

        args_model, handler = self._table[name]
        try:
            args = args_model.model_validate(call.args or {})
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'args'}: {err['msg']}" for err in e.errors()
            )
            logger.log_tool_event(name.value, None, False, error=problems, tool_call_id=call.id)
            return ToolResult(call.id, name.value, failure(f"Invalid arguments for {name.value}: {problems}"))

        target = getattr(args, "path", None) or getattr(args, "directory", None)
        try:
            payload = await handler(args)
        except VibeCodingError as e:
            logger.log_tool_event(name.value, target, False, error=e.message, tool_call_id=call.id)
            return ToolResult(call.id, name.value, failure(e.message))
        except Exception as e:
            # Tool failures stay inside the envelope; the turn goes on
            logger.log_error_with_context(e, context=f"tool {name.value}", tool_call_id=call.id)
            return ToolResult(call.id, name.value, failure(f"{name.value} failed: {type(e).__name__}"))

        logger.log_tool_event(name.value, target, True, tool_call_id=call.id)
        return ToolResult(call.id, name.value, payload)

    async def execute_all(self, calls: List[ToolCall]) -> List[ToolResult]:
        """Execute strictly in the given order; results come back in the same order"""
        results = []
        for call in calls:
            results.append(await self.execute(call))
        return results

    # ==================== HANDLERS ====================

    async def _write_file(self, args: WriteFileArgs) -> Dict[str, Any]:
        await self.store.write(args.path, args.content)
        return {"success": True, "path": args.path, "message": f"File {args.path} created"}

    async def _read_file(self, args: ReadFileArgs) -> Dict[str, Any]:
        content = await self.store.read(args.path)
        return {"success": True, "path": args.path, "content": content}

    async def _list_files(self, args: ListFilesArgs) -> Dict[str, Any]:
        files = await self.store.list(args.directory)
        return {"success": True, "files": files}

    async def _delete_file(self, args: DeleteFileArgs) -> Dict[str, Any]:
        await self.store.delete(args.path)
        return {"success": True, "message": f"File {args.path} deleted"}
