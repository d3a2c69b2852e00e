# Pydantic schemas
from app.schemas.chat import ChatMessage, ChatRequest
from app.schemas.project import (
    ProjectResponse,
    ProjectListResponse,
    ProjectFilesResponse,
    ProjectFileContent,
)

__all__ = [
    "ChatMessage",
    "ChatRequest",
    "ProjectResponse",
    "ProjectListResponse",
    "ProjectFilesResponse",
    "ProjectFileContent",
]
