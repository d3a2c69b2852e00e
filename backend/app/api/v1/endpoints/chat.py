"""
Chat Stream Endpoint - drive one generation turn over Server-Sent Events

POST /chat/stream
    {"projectId": "abc123", "messages": [{"role": "user", "content": "..."}]}

Each SSE frame carries one wire event:
    data: {"type": "text", "content": "..."}
    data: {"type": "tool-call", "toolCallId": "...", "tool": "writeFile", "args": {...}}
    data: {"type": "tool-result", "toolCallId": "...", "tool": "writeFile", "result": {...}}
    data: {"type": "done"}
    data: {"type": "error", "message": "..."}

The project id used for the turn is returned in the X-Project-Id header, so a
client that omitted projectId learns which id was minted for it.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.logging_config import logger, get_request_id, set_project_id
from app.core.rate_limiter import chat_rate_limit
from app.core.security import CurrentUser, get_current_user
from app.modules.agents import CompletionClient, ToolRegistry, get_completion_client
from app.modules.orchestrator import GenerationContext, StreamingOrchestrator
from app.modules.preview import get_preview_url
from app.schemas.chat import ChatRequest
from app.services.project_service import ProjectService

router = APIRouter(prefix="/chat", tags=["Chat"])


SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",  # Disable nginx buffering
}


@router.post("/stream")
@chat_rate_limit()
async def chat_stream(
    request: Request,
    body: ChatRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    client: CompletionClient = Depends(get_completion_client),
):
    """
    Stream a generation turn for one project.

    Returns Server-Sent Events; see module docstring for the event shapes.
    """
    service = ProjectService(db)
    await service.ensure_user(current_user.id, current_user.email)
    project = await service.get_or_create_project(current_user.id, body.project_id)
    await service.touch(project)
    # The stream outlives this handler, so the catalog write is committed now
    await db.commit()

    project_id = project.id
    set_project_id(project_id)

    context = GenerationContext(
        project_id=project_id,
        user_id=current_user.id,
        request_id=get_request_id(),
    )
    orchestrator = StreamingOrchestrator(client, ToolRegistry.for_project(project_id), context)
    history = body.to_history()

    logger.info(
        f"[Chat] User {current_user.id} - project {project_id}, {len(history)} messages",
        extra={"event_type": "chat_stream_start", "project_id": project_id},
    )

    async def event_generator():
        set_project_id(project_id)
        async for event in orchestrator.run(history, request.is_disconnected):
            yield event.to_sse()

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            **SSE_HEADERS,
            "X-Project-Id": project_id,
            "X-Preview-Url": get_preview_url(project_id),
        },
    )
