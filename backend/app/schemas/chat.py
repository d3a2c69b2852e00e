from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Literal, Optional, Union


class ChatMessage(BaseModel):
    """One conversation turn; content is plain text or Anthropic content blocks"""
    role: Literal["user", "assistant"]
    content: Union[str, List[Dict[str, Any]]]


class ChatRequest(BaseModel):
    """Body of POST /chat/stream"""
    project_id: Optional[str] = Field(default=None, alias="projectId", max_length=64)
    messages: List[ChatMessage] = Field(..., min_length=1)

    model_config = ConfigDict(populate_by_name=True)

    def to_history(self) -> List[Dict[str, Any]]:
        return [message.model_dump() for message in self.messages]
