from pydantic import BaseModel, ConfigDict
from typing import List, Optional
from datetime import datetime


class ProjectResponse(BaseModel):
    id: str
    name: str
    status: str
    preview_url: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ProjectListResponse(BaseModel):
    projects: List[ProjectResponse]
    total: int


class ProjectFilesResponse(BaseModel):
    project_id: str
    files: List[str]


class ProjectFileContent(BaseModel):
    project_id: str
    path: str
    content: str
