from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.database import get_db
from app.core.security import CurrentUser, get_current_user
from app.models.project import Project
from app.modules.preview import get_preview_url
from app.modules.sandbox import ProjectFileStore, get_lifecycle
from app.schemas.project import (
    ProjectResponse,
    ProjectListResponse,
    ProjectFilesResponse,
    ProjectFileContent,
)
from app.services.project_service import ProjectService

router = APIRouter(prefix="/projects", tags=["Projects"])


def to_response(project: Project) -> ProjectResponse:
    """Catalog record plus the lifecycle derived from its root on disk"""
    store = ProjectFileStore.for_project(project.id)
    return ProjectResponse(
        id=project.id,
        name=project.name,
        status=get_lifecycle(store.root).value,
        preview_url=get_preview_url(project.id),
        created_at=project.created_at,
        updated_at=project.updated_at,
    )


@router.get("", response_model=ProjectListResponse)
async def list_projects(
    limit: int = Query(100, ge=1, le=500),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List the caller's projects, most recently updated first"""
    projects = await ProjectService(db).list_projects(current_user.id, limit=limit)
    return ProjectListResponse(
        projects=[to_response(p) for p in projects],
        total=len(projects),
    )


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    project = await ProjectService(db).get_owned_project(project_id, current_user.id)
    return to_response(project)


@router.get("/{project_id}/files", response_model=ProjectFilesResponse)
async def list_project_files(
    project_id: str,
    directory: Optional[str] = Query(None),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Files generated so far, relative to the project root"""
    project = await ProjectService(db).get_owned_project(project_id, current_user.id)
    files = await ProjectFileStore.for_project(project.id).list(directory)
    return ProjectFilesResponse(project_id=project.id, files=files)


@router.get("/{project_id}/files/{file_path:path}", response_model=ProjectFileContent)
async def read_project_file(
    project_id: str,
    file_path: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    project = await ProjectService(db).get_owned_project(project_id, current_user.id)
    content = await ProjectFileStore.for_project(project.id).read(file_path)
    return ProjectFileContent(project_id=project.id, path=file_path, content=content)
