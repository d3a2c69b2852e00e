"""
Project Service - the project/user catalog

Thin SQLAlchemy implementation of the catalog boundary:
- create / lookup-by-id for projects and users
- list projects by owner, most recently updated first
"""

from datetime import datetime
from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.models.project import Project
from app.models.user import User
from app.core.exceptions import InvalidProjectIdError, ProjectNotFoundError
from app.core.logging_config import logger
from app.core.types import is_valid_project_id, generate_project_id


DEFAULT_PROJECT_NAME = "Untitled site"


class ProjectService:
    """Catalog operations scoped to one database session"""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ========== User Operations ==========

    async def get_user(self, user_id: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def ensure_user(self, user_id: str, email: Optional[str] = None) -> User:
        """Return the owner record, creating it on first sight of the identity"""
        user = await self.get_user(user_id)
        if user is None:
            user = User(id=user_id, email=email)
            self.db.add(user)
            await self.db.flush()
            logger.info(f"[Catalog] Registered owner {user_id}")
        return user

    # ========== Project Operations ==========

    async def get_project(self, project_id: str) -> Optional[Project]:
        if not is_valid_project_id(project_id):
            return None
        result = await self.db.execute(select(Project).where(Project.id == project_id))
        return result.scalar_one_or_none()

    async def get_owned_project(self, project_id: str, user_id: str) -> Project:
        """Lookup that hides projects owned by someone else"""
        project = await self.get_project(project_id)
        if project is None or str(project.user_id) != str(user_id):
            raise ProjectNotFoundError(project_id)
        return project

    async def create_project(
        self,
        user_id: str,
        project_id: Optional[str] = None,
        name: Optional[str] = None
    ) -> Project:
        """Create a project record. The sandbox root is not created here."""
        if project_id is None:
            project_id = generate_project_id()
            while await self.get_project(project_id) is not None:
                project_id = generate_project_id()
        elif not is_valid_project_id(project_id):
            raise InvalidProjectIdError(project_id)

        project = Project(id=project_id, user_id=user_id, name=name or DEFAULT_PROJECT_NAME)
        self.db.add(project)
        await self.db.flush()
        logger.info(f"[Catalog] Created project {project_id} for owner {user_id}")
        return project

    async def get_or_create_project(
        self,
        user_id: str,
        project_id: Optional[str] = None,
        name: Optional[str] = None
    ) -> Project:
        """
        Resolve the project for a generation request.

        Args:
            user_id: Caller identity
            project_id: Requested id, or None to mint a new one
            name: Display name used only when the record is created

        Raises:
            InvalidProjectIdError: id is not a valid host label
            ProjectNotFoundError: id exists but belongs to another owner
        """
        if project_id is not None:
            if not is_valid_project_id(project_id):
                raise InvalidProjectIdError(project_id)
            existing = await self.get_project(project_id)
            if existing is not None:
                if str(existing.user_id) != str(user_id):
                    raise ProjectNotFoundError(project_id)
                return existing
        return await self.create_project(user_id, project_id=project_id, name=name)

    async def touch(self, project: Project) -> None:
        """Bump updated_at so recency ordering reflects the latest generation"""
        project.updated_at = datetime.utcnow()
        await self.db.flush()

    async def list_projects(self, user_id: str, limit: int = 100) -> List[Project]:
        result = await self.db.execute(
            select(Project)
            .where(Project.user_id == user_id)
            .order_by(Project.updated_at.desc(), Project.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
