"""
Unit Tests for the project catalog service
"""
import uuid
import pytest

from app.core.exceptions import InvalidProjectIdError, ProjectNotFoundError
from app.core.types import is_valid_project_id, PROJECT_ID_LENGTH
from app.services.project_service import ProjectService, DEFAULT_PROJECT_NAME


@pytest.fixture
def service(db_session):
    return ProjectService(db_session)


@pytest.fixture
async def owner(service):
    return await service.ensure_user(str(uuid.uuid4()), "owner@example.com")


class TestUsers:

    @pytest.mark.asyncio
    async def test_ensure_user_creates_once(self, service):
        user_id = str(uuid.uuid4())

        first = await service.ensure_user(user_id)
        second = await service.ensure_user(user_id)

        assert first is second
        assert str(first.id) == user_id


class TestProjects:

    @pytest.mark.asyncio
    async def test_create_mints_valid_id(self, service, owner):
        project = await service.create_project(owner.id)

        assert is_valid_project_id(project.id)
        assert len(project.id) == PROJECT_ID_LENGTH
        assert project.name == DEFAULT_PROJECT_NAME

    @pytest.mark.asyncio
    async def test_get_or_create_uses_requested_id(self, service, owner):
        project = await service.get_or_create_project(owner.id, "mysite1")

        again = await service.get_or_create_project(owner.id, "mysite1")

        assert project.id == again.id == "mysite1"

    @pytest.mark.asyncio
    async def test_get_or_create_rejects_invalid_id(self, service, owner):
        with pytest.raises(InvalidProjectIdError):
            await service.get_or_create_project(owner.id, "My Site")

    @pytest.mark.asyncio
    async def test_foreign_project_hidden(self, service, owner):
        await service.create_project(owner.id, project_id="taken1")
        intruder = await service.ensure_user(str(uuid.uuid4()))

        with pytest.raises(ProjectNotFoundError):
            await service.get_or_create_project(intruder.id, "taken1")
        with pytest.raises(ProjectNotFoundError):
            await service.get_owned_project("taken1", intruder.id)

    @pytest.mark.asyncio
    async def test_create_does_not_touch_filesystem(self, service, owner, apps_dir):
        project = await service.create_project(owner.id)

        assert not (apps_dir / project.id).exists()

    @pytest.mark.asyncio
    async def test_list_by_owner_most_recent_first(self, service, owner):
        a = await service.create_project(owner.id, project_id="aaa")
        b = await service.create_project(owner.id, project_id="bbb")
        c = await service.create_project(owner.id, project_id="ccc")
        await service.touch(b)

        projects = await service.list_projects(owner.id)

        assert [p.id for p in projects][0] == "bbb"
        assert {p.id for p in projects} == {a.id, b.id, c.id}
