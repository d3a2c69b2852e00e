"""
Unit Tests for Projects API Endpoints
"""
import pytest
from httpx import AsyncClient
from faker import Faker

from app.modules.sandbox import ProjectFileStore
from app.services.project_service import ProjectService

fake = Faker()


async def create_project(db_session, user_id, project_id=None):
    service = ProjectService(db_session)
    await service.ensure_user(user_id, fake.email())
    project = await service.create_project(user_id, project_id=project_id, name=fake.company())
    await db_session.commit()
    return project


class TestProjectRetrieval:
    """Test project retrieval endpoints"""

    @pytest.mark.asyncio
    async def test_list_projects_unauthenticated(self, client: AsyncClient):
        response = await client.get('/api/v1/projects')

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_list_projects_empty(self, client: AsyncClient, auth_headers):
        response = await client.get('/api/v1/projects', headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {'projects': [], 'total': 0}

    @pytest.mark.asyncio
    async def test_list_projects_most_recent_first(self, client: AsyncClient, auth_headers, db_session, user_id):
        first = await create_project(db_session, user_id)
        second = await create_project(db_session, user_id)
        await ProjectService(db_session).touch(first)
        await db_session.commit()

        response = await client.get('/api/v1/projects', headers=auth_headers)

        ids = [p['id'] for p in response.json()['projects']]
        assert ids == [first.id, second.id]

    @pytest.mark.asyncio
    async def test_list_excludes_other_owners(self, client: AsyncClient, auth_headers, other_auth_headers, db_session, user_id):
        await create_project(db_session, user_id)

        response = await client.get('/api/v1/projects', headers=other_auth_headers)

        assert response.json()['total'] == 0

    @pytest.mark.asyncio
    async def test_get_project_status_follows_lifecycle(self, client: AsyncClient, auth_headers, db_session, user_id):
        project = await create_project(db_session, user_id)
        store = ProjectFileStore.for_project(project.id)

        absent = await client.get(f'/api/v1/projects/{project.id}', headers=auth_headers)
        await store.write('css/style.css', 'body{}')
        building = await client.get(f'/api/v1/projects/{project.id}', headers=auth_headers)
        await store.write('index.html', '<html></html>')
        ready = await client.get(f'/api/v1/projects/{project.id}', headers=auth_headers)

        assert [r.json()['status'] for r in (absent, building, ready)] == ['absent', 'building', 'ready']
        assert ready.json()['preview_url'] == f'http://{project.id}.preview.test/'

    @pytest.mark.asyncio
    async def test_get_foreign_project_404(self, client: AsyncClient, other_auth_headers, db_session, user_id):
        project = await create_project(db_session, user_id)

        response = await client.get(f'/api/v1/projects/{project.id}', headers=other_auth_headers)

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_get_invalid_id_404(self, client: AsyncClient, auth_headers):
        response = await client.get('/api/v1/projects/NOT-VALID', headers=auth_headers)

        assert response.status_code == 404


class TestProjectFiles:
    """Test generated file access"""

    @pytest.mark.asyncio
    async def test_list_files(self, client: AsyncClient, auth_headers, db_session, user_id):
        project = await create_project(db_session, user_id)
        store = ProjectFileStore.for_project(project.id)
        await store.write('index.html', '<html></html>')
        await store.write('js/app.js', 'console.log(1)')

        response = await client.get(f'/api/v1/projects/{project.id}/files', headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {'project_id': project.id, 'files': ['index.html', 'js/app.js']}

    @pytest.mark.asyncio
    async def test_list_files_before_generation(self, client: AsyncClient, auth_headers, db_session, user_id):
        project = await create_project(db_session, user_id)

        response = await client.get(f'/api/v1/projects/{project.id}/files', headers=auth_headers)

        assert response.json()['files'] == []

    @pytest.mark.asyncio
    async def test_read_nested_file(self, client: AsyncClient, auth_headers, db_session, user_id):
        project = await create_project(db_session, user_id)
        await ProjectFileStore.for_project(project.id).write('css/site.css', 'h1 { margin: 0 }')

        response = await client.get(f'/api/v1/projects/{project.id}/files/css/site.css', headers=auth_headers)

        assert response.status_code == 200
        assert response.json()['content'] == 'h1 { margin: 0 }'

    @pytest.mark.asyncio
    async def test_read_missing_file_404(self, client: AsyncClient, auth_headers, db_session, user_id):
        project = await create_project(db_session, user_id)

        response = await client.get(f'/api/v1/projects/{project.id}/files/nope.html', headers=auth_headers)

        assert response.status_code == 404
        assert response.json()['code'] == 'FILE_NOT_FOUND'

    @pytest.mark.asyncio
    async def test_read_escape_400(self, client: AsyncClient, auth_headers, db_session, user_id):
        project = await create_project(db_session, user_id)

        response = await client.get(
            f'/api/v1/projects/{project.id}/files/%2e%2e/%2e%2e/etc/passwd', headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()['code'] == 'SANDBOX_VIOLATION'
