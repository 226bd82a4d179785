"""
Unit Tests for Student Account Endpoints
"""
import pytest
from httpx import AsyncClient

from helpers import make_headers, student_payload


class TestCreateStudent:
    """POST /api/v1/students"""

    @pytest.mark.asyncio
    async def test_create_returns_initial_password(self, client: AsyncClient, admin_auth_headers):
        """Roll number comes back once as the initial password"""
        response = await client.post(
            '/api/v1/students',
            json=student_payload(roll_no='2107001'),
            headers=admin_auth_headers
        )

        assert response.status_code == 201
        body = response.json()
        assert body['success'] is True
        assert body['initialPassword'] == '2107001'
        assert body['data']['roll_no'] == '2107001'
        assert body['data']['profile']['role'] == 'STUDENT'
        assert 'password_hash' not in body['data']['profile']

    @pytest.mark.asyncio
    async def test_duplicate_roll_number(self, client: AsyncClient, admin_auth_headers):
        """Second student with the same roll number is rejected with 409"""
        first = await client.post(
            '/api/v1/students', json=student_payload(roll_no='2107001'), headers=admin_auth_headers
        )
        assert first.status_code == 201

        response = await client.post(
            '/api/v1/students', json=student_payload(roll_no='2107001'), headers=admin_auth_headers
        )

        assert response.status_code == 409
        body = response.json()
        assert body['success'] is False
        assert body['error'] == 'A student with this roll number already exists'

    @pytest.mark.asyncio
    async def test_duplicate_email(self, client: AsyncClient, admin_auth_headers):
        """Same email twice is rejected with 409"""
        payload = student_payload()
        await client.post('/api/v1/students', json=payload, headers=admin_auth_headers)

        response = await client.post(
            '/api/v1/students',
            json=student_payload(email=payload['email']),
            headers=admin_auth_headers
        )

        assert response.status_code == 409
        assert response.json()['error'] == 'A student with this email already exists'

    @pytest.mark.asyncio
    async def test_invalid_email(self, client: AsyncClient, admin_auth_headers):
        """Malformed email is a 400"""
        response = await client.post(
            '/api/v1/students',
            json=student_payload(email='not-an-email'),
            headers=admin_auth_headers
        )

        assert response.status_code == 400
        assert response.json()['error'] == 'Invalid email format'

    @pytest.mark.asyncio
    async def test_missing_fields(self, client: AsyncClient, admin_auth_headers):
        """Missing required fields is a 400"""
        payload = student_payload()
        del payload['roll_no']

        response = await client.post('/api/v1/students', json=payload, headers=admin_auth_headers)

        assert response.status_code == 400
        assert response.json()['success'] is False

    @pytest.mark.asyncio
    async def test_blank_field(self, client: AsyncClient, admin_auth_headers):
        """Whitespace-only required field is a 400"""
        response = await client.post(
            '/api/v1/students',
            json=student_payload(full_name='   '),
            headers=admin_auth_headers
        )

        assert response.status_code == 400
        assert response.json()['error'] == 'This field is required'

    @pytest.mark.asyncio
    async def test_teacher_cannot_create(self, client: AsyncClient, teacher_auth_headers):
        """Only admins provision accounts"""
        response = await client.post(
            '/api/v1/students', json=student_payload(), headers=teacher_auth_headers
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_requires_auth(self, client: AsyncClient):
        """Anonymous requests are rejected"""
        response = await client.post('/api/v1/students', json=student_payload())

        assert response.status_code in (401, 403)

    @pytest.mark.asyncio
    async def test_unconfigured_store(self, unconfigured_client: AsyncClient, admin_user):
        """Writes fail with 500 when no store is configured"""
        headers = make_headers(admin_user)

        response = await unconfigured_client.post(
            '/api/v1/students', json=student_payload(), headers=headers
        )

        assert response.status_code == 500
        assert response.json()['success'] is False


    @pytest.mark.asyncio
    async def test_over_long_field(self, client: AsyncClient, admin_auth_headers):
        """Values longer than the column allows are a 400 before any write"""
        response = await client.post(
            '/api/v1/students',
            json=student_payload(phone='0' * 21),
            headers=admin_auth_headers
        )

        assert response.status_code == 400
        body = response.json()
        assert body['error'] == 'String should have at most 20 characters'
        assert body['details'] == {'field': 'phone'}

        listed = await client.get('/api/v1/students', headers=admin_auth_headers)
        assert listed.json() == []


class TestListStudents:
    """GET /api/v1/students"""

    @pytest.mark.asyncio
    async def test_list_newest_first(self, client: AsyncClient, admin_auth_headers):
        await client.post('/api/v1/students', json=student_payload(roll_no='2107001'), headers=admin_auth_headers)
        await client.post('/api/v1/students', json=student_payload(roll_no='2107002'), headers=admin_auth_headers)

        response = await client.get('/api/v1/students', headers=admin_auth_headers)

        assert response.status_code == 200
        rolls = [s['roll_no'] for s in response.json()]
        assert rolls == ['2107002', '2107001']
        assert all('password_hash' not in s['profile'] for s in response.json())

    @pytest.mark.asyncio
    async def test_teacher_can_list(self, client: AsyncClient, teacher_auth_headers, student_user):
        response = await client.get('/api/v1/students', headers=teacher_auth_headers)

        assert response.status_code == 200
        assert len(response.json()) == 1

    @pytest.mark.asyncio
    async def test_student_cannot_list(self, client: AsyncClient, student_auth_headers):
        response = await client.get('/api/v1/students', headers=student_auth_headers)

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_unconfigured_store_returns_empty(self, unconfigured_client: AsyncClient, admin_user):
        headers = make_headers(admin_user)

        response = await unconfigured_client.get('/api/v1/students', headers=headers)

        assert response.status_code == 200
        assert response.json() == []


    @pytest.mark.asyncio
    async def test_filter_by_session_and_term(self, client: AsyncClient, admin_auth_headers):
        await client.post('/api/v1/students', json=student_payload(roll_no='1907001', session='2019', term='4-1'),
                          headers=admin_auth_headers)
        await client.post('/api/v1/students', json=student_payload(roll_no='2107001', session='2021', term='2-1'),
                          headers=admin_auth_headers)

        by_session = await client.get('/api/v1/students?session=2019', headers=admin_auth_headers)
        by_term = await client.get('/api/v1/students?term=2-1', headers=admin_auth_headers)

        assert [s['roll_no'] for s in by_session.json()] == ['1907001']
        assert [s['roll_no'] for s in by_term.json()] == ['2107001']


class TestDeactivateStudent:
    """DELETE /api/v1/students?userId="""

    @pytest.mark.asyncio
    async def test_deactivate_is_idempotent(self, client: AsyncClient, admin_auth_headers):
        created = await client.post('/api/v1/students', json=student_payload(), headers=admin_auth_headers)
        user_id = created.json()['data']['user_id']

        first = await client.delete(f'/api/v1/students?userId={user_id}', headers=admin_auth_headers)
        second = await client.delete(f'/api/v1/students?userId={user_id}', headers=admin_auth_headers)

        assert first.status_code == 200
        assert first.json() == {'success': True}
        assert second.status_code == 200

        listed = await client.get('/api/v1/students', headers=admin_auth_headers)
        assert listed.json()[0]['profile']['is_active'] is False

    @pytest.mark.asyncio
    async def test_missing_user_id(self, client: AsyncClient, admin_auth_headers):
        response = await client.delete('/api/v1/students', headers=admin_auth_headers)

        assert response.status_code == 400
        assert response.json()['error'] == 'User ID required'

    @pytest.mark.asyncio
    async def test_unknown_user_id(self, client: AsyncClient, admin_auth_headers):
        response = await client.delete(
            '/api/v1/students?userId=00000000-0000-0000-0000-000000000000',
            headers=admin_auth_headers
        )

        assert response.status_code == 404


class TestUpdateStudent:
    """PATCH /api/v1/students"""

    @pytest.mark.asyncio
    async def test_update_profile(self, client: AsyncClient, admin_auth_headers):
        created = await client.post('/api/v1/students', json=student_payload(), headers=admin_auth_headers)
        user_id = created.json()['data']['user_id']

        response = await client.patch(
            '/api/v1/students',
            json={'userId': user_id, 'action': 'update_profile', 'section': 'B'},
            headers=admin_auth_headers
        )

        assert response.status_code == 200
        listed = await client.get('/api/v1/students', headers=admin_auth_headers)
        assert listed.json()[0]['section'] == 'B'

    @pytest.mark.asyncio
    async def test_invalid_action(self, client: AsyncClient, admin_auth_headers, student_user):
        response = await client.patch(
            '/api/v1/students',
            json={'userId': str(student_user.user_id), 'action': 'reset_password'},
            headers=admin_auth_headers
        )

        assert response.status_code == 400
        assert response.json()['error'] == 'Invalid action'
