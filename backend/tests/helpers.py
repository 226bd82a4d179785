"""
Shared request builders for the account tests
"""
from faker import Faker

from app.core.security import create_access_token
from app.models.profile import Profile

fake = Faker()

ADMIN_PASSWORD = 'adminpassword123'
TEACHER_PASSWORD = '482913'
# Outside the range student_payload draws from
STUDENT_ROLL_NO = '1907999'


def make_headers(profile: Profile) -> dict:
    """Bearer header for a profile"""
    token_data = {
        'sub': str(profile.user_id),
        'email': profile.email,
        'role': profile.role.value
    }
    token = create_access_token(token_data)
    return {'Authorization': f'Bearer {token}'}


def student_payload(**overrides) -> dict:
    """Valid POST /students body"""
    data = {
        'full_name': fake.name(),
        'email': fake.unique.email(),
        'phone': '01712345678',
        'roll_no': str(fake.unique.random_int(min=2000000, max=2999999)),
        'term': '2-1',
        'session': '2021',
    }
    data.update(overrides)
    return data


def teacher_payload(**overrides) -> dict:
    """Valid POST /teachers body"""
    data = {
        'full_name': fake.name(),
        'email': fake.unique.email(),
        'phone': '01812345678',
        'designation': 'LECTURER',
    }
    data.update(overrides)
    return data
