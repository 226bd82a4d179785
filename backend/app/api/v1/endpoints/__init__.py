# API endpoints
from . import auth, students, teachers, accounts, health

__all__ = ["auth", "students", "teachers", "accounts", "health"]
