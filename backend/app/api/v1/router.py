from fastapi import APIRouter
from app.api.v1.endpoints import auth, students, teachers, accounts, health

api_router = APIRouter()

# Deep health check endpoints (/health/live, /health/ready)
api_router.include_router(health.router)

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(students.router, prefix="/students", tags=["Students"])
api_router.include_router(teachers.router, prefix="/teachers", tags=["Teachers"])
api_router.include_router(accounts.router, prefix="/accounts", tags=["Accounts"])
