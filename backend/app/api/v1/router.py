from fastapi import APIRouter
from app.api.v1.endpoints import chat, projects, health

api_router = APIRouter()

# /health and /health/ready
api_router.include_router(health.router)

api_router.include_router(chat.router)
api_router.include_router(projects.router)
