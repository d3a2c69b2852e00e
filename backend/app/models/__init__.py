# Re-export all models for convenient imports
from app.models.user import User
from app.models.project import Project

__all__ = [
    "User",
    "Project",
]
