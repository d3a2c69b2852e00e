# API endpoints
from . import chat, projects, health

__all__ = ["chat", "projects", "health"]
