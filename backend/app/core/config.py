from pydantic_settings import BaseSettings
from typing import List, Any
import json
from pathlib import Path


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "Vibe Coding Platform"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    API_VERSION: str = "v1"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 3000

    # ==========================================
    # Database (project/user catalog)
    # ==========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./vibecoding.db"
    DB_ECHO: bool = False

    # ==========================================
    # Authentication (tokens are issued by the auth service)
    # ==========================================
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours

    # ==========================================
    # Claude AI
    # ==========================================
    ANTHROPIC_API_KEY: str = ""
    ANTHROPIC_BASE_URL: str = ""  # Empty means use default Anthropic URL
    CLAUDE_MODEL: str = "claude-sonnet-4-20250514"
    CLAUDE_MAX_TOKENS: int = 8192
    CLAUDE_TEMPERATURE: float = 0.7
    CLAUDE_REQUEST_TIMEOUT: int = 300  # seconds
    CLAUDE_CONNECT_TIMEOUT: int = 60  # seconds

    # ==========================================
    # Generation
    # ==========================================
    MAX_AGENT_STEPS: int = 20  # Model invocations per chat turn
    MAX_FILE_SIZE_BYTES: int = 1024 * 1024  # 1MB per generated file

    # ==========================================
    # Tenant storage and preview
    # ==========================================
    APPS_PATH: str = "./apps"  # One sub-directory per project id
    PREVIEW_DOMAIN: str = "localhost"  # {project_id}.{PREVIEW_DOMAIN}
    PREVIEW_SCHEME: str = "http"
    PREVIEW_PORT: int = 0  # Appended to preview URLs when non-zero (local dev)
    RESERVED_SUBDOMAINS_STR: str = "www,api,app"

    # ==========================================
    # CORS (stored as comma-separated string, parsed to list)
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://127.0.0.1:3000"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Get CORS origins as a list"""
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    @property
    def RESERVED_SUBDOMAINS(self) -> List[str]:
        return [s.strip().lower() for s in self.RESERVED_SUBDOMAINS_STR.split(',') if s.strip()]

    # ==========================================
    # Rate Limiting
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 60
    CHAT_RATE_LIMIT: str = "10/minute"
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Resolve once so every sandbox root shares the same canonical base
        self._apps_dir = Path(self.APPS_PATH).resolve()
        self._apps_dir.mkdir(exist_ok=True, parents=True)
        if self.LOG_FILE:
            Path(self.LOG_FILE).parent.mkdir(exist_ok=True, parents=True)

    @property
    def APPS_DIR(self) -> Path:
        return self._apps_dir

    def get_project_root(self, project_id: str) -> Path:
        """Filesystem root for a project. Never created here - tools create it lazily."""
        return self._apps_dir / project_id


settings = Settings()
