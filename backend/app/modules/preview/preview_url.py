"""
Preview URL Generation - Single Source of Truth

Every generated site is reachable on its own subdomain:
    Production:  https://{project_id}.{PREVIEW_DOMAIN}/
    Local dev:   http://{project_id}.localhost:3000/

Modern browsers resolve *.localhost to the loopback address, so subdomain
previews work locally without touching /etc/hosts.
"""

from urllib.parse import urlparse

from app.core.config import settings


def get_preview_url(project_id: str) -> str:
    """Public URL of a project's live preview"""
    host = f"{project_id}.{settings.PREVIEW_DOMAIN.strip('.')}"
    if settings.PREVIEW_PORT:
        host = f"{host}:{settings.PREVIEW_PORT}"
    return f"{settings.PREVIEW_SCHEME}://{host}/"


def validate_preview_url(url: str) -> bool:
    """True if the URL looks like a preview URL under PREVIEW_DOMAIN"""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    hostname = parsed.hostname or ""
    return parsed.scheme in ("http", "https") and hostname.endswith("." + settings.PREVIEW_DOMAIN.strip("."))
