"""
Preview Module - live preview of generated sites on tenant subdomains
"""

from .tenant_router import (
    TenantRouter,
    TenantResolution,
    TenantRouteKind,
    LABEL_PATTERN,
    render_placeholder,
    strip_port,
)
from .preview_url import get_preview_url

__all__ = [
    "TenantRouter",
    "TenantResolution",
    "TenantRouteKind",
    "LABEL_PATTERN",
    "render_placeholder",
    "strip_port",
    "get_preview_url",
]
