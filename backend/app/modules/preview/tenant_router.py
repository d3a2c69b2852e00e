"""
Tenant Router - host label → project root

Preview URLs look like Vercel/Netlify ones:
    https://{project_id}.{PREVIEW_DOMAIN}/css/style.css

For every inbound host the router decides one of three outcomes:
1. SERVE        - the label names a project whose root exists; files are
                  served from that root only, through the PathSandbox
2. PLACEHOLDER  - the label is well formed but nothing has been generated
                  yet, so a "building" page is shown instead of an error
3. None         - not a tenant host; the request falls through to the app

This is a host-label multiplexer, not a reverse proxy.
"""

import enum
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Union

from app.core.config import settings
from app.core.exceptions import SandboxViolationError
from app.core.logging_config import logger
from app.modules.sandbox.lifecycle import ENTRY_DOCUMENT, ProjectLifecycle, get_lifecycle
from app.modules.sandbox.path_sandbox import PathSandbox


LABEL_PATTERN = re.compile(r"^[a-z0-9]+$")


class TenantRouteKind(str, enum.Enum):
    SERVE = "serve"
    PLACEHOLDER = "placeholder"


@dataclass
class TenantResolution:
    kind: TenantRouteKind
    project_id: str
    root: Path
    lifecycle: ProjectLifecycle


def strip_port(host: str) -> str:
    """Host header value without the port, lower-cased"""
    host = host.strip().lower()
    if host.startswith("["):
        # IPv6 literal, never a tenant host
        return host
    return host.split(":", 1)[0]


class TenantRouter:
    """
    Resolves tenant hosts under one base domain.

    Usage:
        router = TenantRouter()
        resolution = router.resolve("abc123.example.com")
        if resolution and resolution.kind == TenantRouteKind.SERVE:
            path = router.resolve_file(resolution, "/css/style.css")
    """

    def __init__(
        self,
        base_domain: Optional[str] = None,
        apps_dir: Optional[Union[str, Path]] = None,
        reserved: Optional[Iterable[str]] = None,
    ):
        self.base_domain = (base_domain or settings.PREVIEW_DOMAIN).lower().strip(".")
        self.apps_dir = Path(apps_dir) if apps_dir is not None else settings.APPS_DIR
        self.reserved = set(reserved if reserved is not None else settings.RESERVED_SUBDOMAINS)
        self._suffix = "." + self.base_domain

    def extract_label(self, host: str) -> Optional[str]:
        """Label immediately preceding the base domain, or None"""
        if not host:
            return None
        host = strip_port(host)
        if not host.endswith(self._suffix):
            return None
        label = host[:-len(self._suffix)]
        if not LABEL_PATTERN.match(label) or label in self.reserved:
            return None
        return label

    def resolve(self, host: str) -> Optional[TenantResolution]:
        label = self.extract_label(host)
        if label is None:
            return None

        root = self.apps_dir / label
        lifecycle = get_lifecycle(root)
        kind = TenantRouteKind.PLACEHOLDER if lifecycle == ProjectLifecycle.ABSENT else TenantRouteKind.SERVE
        return TenantResolution(kind=kind, project_id=label, root=root, lifecycle=lifecycle)

    def resolve_file(self, resolution: TenantResolution, request_path: str) -> Optional[Path]:
        """
        Map a request path to a file inside the tenant root.

        Returns None when the path escapes the root or names nothing servable;
        callers answer 404 in that case.
        """
        relative = request_path.lstrip("/")
        if relative == "" or relative.endswith("/"):
            relative += ENTRY_DOCUMENT

        sandbox = PathSandbox(resolution.root)
        try:
            target = sandbox.resolve(relative)
            if target.is_dir():
                # The entry document goes through the same symlink checks
                target = sandbox.resolve(f"{relative.rstrip('/')}/{ENTRY_DOCUMENT}")
        except SandboxViolationError:
            logger.warning(
                f"[TenantRouter] Blocked {request_path!r} for {resolution.project_id}",
                extra={"event_type": "tenant_path_blocked", "tenant": resolution.project_id},
            )
            return None

        if not target.is_file():
            return None
        return target

    def wants_placeholder(self, resolution: TenantResolution, request_path: str) -> bool:
        """The entry page of a site whose index.html is not written yet"""
        if resolution.kind == TenantRouteKind.PLACEHOLDER:
            return True
        return resolution.lifecycle == ProjectLifecycle.BUILDING and request_path.strip("/") in ("", ENTRY_DOCUMENT)


def render_placeholder(project_id: str) -> str:
    """Self-refreshing page shown while a site is being generated"""
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta http-equiv="refresh" content="3">
  <title>Building {project_id}…</title>
  <style>
    body {{ font-family: system-ui, sans-serif; display: flex; align-items: center;
           justify-content: center; height: 100vh; margin: 0; color: #444; }}
  </style>
</head>
<body>
  <div>
    <h1>Your site is being built</h1>
    <p>Project <code>{project_id}</code> is still being generated. This page refreshes automatically.</p>
  </div>
</body>
</html>
"""
