"""
Sandbox Module - per-tenant file isolation

Components:
- PathSandbox: confines untrusted relative paths to a project root
- ProjectFileStore: atomic write / read / list / delete over one root
- ProjectLifecycle: ABSENT / BUILDING / READY derived from the root

Usage:
    from app.modules.sandbox import ProjectFileStore

    store = ProjectFileStore.for_project(project_id)
    await store.write("index.html", "<html></html>")
"""

from .path_sandbox import PathSandbox, resolve, is_within
from .file_store import ProjectFileStore
from .lifecycle import ProjectLifecycle, get_lifecycle, ENTRY_DOCUMENT

__all__ = [
    "PathSandbox",
    "resolve",
    "is_within",
    "ProjectFileStore",
    "ProjectLifecycle",
    "get_lifecycle",
    "ENTRY_DOCUMENT",
]
