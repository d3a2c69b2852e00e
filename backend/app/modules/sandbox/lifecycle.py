"""
Project lifecycle derived from the sandbox root.

The router and the API both ask this module instead of probing the
filesystem themselves, so they always agree on whether a site is live.
"""

import enum
import os
from pathlib import Path
from typing import Union


ENTRY_DOCUMENT = "index.html"


class ProjectLifecycle(str, enum.Enum):
    """Where a tenant's generated site currently stands"""
    ABSENT = "absent"      # no root directory yet
    BUILDING = "building"  # root exists, entry document not written yet
    READY = "ready"        # entry document present


def get_lifecycle(root: Union[str, Path]) -> ProjectLifecycle:
    root = Path(root)
    if not root.is_dir():
        return ProjectLifecycle.ABSENT
    entry = root / ENTRY_DOCUMENT
    if entry.is_file() and not os.path.islink(entry):
        return ProjectLifecycle.READY
    return ProjectLifecycle.BUILDING
