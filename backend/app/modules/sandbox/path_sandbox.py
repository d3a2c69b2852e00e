"""
Path Sandbox - confines untrusted relative paths to a project root

Every path the agent (or a preview request) supplies goes through resolve()
before any filesystem access. Containment is decided on the canonical form of
the path *after* joining it with the root, so composed traversal such as
"css/../../other" is caught even though it does not start with "..".
"""

import os
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Union

from app.core.exceptions import SandboxViolationError
from app.core.logging_config import logger


def _reject(relative_path: str, reason: str) -> SandboxViolationError:
    logger.warning(f"[Sandbox] Rejected {relative_path!r}: {reason}")
    return SandboxViolationError(relative_path, reason)


def _is_absolute(relative_path: str) -> bool:
    if relative_path.startswith(("/", "\\")):
        return True
    return PurePosixPath(relative_path).is_absolute() or PureWindowsPath(relative_path).drive != ""


def _starts_with_parent(relative_path: str) -> bool:
    first = relative_path.replace("\\", "/").split("/", 1)[0]
    return first == ".."


def is_within(root: str, candidate: str) -> bool:
    """Exact prefix containment: candidate == root or starts with root + separator"""
    return candidate == root or candidate.startswith(root + os.sep)


def resolve(root: Union[str, Path], relative_path: str) -> Path:
    """
    Resolve a relative path against a project root.

    Args:
        root: Project root directory (need not exist yet)
        relative_path: Untrusted path, e.g. "index.html" or "css/style.css"

    Returns:
        Absolute canonical path inside root

    Raises:
        SandboxViolationError: absolute path, leading "..", escape after
            canonicalization, empty input, NUL byte, unencodable text, or a
            symlink component
    """
    if not isinstance(relative_path, str):
        raise _reject(repr(relative_path), "Path must be a string")
    if relative_path == "":
        raise _reject(relative_path, "Path must not be empty")
    if "\x00" in relative_path:
        raise _reject(relative_path, "Path contains a NUL byte")
    try:
        relative_path.encode("utf-8")
    except UnicodeEncodeError:
        raise _reject(repr(relative_path), "Path is not valid UTF-8 text")
    if _is_absolute(relative_path):
        raise _reject(relative_path, "Absolute paths are not allowed")
    if _starts_with_parent(relative_path):
        raise _reject(relative_path, "Parent directory references are not allowed")

    canonical_root = os.path.realpath(root)
    # Join first, canonicalize second
    joined = os.path.join(canonical_root, relative_path)
    canonical = os.path.realpath(joined)

    if not is_within(canonical_root, canonical):
        raise _reject(relative_path, "Path is outside the project directory")

    _reject_symlinks(canonical_root, os.path.normpath(joined), relative_path)
    return Path(canonical)


def _reject_symlinks(canonical_root: str, normalized: str, relative_path: str) -> None:
    # realpath already followed any link, so walk the un-followed form and
    # refuse if any existing component between root and target is a link.
    if not is_within(canonical_root, normalized):
        # A link inside the root redirected the path back inside; still a link
        raise _reject(relative_path, "Symbolic links are not allowed")

    current = canonical_root
    remainder = os.path.relpath(normalized, canonical_root)
    if remainder == os.curdir:
        return
    for part in remainder.split(os.sep):
        current = os.path.join(current, part)
        if os.path.islink(current):
            raise _reject(relative_path, "Symbolic links are not allowed")
        if not os.path.lexists(current):
            return


class PathSandbox:
    """resolve() bound to a single root"""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(os.path.realpath(root))

    def resolve(self, relative_path: str) -> Path:
        return resolve(self.root, relative_path)

    def relative(self, absolute: Path) -> str:
        """POSIX-style path of an already-resolved path, relative to root"""
        return absolute.relative_to(self.root).as_posix()
