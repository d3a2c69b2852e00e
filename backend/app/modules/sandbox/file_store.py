"""
Project File Store - write/read/list/delete over one project root

Every operation resolves its path through the PathSandbox first; a violation
is raised before any storage is touched. Writes are whole-file atomic
replaces (temp file in the same directory + os.replace) so concurrent readers
and writers never observe a half-written file.

File I/O goes through aiofiles and directory walks run in the default
executor, so a slow disk never blocks other connections.
"""

import asyncio
import os
import re
import uuid
from pathlib import Path
from typing import List, Optional, Union

import aiofiles
import aiofiles.os

from app.core.config import settings
from app.core.exceptions import FileNotFoundInProjectError, FileOperationError
from app.core.logging_config import logger
from app.modules.sandbox.path_sandbox import PathSandbox


TEMP_SUFFIX = ".vibetmp"
# ".<name>.<32 hex>.vibetmp", exactly what write() creates next to its target
TEMP_NAME_PATTERN = re.compile(r"^\..+\.[0-9a-f]{32}" + re.escape(TEMP_SUFFIX) + "$")


def is_temp_name(name: str) -> bool:
    return TEMP_NAME_PATTERN.match(name) is not None


class ProjectFileStore:
    """
    File primitives for a single project root.

    The root directory is created lazily by the first write, never by the
    constructor.
    """

    def __init__(self, root: Union[str, Path], max_file_size: Optional[int] = None):
        self.sandbox = PathSandbox(root)
        self.root = self.sandbox.root
        self.max_file_size = max_file_size or settings.MAX_FILE_SIZE_BYTES

    @classmethod
    def for_project(cls, project_id: str) -> "ProjectFileStore":
        return cls(settings.get_project_root(project_id))

    def exists(self) -> bool:
        return self.root.is_dir()

    # ==================== WRITE ====================

    async def write(self, path: str, content: str) -> str:
        """
        Create or replace a file.

        Returns:
            The normalized relative path that was written
        """
        target = self.sandbox.resolve(path)
        if target == self.root:
            raise FileOperationError(path, "Path must name a file, not the project directory")
        if is_temp_name(target.name):
            raise FileOperationError(path, f"{target.name} is reserved for in-progress writes")

        try:
            data = content.encode("utf-8")
        except UnicodeEncodeError as e:
            raise FileOperationError(path, f"Content for {path} is not valid UTF-8 text: {e.reason}")
        if len(data) > self.max_file_size:
            raise FileOperationError(
                path, f"File {path} is too large ({len(data)} bytes, max {self.max_file_size})"
            )

        if await aiofiles.os.path.isdir(target):
            raise FileOperationError(path, f"{path} is a directory")

        tmp_path = target.parent / f".{target.name}.{uuid.uuid4().hex}{TEMP_SUFFIX}"
        try:
            await aiofiles.os.makedirs(target.parent, exist_ok=True)
            async with aiofiles.open(tmp_path, "wb") as f:
                await f.write(data)
                await f.flush()
            await aiofiles.os.replace(tmp_path, target)
        except OSError as e:
            await self._discard(tmp_path)
            logger.error(f"[Sandbox] Write failed for {path}: {e}")
            raise FileOperationError(path, f"Failed to write {path}: {e.strerror or e}")

        relative = self.sandbox.relative(target)
        logger.debug(f"[Sandbox] Wrote {relative} ({len(data)} bytes)")
        return relative

    async def _discard(self, tmp_path: Path) -> None:
        try:
            await aiofiles.os.remove(tmp_path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"[Sandbox] Could not remove temp file {tmp_path.name}: {e}")

    # ==================== READ ====================

    async def read(self, path: str) -> str:
        target = self.sandbox.resolve(path)
        if not await aiofiles.os.path.isfile(target):
            raise FileNotFoundInProjectError(path)

        try:
            async with aiofiles.open(target, "r", encoding="utf-8") as f:
                return await f.read()
        except FileNotFoundError:
            # Deleted between the check and the open
            raise FileNotFoundInProjectError(path)
        except UnicodeDecodeError:
            raise FileOperationError(path, f"{path} is not a UTF-8 text file")
        except OSError as e:
            raise FileOperationError(path, f"Failed to read {path}: {e.strerror or e}")

    # ==================== LIST ====================

    async def list(self, subdir: Optional[str] = None) -> List[str]:
        """
        Recursively list files (directories elided), depth-first.

        Paths are POSIX-style and relative to the project root, even when a
        subdirectory is listed. Entries of one directory are sorted by name.
        """
        if not subdir:
            if not self.exists():
                return []
            start = self.root
        else:
            start = self.sandbox.resolve(subdir)
            if not await aiofiles.os.path.isdir(start):
                raise FileNotFoundInProjectError(subdir, kind="Directory")

        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, self._walk, start)
        except OSError as e:
            raise FileOperationError(subdir or "", f"Failed to list {subdir or '/'}: {e.strerror or e}")

    def _walk(self, start: Path) -> List[str]:
        files: List[str] = []

        def visit(directory: str) -> None:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
            for entry in entries:
                if entry.is_symlink() or is_temp_name(entry.name):
                    continue
                if entry.is_dir(follow_symlinks=False):
                    visit(entry.path)
                elif entry.is_file(follow_symlinks=False):
                    files.append(Path(entry.path).relative_to(self.root).as_posix())

        visit(str(start))
        return files

    # ==================== DELETE ====================

    async def delete(self, path: str) -> str:
        target = self.sandbox.resolve(path)
        if await aiofiles.os.path.isdir(target):
            raise FileOperationError(path, f"{path} is a directory")
        if not await aiofiles.os.path.isfile(target):
            raise FileNotFoundInProjectError(path)

        try:
            await aiofiles.os.remove(target)
        except FileNotFoundError:
            raise FileNotFoundInProjectError(path)
        except OSError as e:
            logger.error(f"[Sandbox] Delete failed for {path}: {e}")
            raise FileOperationError(path, f"Failed to delete {path}: {e.strerror or e}")

        relative = self.sandbox.relative(target)
        logger.debug(f"[Sandbox] Deleted {relative}")
        return relative
