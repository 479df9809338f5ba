"""
Local staging manager.

Holds downloaded copies of remote files on disk between discovery and
processing. Layout: ``{root}/{user}/{remote_file_id}_{sanitized_name}``, where
the user and remote id are percent-encoded and only the display name is
sanitized (lossy).

Methods are synchronous filesystem calls; async callers wrap them in
``asyncio.to_thread``.

Dependencies: pathlib, os (stdlib)
System role: Filesystem staging area for the ingestion pipeline
"""

import logging
import os
import re
import tempfile
import time
from pathlib import Path
from urllib.parse import quote

from docsync.boundary.db.base import utcnow
from docsync.configs.staging import StagingSettings
from docsync.core.exceptions import StagingError, StagingNotFoundError
from docsync.models.staging import CleanupResult, DiskUsage, StagedFile

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9.-]")
_UNDERSCORE_RUNS = re.compile(r"_+")

SECONDS_PER_DAY = 24 * 60 * 60


def sanitize_name(name: str) -> str:
    """
    Make a name safe for use as a single path component.

    Characters outside ``[A-Za-z0-9.-]`` become ``_``, runs of ``_``
    collapse to one, and leading/trailing ``_`` are stripped.
    """
    safe = _UNDERSCORE_RUNS.sub("_", _UNSAFE_CHARS.sub("_", name)).strip("_")
    # "." and ".." would escape the user directory
    if safe in ("", ".", ".."):
        return "file"
    return safe


def encode_component(value: str) -> str:
    """
    Reversible, collision-free encoding of an identifier as one path component.

    Percent-encodes everything outside ``[A-Za-z0-9_.~-]`` (including ``%``
    itself), so distinct identifiers never share a path component.
    Ordinary user ids come out unchanged.

    Raises:
        StagingError: Empty identifier
    """
    if not value:
        raise StagingError("Cannot stage under an empty identifier")
    encoded = quote(value, safe="")
    # "." and ".." are the only outputs that name an existing directory
    if encoded in (".", ".."):
        return encoded.replace(".", "%2E")
    return encoded


class LocalStagingManager:
    """Filesystem staging area partitioned per user."""

    def __init__(self, settings: StagingSettings | None = None, root_dir: str | Path | None = None) -> None:
        """
        Initialize the staging manager.

        Args:
            settings: Staging settings (defaults read from the environment)
            root_dir: Explicit root, overriding settings
        """
        self._settings = settings or StagingSettings()
        self.root = Path(root_dir or self._settings.root_dir).resolve()

    def user_dir(self, user_id: str) -> Path:
        return self.root / encode_component(user_id)

    def local_path_for(self, user_id: str, remote_file_id: str, file_name: str) -> Path:
        """Deterministic staging path for one remote file."""
        # "_" in the id is encoded too, so the first "_" always ends the id
        file_id = encode_component(remote_file_id).replace("_", "%5F")
        return self.user_dir(user_id) / f"{file_id}_{sanitize_name(file_name)}"

    def save(self, user_id: str, remote_file_id: str, file_name: str, content: bytes) -> StagedFile:
        """
        Write a file to the staging area, replacing any previous copy.

        Content goes to a temporary file in the target directory first and
        is then renamed over the final path, so readers never see a partial
        file.

        Args:
            user_id: Owning user
            remote_file_id: Remote id (prefix of the staged name)
            file_name: Remote display name
            content: Raw bytes

        Returns:
            StagedFile: Absolute path, bytes written and timestamp

        Raises:
            StagingError: Directory creation or write failed
        """
        target = self.local_path_for(user_id, remote_file_id, file_name)
        tmp_path: str | None = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=target.parent, prefix=".staging-", suffix=".part")
            with os.fdopen(fd, "wb") as handle:
                handle.write(content)
            os.replace(tmp_path, target)
            tmp_path = None
        except OSError as e:
            raise StagingError(f"Failed to stage file: {e}", local_path=str(target)) from e
        finally:
            if tmp_path is not None:
                Path(tmp_path).unlink(missing_ok=True)

        logger.debug(
            f"{__name__}:save - Staged {file_name}",
            extra={"user_id": user_id, "file_id": remote_file_id, "bytes": len(content)},
        )
        return StagedFile(local_path=str(target), size=len(content), downloaded_at=utcnow())

    def exists(self, local_path: str | Path) -> bool:
        return Path(local_path).is_file()

    def read(self, local_path: str | Path) -> bytes:
        """
        Read a staged file.

        Raises:
            StagingNotFoundError: File is absent
            StagingError: Any other read failure
        """
        path = Path(local_path)
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise StagingNotFoundError(
                f"Staged file not found: {path}", local_path=str(path)
            ) from e
        except OSError as e:
            raise StagingError(f"Failed to read staged file: {e}", local_path=str(path)) from e

    def delete(self, local_path: str | Path) -> bool:
        """
        Remove a staged file. Idempotent and never raises.

        Returns:
            bool: True if a file was removed
        """
        path = Path(local_path)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning(
                f"{__name__}:delete - Failed to remove staged file",
                extra={"local_path": str(path), "error": str(e)},
            )
            return False
        logger.debug(f"{__name__}:delete - Removed staged file", extra={"local_path": str(path)})
        return True

    def file_size(self, local_path: str | Path) -> int:
        """Size in bytes of a staged file, 0 when absent."""
        try:
            return Path(local_path).stat().st_size
        except OSError:
            return 0

    def cleanup_older_than(self, max_age_days: float | None = None) -> CleanupResult:
        """
        Remove staged files last modified before the age cutoff.

        Walks the whole tree bottom-up; user directories left empty are
        pruned. Files at or after the cutoff are never touched.

        Args:
            max_age_days: Age threshold (defaults to settings)

        Returns:
            CleanupResult: Files and directories removed, bytes freed
        """
        if max_age_days is None:
            max_age_days = self._settings.cleanup_max_age_days
        cutoff = time.time() - max_age_days * SECONDS_PER_DAY
        result = CleanupResult()

        if not self.root.is_dir():
            return result

        for dirpath, _dirnames, filenames in os.walk(self.root, topdown=False):
            directory = Path(dirpath)
            for name in filenames:
                path = directory / name
                try:
                    stat = path.stat()
                    if stat.st_mtime < cutoff:
                        path.unlink()
                        result.removed_files += 1
                        result.freed_bytes += stat.st_size
                except OSError as e:
                    logger.warning(
                        f"{__name__}:cleanup_older_than - Skipped {path}",
                        extra={"error": str(e)},
                    )

            if directory != self.root and not any(directory.iterdir()):
                try:
                    directory.rmdir()
                    result.removed_dirs += 1
                except OSError as e:
                    logger.warning(
                        f"{__name__}:cleanup_older_than - Could not prune {directory}",
                        extra={"error": str(e)},
                    )

        logger.info(
            f"{__name__}:cleanup_older_than - Removed {result.removed_files} files",
            extra={"removed_dirs": result.removed_dirs, "freed_bytes": result.freed_bytes},
        )
        return result

    def disk_usage(self) -> DiskUsage:
        """Total bytes and file count under the staging root."""
        usage = DiskUsage()
        if not self.root.is_dir():
            return usage
        for path in self.root.rglob("*"):
            if path.is_file():
                usage.total_bytes += self.file_size(path)
                usage.file_count += 1
        return usage

