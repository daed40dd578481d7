"""Disposition of the original file after a verified conversion."""

from __future__ import annotations

import errno
import logging
import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from vshrink.domain.models import DispositionAction

logger = logging.getLogger(__name__)


class DispositionErrorType(Enum):
    """Categorization of disposition errors."""

    DISK_SPACE = "disk_space"
    PERMISSION = "permission"
    NOT_FOUND = "not_found"
    CROSS_DEVICE = "cross_device"
    DESTINATION_EXISTS = "destination_exists"
    IO_ERROR = "io_error"
    UNKNOWN = "unknown"


_ERRNO_TO_TYPE = {
    errno.ENOSPC: DispositionErrorType.DISK_SPACE,
    errno.EACCES: DispositionErrorType.PERMISSION,
    errno.EPERM: DispositionErrorType.PERMISSION,
    errno.ENOENT: DispositionErrorType.NOT_FOUND,
    errno.EXDEV: DispositionErrorType.CROSS_DEVICE,
    errno.EEXIST: DispositionErrorType.DESTINATION_EXISTS,
    errno.EIO: DispositionErrorType.IO_ERROR,
    errno.EROFS: DispositionErrorType.IO_ERROR,
}


@dataclass(frozen=True)
class DispositionResult:
    """Result of a disposition."""

    success: bool
    action: DispositionAction
    source_path: Path
    destination_path: Path | None = None
    error_message: str | None = None
    error_type: DispositionErrorType | None = None


class DispositionExecutor:
    """Deletes or moves an original file, or does nothing for dry runs."""

    def execute(
        self,
        action: DispositionAction,
        path: Path,
        backup_root: Path | None = None,
    ) -> DispositionResult:
        """Apply a disposition action to path.

        Move never overwrites: an existing file of the same name under
        backup_root is reported as a failure and the original stays put.

        Raises:
            ValueError: If action is MOVE and no backup_root was given.
        """
        if action is DispositionAction.DRYRUN:
            return DispositionResult(success=True, action=action, source_path=path)
        if action is DispositionAction.DELETE:
            return self._delete(path)
        if backup_root is None:
            raise ValueError("A backup directory is required for the move action")
        return self._move(path, backup_root)

    def _delete(self, path: Path) -> DispositionResult:
        action = DispositionAction.DELETE
        logger.info("Deleting original file: %s", path)
        try:
            path.unlink()
        except OSError as e:
            return self._failure(action, path, e)
        return DispositionResult(success=True, action=action, source_path=path)

    def _move(self, path: Path, backup_root: Path) -> DispositionResult:
        action = DispositionAction.MOVE
        destination = backup_root / path.name

        if destination.exists():
            message = f"Destination already exists: {destination}"
            logger.error("Move refused: %s", message)
            return DispositionResult(
                success=False,
                action=action,
                source_path=path,
                destination_path=destination,
                error_message=message,
                error_type=DispositionErrorType.DESTINATION_EXISTS,
            )

        logger.info("Moving original file: %s -> %s", path, destination)
        try:
            backup_root.mkdir(parents=True, exist_ok=True)
            shutil.move(str(path), str(destination))
        except OSError as e:
            return self._failure(action, path, e, destination)

        return DispositionResult(
            success=True,
            action=action,
            source_path=path,
            destination_path=destination,
        )

    @staticmethod
    def _failure(
        action: DispositionAction,
        path: Path,
        error: OSError,
        destination: Path | None = None,
    ) -> DispositionResult:
        error_type = _ERRNO_TO_TYPE.get(error.errno, DispositionErrorType.UNKNOWN)
        logger.error("%s failed (%s): %s", action.value, error_type.value, error)
        return DispositionResult(
            success=False,
            action=action,
            source_path=path,
            destination_path=destination,
            error_message=str(error),
            error_type=error_type,
        )
