from __future__ import annotations

import logging
import os
import uuid
from pathlib import Path
from typing import Iterable, Optional

from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)


def file_size(file: FileStorage) -> int:
    stream = file.stream
    pos = stream.tell()
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(pos)
    return size


def extension_of(filename: str) -> str:
    return filename.rsplit(".", 1)[-1].lower() if "." in filename else ""


class UploadStorage:
    """Stores attachments below one root folder.

    Paths handed back to callers (and saved on records) are relative to the
    root, e.g. ``warnings/3f2a..._notice.pdf``; they are served under
    ``/storage/<path>``.
    """

    def __init__(self, root: str | Path):
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def check(self, file: FileStorage, *, field: str, extensions: Iterable[str], max_bytes: int) -> None:
        filename = file.filename or ""
        allowed = frozenset(extensions)
        if extension_of(filename) not in allowed:
            raise ValidationError.for_field(field, f"The {field} must be a file of type: {', '.join(sorted(allowed))}.")
        if file_size(file) > max_bytes:
            raise ValidationError.for_field(
                field, f"The {field} may not be greater than {max_bytes // 1024} kilobytes."
            )

    def save(self, file: FileStorage, *, folder: str, field: str, extensions: Iterable[str], max_bytes: int) -> str:
        self.check(file, field=field, extensions=extensions, max_bytes=max_bytes)
        name = secure_filename(file.filename or "") or f"upload.{extension_of(file.filename or '')}"
        relative = f"{folder}/{uuid.uuid4().hex}_{name}"
        target = self._root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        # the same upload may be stored once per created record
        file.stream.seek(0)
        file.save(str(target))
        logger.info("Stored upload %s", relative)
        return relative

    def delete(self, relative: Optional[str]) -> None:
        if not relative:
            return
        target = self.resolve(relative)
        if target is not None and target.is_file():
            target.unlink()
            logger.info("Deleted upload %s", relative)

    def resolve(self, relative: str) -> Optional[Path]:
        """Absolute path for ``relative``; None when it escapes the root."""
        root = self._root.resolve()
        target = (root / relative).resolve()
        if root != target and root not in target.parents:
            return None
        return target
