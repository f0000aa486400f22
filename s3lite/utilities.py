"""Utility functions for s3lite"""

import logging
import mimetypes
import os
from pathlib import Path
from typing import Iterator, Tuple

from s3lite.constants import DEFAULT_CONTENT_TYPE
from s3lite.exceptions import FileReadError


def join_key(*parts: str) -> str:
    """
    Join virtual directory parts into an object key.

    Empty parts are skipped and duplicated or surrounding ``/`` are removed.
    """
    segments = []
    for part in parts:
        if part:
            segments.extend(segment for segment in part.replace("\\", "/").split("/") if segment)
    return "/".join(segments)


def guess_content_type(path) -> str:
    """Content type of a file from its name, ``application/octet-stream`` if unknown"""
    content_type, _ = mimetypes.guess_type(str(path))
    return content_type or DEFAULT_CONTENT_TYPE


def read_file(file_path) -> bytes:
    """
    Read a whole local file.

    :raises FileReadError: If the path is not a readable file
    """
    try:
        with open(file_path, "rb") as f:
            return f.read()
    except OSError as e:
        raise FileReadError(f"Unable to read file {file_path}: {e}") from e


def ensure_readable_directory(path) -> Path:
    """
    :raises FileReadError: If ``path`` is not a readable directory
    """
    root = Path(path)
    if not root.is_dir():
        raise FileReadError(f"Not a directory: {path}")
    if not os.access(root, os.R_OK | os.X_OK):
        raise FileReadError(f"Directory is not readable: {path}")
    return root


def iter_directory(path, prefix: str = "") -> Iterator[Tuple[Path, str]]:
    """
    Walk a local directory tree and yield ``(file_path, key)`` for every regular file.

    Keys are the file path relative to ``path`` (``/`` separated), prefixed with the
    optional virtual directory ``prefix``. Files are yielded in a stable, sorted
    order; each call starts a new walk.

    :raises FileReadError: If ``path`` is not a readable directory
    """
    loggit = logging.getLogger("s3lite.utilities")
    root = ensure_readable_directory(path)

    def _walk():
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames.sort()
            for filename in sorted(filenames):
                file_path = Path(dirpath) / filename
                if not file_path.is_file():
                    loggit.debug("Skipping %s, not a regular file", file_path)
                    continue
                relative = file_path.relative_to(root).as_posix()
                yield file_path, join_key(prefix, relative)

    return _walk()
