"""Utilities for working with the local blobstore used by the JSON record store."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Union

# The default storage lives alongside the package so a fresh checkout can run the
# application without a database server.
_PACKAGE_DIR = Path(__file__).resolve().parent

#: Name of the directory under :mod:`headlinescraper.blobstore` that contains the data.
DEFAULT_BLOB_SUBDIR = "data"

#: Default location where stored articles and notes are kept.
DEFAULT_BLOB_ROOT = _PACKAGE_DIR / DEFAULT_BLOB_SUBDIR


_Pathish = Union[str, Path]


def resolve_blob_root(blob_root: _Pathish | None = None) -> Path:
    """Return a :class:`Path` pointing at the blob root.

    ``blob_root`` may be either a string or :class:`Path`.  When ``None`` is
    provided, :data:`DEFAULT_BLOB_ROOT` is returned.  The path is not created on
    disk; callers can use :func:`ensure_blob_root` if they need to create it.
    """

    if blob_root is None:
        return DEFAULT_BLOB_ROOT
    if isinstance(blob_root, Path):
        return blob_root
    return Path(blob_root)


def ensure_blob_root(blob_root: _Pathish | None = None) -> Path:
    """Ensure the blob root exists and return it as a :class:`Path`."""

    root = resolve_blob_root(blob_root)
    root.mkdir(parents=True, exist_ok=True)
    return root


def load_json(path: Path, default: Any) -> Any:
    """Return the decoded contents of ``path`` or ``default`` when it does not exist."""

    if not path.exists():
        return default
    with path.open("r", encoding="utf-8") as file:
        return json.load(file)


def store_json(path: Path, payload: Any) -> None:
    """Write ``payload`` to ``path`` as UTF-8 JSON, replacing the file atomically."""

    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with tmp_path.open("w", encoding="utf-8") as file:
        json.dump(payload, file, ensure_ascii=False, indent=2)
    os.replace(tmp_path, path)


__all__ = [
    "DEFAULT_BLOB_ROOT",
    "DEFAULT_BLOB_SUBDIR",
    "ensure_blob_root",
    "load_json",
    "resolve_blob_root",
    "store_json",
]
