"""Binary snapshots of loaded objects.

Two shapes, both serialized with pandas' pickle support:

* workspace snapshots (``save`` / ``save_image`` / ``load``) hold several
  named objects and restore them under the same names;
* single-object snapshots (``save_rds`` / ``read_rds``) hold one object
  and hand it back for the caller to name.

Compression defaults to gzip and is detected from the file's leading bytes
when reading, so files keep whatever extension the caller likes.
"""
import bz2
import gzip
import lzma
import pickle
from pathlib import Path
from typing import Any, List, Mapping, Optional, Union

import pandas as pd

from tabload.core.config import settings
from tabload.core.errors import SnapshotFormatError
from tabload.core.logging import get_logger, LogTimer
from tabload.domain.workspace import Workspace, workspace as global_workspace

logger = get_logger(__name__)

PathLike = Union[str, Path]
Compress = Union[bool, str, None]

FORMAT_KEY = "__tabload_snapshot__"
WORKSPACE_FORMAT = "workspace"
FORMAT_VERSION = 1

_SCHEMES = {
    "gzip": "gzip",
    "gz": "gzip",
    "bzip2": "bz2",
    "bz2": "bz2",
    "xz": "xz",
    "none": None,
}

_MAGIC = (
    (b"\x1f\x8b", "gzip"),
    (b"BZh", "bz2"),
    (b"\xfd7zXZ\x00", "xz"),
)

_OPENERS = {
    None: open,
    "gzip": gzip.open,
    "bz2": bz2.open,
    "xz": lzma.open,
}

# pandas pickles with protocol 2 or later, which always opens with PROTO
PICKLE_PROTO = b"\x80"


def compression_scheme(compress: Compress) -> Optional[str]:
    """Map a ``compress`` argument to a pandas compression name.

    ``True`` means the configured default (gzip unless overridden).
    """
    if compress is None:
        return None
    if isinstance(compress, bool):
        if not compress:
            return None
        compress = settings.snapshot_compression
    key = str(compress).lower()
    if key not in _SCHEMES:
        raise ValueError(f"invalid 'compress' argument: {compress!r}")
    return _SCHEMES[key]


def sniff_compression(path: PathLike) -> Optional[str]:
    """Detect gzip, bzip2 or xz from the first bytes of a file."""
    with open(path, "rb") as fh:
        head = fh.read(6)
    for magic, scheme in _MAGIC:
        if head.startswith(magic):
            return scheme
    return None


def _is_workspace_envelope(obj: Any) -> bool:
    return isinstance(obj, dict) and obj.get(FORMAT_KEY) == WORKSPACE_FORMAT


def _read(path: PathLike) -> Any:
    scheme = sniff_compression(path)
    try:
        with _OPENERS[scheme](path, "rb") as fh:
            marker = fh.read(1)
    except (OSError, EOFError, lzma.LZMAError) as e:
        raise SnapshotFormatError(f"'{path}' is not a snapshot file: {e}") from e
    if marker != PICKLE_PROTO:
        raise SnapshotFormatError(f"'{path}' is not a snapshot file")

    try:
        return pd.read_pickle(path, compression=scheme)
    except (pickle.UnpicklingError, EOFError, ValueError, ImportError,
            AttributeError, TypeError, IndexError, KeyError) as e:
        raise SnapshotFormatError(f"'{path}' is not a snapshot file: {e}") from e


# ----------------
# SINGLE OBJECT
# ----------------

def save_rds(obj: Any, file: PathLike, compress: Compress = True) -> Path:
    """Serialize one object to ``file``."""
    path = Path(file)
    scheme = compression_scheme(compress)
    with LogTimer(logger, "save_rds", file=str(path), objects=1):
        pd.to_pickle(obj, path, compression=scheme)
    return path


def read_rds(file: PathLike) -> Any:
    """Restore the object saved by ``save_rds``.

    Raises:
        FileNotFoundError: If ``file`` does not exist
        SnapshotFormatError: If ``file`` holds a workspace snapshot
    """
    path = Path(file)
    with LogTimer(logger, "read_rds", file=str(path)):
        obj = _read(path)
    if _is_workspace_envelope(obj):
        raise SnapshotFormatError(
            f"'{path}' is a workspace snapshot; use load() to restore it"
        )
    return obj


# ----------------
# WORKSPACE
# ----------------

def _write_workspace(path: Path, names: List[str], pool: Mapping[str, Any],
                     compress: Compress, operation: str) -> None:
    envelope = {
        FORMAT_KEY: WORKSPACE_FORMAT,
        "version": FORMAT_VERSION,
        "names": names,
        "objects": {name: pool[name] for name in names},
    }
    with LogTimer(logger, operation, file=str(path), objects=len(names)):
        pd.to_pickle(envelope, path, compression=compression_scheme(compress))


def save(
    file: PathLike,
    *names: str,
    objects: Optional[Mapping[str, Any]] = None,
    workspace: Optional[Workspace] = None,
    compress: Compress = True,
) -> List[str]:
    """Save named objects to a workspace snapshot.

    Objects come from ``objects`` when given, otherwise they are looked up
    by name in ``workspace`` (the global workspace by default). With
    ``objects`` and no names, everything in ``objects`` is saved.

    Returns:
        The saved names, in order.

    Raises:
        KeyError: If a name is not found
    """
    pool: Mapping[str, Any]
    if objects is not None:
        pool = objects
    else:
        pool = workspace if workspace is not None else global_workspace
    selected = list(names) if names else (list(objects) if objects is not None else [])
    if not selected:
        raise ValueError("nothing to save: pass object names or an objects mapping")

    for name in selected:
        if name not in pool:
            raise KeyError(f"object '{name}' not found")

    _write_workspace(Path(file), selected, pool, compress, "save")
    return selected


def save_image(file: PathLike, workspace: Optional[Workspace] = None,
               compress: Compress = True) -> List[str]:
    """Save every object in the workspace."""
    ws = workspace if workspace is not None else global_workspace
    names = ws.ls()
    if not names:
        logger.warning(f"Saving an empty workspace to {file}")
    _write_workspace(Path(file), names, ws, compress, "save_image")
    return names


def load(file: PathLike, workspace: Optional[Workspace] = None) -> List[str]:
    """Restore a workspace snapshot, overwriting same-named objects.

    Returns:
        The restored names, in the order they were saved.

    Raises:
        FileNotFoundError: If ``file`` does not exist
        SnapshotFormatError: If ``file`` is not a workspace snapshot
    """
    path = Path(file)
    ws = workspace if workspace is not None else global_workspace
    with LogTimer(logger, "load", file=str(path)) as timer:
        envelope = _read(path)
        if not _is_workspace_envelope(envelope):
            raise SnapshotFormatError(
                f"'{path}' is not a workspace snapshot; use read_rds() for single objects"
            )
        version = envelope.get("version")
        if version != FORMAT_VERSION:
            raise SnapshotFormatError(f"unsupported snapshot version {version!r} in '{path}'")

        names = list(envelope["names"])
        for name in names:
            ws[name] = envelope["objects"][name]
        timer.update(objects=len(names))
    return names
