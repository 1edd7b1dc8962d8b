"""Fingerprint update content on disk.

The package hash is computed from a manifest rather than from raw bytes so
that a directory hashes the same regardless of file system order: every
file contributes ``"<relative/posix/path>:<sha256>"``, the sorted entries
are JSON-encoded and hashed again.
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
import zipfile
from collections.abc import Callable
from pathlib import Path

from otactl.core.result import Err, Ok, Result
from otactl.release import errors
from otactl.release.errors import ReleaseError
from otactl.release.model import BundleDescriptor

logger = logging.getLogger(__name__)

BINARY_SUFFIXES = frozenset({".zip", ".apk", ".ipa", ".aab", ".xap"})
IGNORED_NAMES = frozenset({".DS_Store", "__MACOSX", "Thumbs.db"})

_CHUNK = 1 << 16


def _now_ms() -> int:
    return int(time.time() * 1000)


def _file_sha256(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        while chunk := handle.read(_CHUNK):
            digest.update(chunk)
    return digest.hexdigest()


def _iter_files(root: Path) -> list[Path]:
    files: list[Path] = []
    for path in sorted(root.rglob("*")):
        rel = path.relative_to(root)
        if any(part in IGNORED_NAMES for part in rel.parts):
            continue
        if path.is_file():
            files.append(path)
    return files


def is_binary_bundle(path: Path) -> bool:
    """Archives and platform binaries are not update content."""
    if path.suffix.lower() in BINARY_SUFFIXES:
        return True
    return path.is_file() and zipfile.is_zipfile(path)


def manifest_hash(entries: list[str]) -> str:
    payload = json.dumps(sorted(entries), separators=(",", ":"))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def describe_bundle(
    path: Path, *, clock: Callable[[], int] = _now_ms
) -> Result[BundleDescriptor, ReleaseError]:
    """Hash ``path`` (a file or a directory) into a ``BundleDescriptor``.

    Binary archives are described, not refused: refusing them is a release
    rule and belongs to the state machine.
    """
    if not path.exists():
        return Err(errors.bundle_not_found(str(path)))

    try:
        if path.is_dir():
            files = _iter_files(path)
            entries = [f"{f.relative_to(path).as_posix()}:{_file_sha256(f)}" for f in files]
            size = sum(f.stat().st_size for f in files)
            is_directory = True
        else:
            entries = [f"{path.name}:{_file_sha256(path)}"]
            size = path.stat().st_size
            is_directory = False
        binary = is_binary_bundle(path)
    except OSError as e:
        logger.debug("cannot read bundle %s: %s", path, e)
        return Err(errors.bundle_not_found(str(path)))

    if size <= 0:
        return Err(errors.bundle_empty(str(path)))

    descriptor = BundleDescriptor(
        path=str(path),
        package_hash=manifest_hash(entries),
        size=size,
        upload_time=clock(),
        is_directory=is_directory,
        is_binary=binary,
    )
    logger.debug(
        "bundle %s: %d file(s), %d bytes, hash %s",
        path,
        len(entries),
        size,
        descriptor.package_hash,
    )
    return Ok(descriptor)
