"""Release archive creation."""

from __future__ import annotations

import logging
import os
import tarfile
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from extkit.errors import ArchiveWriteError
from extkit.manifest.base import Manifest

logger = logging.getLogger(__name__)

DEFAULT_EXCLUSIONS: tuple[str, ...] = (".git", ".github")
ARCHIVE_SUFFIX = ".tar.gz"


@dataclass(frozen=True)
class PackageResult:
    """Summary of a written archive."""

    output: Path
    files: tuple[str, ...]  # relative POSIX paths, in archive order


def _normalize_prefix(prefix: str) -> tuple[str, ...]:
    return PurePosixPath(prefix.replace("\\", "/").strip("/")).parts


def is_excluded(relative_path: str, exclusions: Sequence[str]) -> bool:
    """Check whether a relative path falls under any exclusion prefix.

    Prefixes match whole path components: ``.git`` excludes ``.git/config``
    but not ``.github/ci.yml`` or ``.gitignore``.
    """
    parts = PurePosixPath(relative_path).parts
    for prefix in exclusions:
        prefix_parts = _normalize_prefix(prefix)
        if prefix_parts and parts[: len(prefix_parts)] == prefix_parts:
            return True
    return False


def _raise(error: OSError) -> None:
    raise error


def collect_files(
    root: Path, exclusions: Sequence[str], skip: Path | None = None
) -> list[str]:
    """List every regular file under root that is not excluded.

    Excluded directories are not descended into. ``skip`` names one file to
    leave out (the archive being written, when it lives under root).

    Returns sorted relative POSIX paths.

    Raises:
        OSError: A directory under root cannot be listed.
    """
    skip_resolved = skip.resolve() if skip is not None else None
    files: list[str] = []

    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
        current = Path(dirpath)
        rel_dir = current.relative_to(root).as_posix()
        dirnames[:] = sorted(
            d
            for d in dirnames
            if not is_excluded(d if rel_dir == "." else f"{rel_dir}/{d}", exclusions)
        )
        for name in filenames:
            relative = name if rel_dir == "." else f"{rel_dir}/{name}"
            path = current / name
            if is_excluded(relative, exclusions) or not path.is_file():
                continue
            if skip_resolved is not None and path.resolve() == skip_resolved:
                continue
            files.append(relative)

    return sorted(files)


def build_archive(
    root: Path,
    output: Path,
    exclusions: Sequence[str] = DEFAULT_EXCLUSIONS,
) -> PackageResult:
    """Write a gzip-compressed tar of root, minus excluded paths.

    Members keep their relative paths and permission bits. Timestamps are
    taken from the files, so output is not byte-reproducible.

    Raises:
        ArchiveWriteError: Any I/O failure. The partial archive is removed.
    """
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        files = collect_files(root, exclusions, skip=output)
        with tarfile.open(output, "w:gz") as tar:
            for relative in files:
                tar.add(root / relative, arcname=relative, recursive=False)
    except (OSError, tarfile.TarError) as e:
        if output.is_file():
            logger.warning("Removing partial archive %s", output)
            output.unlink()
        raise ArchiveWriteError(output, str(e)) from e

    logger.debug("Packed %d file(s) from %s into %s", len(files), root, output)
    return PackageResult(output=output, files=tuple(files))


def default_archive_name(manifest: Manifest | None, root: Path) -> str:
    """Archive file name: ``<name>-<version>.tar.gz`` or ``<root>.tar.gz``."""
    if manifest is not None:
        return f"{manifest.name}-{manifest.version}{ARCHIVE_SUFFIX}"
    return f"{root.resolve().name}{ARCHIVE_SUFFIX}"


def list_archive(path: Path) -> list[str]:
    """Return the member names of an archive."""
    with tarfile.open(path, "r:*") as tar:
        return tar.getnames()
