"""Release packaging."""

from extkit.packager.archive import (
    DEFAULT_EXCLUSIONS,
    PackageResult,
    build_archive,
    collect_files,
    default_archive_name,
    is_excluded,
    list_archive,
)

__all__ = [
    "DEFAULT_EXCLUSIONS",
    "PackageResult",
    "build_archive",
    "collect_files",
    "default_archive_name",
    "is_excluded",
    "list_archive",
]
