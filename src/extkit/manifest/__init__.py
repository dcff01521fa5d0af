"""Extension manifest definition and loading."""

from extkit.manifest.base import Manifest
from extkit.manifest.loader import (
    MANIFEST_FILENAME,
    find_manifest,
    load_manifest,
    save_manifest,
)

__all__ = [
    "MANIFEST_FILENAME",
    "Manifest",
    "find_manifest",
    "load_manifest",
    "save_manifest",
]
