"""Manifest loading and saving."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from extkit.errors import MalformedManifest, MissingContextFile
from extkit.manifest.base import Manifest, ManifestFieldError

logger = logging.getLogger(__name__)

# Constants
MANIFEST_FILENAME = "extension.json"


def find_manifest(root: Path, filename: str = MANIFEST_FILENAME) -> Path | None:
    """Return the manifest path under root, or None if there is none."""
    candidate = root / filename
    if candidate.is_file():
        return candidate
    return None


def load_manifest(path: Path, filename: str = MANIFEST_FILENAME) -> Manifest:
    """Load and validate a manifest.

    Args:
        path: The manifest file, or a directory containing ``filename``.
        filename: Manifest file name used when ``path`` is a directory.

    Raises:
        MalformedManifest: The file is absent, not a JSON object, or has
            missing or mistyped fields.
        MissingContextFile: The context file reference does not resolve.
    """
    manifest_path = path / filename if path.is_dir() else path
    if not manifest_path.is_file():
        raise MalformedManifest(manifest_path, "file not found")

    try:
        with manifest_path.open(encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedManifest(manifest_path, str(e)) from e

    if not isinstance(data, dict):
        raise MalformedManifest(manifest_path, "top-level value must be an object")

    try:
        manifest = Manifest.from_dict(data, source=manifest_path)
    except ManifestFieldError as e:
        raise MalformedManifest(manifest_path, str(e)) from e

    context_path = manifest.resolve_context_file()
    if not context_path.is_file():
        raise MissingContextFile(manifest_path, context_path)

    logger.debug(
        "Loaded manifest %s %s from %s", manifest.name, manifest.version, manifest_path
    )
    return manifest


def save_manifest(manifest: Manifest, path: Path) -> None:
    """Save a manifest as JSON.

    Creates parent directories if needed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(manifest.to_dict(), f, indent=2)
        f.write("\n")
