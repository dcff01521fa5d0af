"""Extension manifest definition."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

NAME_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_-]*$")
VERSION_PATTERN = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-[0-9A-Za-z.-]+)?(?:\+[0-9A-Za-z.-]+)?$"
)

# Wire key for the context file reference
CONTEXT_FILE_KEY = "contextFileName"


class ManifestFieldError(ValueError):
    """Raised by Manifest.from_dict when a field is missing or mistyped."""


@dataclass(frozen=True)
class Manifest:
    """Top-level record identifying an extension installation.

    The host runtime uses ``name`` as the command prefix and loads
    ``context_file`` as ambient context for every session.
    """

    name: str
    version: str
    context_file: str  # relative to the manifest's directory
    source: Path | None = field(default=None, compare=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON-serializable wire form."""
        # source is runtime-only, not serialized
        return {
            "name": self.name,
            "version": self.version,
            CONTEXT_FILE_KEY: self.context_file,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], source: Path | None = None) -> Manifest:
        """Create a Manifest from parsed JSON. Unknown keys are ignored."""
        name = _require_str(data, "name")
        if not NAME_PATTERN.match(name):
            raise ManifestFieldError(
                f"'name' must be lowercase letters, digits, '-' or '_': {name!r}"
            )

        version = _require_str(data, "version")
        if not VERSION_PATTERN.match(version):
            raise ManifestFieldError(
                f"'version' is not a semantic version: {version!r}"
            )

        context_file = _require_str(data, CONTEXT_FILE_KEY)
        if Path(context_file).is_absolute() or context_file.startswith("/"):
            raise ManifestFieldError(
                f"'{CONTEXT_FILE_KEY}' must be a relative path: {context_file!r}"
            )

        return cls(
            name=name,
            version=version,
            context_file=context_file,
            source=source,
        )

    def resolve_context_file(self) -> Path:
        """Return the context file path resolved against the manifest's directory."""
        base = self.source.parent if self.source is not None else Path.cwd()
        return base / self.context_file


def _require_str(data: dict[str, Any], key: str) -> str:
    if key not in data:
        raise ManifestFieldError(f"missing required field '{key}'")
    value = data[key]
    if not isinstance(value, str) or not value.strip():
        raise ManifestFieldError(f"'{key}' must be a non-empty string")
    return value
