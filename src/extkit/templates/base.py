"""Base template asset definition."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

# {{ token_name }}, whitespace inside the braces optional
PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")


class DistributionPolicy(str, Enum):
    """What to do when a destination file already exists."""

    OVERWRITE = "overwrite"
    SKIP_EXISTING = "skip-existing"


def find_placeholders(text: str) -> list[str]:
    """Return the sorted, de-duplicated token names used in text."""
    return sorted({m.group(1) for m in PLACEHOLDER_PATTERN.finditer(text)})


@dataclass(frozen=True)
class TemplateAsset:
    """A text file distributed into consumer projects during setup."""

    relative_path: str  # POSIX path under the templates root
    content: str
    source: Path | None = field(default=None, compare=False)

    @property
    def placeholders(self) -> list[str]:
        return find_placeholders(self.content)


@dataclass
class DistributionReport:
    """Outcome of a template distribution run."""

    written: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    notices: list[str] = field(default_factory=list)
