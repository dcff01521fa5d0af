"""Base command definition."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


class CommandFieldError(ValueError):
    """Raised by CommandDefinition.from_dict for missing or mistyped fields."""


@dataclass(frozen=True)
class CommandDefinition:
    """A named prompt command interpreted by the host runtime.

    The prompt body is opaque natural-language text. Nothing here inspects
    what it says, only that it is present and survives serialization.
    """

    name: str  # derived from the file path, e.g. "setup" or "git:commit"
    description: str
    prompt: str
    source: Path | None = field(default=None, compare=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the file form (name and source are not stored in the file)."""
        return {"description": self.description, "prompt": self.prompt}

    @classmethod
    def from_dict(
        cls, name: str, data: dict[str, Any], source: Path | None = None
    ) -> CommandDefinition:
        """Create from a parsed command file. Unknown keys are ignored.

        An empty prompt is accepted here; the loader reports it separately.
        """
        description = data.get("description", "")
        if not isinstance(description, str):
            raise CommandFieldError("'description' must be a string")
        if "\n" in description or "\r" in description:
            raise CommandFieldError("'description' must be a single line")

        if "prompt" not in data:
            raise CommandFieldError("missing required field 'prompt'")
        prompt = data["prompt"]
        if not isinstance(prompt, str):
            raise CommandFieldError("'prompt' must be a string")

        return cls(
            name=name,
            description=description,
            prompt=prompt,
            source=source,
        )

    @property
    def summary(self) -> str:
        """Description, or the first non-blank prompt line when there is none."""
        if self.description:
            return self.description
        for line in self.prompt.splitlines():
            if line.strip():
                return line.strip()
        return ""
