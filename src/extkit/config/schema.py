"""Configuration schema and validation for extkit."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Literal, cast

SetupPolicyType = Literal["overwrite", "skip-existing"]
SETUP_POLICIES: tuple[str, ...] = ("overwrite", "skip-existing")


@dataclass
class ExtkitConfig:
    """extkit configuration schema.

    Directory fields are relative to the extension root unless absolute.
    None values indicate "not set" and will use defaults or be inherited.
    """

    # Extension layout
    manifest: str | None = None
    commands_dir: str | None = None
    templates_dir: str | None = None

    # Setup settings
    setup_policy: SetupPolicyType | None = None
    substitutions: dict[str, str] | None = None

    # Packaging settings
    exclude: tuple[str, ...] | None = None
    dist_dir: str | None = None

    def merge(self, other: ExtkitConfig) -> ExtkitConfig:
        """Merge another config into this one.

        Values from `other` take precedence when they are not None.
        Substitution mappings are merged key by key.
        Returns a new ExtkitConfig instance.
        """
        substitutions = self.substitutions
        if other.substitutions is not None:
            substitutions = {**(self.substitutions or {}), **other.substitutions}

        return ExtkitConfig(
            manifest=other.manifest if other.manifest is not None else self.manifest,
            commands_dir=(
                other.commands_dir
                if other.commands_dir is not None
                else self.commands_dir
            ),
            templates_dir=(
                other.templates_dir
                if other.templates_dir is not None
                else self.templates_dir
            ),
            setup_policy=(
                other.setup_policy
                if other.setup_policy is not None
                else self.setup_policy
            ),
            substitutions=substitutions,
            exclude=other.exclude if other.exclude is not None else self.exclude,
            dist_dir=other.dist_dir if other.dist_dir is not None else self.dist_dir,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary, excluding None values."""
        result: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if f.name == "exclude":
                result[f.name] = list(value)
            elif f.name == "substitutions":
                result[f.name] = dict(value)
            else:
                result[f.name] = value
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExtkitConfig:
        """Create an ExtkitConfig from a dictionary.

        Unknown keys are ignored. Type validation is performed.
        """
        manifest = _optional_str(data.get("manifest"))
        commands_dir = _optional_str(data.get("commands_dir"))
        templates_dir = _optional_str(data.get("templates_dir"))
        dist_dir = _optional_str(data.get("dist_dir"))

        setup_policy_raw = data.get("setup_policy")
        setup_policy: SetupPolicyType | None = None
        if setup_policy_raw in SETUP_POLICIES:
            setup_policy = cast(SetupPolicyType, setup_policy_raw)

        substitutions_raw = data.get("substitutions")
        substitutions: dict[str, str] | None = None
        if isinstance(substitutions_raw, dict):
            substitutions = {str(k): str(v) for k, v in substitutions_raw.items()}

        exclude_raw = data.get("exclude")
        exclude: tuple[str, ...] | None = None
        if isinstance(exclude_raw, list):
            exclude = tuple(str(p) for p in exclude_raw)

        return cls(
            manifest=manifest,
            commands_dir=commands_dir,
            templates_dir=templates_dir,
            setup_policy=setup_policy,
            substitutions=substitutions,
            exclude=exclude,
            dist_dir=dist_dir,
        )


def _optional_str(value: Any) -> str | None:
    return str(value) if value is not None else None


# Default configuration values (used when not specified anywhere)
DEFAULT_CONFIG = ExtkitConfig(
    manifest="extension.json",
    commands_dir="commands",
    templates_dir="templates",
    setup_policy="skip-existing",
    substitutions={},
    exclude=(".git", ".github"),
    dist_dir="dist",
)
