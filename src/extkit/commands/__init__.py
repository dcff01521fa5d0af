"""Command definitions and registry loading."""

from extkit.commands.base import CommandDefinition, CommandFieldError
from extkit.commands.loader import (
    derive_command_name,
    discover_command_files,
    get_command_by_name,
    load_command_file,
    load_registry,
    qualified_name,
    render_command_toml,
    validate_command_name,
    write_command_file,
)

__all__ = [
    "CommandDefinition",
    "CommandFieldError",
    "derive_command_name",
    "discover_command_files",
    "get_command_by_name",
    "load_command_file",
    "load_registry",
    "qualified_name",
    "render_command_toml",
    "validate_command_name",
    "write_command_file",
]
