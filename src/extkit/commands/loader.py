"""Command discovery, loading and serialization."""

from __future__ import annotations

import json
import logging
import tomllib
from pathlib import Path

from extkit.commands.base import CommandDefinition, CommandFieldError
from extkit.errors import DuplicateCommand, EmptyPrompt, MalformedCommand
from extkit.manifest.base import Manifest

logger = logging.getLogger(__name__)

# Constants
COMMAND_SUFFIX = ".toml"
NAME_SEPARATOR = ":"


def discover_command_files(root: Path) -> list[Path]:
    """Find every command file below root, sorted by path.

    Subdirectories namespace their commands (``git/commit.toml``).
    Returns an empty list when root does not exist.
    """
    if not root.is_dir():
        return []
    return sorted(p for p in root.rglob(f"*{COMMAND_SUFFIX}") if p.is_file())


def derive_command_name(path: Path, root: Path) -> str:
    """Derive the command name exposed to the host from a file path.

    ``setup.toml`` -> ``setup``, ``git/commit.toml`` -> ``git:commit``.
    Names keep the case of the path exactly.
    """
    relative = path.relative_to(root).with_suffix("")
    return NAME_SEPARATOR.join(relative.parts)


def qualified_name(manifest: Manifest, command: CommandDefinition) -> str:
    """Return the manifest-prefixed name the host exposes, e.g. ``ext:setup``."""
    return f"{manifest.name}{NAME_SEPARATOR}{command.name}"


def load_command_file(path: Path, root: Path) -> CommandDefinition:
    """Parse a single command file.

    Raises:
        MalformedCommand: The file is unreadable, not valid TOML, or its
            fields are missing or mistyped.
        EmptyPrompt: The prompt body is empty or whitespace only.
    """
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
        raise MalformedCommand(path, str(e)) from e

    name = derive_command_name(path, root)
    try:
        command = CommandDefinition.from_dict(name, data, source=path)
    except CommandFieldError as e:
        raise MalformedCommand(path, str(e)) from e

    if not command.prompt.strip():
        raise EmptyPrompt(path)

    return command


def load_registry(root: Path) -> dict[str, CommandDefinition]:
    """Load every command below root, keyed by derived name.

    A single bad file fails the whole load; nothing is skipped.

    Raises:
        MalformedCommand, EmptyPrompt: From the first file that fails.
        DuplicateCommand: Two files derive the same name, or names that
            differ only in case.
    """
    commands: dict[str, CommandDefinition] = {}
    # Names differing only in case collide on case-insensitive filesystems
    folded: dict[str, CommandDefinition] = {}

    for path in discover_command_files(root):
        command = load_command_file(path, root)
        existing = folded.get(command.name.casefold())
        if existing is not None:
            first = existing.source if existing.source is not None else path
            raise DuplicateCommand(command.name, [first, path])
        commands[command.name] = command
        folded[command.name.casefold()] = command
        logger.debug("Loaded command %s from %s", command.name, path)

    return dict(sorted(commands.items()))


def get_command_by_name(root: Path, name: str) -> CommandDefinition | None:
    """Get a specific command by name, or None if it is not defined."""
    return load_registry(root).get(name)


def _toml_basic_string(value: str) -> str:
    # JSON string escapes are a subset of TOML basic-string escapes, except
    # that TOML also requires DEL to be escaped.
    return json.dumps(value, ensure_ascii=False).replace("\x7f", "\\u007f")


def _fits_multiline_literal(value: str) -> bool:
    if "'''" in value or value.endswith("'"):
        return False
    return not any(
        (ord(ch) < 0x20 and ch not in "\n\t") or ch == "\x7f" for ch in value
    )


def render_command_toml(command: CommandDefinition) -> str:
    """Serialize a command to TOML that parses back to the same text.

    Prompts go in a multi-line literal string when their content allows it
    and fall back to an escaped basic string otherwise.
    """
    lines = [f"description = {_toml_basic_string(command.description)}"]
    if _fits_multiline_literal(command.prompt):
        # The newline right after the opening delimiter is trimmed by parsers.
        lines.append(f"prompt = '''\n{command.prompt}'''")
    else:
        lines.append(f"prompt = {_toml_basic_string(command.prompt)}")
    return "\n".join(lines) + "\n"


def validate_command_name(name: str) -> None:
    """Check that a name maps to a file inside the commands directory.

    Raises:
        CommandFieldError: A segment is empty, ``.`` or ``..``, or holds a
            path separator.
    """
    for segment in name.split(NAME_SEPARATOR):
        if not segment or segment in (".", "..") or "/" in segment or "\\" in segment:
            raise CommandFieldError(
                f"invalid command name {name!r}: use segments separated by "
                f"'{NAME_SEPARATOR}', e.g. 'git{NAME_SEPARATOR}commit'"
            )


def command_path_for_name(root: Path, name: str) -> Path:
    """Return the file path a command name maps to under root."""
    validate_command_name(name)
    parts = name.split(NAME_SEPARATOR)
    return root.joinpath(*parts[:-1], f"{parts[-1]}{COMMAND_SUFFIX}")


def write_command_file(command: CommandDefinition, root: Path) -> Path:
    """Write a new command file under root and return its path.

    Raises:
        CommandFieldError: The name does not map back to itself.
        FileExistsError: A file for this command name already exists.
    """
    path = command_path_for_name(root, command.name)
    if derive_command_name(path, root) != command.name:
        raise CommandFieldError(f"invalid command name {command.name!r}")
    if path.exists():
        raise FileExistsError(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_command_toml(command), encoding="utf-8")
    return path
