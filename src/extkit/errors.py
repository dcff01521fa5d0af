"""Error types raised by extkit loaders, the distributor and the packager."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


class ExtkitError(Exception):
    """Base class for every extkit validation or I/O failure."""


class MalformedManifest(ExtkitError):
    """Raised when the manifest is missing, unparsable or has bad fields."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Malformed manifest {path}: {reason}")


class MissingContextFile(ExtkitError):
    """Raised when the manifest's context file does not exist."""

    def __init__(self, manifest_path: Path, context_path: Path) -> None:
        self.manifest_path = manifest_path
        self.context_path = context_path
        super().__init__(
            f"Context file {context_path} referenced by {manifest_path} not found"
        )


class MalformedCommand(ExtkitError):
    """Raised when a command definition file cannot be parsed."""

    def __init__(self, file: Path, reason: str) -> None:
        self.file = file
        self.reason = reason
        super().__init__(f"Malformed command file {file}: {reason}")


class DuplicateCommand(ExtkitError):
    """Raised when two command files derive the same command name."""

    def __init__(self, name: str, files: Sequence[Path]) -> None:
        self.name = name
        self.files = tuple(files)
        joined = ", ".join(str(f) for f in self.files)
        super().__init__(f"Duplicate command '{name}' defined by: {joined}")


class EmptyPrompt(ExtkitError):
    """Raised when a command file has an empty prompt body."""

    def __init__(self, file: Path) -> None:
        self.file = file
        super().__init__(f"Command file {file} has an empty prompt")


class TemplateRootNotFound(ExtkitError):
    """Raised when the templates source directory does not exist."""

    def __init__(self, root: Path) -> None:
        self.root = root
        super().__init__(f"Templates directory not found: {root}")


class MalformedTemplate(ExtkitError):
    """Raised when a template file is not valid UTF-8 text."""

    def __init__(self, file: Path, reason: str) -> None:
        self.file = file
        self.reason = reason
        super().__init__(f"Malformed template {file}: {reason}")


class UnresolvedPlaceholder(ExtkitError):
    """Raised when a template uses a token with no substitution."""

    def __init__(self, token: str, file: str) -> None:
        self.token = token
        self.file = file
        super().__init__(f"Unresolved placeholder '{token}' in template {file}")


class DestinationUnwritable(ExtkitError):
    """Raised when template distribution cannot write to the destination.

    ``failed`` lists every relative path that did not get written, ``written``
    the ones that did before the failure.
    """

    def __init__(
        self,
        path: Path,
        reason: str,
        failed: Sequence[str] = (),
        written: Sequence[str] = (),
    ) -> None:
        self.path = path
        self.reason = reason
        self.failed = tuple(failed)
        self.written = tuple(written)
        message = f"Cannot write to {path}: {reason}"
        if self.failed:
            message += f" ({len(self.failed)} file(s) not written)"
        super().__init__(message)


class ArchiveWriteError(ExtkitError):
    """Raised when the release archive cannot be written."""

    def __init__(self, output: Path, reason: str) -> None:
        self.output = output
        self.reason = reason
        super().__init__(f"Failed to write archive {output}: {reason}")
