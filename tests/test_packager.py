"""Tests for release packaging."""

import os
import tarfile
from pathlib import Path
from unittest.mock import patch

import pytest

from extkit.errors import ArchiveWriteError
from extkit.manifest import Manifest
from extkit.packager import (
    build_archive,
    collect_files,
    default_archive_name,
    is_excluded,
    list_archive,
)


@pytest.fixture
def extension(tmp_path: Path) -> Path:
    """Create an extension tree with VCS and CI directories."""
    root = tmp_path / "ext"
    files = {
        "extension.json": "{}",
        "CONTEXT.md": "# Context\n",
        "commands/setup.toml": 'prompt = "setup"\n',
        "templates/workflow.md": "# {{ project_name }}\n",
        ".gitignore": "dist/\n",
        ".git/config": "[core]\n",
        ".git/objects/ab/cdef": "blob",
        ".github/workflows/release.yml": "on: push\n",
    }
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


class TestIsExcluded:
    """Tests for exclusion prefix matching."""

    @pytest.mark.parametrize(
        "path,expected",
        [
            (".git", True),
            (".git/config", True),
            (".github/workflows/ci.yml", False),
            (".gitignore", False),
            ("docs/.git/config", False),
        ],
    )
    def test_matches_whole_components(self, path: str, expected: bool) -> None:
        """Test that prefixes match path components, not raw strings."""
        assert is_excluded(path, [".git"]) is expected

    def test_multi_component_prefix(self) -> None:
        """Test that a nested prefix excludes only that subtree."""
        assert is_excluded("docs/drafts/a.md", ["docs/drafts/"])
        assert not is_excluded("docs/final/a.md", ["docs/drafts/"])

    def test_empty_exclusions(self) -> None:
        """Test that nothing is excluded by an empty list."""
        assert not is_excluded(".git/config", [])


class TestCollectFiles:
    """Tests for collecting archive members."""

    def test_excludes_prefixes(self, extension: Path) -> None:
        """Test that excluded trees are left out and the rest kept."""
        files = collect_files(extension, [".git", ".github"])

        assert files == [
            ".gitignore",
            "CONTEXT.md",
            "commands/setup.toml",
            "extension.json",
            "templates/workflow.md",
        ]

    def test_no_exclusions_includes_everything(self, extension: Path) -> None:
        """Test that without exclusions hidden trees are included."""
        files = collect_files(extension, [])

        assert ".git/objects/ab/cdef" in files
        assert ".github/workflows/release.yml" in files


class TestBuildArchive:
    """Tests for build_archive."""

    def test_archive_contents(self, extension: Path, tmp_path: Path) -> None:
        """Test that excluded prefixes are absent and other files are exact."""
        output = tmp_path / "out" / "ext.tar.gz"

        result = build_archive(extension, output, [".git", ".github"])

        names = list_archive(output)
        assert not any(n == ".git" or n.startswith(".git/") for n in names)
        assert not any(n.startswith(".github") for n in names)
        assert sorted(names) == list(result.files)

        with tarfile.open(output, "r:gz") as tar:
            for relative in result.files:
                member = tar.extractfile(relative)
                assert member is not None
                assert member.read() == (extension / relative).read_bytes()

    def test_preserves_permissions(self, extension: Path, tmp_path: Path) -> None:
        """Test that permission bits are stored."""
        script = extension / "install.sh"
        script.write_text("#!/bin/sh\n")
        script.chmod(0o755)
        output = tmp_path / "ext.tar.gz"

        build_archive(extension, output, [".git"])

        with tarfile.open(output, "r:gz") as tar:
            assert tar.getmember("install.sh").mode & 0o777 == 0o755

    def test_output_inside_root_not_included(self, extension: Path) -> None:
        """Test that the archive never contains itself."""
        output = extension / "dist" / "ext.tar.gz"

        result = build_archive(extension, output, [".git", ".github"])

        assert "dist/ext.tar.gz" not in result.files
        assert "dist/ext.tar.gz" not in list_archive(output)

    def test_write_error_raises(self, extension: Path, tmp_path: Path) -> None:
        """Test that an unwritable output path raises ArchiveWriteError."""
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        output = blocker / "ext.tar.gz"

        with pytest.raises(ArchiveWriteError) as exc_info:
            build_archive(extension, output, [".git"])
        assert exc_info.value.output == output

    def test_unlistable_directory_raises(
        self, extension: Path, tmp_path: Path
    ) -> None:
        """Test that a directory that cannot be read fails the build."""
        real_scandir = os.scandir
        output = tmp_path / "ext.tar.gz"

        def scandir(path: str = ".") -> object:
            if Path(path).name == "commands":
                raise PermissionError(13, "Permission denied", str(path))
            return real_scandir(path)

        with (
            patch("os.scandir", side_effect=scandir),
            pytest.raises(ArchiveWriteError, match="Permission denied"),
        ):
            build_archive(extension, output, [".git"])

        assert not output.exists()

    def test_default_archive_name(self, tmp_path: Path) -> None:
        """Test archive naming with and without a manifest."""
        manifest = Manifest("conductor", "0.2.0", "CONTEXT.md")
        root = tmp_path / "my-ext"

        assert default_archive_name(manifest, root) == "conductor-0.2.0.tar.gz"
        assert default_archive_name(None, root) == "my-ext.tar.gz"
