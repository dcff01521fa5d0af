"""Copy templates into a consumer project."""

from __future__ import annotations

import logging
import os
import stat
import tempfile
from collections.abc import Mapping
from pathlib import Path

from extkit.errors import DestinationUnwritable
from extkit.templates.base import DistributionPolicy, DistributionReport
from extkit.templates.loader import discover_template_assets, render_template

logger = logging.getLogger(__name__)

DEFAULT_FILE_MODE = 0o644


def _target_mode(dest: Path, source: Path | None) -> int:
    """Mode of the file being replaced, else of the template."""
    if dest.exists():
        return stat.S_IMODE(dest.stat().st_mode)
    if source is not None:
        return stat.S_IMODE(source.stat().st_mode)
    return DEFAULT_FILE_MODE


def _write_atomic(path: Path, content: str, mode: int) -> None:
    """Write content through a temporary sibling so no truncated file is left.

    mkstemp creates the file owner-only, so mode is applied before the rename.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def distribute_templates(
    source_root: Path,
    dest_root: Path,
    substitutions: Mapping[str, str] | None = None,
    policy: DistributionPolicy | str = DistributionPolicy.SKIP_EXISTING,
) -> DistributionReport:
    """Copy every template under source_root into dest_root.

    All templates are rendered before anything is written, so an unresolved
    placeholder anywhere aborts the run with the destination untouched.

    Args:
        source_root: Templates directory.
        dest_root: Consumer directory to populate.
        substitutions: Token name -> replacement text.
        policy: Whether existing destination files are replaced or kept.

    Returns:
        A DistributionReport of written and skipped files.

    Raises:
        TemplateRootNotFound, MalformedTemplate: From template discovery.
        UnresolvedPlaceholder: A template uses a token with no substitution.
        DestinationUnwritable: A write failed. The error lists every file
            that did not get written.
    """
    substitutions = dict(substitutions or {})
    policy = DistributionPolicy(policy)

    if dest_root.resolve().is_relative_to(source_root.resolve()):
        raise DestinationUnwritable(
            dest_root, f"destination is inside the templates directory {source_root}"
        )

    rendered = [
        (asset.relative_path, asset.source, render_template(asset, substitutions))
        for asset in discover_template_assets(source_root)
    ]

    report = DistributionReport()
    for index, (relative_path, source, content) in enumerate(rendered):
        dest = dest_root / relative_path

        if dest.exists() and policy is DistributionPolicy.SKIP_EXISTING:
            notice = f"Skipped existing file {relative_path}"
            logger.warning("%s (in %s)", notice, dest_root)
            report.skipped.append(relative_path)
            report.notices.append(notice)
            continue

        try:
            _write_atomic(dest, content, _target_mode(dest, source))
        except OSError as e:
            failed = [relative_path] + [
                path
                for path, _, _ in rendered[index + 1 :]
                if not (
                    policy is DistributionPolicy.SKIP_EXISTING
                    and (dest_root / path).exists()
                )
            ]
            raise DestinationUnwritable(
                dest, str(e), failed=failed, written=report.written
            ) from e

        report.written.append(relative_path)
        logger.debug("Wrote %s", dest)

    return report
