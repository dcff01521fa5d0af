"""Template discovery and placeholder substitution."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from pathlib import Path

from extkit.errors import MalformedTemplate, TemplateRootNotFound, UnresolvedPlaceholder
from extkit.templates.base import PLACEHOLDER_PATTERN, TemplateAsset

logger = logging.getLogger(__name__)


def discover_template_assets(root: Path) -> list[TemplateAsset]:
    """Load every file under root as a template asset, sorted by path.

    Raises:
        TemplateRootNotFound: root is not a directory.
        MalformedTemplate: A file is unreadable or not UTF-8 text.
    """
    if not root.is_dir():
        raise TemplateRootNotFound(root)

    assets: list[TemplateAsset] = []
    for path in sorted(p for p in root.rglob("*") if p.is_file()):
        try:
            # newline="" keeps line endings byte for byte
            with path.open(encoding="utf-8", newline="") as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise MalformedTemplate(path, str(e)) from e
        relative_path = path.relative_to(root).as_posix()
        assets.append(
            TemplateAsset(relative_path=relative_path, content=content, source=path)
        )

    logger.debug("Discovered %d template(s) under %s", len(assets), root)
    return assets


def render_template(asset: TemplateAsset, substitutions: Mapping[str, str]) -> str:
    """Replace every placeholder token in the asset's content.

    Raises:
        UnresolvedPlaceholder: The first token, in text order, with no entry in
            substitutions.
    """
    for match in PLACEHOLDER_PATTERN.finditer(asset.content):
        if match.group(1) not in substitutions:
            raise UnresolvedPlaceholder(match.group(1), asset.relative_path)

    def _replace(match: re.Match[str]) -> str:
        return str(substitutions[match.group(1)])

    return PLACEHOLDER_PATTERN.sub(_replace, asset.content)
