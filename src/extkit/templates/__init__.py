"""Template assets and distribution into consumer projects."""

from extkit.templates.base import (
    DistributionPolicy,
    DistributionReport,
    TemplateAsset,
    find_placeholders,
)
from extkit.templates.distributor import distribute_templates
from extkit.templates.loader import discover_template_assets, render_template

__all__ = [
    "DistributionPolicy",
    "DistributionReport",
    "TemplateAsset",
    "discover_template_assets",
    "distribute_templates",
    "find_placeholders",
    "render_template",
]
