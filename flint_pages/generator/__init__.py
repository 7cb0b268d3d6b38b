"""Compile, template and write Flint pages."""

from .children import DirectiveError, process_children_directives
from .link_rewriter import rewrite_absolute_paths
from .models import BreadcrumbLink, ChildPageData, ContentFile, TemplateContext
from .renderer import MarkdownCompiler
from .site_builder import DuplicateUrlError, InvalidShortUriError, SiteBuilder
from .template_registry import TemplateNotFoundError, TemplateRegistry, process_template

__all__ = [
    "BreadcrumbLink",
    "ChildPageData",
    "ContentFile",
    "DirectiveError",
    "DuplicateUrlError",
    "InvalidShortUriError",
    "MarkdownCompiler",
    "SiteBuilder",
    "TemplateContext",
    "TemplateNotFoundError",
    "TemplateRegistry",
    "process_children_directives",
    "process_template",
    "rewrite_absolute_paths",
]
