"""Theme templates and the ``{{tag}}`` engine that fills them.

Theme files are plain HTML with two kinds of placeholder:

- ``{{tag}}`` is replaced by the tag's value for the page being rendered.
- ``{{#if tag}}...{{/if tag}}`` (or a bare ``{{/if}}``) keeps its body only
  when ``tag`` resolves to a non-empty string. Blocks may nest.

Built-in tags cover page fields and the packaged partials (head,
navigation, breadcrumbs, label footer and so on). Any other tag is looked up
in the component registry with the page frontmatter as props. Tags nobody
knows are left in the output verbatim and count as false in conditionals.

Examples
--------
>>> from flint_pages.generator.models import TemplateContext
>>> from flint_pages.generator.template_registry import process_template
>>> process_template("<h1>{{title}}</h1>", TemplateContext(title="Hi"))
'<h1>Hi</h1>'
>>> process_template("{{#if author}}by {{author}}{{/if}}", TemplateContext(title=""))
''
"""

from __future__ import annotations

import functools
import html
import logging
import re
import typing as typ

from flint_pages.components import ComponentError, PartialRenderer
from flint_pages.metadata import DEFAULT_TEMPLATE, frontmatter_value

from .models import format_price

if typ.TYPE_CHECKING:
    import datetime as dt
    from pathlib import Path

    from flint_pages.components import ComponentRegistry

    from .models import TemplateContext

logger = logging.getLogger(__name__)

CONDITIONAL_PATTERN = re.compile(
    r"\{\{#if\s+(?P<tag>[^\s{}]+)\s*\}\}"
    r"(?P<body>(?:(?!\{\{#if\s).)*?)"
    r"\{\{/if(?:\s+(?P=tag))?\s*\}\}",
    re.DOTALL,
)
TAG_PATTERN = re.compile(r"\{\{(?P<tag>[^\s{}#/][^\s{}]*)\}\}")
HTML_TAG_PATTERN = re.compile(r"<[^>]*>")
WORDS_PER_MINUTE = 200
MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June", "July",
    "August", "September", "October", "November", "December",
)  # fmt: skip
PRODUCT_DETAIL_TEMPLATE = "product-detail"


class TemplateNotFoundError(LookupError):
    """Raised when neither the requested template nor ``default`` exists."""


@functools.cache
def _default_partials() -> PartialRenderer:
    return PartialRenderer()


def estimate_reading_time(content_html: str) -> int:
    """Return the estimated minutes needed to read ``content_html``.

    Examples
    --------
    >>> estimate_reading_time("<p>" + "word " * 450 + "</p>")
    2
    >>> estimate_reading_time("")
    1
    """
    words = len(HTML_TAG_PATTERN.sub(" ", content_html).split())
    return max(1, int(words / WORDS_PER_MINUTE + 0.5))


def format_long_date(value: dt.date | None) -> str:
    """Return ``value`` as ``Month D, YYYY`` or an empty string."""
    if value is None:
        return ""
    return f"{MONTH_NAMES[value.month - 1]} {value.day}, {value.year}"


def _badge(label: str) -> str:
    return (
        '<span class="text-xs bg-gray-100 text-gray-600 px-2 py-1 rounded-full">'
        f"{html.escape(label)}</span>"
    )


def _category_pill(category: str) -> str:
    if not category:
        return ""
    return (
        '<span class="category-pill inline-block bg-blue-100 text-blue-800 '
        f'text-xs font-medium px-2.5 py-0.5 rounded">{html.escape(category)}</span>'
    )


class _TagResolver:
    """Resolve tag names against one page's :class:`TemplateContext`."""

    def __init__(
        self,
        context: TemplateContext,
        components: ComponentRegistry | None,
        partials: PartialRenderer,
    ) -> None:
        self.context = context
        self.components = components
        self.partials = partials
        self._cache: dict[str, str | None] = {}

    def __call__(self, tag: str) -> str | None:
        if tag not in self._cache:
            self._cache[tag] = self._resolve(tag)
        return self._cache[tag]

    def _scalars(self) -> dict[str, str]:
        ctx = self.context
        return {
            "title": ctx.title,
            "description": ctx.description,
            "keywords": ctx.keywords,
            "author": ctx.author,
            "category": ctx.category,
            "basePath": ctx.base_path,
            "url": ctx.url,
            "short-uri": ctx.short_uri,
        }

    def _resolve(self, tag: str) -> str | None:  # noqa: C901, PLR0911
        ctx = self.context
        scalars = self._scalars()
        if tag in scalars:
            return html.escape(scalars[tag], quote=True)
        match tag:
            case "content":
                return ctx.content
            case "head":
                return self.partials.head(
                    title=ctx.title,
                    description=ctx.description,
                    keywords=ctx.keywords,
                    css_files=ctx.css_files,
                )
            case "navigation":
                return self.partials.navigation(ctx.navigation)
            case "breadcrumbs":
                return self.partials.breadcrumbs(ctx.breadcrumbs)
            case "label-footer":
                return self.partials.label_footer(ctx.site_labels)
            case "foot-scripts":
                return self.partials.foot_scripts(ctx.js_files)
            case "blog-header":
                return self.partials.blog_header(
                    title=ctx.title,
                    category=ctx.category,
                    author=ctx.author,
                    date=ctx.date,
                    date_display=format_long_date(ctx.date),
                    reading_time=estimate_reading_time(ctx.content),
                    labels=ctx.labels,
                )
            case "formatted-date":
                return format_long_date(ctx.date)
            case "reading-time":
                return f"{estimate_reading_time(ctx.content)} min read"
            case "category-pill":
                return _category_pill(ctx.category)
            case "label-badges":
                return "".join(_badge(label) for label in ctx.labels)
            case "product":
                return self._product()
            case _:
                return self._component(tag)

    def _product(self) -> str:
        ctx = self.context
        if ctx.type != "product" or not ctx.short_uri:
            return ""
        fm = ctx.frontmatter
        price_cents = frontmatter_value(fm, "PriceCents", "Price-Cents")
        currency = frontmatter_value(fm, "Currency") or ""
        try:
            cents = int(price_cents or 0)
        except (TypeError, ValueError):
            cents = 0
        return self.partials.product_card(
            product_id=ctx.short_uri,
            title=ctx.title,
            price=format_price(cents, str(currency)),
            description=ctx.description,
            image=str(frontmatter_value(fm, "Image") or ""),
            detail=ctx.template == PRODUCT_DETAIL_TEMPLATE,
        )

    def _component(self, tag: str) -> str | None:
        if self.components is None or not self.components.has_tag(tag):
            return None
        try:
            return self.components.render(tag, self.context.frontmatter)
        except ComponentError as exc:
            logger.warning(
                "Component %r failed on page %r: %s", tag, self.context.short_uri, exc
            )
            return None


def process_template(
    text: str,
    context: TemplateContext,
    components: ComponentRegistry | None = None,
    partials: PartialRenderer | None = None,
) -> str:
    """Resolve conditionals and tags in ``text`` for one page.

    Parameters
    ----------
    text : str
        Template source.
    context : TemplateContext
        Values for the page being rendered.
    components : ComponentRegistry, optional
        Registry consulted for tags that are not built in.
    partials : PartialRenderer, optional
        Renderer for built-in fragments; defaults to the packaged partials.

    Returns
    -------
    str
        Rendered HTML. Substituted values are never re-scanned for tags.
    """
    resolve = _TagResolver(context, components, partials or _default_partials())

    def _conditional(match: re.Match[str]) -> str:
        return match.group("body") if resolve(match.group("tag")) else ""

    previous = None
    result = text
    while previous != result:
        previous = result
        result = CONDITIONAL_PATTERN.sub(_conditional, result)

    def _tag(match: re.Match[str]) -> str:
        value = resolve(match.group("tag"))
        return match.group(0) if value is None else value

    return TAG_PATTERN.sub(_tag, result)


class TemplateRegistry:
    """Named theme templates rendered through :func:`process_template`."""

    def __init__(
        self,
        components: ComponentRegistry | None = None,
        partials: PartialRenderer | None = None,
    ) -> None:
        self.components = components
        self.partials = partials
        self._templates: dict[str, str] = {}

    def register(self, name: str, text: str) -> None:
        """Add or replace the template called ``name``."""
        self._templates[name] = text

    def get(self, name: str) -> str | None:
        """Return the template source for ``name`` or ``None``."""
        return self._templates.get(name)

    def has(self, name: str) -> bool:
        """Return True when ``name`` is registered."""
        return name in self._templates

    def names(self) -> list[str]:
        """Return registered names in registration order."""
        return list(self._templates)

    def render(self, name: str, context: TemplateContext) -> str:
        """Render ``name`` for ``context``, falling back to ``default``.

        Raises
        ------
        TemplateNotFoundError
            If neither ``name`` nor ``default`` is registered.
        """
        source = self._templates.get(name)
        if source is None:
            source = self._templates.get(DEFAULT_TEMPLATE)
            if source is None:
                msg = (
                    f"Template '{name}' is not registered and no "
                    f"'{DEFAULT_TEMPLATE}' template is available."
                )
                raise TemplateNotFoundError(msg)
            logger.warning(
                "Unknown template %r for page %r; using %r",
                name,
                context.short_uri,
                DEFAULT_TEMPLATE,
            )
        return process_template(source, context, self.components, self.partials)


def _read_templates(path: Path) -> dict[str, str]:
    if not path.is_dir():
        return {}
    return {
        template.stem: template.read_text(encoding="utf-8")
        for template in sorted(path.glob("*.html"))
        if template.is_file()
    }


def load_templates_from_dir(
    path: Path, registry: TemplateRegistry | None = None
) -> TemplateRegistry:
    """Register every ``*.html`` file in ``path`` under its stem.

    A missing directory yields an empty registry.
    """
    registry = registry if registry is not None else TemplateRegistry()
    for name, text in _read_templates(path).items():
        registry.register(name, text)
    return registry


def overlay_templates_from_dir(path: Path, registry: TemplateRegistry) -> TemplateRegistry:
    """Replace or add templates from a theme directory; missing dirs are ignored."""
    overlay = _read_templates(path)
    for name, text in overlay.items():
        registry.register(name, text)
    if overlay:
        logger.debug("Applied %d theme templates from %s", len(overlay), path)
    return registry


__all__ = [
    "TemplateNotFoundError",
    "TemplateRegistry",
    "estimate_reading_time",
    "format_long_date",
    "load_templates_from_dir",
    "overlay_templates_from_dir",
    "process_template",
]
