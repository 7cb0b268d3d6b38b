"""Component tags and the Jinja2 partials behind built-in page fragments.

Two collaborators live here:

- :class:`ComponentRegistry` maps ``{{tag}}`` names to callables that turn a
  page's frontmatter into HTML. Both the Markdown compiler and the template
  engine consult it for tags they do not handle themselves.
- :class:`PartialRenderer` renders the packaged ``templates/partials``
  Jinja2 files used for navigation, label footers, breadcrumbs and the like.

Examples
--------
>>> from flint_pages.components import default_registry
>>> registry = default_registry()
>>> registry.has_tag("hero")
True
>>> registry.render("hero", {})
''
"""

from __future__ import annotations

import collections.abc as cabc
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .metadata import frontmatter_value

if typ.TYPE_CHECKING:
    import datetime as dt

    from .config import NavItem

ComponentProps = typ.Mapping[str, typ.Any]
ComponentRenderer = cabc.Callable[[ComponentProps], str]

PARTIALS_DIR = Path(__file__).resolve().parent / "templates" / "partials"
LABEL_COLORS: tuple[tuple[str, str], ...] = (
    ("bg-blue-100", "text-blue-700"),
    ("bg-green-100", "text-green-700"),
    ("bg-purple-100", "text-purple-700"),
    ("bg-amber-100", "text-amber-700"),
    ("bg-rose-100", "text-rose-700"),
    ("bg-teal-100", "text-teal-700"),
    ("bg-indigo-100", "text-indigo-700"),
    ("bg-orange-100", "text-orange-700"),
)


class ComponentError(ValueError):
    """Raised when a component cannot render the props it was given."""


class UnknownComponentError(LookupError):
    """Raised when rendering a tag that has no registered component."""


class ComponentRegistry:
    """Lookup table from component tag names to renderers."""

    def __init__(self) -> None:
        self._renderers: dict[str, ComponentRenderer] = {}

    def register(self, tag: str, renderer: ComponentRenderer) -> None:
        """Register ``renderer`` for ``tag``, replacing any previous entry."""
        self._renderers[tag] = renderer

    def has_tag(self, tag: str) -> bool:
        """Return True when ``tag`` has a registered renderer."""
        return tag in self._renderers

    def tags(self) -> list[str]:
        """Return the registered tag names in registration order."""
        return list(self._renderers)

    def render(self, tag: str, props: ComponentProps) -> str:
        """Render ``tag`` with ``props``.

        Raises
        ------
        UnknownComponentError
            If ``tag`` is not registered.
        ComponentError
            If the component rejects ``props``.
        """
        try:
            renderer = self._renderers[tag]
        except KeyError as exc:
            msg = f"No component registered for tag '{tag}'."
            raise UnknownComponentError(msg) from exc
        return renderer(props)


class PartialRenderer:
    """Render the packaged Jinja2 partials into HTML strings."""

    def __init__(self, partials_dir: Path | None = None) -> None:
        self.partials_dir = partials_dir or PARTIALS_DIR
        self.env = Environment(
            loader=FileSystemLoader(str(self.partials_dir)),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, name: str, **context: typ.Any) -> str:  # noqa: ANN401
        """Render the partial ``{name}.jinja`` with ``context``."""
        template = self.env.get_template(f"{name}.jinja")
        return template.render(**context).strip()

    def navigation(self, items: typ.Sequence[NavItem]) -> str:
        """Render the navigation bar, or nothing when ``items`` is empty."""
        if not items:
            return ""
        return self.render("navigation", items=items)

    def label_footer(self, labels: typ.Iterable[str]) -> str:
        """Render the site-wide label cloud with rotating badge colours."""
        unique = sorted(set(labels), key=str.casefold)
        if not unique:
            return ""
        badges = [
            {"label": label, "colors": LABEL_COLORS[index % len(LABEL_COLORS)]}
            for index, label in enumerate(unique)
        ]
        return self.render("label_footer", badges=badges)

    def label_index(self, label: str, pages: typ.Sequence[typ.Mapping[str, typ.Any]]) -> str:
        """Render the body of a label index page."""
        return self.render("label_index", label=label, pages=pages)

    def breadcrumbs(self, items: typ.Sequence[typ.Any]) -> str:
        """Render a breadcrumb trail; a single-item trail renders nothing."""
        if len(items) < 2:
            return ""
        return self.render("breadcrumbs", items=items)

    def head(
        self,
        *,
        title: str,
        description: str = "",
        keywords: str = "",
        css_files: typ.Sequence[str] = (),
    ) -> str:
        """Render the document ``<head>`` element."""
        return self.render(
            "head",
            title=title,
            description=description,
            keywords=keywords,
            css_files=css_files,
        )

    def foot_scripts(self, js_files: typ.Sequence[str]) -> str:
        """Render the closing ``<script>`` tags."""
        if not js_files:
            return ""
        return self.render("foot_scripts", js_files=js_files)

    def blog_header(  # noqa: PLR0913
        self,
        *,
        title: str,
        category: str,
        author: str,
        date: dt.date | None,
        date_display: str,
        reading_time: int,
        labels: typ.Sequence[str],
    ) -> str:
        """Render an article header with byline and reading time."""
        return self.render(
            "blog_header",
            title=title,
            category=category,
            author=author,
            date_iso=date.isoformat() if date else "",
            date_display=date_display,
            reading_time=reading_time,
            labels=labels,
        )

    def product_card(  # noqa: PLR0913
        self,
        *,
        product_id: str,
        title: str,
        price: str = "",
        description: str = "",
        image: str = "",
        detail: bool = False,
    ) -> str:
        """Render a product card, or the larger detail hero when ``detail``."""
        return self.render(
            "product_card",
            product_id=product_id,
            title=title,
            price=price,
            description=description,
            image=image,
            detail=detail,
        )


def _button(payload: object, *, component: str) -> dict[str, str] | None:
    if payload is None:
        return None
    if not isinstance(payload, cabc.Mapping):
        msg = f"{component} buttons must be mappings with 'label' and 'href'."
        raise ComponentError(msg)
    label = frontmatter_value(payload, "label")
    href = frontmatter_value(payload, "href")
    if not label or not href:
        msg = f"{component} buttons need both 'label' and 'href'."
        raise ComponentError(msg)
    return {"label": str(label), "href": str(href)}


def _section_props(props: ComponentProps, key: str, component: str) -> dict[str, typ.Any] | None:
    """Read the frontmatter block ``key`` shared by hero and CTA sections."""
    payload = frontmatter_value(props, key)
    if payload is None:
        return None
    if not isinstance(payload, cabc.Mapping):
        msg = f"'{key}' frontmatter must be a mapping."
        raise ComponentError(msg)
    heading = frontmatter_value(payload, "heading")
    if not heading:
        msg = f"'{key}' frontmatter needs a 'heading'."
        raise ComponentError(msg)
    primary = _button(frontmatter_value(payload, "primaryCta"), component=component)
    if primary is None:
        msg = f"'{key}' frontmatter needs a 'primaryCta'."
        raise ComponentError(msg)
    return {
        "tagline": str(frontmatter_value(payload, "tagline") or ""),
        "heading": str(heading),
        "subtitle": str(frontmatter_value(payload, "subtitle") or ""),
        "primary_cta": primary,
        "secondary_cta": _button(
            frontmatter_value(payload, "secondaryCta"), component=component
        ),
    }


def _partial_component(
    partials: PartialRenderer, key: str, partial: str
) -> ComponentRenderer:
    def _render(props: ComponentProps) -> str:
        section = _section_props(props, key, partial)
        if section is None:
            return ""
        return partials.render(partial, **section)

    return _render


def default_registry(partials: PartialRenderer | None = None) -> ComponentRegistry:
    """Return a registry holding the frontmatter-driven section components.

    ``hero`` reads the page's ``Hero`` block and ``call-to-action`` reads
    ``CTA``; both render nothing when their block is absent.
    """
    partials = partials or PartialRenderer()
    registry = ComponentRegistry()
    registry.register("hero", _partial_component(partials, "Hero", "hero"))
    registry.register(
        "call-to-action", _partial_component(partials, "CTA", "call_to_action")
    )
    return registry


__all__ = [
    "LABEL_COLORS",
    "PARTIALS_DIR",
    "ComponentError",
    "ComponentProps",
    "ComponentRegistry",
    "ComponentRenderer",
    "PartialRenderer",
    "UnknownComponentError",
    "default_registry",
]
