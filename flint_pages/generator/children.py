r"""Expand ``:::children`` directives into listings of child pages.

A section page can list its children without hand-written HTML::

    :::children sort=date-desc limit=5 class="space-y-4"
    <div class="card">
      <a href="{url}">{title}</a>
      <p>{date} · {category} {labels:badges}</p>
    </div>
    :::

The block body is a per-item template; an empty body uses
:data:`DEFAULT_ITEM_TEMPLATE`. Each expanded block is wrapped in a
``:::html`` fence so the Markdown compiler passes it through untouched.

Examples
--------
>>> from flint_pages.generator.children import parse_children_options
>>> options = parse_children_options('sort=title limit=2 class="grid gap-4"')
>>> (options.sort, options.limit, options.wrapper_class)
('title', 2, 'grid gap-4')
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import html
import logging
import re
import typing as typ

if typ.TYPE_CHECKING:
    from .models import ChildPageData

logger = logging.getLogger(__name__)

CHILDREN_PATTERN = re.compile(
    r"^:::children(?:[ \t]+(?P<options>[^\r\n]*))?[ \t]*\r?\n"
    r"(?P<body>.*?)^:::[ \t]*(?=\r?$)",
    re.MULTILINE | re.DOTALL,
)
OPTION_PATTERN = re.compile(r'([\w-]+)=(?:"([^"]*)"|(\S+))')
PLACEHOLDER_PATTERN = re.compile(
    r"\{(title|url|description|category|author|type|short-uri|labels:badges|labels"
    r"|date:iso|date|price-cents|price|currency|stripe-price-id|image)\}"
)

SORT_MODES = ("date-desc", "date-asc", "title", "order")
DEFAULT_SORT = "date-desc"
DEFAULT_WRAPPER_CLASS = "space-y-4"
EPOCH = dt.date(1970, 1, 1)
MONTHS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)  # fmt: skip

DEFAULT_ITEM_TEMPLATE = """\
<div class="border border-gray-200 rounded p-4 hover:shadow-sm transition-shadow">
  <a href="{url}" class="text-lg font-semibold text-blue-600 hover:underline">{title}</a>
  <p class="text-sm text-gray-500 mt-1">{date} · {category} {labels:badges}</p>
  <p class="text-gray-600 mt-2">{description}</p>
</div>"""


class DirectiveError(ValueError):
    """Raised when a ``:::children`` option cannot be interpreted."""


@dc.dataclass(frozen=True, slots=True)
class ChildrenOptions:
    """Options parsed from a ``:::children`` opening line."""

    sort: str = DEFAULT_SORT
    limit: int | None = None
    type: str | None = None
    wrapper_class: str = DEFAULT_WRAPPER_CLASS


def parse_children_options(text: str | None) -> ChildrenOptions:
    """Parse ``key=value`` pairs from a directive's opening line.

    Unknown keys are ignored and unknown ``sort`` values fall back to
    ``date-desc``.

    Raises
    ------
    DirectiveError
        If ``limit`` is not a positive integer.
    """
    sort = DEFAULT_SORT
    limit: int | None = None
    page_type: str | None = None
    wrapper_class = DEFAULT_WRAPPER_CLASS
    for match in OPTION_PATTERN.finditer(text or ""):
        key = match.group(1)
        value = match.group(2) if match.group(2) is not None else match.group(3)
        match key:
            case "sort":
                if value in SORT_MODES:
                    sort = value
                else:
                    logger.warning(
                        "Unknown children sort %r; using %r", value, DEFAULT_SORT
                    )
            case "limit":
                limit = _parse_limit(value)
            case "type":
                page_type = value.strip() or None
            case "class":
                wrapper_class = value
            case _:
                continue
    return ChildrenOptions(
        sort=sort, limit=limit, type=page_type, wrapper_class=wrapper_class
    )


def _parse_limit(value: str) -> int:
    try:
        limit = int(value)
    except ValueError as exc:
        msg = f"Invalid children limit {value!r}: expected a positive integer."
        raise DirectiveError(msg) from exc
    if limit < 1:
        msg = f"Invalid children limit {value!r}: expected a positive integer."
        raise DirectiveError(msg)
    return limit


def format_date(value: dt.date | None) -> str:
    """Return ``value`` as ``Mon D, YYYY`` or an empty string.

    Examples
    --------
    >>> import datetime as dt
    >>> format_date(dt.date(2026, 2, 1))
    'Feb 1, 2026'
    """
    if value is None:
        return ""
    return f"{MONTHS[value.month - 1]} {value.day}, {value.year}"


def format_iso_date(value: dt.date | None) -> str:
    """Return ``value`` as ``YYYY-MM-DD`` or an empty string."""
    if value is None:
        return ""
    return value.isoformat()


def render_label_badges(labels: typ.Iterable[str]) -> str:
    """Render ``labels`` as badge ``<span>`` elements."""
    return " ".join(
        '<span class="text-xs bg-blue-100 text-blue-700 px-2 py-0.5 rounded">'
        f"{html.escape(label)}</span>"
        for label in labels
    )


def _placeholder_values(page: ChildPageData) -> dict[str, str]:
    def text(value: object | None) -> str:
        return "" if value is None else html.escape(str(value), quote=True)

    return {
        "title": text(page.title),
        "url": text(page.url),
        "description": text(page.description),
        "category": text(page.category),
        "author": text(page.author),
        "type": text(page.type),
        "short-uri": text(page.short_uri),
        "labels": text(", ".join(page.labels)),
        "labels:badges": render_label_badges(page.labels),
        "date": format_date(page.date),
        "date:iso": format_iso_date(page.date),
        "price": text(page.price),
        "price-cents": text(page.price_cents),
        "currency": text(page.currency),
        "stripe-price-id": text(page.stripe_price_id),
        "image": text(page.image),
    }


def render_child_template(template: str, page: ChildPageData) -> str:
    """Substitute every known ``{placeholder}`` in ``template`` for ``page``.

    Substitution is a single pass, so values containing placeholder-like
    text are never expanded again. Unknown ``{...}`` text is left alone.

    Examples
    --------
    >>> from flint_pages.generator.models import ChildPageData
    >>> page = ChildPageData(title="Notes", url="/notes", short_uri="notes")
    >>> render_child_template("{price}|{image}|{currency}", page)
    '||'
    """
    values = _placeholder_values(page)
    return PLACEHOLDER_PATTERN.sub(lambda match: values[match.group(1)], template)


def sort_children(
    children: typ.Iterable[ChildPageData], sort: str
) -> list[ChildPageData]:
    """Return ``children`` ordered by ``sort``; ties keep their input order."""
    pages = list(children)
    match sort:
        case "date-asc":
            return sorted(pages, key=lambda page: page.date or EPOCH)
        case "title":
            return sorted(pages, key=lambda page: page.title.casefold())
        case "order":
            return sorted(pages, key=lambda page: page.order)
        case _:
            return sorted(pages, key=lambda page: page.date or EPOCH, reverse=True)


def _select_children(
    children: typ.Sequence[ChildPageData], options: ChildrenOptions
) -> list[ChildPageData]:
    pages = [page for page in children if options.type in (None, page.type)]
    pages = sort_children(pages, options.sort)
    if options.limit is not None:
        pages = pages[: options.limit]
    return pages


def process_children_directives(
    markdown: str, children: typ.Sequence[ChildPageData]
) -> str:
    """Replace every ``:::children`` block in ``markdown`` with a listing.

    Parameters
    ----------
    markdown : str
        Page body that may contain directive blocks.
    children : Sequence[ChildPageData]
        The page's direct children in build order.

    Returns
    -------
    str
        Markdown with each block replaced by a ``:::html`` fenced listing,
        or removed entirely when no child matches its filters.

    Raises
    ------
    DirectiveError
        If a block carries an option that cannot be interpreted.
    """

    def _expand(match: re.Match[str]) -> str:
        options = parse_children_options(match.group("options"))
        pages = _select_children(children, options)
        if not pages:
            return ""
        template = match.group("body").strip() or DEFAULT_ITEM_TEMPLATE
        items = "\n".join(render_child_template(template, page) for page in pages)
        wrapper = html.escape(options.wrapper_class, quote=True)
        return f':::html\n<div class="{wrapper}">\n{items}\n</div>\n:::'

    return CHILDREN_PATTERN.sub(_expand, markdown)


__all__ = [
    "CHILDREN_PATTERN",
    "DEFAULT_ITEM_TEMPLATE",
    "EPOCH",
    "ChildrenOptions",
    "DirectiveError",
    "format_date",
    "format_iso_date",
    "parse_children_options",
    "process_children_directives",
    "render_child_template",
    "render_label_badges",
    "sort_children",
]
