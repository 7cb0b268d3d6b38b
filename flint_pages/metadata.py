"""Normalize raw frontmatter into typed page metadata.

Authors write keys in whatever case they like (``Short-URI``, ``short_uri``,
``shorturi``); lookups ignore case, hyphens, underscores and spaces. Every
field has a default so a page with no header still produces a usable
:class:`PageMetadata` whose ``short_uri`` comes from its file path.
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import logging
import posixpath
import re
import typing as typ

from .frontmatter import FrontmatterError, parse_frontmatter

logger = logging.getLogger(__name__)

DEFAULT_ORDER = 999
DEFAULT_TEMPLATE = "default"
DEFAULT_TYPE = "page"
PAGE_TYPES = frozenset({"page", "post", "product", "section", "index"})
ROOT_PARENT = "root"

_KEY_NOISE = re.compile(r"[-_\s]+")


class MetadataError(ValueError):
    """Raised when a page's frontmatter cannot be turned into metadata."""


@dc.dataclass(slots=True)
class PageMetadata:
    """Normalized, typed view of a page's frontmatter.

    Attributes
    ----------
    short_uri : str
        Stable slug that determines the page's URL and output path.
    title : str
        Page title; empty when the author gave none.
    parent : str | None
        ``short_uri`` of the parent page, the ``"root"`` sentinel for
        top-level pages, or ``None`` for the page that roots the tree.
    order : int | float
        Sort key used by navigation and ``sort=order`` listings.
    type : str
        One of ``page``, ``post``, ``product``, ``section`` or ``index``.
    explicit_short_uri : bool
        Whether ``Short-URI`` was authored rather than derived from the path.
    """

    short_uri: str
    title: str = ""
    parent: str | None = None
    order: int | float = DEFAULT_ORDER
    type: str = DEFAULT_TYPE
    category: str = ""
    labels: list[str] = dc.field(default_factory=list)
    keywords: list[str] = dc.field(default_factory=list)
    author: str = ""
    date: dt.date | None = None
    description: str = ""
    template: str = DEFAULT_TEMPLATE
    price_cents: int = 0
    currency: str = ""
    stripe_price_id: str = ""
    stripe_payment_link: str = ""
    image: str = ""
    explicit_short_uri: bool = False

    @property
    def is_top_level(self) -> bool:
        """Return True when the page hangs directly off the site root."""
        return self.parent is None or self.parent in ("", ROOT_PARENT)

    @property
    def is_product(self) -> bool:
        """Return True for ``type: product`` pages."""
        return self.type == "product"


def _normalize_key(key: object) -> str:
    return _KEY_NOISE.sub("", str(key).lower())


class _FieldLookup:
    """Case-insensitive view over a frontmatter mapping."""

    def __init__(self, data: typ.Mapping[str, typ.Any]) -> None:
        self._values: dict[str, typ.Any] = {}
        for key, value in data.items():
            self._values.setdefault(_normalize_key(key), value)

    def get(self, *names: str) -> typ.Any:  # noqa: ANN401 - raw YAML values
        for name in names:
            value = self._values.get(_normalize_key(name))
            if value is not None:
                return value
        return None


def frontmatter_value(data: typ.Mapping[str, typ.Any], *names: str) -> typ.Any:  # noqa: ANN401
    """Return the first non-null value among ``names`` using loose key matching.

    Examples
    --------
    >>> frontmatter_value({"short_uri": "home"}, "Short-URI")
    'home'
    """
    return _FieldLookup(data).get(*names)


def _text(value: object | None) -> str:
    """Return a stripped string value or an empty string for ``None``."""
    if value is None:
        return ""
    return str(value).strip()


def _string_list(value: object | None) -> list[str]:
    """Coerce a YAML list or comma-separated string into a list of strings."""
    match value:
        case None:
            return []
        case str() as text:
            segments = text.split(",")
        case list() | tuple() | set():
            segments = [str(item) for item in value if item is not None]
        case _:
            segments = [str(value)]
    return [segment.strip() for segment in segments if segment.strip()]


def _order(value: object | None) -> int | float:
    match value:
        case bool() | None:
            return DEFAULT_ORDER
        case int() | float():
            return value
        case str() as text:
            try:
                number = float(text.strip())
            except ValueError:
                return DEFAULT_ORDER
            return int(number) if number.is_integer() else number
        case _:
            return DEFAULT_ORDER


def _int(value: object | None) -> int:
    match value:
        case bool() | None:
            return 0
        case int():
            return value
        case float():
            return int(value)
        case str() as text:
            try:
                return int(float(text.strip()))
            except ValueError:
                return 0
        case _:
            return 0


def coerce_date(value: object | None) -> dt.date | None:
    """Return a calendar date parsed from ``value``, or None.

    Datetimes are converted to UTC before the date is taken so that a
    timestamp near midnight lands on the same day everywhere.
    """
    match value:
        case dt.datetime():
            if value.tzinfo is not None:
                return value.astimezone(dt.UTC).date()
            return value.date()
        case dt.date():
            return value
        case str() as text:
            sanitized = text.strip()
            if not sanitized:
                return None
            if sanitized.endswith("Z"):
                sanitized = sanitized[:-1] + "+00:00"
            try:
                parsed = dt.datetime.fromisoformat(sanitized)
            except ValueError:
                return None
            return coerce_date(parsed)
        case _:
            return None


def _page_type(value: object | None, short_uri: str) -> str:
    page_type = _text(value).lower()
    if not page_type:
        return DEFAULT_TYPE
    if page_type not in PAGE_TYPES:
        logger.warning(
            "Unknown Type %r on page %r; treating it as %r",
            page_type,
            short_uri,
            DEFAULT_TYPE,
        )
        return DEFAULT_TYPE
    return page_type


def slug_from_path(relative_path: str | None) -> str:
    """Return the slug implied by a content-relative Markdown path.

    ``blog/index.md`` maps to its directory name (``blog``); any other file
    maps to its filename stem. A root ``index.md`` maps to ``index``.
    """
    if not relative_path:
        return ""
    normalized = relative_path.replace("\\", "/")
    directory, filename = posixpath.split(normalized)
    stem = filename[:-3] if filename.endswith(".md") else filename
    if stem == "index" and directory:
        return posixpath.basename(directory)
    return stem


def metadata_from_frontmatter(
    data: typ.Mapping[str, typ.Any], relative_path: str | None = None
) -> PageMetadata:
    """Build :class:`PageMetadata` from an already parsed frontmatter mapping."""
    fields = _FieldLookup(data)
    authored_uri = _text(fields.get("Short-URI"))
    short_uri = authored_uri or slug_from_path(relative_path)
    parent = _text(fields.get("Parent")) or None
    return PageMetadata(
        short_uri=short_uri,
        title=_text(fields.get("Title")),
        parent=parent,
        order=_order(fields.get("Order")),
        type=_page_type(fields.get("Type"), short_uri),
        category=_text(fields.get("Category")),
        labels=_string_list(fields.get("Labels")),
        keywords=_string_list(fields.get("Keywords")),
        author=_text(fields.get("Author")),
        date=coerce_date(fields.get("Date")),
        description=_text(fields.get("Description")),
        template=_text(fields.get("Template")) or DEFAULT_TEMPLATE,
        price_cents=_int(fields.get("PriceCents", "Price-Cents")),
        currency=_text(fields.get("Currency")),
        stripe_price_id=_text(fields.get("StripePriceId", "Stripe-Price-Id")),
        stripe_payment_link=_text(fields.get("StripePaymentLink")),
        image=_text(fields.get("Image")),
        explicit_short_uri=bool(authored_uri),
    )


def parse_page_metadata(text: str, relative_path: str | None = None) -> PageMetadata:
    """Parse raw file text into :class:`PageMetadata`.

    Parameters
    ----------
    text : str
        Full file contents including the optional YAML header.
    relative_path : str, optional
        Content-relative path used to derive ``short_uri`` when the header
        omits ``Short-URI``.

    Raises
    ------
    MetadataError
        If the frontmatter header cannot be parsed.
    """
    try:
        parsed = parse_frontmatter(text)
    except FrontmatterError as exc:
        location = relative_path or "<string>"
        msg = f"Cannot read metadata from {location}: {exc}"
        raise MetadataError(msg) from exc
    return metadata_from_frontmatter(parsed.data, relative_path)


def metadata_from_path(relative_path: str) -> PageMetadata:
    """Return fallback metadata derived only from ``relative_path``."""
    return PageMetadata(short_uri=slug_from_path(relative_path))


__all__ = [
    "DEFAULT_ORDER",
    "DEFAULT_TEMPLATE",
    "DEFAULT_TYPE",
    "PAGE_TYPES",
    "ROOT_PARENT",
    "MetadataError",
    "PageMetadata",
    "coerce_date",
    "frontmatter_value",
    "metadata_from_frontmatter",
    "metadata_from_path",
    "parse_page_metadata",
    "slug_from_path",
]
