"""Utility helpers shared by the Flint configuration loader."""

from __future__ import annotations

import typing as typ

from .models import NavItem, SiteConfigError


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _normalize_files(value: str | list[object] | None) -> list[str] | None:
    """Normalize asset lists into non-empty strings, or None when unset."""
    if value is None:
        return None
    if isinstance(value, str):
        return [segment for segment in value.split() if segment]
    if isinstance(value, list):
        normalized: list[str] = []
        for segment in value:
            text = str(segment).strip()
            if text:
                normalized.append(text)
        return normalized
    msg = f"Expected a list of asset paths, got {type(value).__name__}."
    raise SiteConfigError(msg)


def normalize_base_path(value: object | None) -> str:
    """Return ``value`` as a URL prefix with one leading and no trailing slash.

    Empty values, including ``"/"``, mean the site is served from the
    domain root and normalize to ``""``.

    Examples
    --------
    >>> normalize_base_path("Flint/")
    '/Flint'
    >>> normalize_base_path("/")
    ''
    """
    text = _optional_str(value)
    if text is None:
        return ""
    trimmed = text.strip("/")
    if not trimmed:
        return ""
    return f"/{trimmed}"


def _build_nav_items(payload: object | None) -> list[NavItem] | None:
    """Build manual navigation entries, or None when not configured."""
    if payload is None:
        return None
    if not isinstance(payload, list):
        msg = "'navigation' must be a list of {label, href} mappings."
        raise SiteConfigError(msg)
    items: list[NavItem] = []
    for index, entry in enumerate(payload):
        if not isinstance(entry, dict):
            msg = f"Navigation entry {index} must be a mapping."
            raise SiteConfigError(msg)
        label = _optional_str(entry.get("label"))
        href = _optional_str(entry.get("href"))
        if label is None or href is None:
            msg = f"Navigation entry {index} is missing 'label' or 'href'."
            raise SiteConfigError(msg)
        order = entry.get("order", 999)
        if isinstance(order, bool) or not isinstance(order, int | float):
            msg = f"Navigation entry '{label}' has a non-numeric 'order'."
            raise SiteConfigError(msg)
        items.append(NavItem(label=label, href=href, order=order))
    return items


def _require_mapping(value: object, name: str) -> typ.Mapping[str, typ.Any]:
    if not isinstance(value, dict):
        msg = f"'{name}' must be a mapping."
        raise SiteConfigError(msg)
    return value


__all__ = [
    "_build_nav_items",
    "_normalize_files",
    "_optional_str",
    "_require_mapping",
    "normalize_base_path",
]
