"""Unit tests for the component registry and the packaged partials."""

from __future__ import annotations

import pytest
from bs4 import BeautifulSoup
from pytest_mock import MockerFixture

from flint_pages.components import (
    LABEL_COLORS,
    ComponentError,
    ComponentRegistry,
    PartialRenderer,
    UnknownComponentError,
    default_registry,
)
from flint_pages.config import NavItem
from flint_pages.generator.models import BreadcrumbLink


@pytest.fixture
def partials() -> PartialRenderer:
    """Return a renderer over the packaged partials."""
    return PartialRenderer()


def test_registry_dispatches_to_renderer(mocker: MockerFixture) -> None:
    """Registered callables receive the props untouched."""
    renderer = mocker.Mock(return_value="<b>ok</b>")
    registry = ComponentRegistry()
    registry.register("badge", renderer)
    props = {"Title": "Hi"}

    assert registry.has_tag("badge")
    assert registry.render("badge", props) == "<b>ok</b>"
    renderer.assert_called_once_with(props)
    assert registry.tags() == ["badge"]


def test_unknown_component_raises() -> None:
    """Rendering an unregistered tag is a lookup error."""
    with pytest.raises(UnknownComponentError, match="nope"):
        ComponentRegistry().render("nope", {})


def test_default_registry_tags() -> None:
    """The built-in registry offers the section components."""
    registry = default_registry()

    assert registry.tags() == ["hero", "call-to-action"]
    assert registry.render("hero", {}) == ""
    assert registry.render("call-to-action", {}) == ""


def test_hero_renders_both_buttons() -> None:
    """Primary and secondary calls to action become links."""
    html = default_registry().render(
        "hero",
        {
            "hero": {
                "heading": "<Fast> sites",
                "subtitle": "From Markdown",
                "primaryCta": {"label": "Start", "href": "/start"},
                "secondary_cta": {"label": "Docs", "href": "/docs"},
            }
        },
    )

    soup = BeautifulSoup(html, "html.parser")
    heading = soup.find("h1")
    assert heading is not None
    assert heading.get_text() == "<Fast> sites"
    assert "&lt;Fast&gt;" in html
    assert [a["href"] for a in soup.find_all("a")] == ["/start", "/docs"]


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ("just text", "must be a mapping"),
        ({"primaryCta": {"label": "Go", "href": "/"}}, "needs a 'heading'"),
        ({"heading": "Hi"}, "needs a 'primaryCta'"),
        ({"heading": "Hi", "primaryCta": {"label": "Go"}}, "both 'label' and 'href'"),
        ({"heading": "Hi", "primaryCta": "Go"}, "must be mappings"),
    ],
)
def test_malformed_sections_raise(payload: object, message: str) -> None:
    """Section components reject incomplete frontmatter."""
    with pytest.raises(ComponentError, match=message):
        default_registry().render("call-to-action", {"CTA": payload})


def test_navigation_marks_active_item(partials: PartialRenderer) -> None:
    """The active entry carries ``aria-current``."""
    html = partials.navigation(
        [
            NavItem(label="Home", href="/"),
            NavItem(label="Blog", href="/blog", active=True),
        ]
    )

    soup = BeautifulSoup(html, "html.parser")
    current = {a["href"] for a in soup.find_all("a", attrs={"aria-current": "page"})}
    assert current == {"/blog"}
    assert partials.navigation([]) == ""


def test_label_footer_sorts_and_colours(partials: PartialRenderer) -> None:
    """Labels are unique, case-insensitively sorted and colour-cycled."""
    html = partials.label_footer(["beta", "Alpha", "beta", "gamma"])

    soup = BeautifulSoup(html, "html.parser")
    links = soup.find_all("a", class_="label-link")
    assert [link["data-label"] for link in links] == ["Alpha", "beta", "gamma"]
    assert LABEL_COLORS[1][0] in links[1]["class"]
    assert partials.label_footer([]) == ""


def test_breadcrumbs_need_two_items(partials: PartialRenderer) -> None:
    """A lone crumb renders nothing; the last crumb is not a link."""
    home = BreadcrumbLink(title="Home", href="/")
    post = BreadcrumbLink(title="Post", href="/post")

    assert partials.breadcrumbs([home]) == ""
    soup = BeautifulSoup(partials.breadcrumbs([home, post]), "html.parser")
    assert [a["href"] for a in soup.find_all("a")] == ["/"]
    current = soup.find("li", attrs={"aria-current": "page"})
    assert current is not None
    assert current.get_text() == "Post"


def test_label_index_lists_pages(partials: PartialRenderer) -> None:
    """The label page names the label and links each tagged page."""
    html = partials.label_index(
        "python",
        [
            {"url": "/b", "title": "B", "category": "", "date": "2026-02-01"},
            {"url": "/a", "title": "A", "category": "Docs", "date": None},
        ],
    )

    soup = BeautifulSoup(html, "html.parser")
    heading = soup.find("h1")
    assert heading is not None
    assert heading.get_text() == "Label: python"
    assert [a["href"] for a in soup.find_all("a")] == ["/b", "/a"]
    assert "2 pages tagged" in html
