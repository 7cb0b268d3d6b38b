"""Unit tests for theme templates and the ``{{tag}}`` engine."""

from __future__ import annotations

import datetime as dt
import logging
import typing as typ

import pytest
from bs4 import BeautifulSoup

from flint_pages.components import ComponentRegistry
from flint_pages.config import NavItem
from flint_pages.generator.models import BreadcrumbLink, TemplateContext
from flint_pages.generator.site_builder import DEFAULT_TEMPLATES_DIR
from flint_pages.generator.template_registry import (
    TemplateNotFoundError,
    TemplateRegistry,
    estimate_reading_time,
    format_long_date,
    load_templates_from_dir,
    overlay_templates_from_dir,
    process_template,
)

if typ.TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def context() -> TemplateContext:
    """Return a context for a dated blog post."""
    return TemplateContext(
        title="Hello & Welcome",
        content="<p>" + "word " * 450 + "</p>",
        description="A post",
        author="Ada",
        date=dt.date(2026, 2, 1),
        category="News",
        labels=["python", "tips"],
        type="post",
        url="/hello",
        short_uri="hello",
        navigation=[NavItem(label="Blog", href="/blog", active=True)],
        breadcrumbs=[
            BreadcrumbLink(title="Home", href="/"),
            BreadcrumbLink(title="Hello & Welcome", href="/hello"),
        ],
        css_files=["/assets/main.css"],
        js_files=["/assets/main.js"],
    )


def test_scalar_tags_are_escaped(context: TemplateContext) -> None:
    """Page fields are HTML-escaped when substituted."""
    assert process_template("<h1>{{title}}</h1>", context) == (
        "<h1>Hello &amp; Welcome</h1>"
    )


def test_content_is_inserted_raw(context: TemplateContext) -> None:
    """The compiled body is trusted HTML."""
    assert process_template("{{content}}", context).startswith("<p>word")


def test_conditionals_keep_or_drop_body(context: TemplateContext) -> None:
    """``{{#if}}`` keeps its body only for non-empty tags."""
    template = "{{#if author}}by {{author}}{{/if author}}|{{#if keywords}}k{{/if}}"

    assert process_template(template, context) == "by Ada|"


def test_nested_conditionals_resolve_inside_out(context: TemplateContext) -> None:
    """An inner block is decided before the block around it."""
    template = "{{#if title}}A{{#if keywords}}B{{/if keywords}}C{{/if title}}"

    assert process_template(template, context) == "AC"


def test_unknown_tags_stay_literal_and_are_falsy(context: TemplateContext) -> None:
    """Tags nobody resolves are visible and count as false."""
    template = "{{mystery}}{{#if mystery}}hidden{{/if}}"

    assert process_template(template, context) == "{{mystery}}"


def test_substituted_values_are_not_rescanned() -> None:
    """A title containing tag syntax is emitted as text."""
    context = TemplateContext(title="{{content}}", content="SECRET")

    assert process_template("{{title}}", context) == "{{content}}"


def test_builtin_partials(context: TemplateContext) -> None:
    """Head, navigation, breadcrumbs and scripts come from partials."""
    html = process_template(
        "<html>{{head}}<body>{{navigation}}{{breadcrumbs}}{{foot-scripts}}</body></html>",
        context,
    )

    soup = BeautifulSoup(html, "html.parser")
    title = soup.find("title")
    assert title is not None
    assert title.get_text() == "Hello & Welcome"
    assert soup.find("link", href="/assets/main.css") is not None
    active = soup.find("a", attrs={"aria-current": "page"})
    assert active is not None
    assert active["href"] == "/blog"
    crumbs = soup.find("nav", class_="breadcrumbs")
    assert crumbs is not None
    current = crumbs.find("li", attrs={"aria-current": "page"})
    assert current is not None
    assert current.get_text() == "Hello & Welcome"
    assert soup.find("script", src="/assets/main.js") is not None


def test_blog_helpers(context: TemplateContext) -> None:
    """Reading time, long dates and the category pill render for posts."""
    html = process_template(
        "{{reading-time}}|{{formatted-date}}|{{category-pill}}|{{blog-header}}",
        context,
    )

    reading, date, pill, header = html.split("|", 3)
    assert reading == "2 min read"
    assert date == "February 1, 2026"
    assert "News" in pill
    soup = BeautifulSoup(header, "html.parser")
    time = soup.find("time")
    assert time is not None
    assert time["datetime"] == "2026-02-01"


def test_product_tag_only_for_products(context: TemplateContext) -> None:
    """``{{product}}`` renders a card for product pages and nothing otherwise."""
    assert process_template("{{product}}", context) == ""

    product = TemplateContext(
        title="Mug",
        type="product",
        short_uri="mug",
        template="product-detail",
        frontmatter={"PriceCents": 1499, "Currency": "eur"},
    )
    soup = BeautifulSoup(process_template("{{product}}", product), "html.parser")
    card = soup.find("article", attrs={"data-product-id": "mug"})
    assert card is not None
    assert "product-detail" in card["class"]
    price = card.find("span", class_="price")
    assert price is not None
    assert price.get_text() == "€14.99"


def test_registry_components_resolve_in_templates(context: TemplateContext) -> None:
    """Tags outside the built-ins go to the component registry."""
    registry = ComponentRegistry()
    registry.register("banner", lambda props: f"<div>{props.get('Title', '')}</div>")
    context.frontmatter = {"Title": "From header"}

    html = process_template("{{#if banner}}{{banner}}{{/if}}", context, registry)

    assert html == "<div>From header</div>"


def test_registry_falls_back_to_default(
    context: TemplateContext, caplog: pytest.LogCaptureFixture
) -> None:
    """Unknown template names render ``default`` and log a warning."""
    registry = TemplateRegistry()
    registry.register("default", "<main>{{title}}</main>")

    with caplog.at_level(
        logging.WARNING, logger="flint_pages.generator.template_registry"
    ):
        html = registry.render("missing", context)

    assert html == "<main>Hello &amp; Welcome</main>"
    assert "missing" in caplog.text


def test_registry_without_default_raises(context: TemplateContext) -> None:
    """With no fallback available rendering fails."""
    with pytest.raises(TemplateNotFoundError, match="missing"):
        TemplateRegistry().render("missing", context)


def test_packaged_theme_templates_load() -> None:
    """The shipped theme provides the documented templates."""
    registry = load_templates_from_dir(DEFAULT_TEMPLATES_DIR)

    assert set(registry.names()) >= {
        "default",
        "blank",
        "blog-post",
        "product-detail",
    }


def test_theme_overlay_replaces_and_adds(tmp_path: Path) -> None:
    """Overlay files win over base templates of the same name."""
    base = tmp_path / "base"
    base.mkdir()
    (base / "default.html").write_text("base", encoding="utf-8")
    (base / "blank.html").write_text("blank", encoding="utf-8")
    theme = tmp_path / "themes" / "dark"
    theme.mkdir(parents=True)
    (theme / "default.html").write_text("dark", encoding="utf-8")
    (theme / "landing.html").write_text("landing", encoding="utf-8")

    registry = load_templates_from_dir(base)
    overlay_templates_from_dir(theme, registry)
    overlay_templates_from_dir(tmp_path / "themes" / "absent", registry)

    assert registry.get("default") == "dark"
    assert registry.get("blank") == "blank"
    assert registry.get("landing") == "landing"


def test_reading_time_and_dates() -> None:
    """Helpers round reading time and spell out months."""
    assert estimate_reading_time("") == 1
    assert estimate_reading_time("<p>" + "w " * 299 + "</p>") == 1
    assert estimate_reading_time("<p>" + "w " * 300 + "</p>") == 2
    assert format_long_date(dt.date(2026, 12, 25)) == "December 25, 2026"
    assert format_long_date(None) == ""
