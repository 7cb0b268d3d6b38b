"""Tests for the ``flint build`` command."""

from __future__ import annotations

import typing as typ

import pytest

from flint_pages import cli

if typ.TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create a one-page project and make it the working directory."""
    content = tmp_path / "content"
    content.mkdir()
    (content / "index.md").write_text(
        "---\nShort-URI: home\nTitle: Home\n---\n[About](/about)\n",
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_build_uses_defaults_without_config(
    project: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """Without ``flint.yaml`` the command builds ``content`` into ``dist``."""
    cli.build()

    out = capsys.readouterr().out.splitlines()
    assert "wrote dist/index.html" in out
    assert "wrote dist/fragments/page-index.json" in out
    assert (project / "dist" / "index.html").is_file()


def test_build_reads_config_and_applies_overrides(
    project: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """Options override values from the configuration file."""
    (project / "flint.yaml").write_text(
        "site:\n  output_dir: public\n  base_path: /Old\n", encoding="utf-8"
    )

    cli.build(
        base_path="Docs/",
        site_url="https://example.com/",
        output_dir=project / "site",
    )

    out = capsys.readouterr().out.splitlines()
    assert "wrote site/index.html" in out
    assert "wrote site/robots.txt" in out
    assert not (project / "public").exists()
    html = (project / "site" / "index.html").read_text(encoding="utf-8")
    assert 'href="/Docs/about"' in html
    robots = (project / "site" / "robots.txt").read_text(encoding="utf-8")
    assert "Sitemap: https://example.com/Docs/sitemap.xml" in robots


def test_explicit_config_path(project: Path) -> None:
    """``--config`` points at a file outside the working directory name."""
    config = project / "conf" / "site.yaml"
    config.parent.mkdir()
    config.write_text("site:\n  output_dir: out\n  theme: missing\n", encoding="utf-8")

    cli.build(config=config)

    assert (project / "out" / "index.html").is_file()


def test_format_path_prefers_cwd_relative(project: Path) -> None:
    """Absolute paths under the working directory are shortened."""
    assert cli._format_path(project / "dist" / "index.html") == "dist/index.html"
