"""Tests for the build pipeline and the ``portfolio-builder`` CLI wrapper."""

from __future__ import annotations

import shutil
import typing as typ

import pytest

from portfolio_builder import cli
from portfolio_builder.builder import PortfolioBuilder, fetch_template_config
from portfolio_builder.errors import (
    ConfigReadError,
    RenderFailuresError,
    SchemaValidationError,
    SchemaViolation,
    TemplateNotFoundError,
)
from portfolio_builder.remote import TemplateRepository

if typ.TYPE_CHECKING:
    from pathlib import Path

    from pytest_mock import MockerFixture

CONFIG = """
template_id: "0001"
base:
  site: MySite
pages:
  index:
    title: Hi
collections:
  posts:
    items:
      - output_file: post1.html
        title: A
      - title: B
"""


@pytest.fixture
def template_root(tmp_path: Path, base_layout: str) -> Path:
    """Write a template root with pages, base layout and assets."""
    pages = tmp_path / "remote" / "pages"
    (pages / "assets" / "css").mkdir(parents=True)
    (pages / "assets" / "css" / "site.css").write_text("body {}", encoding="utf-8")
    (pages / "base.html").write_text(base_layout, encoding="utf-8")
    (pages / "index.html").write_text("<h1>{{ title }}</h1>", encoding="utf-8")
    (pages / "posts.html").write_text("<article>{{ title }}</article>", encoding="utf-8")
    return pages.parent


@pytest.fixture
def repository(mocker: MockerFixture, template_root: Path) -> typ.Any:  # noqa: ANN401
    """Return a repository double that copies ``template_root`` on download."""
    repo = mocker.Mock(spec=TemplateRepository)
    repo.fetch_schema.return_value = {
        "type": "object",
        "required": ["template_id"],
        "properties": {"template_id": {"type": "string"}},
    }

    def fake_download(template_id: str, destination: Path) -> Path:
        target = destination / "templates" / template_id
        shutil.copytree(template_root, target)
        return target

    repo.download_template.side_effect = fake_download
    return repo


def test_builder_runs_full_pipeline(
    write_config: typ.Callable[[str], Path],
    repository: typ.Any,  # noqa: ANN401
    output_dir: Path,
) -> None:
    config_path = write_config(CONFIG)

    result = PortfolioBuilder(
        config_path=config_path, output_dir=output_dir, repository=repository
    ).run()

    repository.fetch_schema.assert_called_once_with("0001")
    repository.download_template.assert_called_once()
    assert result.pages == [output_dir / "index.html"]
    assert result.collection_items == [output_dir / "post1.html"]
    assert result.assets == output_dir / "assets"
    assert (output_dir / "assets" / "css" / "site.css").read_text(encoding="utf-8") == (
        "body {}"
    )
    assert "<title>MySite | Hi</title>" in (output_dir / "index.html").read_text(
        encoding="utf-8"
    )
    assert not (output_dir / "B").exists()


def test_builder_removes_downloaded_template(
    write_config: typ.Callable[[str], Path],
    repository: typ.Any,  # noqa: ANN401
    output_dir: Path,
) -> None:
    PortfolioBuilder(
        config_path=write_config(CONFIG), output_dir=output_dir, repository=repository
    ).run()

    destination = repository.download_template.call_args.args[1]
    assert not destination.exists(), "temporary template dir must be cleaned up"


def test_builder_stops_on_schema_violations_before_download(
    write_config: typ.Callable[[str], Path],
    repository: typ.Any,  # noqa: ANN401
    output_dir: Path,
) -> None:
    repository.fetch_schema.return_value = {
        "type": "object",
        "required": ["pages", "footer"],
        "properties": {"template_id": {"type": "integer"}},
    }

    with pytest.raises(SchemaValidationError) as excinfo:
        PortfolioBuilder(
            config_path=write_config(CONFIG), output_dir=output_dir, repository=repository
        ).run()

    assert len(excinfo.value.violations) == 2
    repository.download_template.assert_not_called()
    assert not output_dir.exists()


def test_builder_uses_local_template_dir_without_network(
    write_config: typ.Callable[[str], Path],
    repository: typ.Any,  # noqa: ANN401
    template_root: Path,
    output_dir: Path,
) -> None:
    result = PortfolioBuilder(
        config_path=write_config(CONFIG),
        output_dir=output_dir,
        repository=repository,
        templates_dir=template_root,
        validate=False,
    ).run()

    repository.fetch_schema.assert_not_called()
    repository.download_template.assert_not_called()
    assert [path.name for path in result.written] == ["index.html", "post1.html"]


def test_builder_fails_fast_on_missing_page_template(
    write_config: typ.Callable[[str], Path],
    repository: typ.Any,  # noqa: ANN401
    template_root: Path,
    output_dir: Path,
) -> None:
    (template_root / "pages" / "index.html").unlink()

    with pytest.raises(TemplateNotFoundError, match="index"):
        PortfolioBuilder(
            config_path=write_config(CONFIG),
            output_dir=output_dir,
            repository=repository,
        ).run()

    assert not (output_dir / "post1.html").exists()


def test_builder_keep_going_aggregates_page_and_collection_failures(
    write_config: typ.Callable[[str], Path],
    repository: typ.Any,  # noqa: ANN401
    template_root: Path,
    output_dir: Path,
) -> None:
    (template_root / "pages" / "index.html").unlink()
    (template_root / "pages" / "posts.html").write_text("{{ 1 / 0 }}", encoding="utf-8")

    with pytest.raises(RenderFailuresError) as excinfo:
        PortfolioBuilder(
            config_path=write_config(CONFIG),
            output_dir=output_dir,
            repository=repository,
            keep_going=True,
        ).run()

    assert len(excinfo.value.failures) == 2


def test_fetch_template_config_delegates_to_repository(
    mocker: MockerFixture, tmp_path: Path
) -> None:
    repo = mocker.Mock(spec=TemplateRepository)
    repo.fetch_config.return_value = tmp_path / "config.yml"

    path = fetch_template_config("0001", tmp_path / "config.yml", repository=repo)

    repo.fetch_config.assert_called_once_with("0001", tmp_path / "config.yml")
    assert path == tmp_path / "config.yml"


def test_cli_template_mode_only_fetches_config(
    mocker: MockerFixture, capsys: pytest.CaptureFixture[str], tmp_path: Path
) -> None:
    fetch = mocker.patch.object(
        cli, "fetch_template_config", return_value=tmp_path / "config.yml"
    )
    builder = mocker.patch.object(cli, "PortfolioBuilder")

    cli.build(template="0001", config=tmp_path / "config.yml")

    fetch.assert_called_once()
    assert fetch.call_args.args == ("0001", tmp_path / "config.yml")
    builder.assert_not_called()
    assert "config.yml" in capsys.readouterr().out


def test_cli_build_mode_prints_written_files(
    write_config: typ.Callable[[str], Path],
    repository: typ.Any,  # noqa: ANN401
    mocker: MockerFixture,
    capsys: pytest.CaptureFixture[str],
    output_dir: Path,
) -> None:
    mocker.patch.object(cli, "TemplateRepository", return_value=repository)

    cli.build(config=write_config(CONFIG), output_dir=output_dir)

    out = capsys.readouterr().out
    assert "index.html" in out
    assert "post1.html" in out
    assert "Your portfolio is ready" in out


def test_cli_reads_github_token_from_environment(
    mocker: MockerFixture, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("GITHUB_TOKEN", "env-token")
    repo_cls = mocker.patch.object(cli, "TemplateRepository")
    mocker.patch.object(cli, "fetch_template_config", return_value=tmp_path / "c.yml")

    cli.build(template="0001", config=tmp_path / "c.yml")

    assert repo_cls.call_args.kwargs["token"] == "env-token"


def test_main_reports_errors_and_returns_non_zero(
    mocker: MockerFixture, capsys: pytest.CaptureFixture[str], tmp_path: Path
) -> None:
    mocker.patch.object(
        cli,
        "app",
        side_effect=ConfigReadError(tmp_path / "config.yml", FileNotFoundError("gone")),
    )

    assert cli.main([]) == 1

    err = capsys.readouterr().err
    assert err.startswith("error: Cannot read config file")


def test_main_lists_schema_violations_before_summary(
    mocker: MockerFixture, capsys: pytest.CaptureFixture[str]
) -> None:
    violations = [
        SchemaViolation(path="$.pages", message="'pages' is a required property"),
        SchemaViolation(path="$.base.site", message="5 is not of type 'string'"),
    ]
    mocker.patch.object(cli, "app", side_effect=SchemaValidationError(violations))

    assert cli.main([]) == 1

    lines = capsys.readouterr().err.splitlines()
    assert lines[0] == "- $.pages: 'pages' is a required property"
    assert lines[1] == "- $.base.site: 5 is not of type 'string'"
    assert lines[2].startswith("error: Config validation failed with 2 errors")


def test_main_returns_zero_on_success(mocker: MockerFixture) -> None:
    mocker.patch.object(cli, "app", return_value=None)

    assert cli.main(["--help"]) == 0


def test_main_propagates_unexpected_exceptions(mocker: MockerFixture) -> None:
    mocker.patch.object(cli, "app", side_effect=KeyError("bug"))

    with pytest.raises(KeyError):
        cli.main([])
