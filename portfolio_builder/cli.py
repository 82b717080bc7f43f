"""Cyclopts CLI entrypoint for building a portfolio site.

The ``portfolio-builder`` console script defined here works in two steps.
First ``--template <id>`` downloads the starter ``config.yml`` of a template;
after editing it, running without ``--template`` validates the config,
downloads the template and renders the site into ``--output-dir``.

Examples
--------
Download the configuration for template ``0001``:

>>> from portfolio_builder.cli import app
>>> app(["--template", "0001"])  # doctest: +SKIP

Render the portfolio into ``site/``:

>>> app(["--output-dir", "site"])  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import os
import sys
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from ._constants import CONFIG_FILENAME, DEFAULT_API_BASE, DEFAULT_BRANCH, DEFAULT_REPO
from .builder import PortfolioBuilder, fetch_template_config
from .errors import PortfolioBuilderError, RenderFailuresError, SchemaValidationError
from .remote import TemplateRepository

DEFAULT_CONFIG = Path(CONFIG_FILENAME)

app = App(
    name="portfolio-builder",
    help=(
        "A portfolio generator that uses a template and a configuration file "
        "to build a static website."
    ),
    config=cyclopts.config.Env("INPUT_", command=False),  # type: ignore[unknown-argument]
)


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


@app.default
def build(
    *,
    template: typ.Annotated[
        str | None,
        Parameter(
            help="Download the configuration for a template id. Use this first!"
        ),
    ] = None,
    config: typ.Annotated[
        Path, Parameter(help="Path to your configuration file")
    ] = DEFAULT_CONFIG,
    output_dir: typ.Annotated[
        Path, Parameter(help="Output directory for the generated site")
    ] = Path(),
    template_dir: typ.Annotated[
        Path | None,
        Parameter(help="Render from a local template directory instead of GitHub"),
    ] = None,
    repo: typ.Annotated[
        str, Parameter(help="GitHub repository hosting the templates")
    ] = DEFAULT_REPO,
    branch: typ.Annotated[
        str, Parameter(help="Branch the templates are read from")
    ] = DEFAULT_BRANCH,
    github_token: typ.Annotated[
        str | None,
        Parameter(help="Optional GitHub token (falls back to GITHUB_TOKEN)"),
    ] = None,
    github_api_url: typ.Annotated[
        str, Parameter(help="Override the GitHub API base URL")
    ] = DEFAULT_API_BASE,
    skip_validation: typ.Annotated[
        bool, Parameter(help="Do not validate the config against the schema")
    ] = False,
    keep_going: typ.Annotated[
        bool, Parameter(help="Render every target and report all failures at the end")
    ] = False,
    allow_unsafe_paths: typ.Annotated[
        bool, Parameter(help="Allow output files outside the output directory")
    ] = False,
    verbose: typ.Annotated[bool, Parameter(help="Enable verbose logging")] = False,
) -> None:
    """Fetch a template configuration or build the portfolio site.

    Parameters
    ----------
    template : str or None, optional
        When set, only download ``config.yml`` for this template id into
        ``config`` and return without rendering.
    config : Path, optional
        Configuration file path, ``config.yml`` by default.
    output_dir : Path, optional
        Output directory, the current directory by default; created if
        missing.
    template_dir : Path or None, optional
        Local template directory; skips the template download.
    repo, branch, github_token, github_api_url
        Coordinates and credentials of the template repository.
    skip_validation : bool, optional
        Skip the remote schema validation.
    keep_going : bool, optional
        Continue past render failures and report them together.
    allow_unsafe_paths : bool, optional
        Permit output paths that escape ``output_dir``.
    verbose : bool, optional
        Log at DEBUG instead of INFO.

    Raises
    ------
    PortfolioBuilderError
        Any build failure; :func:`main` reports it and exits non-zero.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )
    token = github_token or os.getenv("GITHUB_TOKEN") or os.getenv("GH_TOKEN")
    repository = TemplateRepository(
        repo=repo, branch=branch, token=token, api_base=github_api_url
    )

    if template:
        path = fetch_template_config(template, config, repository=repository)
        print(f"wrote {_format_path(path)}")
        return

    result = PortfolioBuilder(
        config_path=config,
        output_dir=output_dir,
        repository=repository,
        templates_dir=template_dir,
        validate=not skip_validation,
        keep_going=keep_going,
        allow_unsafe_paths=allow_unsafe_paths,
    ).run()
    for path in result.written:
        print(f"wrote {_format_path(path)}")
    print(f"Your portfolio is ready in the '{_format_path(output_dir)}' directory.")


def report_error(exc: PortfolioBuilderError) -> None:
    """Print ``exc`` to stderr, listing aggregated violations and failures."""
    if isinstance(exc, SchemaValidationError):
        for violation in exc.violations:
            print(f"- {violation}", file=sys.stderr)
    elif isinstance(exc, RenderFailuresError):
        for failure in exc.failures:
            print(f"- {failure}", file=sys.stderr)
    print(f"error: {exc}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    """Invoke the Cyclopts application behind the ``portfolio-builder`` command.

    Parameters
    ----------
    argv : list[str] or None, optional
        Arguments to parse; ``None`` reads ``sys.argv``.

    Returns
    -------
    int
        ``0`` on success, ``1`` when the build failed.
    """
    try:
        app(argv)
    except PortfolioBuilderError as exc:
        report_error(exc)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    sys.exit(main())
