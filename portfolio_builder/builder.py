"""End-to-end portfolio build pipeline.

The pipeline runs once, in order: load the config, validate it against the
template's schema, download the template, copy its assets, render pages, then
render collections. Any failure is fatal; the downloaded template is removed
on every exit path.

Example
-------
>>> from pathlib import Path
>>> from portfolio_builder.builder import PortfolioBuilder
>>> result = PortfolioBuilder(
...     config_path=Path("config.yml"), output_dir=Path("site")
... ).run()  # doctest: +SKIP
>>> [path.name for path in result.pages]  # doctest: +SKIP
['index.html', 'about.html']
"""

from __future__ import annotations

import dataclasses as dc
import logging
import tempfile
import typing as typ
from pathlib import Path

from ._constants import PAGES_DIRNAME
from .assets import copy_assets
from .config import load_site_config, validate_site_config
from .errors import OutputWriteError, PortfolioBuilderError, RenderFailuresError
from .remote import TemplateRepository
from .rendering import CollectionRenderer, PageRenderer

if typ.TYPE_CHECKING:
    from .config import SiteConfig
    from .rendering import EventSink

logger = logging.getLogger(__name__)


@dc.dataclass(slots=True)
class BuildResult:
    """Files produced by one build."""

    output_dir: Path
    pages: list[Path] = dc.field(default_factory=list)
    collection_items: list[Path] = dc.field(default_factory=list)
    assets: Path | None = None

    @property
    def written(self) -> list[Path]:
        """Return every rendered HTML file, pages first."""
        return [*self.pages, *self.collection_items]


class PortfolioBuilder:
    """Coordinate config loading, validation, template download and rendering."""

    def __init__(
        self,
        *,
        config_path: Path,
        output_dir: Path,
        repository: TemplateRepository | None = None,
        templates_dir: Path | None = None,
        validate: bool = True,
        sink: EventSink | None = None,
        keep_going: bool = False,
        allow_unsafe_paths: bool = False,
    ) -> None:
        """Configure a build.

        Parameters
        ----------
        config_path : Path
            Configuration document to load.
        output_dir : Path
            Destination directory; created when missing.
        repository : TemplateRepository, optional
            Remote template client; a default client is created when omitted.
        templates_dir : Path, optional
            Local template directory used instead of downloading one. Either
            a template root containing ``pages/`` or the pages folder itself.
        validate : bool, optional
            Validate the config against the template's remote schema.
        sink : EventSink, optional
            Receiver for render events shared by both renderers.
        keep_going : bool, optional
            Collect render failures across every page and item instead of
            stopping at the first one.
        allow_unsafe_paths : bool, optional
            Allow output names that resolve outside ``output_dir``.
        """
        self.config_path = config_path
        self.output_dir = output_dir
        self.repository = repository or TemplateRepository()
        self.templates_dir = templates_dir
        self.validate = validate
        self.sink = sink
        self.keep_going = keep_going
        self.allow_unsafe_paths = allow_unsafe_paths

    def run(self) -> BuildResult:
        """Execute the full pipeline and return the produced files.

        Raises
        ------
        PortfolioBuilderError
            Any subclass, from the first failing step.
        """
        site_config = load_site_config(self.config_path)
        if self.validate:
            schema = self.repository.fetch_schema(site_config.template_id)
            validate_site_config(site_config, schema)
            logger.info("Config is valid!")
        else:
            logger.info("Skipping schema validation")

        if self.templates_dir is not None:
            return self._build(site_config, _pages_dir(self.templates_dir))

        with tempfile.TemporaryDirectory(prefix="portfolio-template-") as tmp:
            template_root = self.repository.download_template(
                site_config.template_id, Path(tmp)
            )
            return self._build(site_config, template_root / PAGES_DIRNAME)

    def _build(self, site_config: SiteConfig, pages_dir: Path) -> BuildResult:
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise OutputWriteError(self.output_dir, exc) from exc

        result = BuildResult(output_dir=self.output_dir)
        result.assets = copy_assets(pages_dir, self.output_dir)

        options = {
            "sink": self.sink,
            "keep_going": self.keep_going,
            "allow_unsafe_paths": self.allow_unsafe_paths,
        }
        pages = PageRenderer(site_config, pages_dir, self.output_dir, **options)
        result.pages = pages.render()
        collections = CollectionRenderer(
            site_config, pages_dir, self.output_dir, **options
        )
        result.collection_items = collections.render()

        failures: list[PortfolioBuilderError] = [
            *pages.failures,
            *collections.failures,
        ]
        if failures:
            raise RenderFailuresError(failures)

        logger.info("Portfolio generation completed successfully!")
        return result


def fetch_template_config(
    template_id: str,
    destination: Path,
    *,
    repository: TemplateRepository | None = None,
) -> Path:
    """Download the starter configuration for ``template_id`` to ``destination``."""
    client = repository or TemplateRepository()
    path = client.fetch_config(template_id, destination)
    logger.info(
        "Successfully fetched the configuration, please update '%s' as needed, "
        "and then run again without --template to generate your portfolio.",
        path,
    )
    return path


def _pages_dir(templates_dir: Path) -> Path:
    candidate = templates_dir / PAGES_DIRNAME
    return candidate if candidate.is_dir() else templates_dir


__all__ = ["BuildResult", "PortfolioBuilder", "fetch_template_config"]
