"""Render every configured page into ``<output_dir>/<page>.html``."""

from __future__ import annotations

import typing as typ

from portfolio_builder._constants import TEMPLATE_SUFFIX

from .emitter import TargetEmitter
from .events import EventKind

if typ.TYPE_CHECKING:
    from pathlib import Path

    from portfolio_builder.config import SiteConfig
    from portfolio_builder.errors import PortfolioBuilderError

    from .events import EventSink


class PageRenderer:
    """Render the ``pages`` section of a site configuration."""

    def __init__(
        self,
        site_config: SiteConfig,
        templates_dir: Path,
        output_dir: Path,
        *,
        sink: EventSink | None = None,
        keep_going: bool = False,
        allow_unsafe_paths: bool = False,
    ) -> None:
        """Bind the renderer to a configuration and its template directory.

        Parameters
        ----------
        site_config : SiteConfig
            Loaded configuration; ``pages`` drives the output and ``base``
            selects whether ``base.html`` wraps every page.
        templates_dir : Path
            Directory holding ``<page>.html`` files (and ``base.html``).
        output_dir : Path
            Directory receiving ``<page>.html`` outputs.
        sink : EventSink, optional
            Receiver for render events; defaults to a logging sink.
        keep_going : bool, optional
            Record failures and continue instead of stopping at the first one.
        allow_unsafe_paths : bool, optional
            Allow page names that resolve outside ``output_dir``.
        """
        self.site_config = site_config
        self.emitter = TargetEmitter(
            site_config,
            templates_dir,
            output_dir,
            sink=sink,
            keep_going=keep_going,
            allow_unsafe_paths=allow_unsafe_paths,
        )

    @property
    def failures(self) -> list[PortfolioBuilderError]:
        """Failures recorded in keep-going mode."""
        return self.emitter.failures

    def run(self) -> list[Path]:
        """Render all pages and return the written paths in config order.

        Every page template is resolved before the first file is written, so a
        missing or broken template leaves no page output behind.

        Raises
        ------
        TemplateNotFoundError
            If a page (or the base layout) has no template file.
        RenderError
            If a template fails to parse or execute.
        RenderFailuresError
            In keep-going mode, once every page was attempted and any failed.
        """
        written = self.render()
        self.emitter.raise_collected()
        return written

    def render(self) -> list[Path]:
        """Render all pages without raising collected keep-going failures."""
        resolved = {
            name: self.emitter.resolve(name) for name in self.site_config.pages
        }

        written: list[Path] = []
        for name, context in self.site_config.pages.items():
            template = resolved[name]
            if template is None:
                continue
            path = self.emitter.emit(
                template,
                context,
                target=name,
                output_name=f"{name}{TEMPLATE_SUFFIX}",
                kind=EventKind.PAGE,
            )
            if path is not None:
                written.append(path)

        return written


__all__ = ["PageRenderer"]
