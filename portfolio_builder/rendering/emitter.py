"""Shared merge-and-write routine used by the page and collection renderers."""

from __future__ import annotations

import collections.abc as cabc
import typing as typ
from pathlib import Path

from portfolio_builder.errors import (
    OutputWriteError,
    PortfolioBuilderError,
    RenderError,
    RenderFailuresError,
    UnsafeOutputPathError,
)

from .context import merge_context, shadows_reserved_key
from .events import EventKind, EventSink, LoggingSink, RenderEvent
from .templates import ResolvedTemplate, TemplateSet

if typ.TYPE_CHECKING:
    from portfolio_builder.config import SiteConfig


class TargetEmitter:
    """Render resolved templates with merged context and write the results.

    Both renderers delegate here so merge precedence, path checks, error
    wrapping and keep-going bookkeeping stay identical for pages and
    collection items.
    """

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
        self.site_config = site_config
        self.output_dir = output_dir
        self.sink = sink or LoggingSink()
        self.keep_going = keep_going
        self.allow_unsafe_paths = allow_unsafe_paths
        self.templates = TemplateSet(templates_dir, use_base=site_config.has_base)
        self.failures: list[PortfolioBuilderError] = []

    def resolve(self, name: str) -> ResolvedTemplate | None:
        """Resolve ``name``'s template, recording the failure in keep-going mode."""
        try:
            return self.templates.resolve(name)
        except PortfolioBuilderError as exc:
            self._fail(name, exc)
            return None

    def output_path(self, name: str) -> Path:
        """Return the output path for ``name``, rejecting escapes by default.

        Raises
        ------
        UnsafeOutputPathError
            If ``name`` is absolute or resolves outside the output directory
            and unsafe paths are not allowed.
        """
        candidate = self.output_dir / name
        if self.allow_unsafe_paths:
            return candidate
        root = self.output_dir.resolve()
        if Path(name).is_absolute() or not candidate.resolve().is_relative_to(root):
            raise UnsafeOutputPathError(name, self.output_dir)
        return candidate

    def emit(
        self,
        resolved: ResolvedTemplate,
        context: object,
        *,
        target: str,
        output_name: str,
        kind: EventKind,
    ) -> Path | None:
        """Render ``resolved`` for one target and write it under the output dir.

        Parameters
        ----------
        resolved : ResolvedTemplate
            Parsed entry-point template.
        context : object
            The page or item context before merging with ``base``.
        target : str
            Name used in events and errors (page name or item output file).
        output_name : str
            Output path relative to the output directory.
        kind : EventKind
            Event recorded once the file is written.

        Returns
        -------
        Path or None
            The written path, or ``None`` when the failure was recorded in
            keep-going mode.
        """
        try:
            path = self.output_path(output_name)
            html = self._render(resolved, context, target)
            _write(path, html)
        except PortfolioBuilderError as exc:
            self._fail(target, exc)
            return None
        self.sink.record(RenderEvent(kind=kind, target=target, path=path))
        return path

    def raise_collected(self) -> None:
        """Raise :class:`RenderFailuresError` if keep-going mode saw failures."""
        if self.failures:
            raise RenderFailuresError(self.failures)

    def _render(self, resolved: ResolvedTemplate, context: object, target: str) -> str:
        base = self.site_config.base
        if shadows_reserved_key(base, context):
            self.sink.record(RenderEvent(kind=EventKind.RESERVED_KEY, target=target))
        merged = merge_context(base, context)
        if not isinstance(merged, cabc.Mapping):
            self.sink.record(
                RenderEvent(kind=EventKind.NON_MAPPING_CONTEXT, target=target)
            )
            merged = {}
        try:
            return resolved.template.render(merged)
        except Exception as exc:  # noqa: BLE001 - template code can raise anything
            raise RenderError(target, exc) from exc

    def _fail(self, target: str, exc: PortfolioBuilderError) -> None:
        if not self.keep_going:
            raise exc
        self.failures.append(exc)
        self.sink.record(
            RenderEvent(kind=EventKind.RENDER_FAILED, target=target, detail=str(exc))
        )


def _write(path: Path, html: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(html, encoding="utf-8")
    except OSError as exc:
        raise OutputWriteError(path, exc) from exc


__all__ = ["TargetEmitter"]
