"""Render collection items, one output file per item."""

from __future__ import annotations

import collections.abc as cabc
import typing as typ

from .emitter import TargetEmitter
from .events import EventKind, RenderEvent

if typ.TYPE_CHECKING:
    from pathlib import Path

    from portfolio_builder.config import SiteConfig
    from portfolio_builder.errors import PortfolioBuilderError

    from .events import EventSink

OUTPUT_FILE_KEY = "output_file"
ITEMS_KEY = "items"


class CollectionRenderer:
    """Render the ``collections`` section of a site configuration.

    Malformed collections (no ``items`` sequence) and items without a string
    ``output_file`` are skipped without error; template failures are fatal.
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
        self.emitter = TargetEmitter(
            site_config,
            templates_dir,
            output_dir,
            sink=sink,
            keep_going=keep_going,
            allow_unsafe_paths=allow_unsafe_paths,
        )

    @property
    def sink(self) -> EventSink:
        """Receiver of skip and render events."""
        return self.emitter.sink

    @property
    def failures(self) -> list[PortfolioBuilderError]:
        """Failures recorded in keep-going mode."""
        return self.emitter.failures

    def run(self) -> list[Path]:
        """Render every item of every well-formed collection.

        Returns
        -------
        list[Path]
            Written paths, grouped by collection in config order and in item
            order within each collection.

        Raises
        ------
        TemplateNotFoundError
            If a collection (or the base layout) has no template file.
        RenderError
            If a template fails to parse or execute for any item.
        RenderFailuresError
            In keep-going mode, once every item was attempted and any failed.
        """
        written = self.render()
        self.emitter.raise_collected()
        return written

    def render(self) -> list[Path]:
        """Render every item without raising collected keep-going failures."""
        collections = self._well_formed()
        resolved = {name: self.emitter.resolve(name) for name in collections}

        written: list[Path] = []
        for name, items in collections.items():
            template = resolved[name]
            if template is None:
                continue
            for index, item in enumerate(items):
                output_file = _output_file(item)
                if output_file is None:
                    self.sink.record(
                        RenderEvent(
                            kind=EventKind.SKIPPED_ITEM,
                            target=name,
                            detail=f"item {index} has no string '{OUTPUT_FILE_KEY}'",
                        )
                    )
                    continue
                path = self.emitter.emit(
                    template,
                    item,
                    target=output_file,
                    output_name=output_file,
                    kind=EventKind.COLLECTION_ITEM,
                )
                if path is not None:
                    written.append(path)

        return written

    def _well_formed(self) -> dict[str, cabc.Sequence[typ.Any]]:
        """Return collection name to item sequence, skipping malformed entries."""
        result: dict[str, cabc.Sequence[typ.Any]] = {}
        for name, definition in self.site_config.collections.items():
            items = _items(definition)
            if items is None:
                self.sink.record(
                    RenderEvent(
                        kind=EventKind.SKIPPED_COLLECTION,
                        target=name,
                        detail=f"no '{ITEMS_KEY}' sequence",
                    )
                )
                continue
            result[name] = items
        return result


def _items(definition: object) -> cabc.Sequence[typ.Any] | None:
    if not isinstance(definition, cabc.Mapping):
        return None
    items = definition.get(ITEMS_KEY)
    if isinstance(items, cabc.Sequence) and not isinstance(items, (str, bytes)):
        return items
    return None


def _output_file(item: object) -> str | None:
    if not isinstance(item, cabc.Mapping):
        return None
    value = item.get(OUTPUT_FILE_KEY)
    return value if isinstance(value, str) else None


__all__ = ["CollectionRenderer"]
