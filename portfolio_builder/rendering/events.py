"""Render events and the sinks that receive them.

Renderers report progress through an :class:`EventSink` instead of logging
directly, so callers decide whether events end up in ``logging``, a list, or
both.
"""

from __future__ import annotations

import dataclasses as dc
import enum
import logging
import typing as typ

if typ.TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger("portfolio_builder.rendering")


class EventKind(enum.StrEnum):
    """Kinds of events recorded while rendering pages and collections."""

    PAGE = "page"
    COLLECTION_ITEM = "collection-item"
    SKIPPED_COLLECTION = "skipped-collection"
    SKIPPED_ITEM = "skipped-item"
    RESERVED_KEY = "reserved-key"
    NON_MAPPING_CONTEXT = "non-mapping-context"
    RENDER_FAILED = "render-failed"


@dc.dataclass(frozen=True, slots=True)
class RenderEvent:
    """A single observation emitted by a renderer.

    Attributes
    ----------
    kind : EventKind
        What happened.
    target : str
        Page name, collection name, or item output file the event concerns.
    path : Path or None
        Written output path, when there is one.
    detail : str or None
        Free-form explanation (skip reason, failure message).
    """

    kind: EventKind
    target: str
    path: Path | None = None
    detail: str | None = None


class EventSink(typ.Protocol):
    """Anything able to record render events."""

    def record(self, event: RenderEvent) -> None:
        """Record ``event``."""
        ...


_LEVELS: dict[EventKind, int] = {
    EventKind.PAGE: logging.INFO,
    EventKind.COLLECTION_ITEM: logging.INFO,
    EventKind.SKIPPED_COLLECTION: logging.DEBUG,
    EventKind.SKIPPED_ITEM: logging.DEBUG,
    EventKind.RESERVED_KEY: logging.WARNING,
    EventKind.NON_MAPPING_CONTEXT: logging.WARNING,
    EventKind.RENDER_FAILED: logging.ERROR,
}

_MESSAGES: dict[EventKind, str] = {
    EventKind.PAGE: "Generated page: %(path)s",
    EventKind.COLLECTION_ITEM: "Generated collection item: %(path)s",
    EventKind.SKIPPED_COLLECTION: "Skipped collection '%(target)s': %(detail)s",
    EventKind.SKIPPED_ITEM: "Skipped item in collection '%(target)s': %(detail)s",
    EventKind.RESERVED_KEY: "'%(target)s' overrides the reserved 'base' context key",
    EventKind.NON_MAPPING_CONTEXT: (
        "Context for '%(target)s' is not a mapping; rendering with an empty context"
    ),
    EventKind.RENDER_FAILED: "Failed to render '%(target)s': %(detail)s",
}


class LoggingSink:
    """Forward render events to the ``portfolio_builder.rendering`` logger."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._logger = log or logger

    def record(self, event: RenderEvent) -> None:
        """Log ``event`` at the level matching its kind."""
        self._logger.log(
            _LEVELS[event.kind],
            _MESSAGES[event.kind],
            {"target": event.target, "path": event.path, "detail": event.detail},
        )


class CollectingSink:
    """Keep every recorded event in memory."""

    def __init__(self) -> None:
        self.events: list[RenderEvent] = []

    def record(self, event: RenderEvent) -> None:
        """Append ``event`` to :attr:`events`."""
        self.events.append(event)

    def of_kind(self, kind: EventKind) -> list[RenderEvent]:
        """Return the recorded events of ``kind`` in recording order."""
        return [event for event in self.events if event.kind is kind]


__all__ = [
    "CollectingSink",
    "EventKind",
    "EventSink",
    "LoggingSink",
    "RenderEvent",
]
