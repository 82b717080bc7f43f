"""Render configured pages and collection items through Jinja templates."""

from .collection import CollectionRenderer
from .context import merge_context, shadows_reserved_key
from .events import CollectingSink, EventKind, EventSink, LoggingSink, RenderEvent
from .pages import PageRenderer
from .templates import TemplateSet

__all__ = [
    "CollectingSink",
    "CollectionRenderer",
    "EventKind",
    "EventSink",
    "LoggingSink",
    "PageRenderer",
    "RenderEvent",
    "TemplateSet",
    "merge_context",
    "shadows_reserved_key",
]
