"""Typed dataclasses describing a portfolio site configuration."""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import datetime as dt
import types
import typing as typ


@dc.dataclass(frozen=True, slots=True)
class SiteConfig:
    """Root configuration document loaded from ``config.yml``.

    Attributes
    ----------
    template_id : str
        Identifier of the remote template and schema pair.
    base : Mapping or None
        Global context shared by every page. ``None`` switches rendering to
        the page-only mode where no ``base.html`` is used.
    pages : Mapping
        Page name to page context. Each name maps to ``<name>.html``.
    collections : Mapping
        Collection name to collection definition (a mapping with ``items``).
    """

    template_id: str
    base: cabc.Mapping[str, typ.Any] | None = None
    pages: cabc.Mapping[str, typ.Any] = dc.field(
        default_factory=lambda: types.MappingProxyType({})
    )
    collections: cabc.Mapping[str, typ.Any] = dc.field(
        default_factory=lambda: types.MappingProxyType({})
    )

    def __post_init__(self) -> None:
        if self.base is not None:
            object.__setattr__(self, "base", types.MappingProxyType(dict(self.base)))
        object.__setattr__(self, "pages", types.MappingProxyType(dict(self.pages)))
        object.__setattr__(
            self, "collections", types.MappingProxyType(dict(self.collections))
        )

    @property
    def has_base(self) -> bool:
        """Return whether the configuration declares a ``base`` context."""
        return self.base is not None

    def to_document(self) -> dict[str, typ.Any]:
        """Return the JSON-compatible document validated against the schema."""
        document: dict[str, typ.Any] = {"template_id": self.template_id}
        if self.base is not None:
            document["base"] = _jsonable(self.base)
        if self.pages:
            document["pages"] = _jsonable(self.pages)
        if self.collections:
            document["collections"] = _jsonable(self.collections)
        return document


def _jsonable(value: object) -> typ.Any:  # noqa: ANN401 - arbitrary YAML payload
    """Convert YAML-native values (dates, proxies, tuples) into JSON types."""
    match value:
        case cabc.Mapping():
            return {str(key): _jsonable(item) for key, item in value.items()}
        case str():
            return value
        case bytes():
            return value.decode("utf-8", errors="replace")
        case cabc.Sequence() | cabc.Set():
            return [_jsonable(item) for item in value]
        case dt.datetime() | dt.date() | dt.time():
            return value.isoformat()
        case _:
            return value


__all__ = ["SiteConfig"]
