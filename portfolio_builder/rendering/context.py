"""Merge the global ``base`` context with page and item contexts."""

from __future__ import annotations

import collections.abc as cabc
import typing as typ

from portfolio_builder._constants import BASE_CONTEXT_KEY


def merge_context(
    base: cabc.Mapping[str, typ.Any] | None, override: object
) -> object:
    """Return the render context for one page or collection item.

    Parameters
    ----------
    base : Mapping or None
        The configuration's global ``base`` context, or ``None`` when the
        configuration does not declare one.
    override : object
        The page or item context. Usually a mapping, but any YAML value is
        accepted.

    Returns
    -------
    object
        ``override`` unchanged when ``base`` is ``None``. Otherwise a new dict
        holding ``{"base": base}`` with every key of ``override`` copied next
        to it. A non-mapping ``override`` contributes nothing. A field named
        ``base`` in ``override`` replaces the global context.

    Examples
    --------
    >>> merge_context(None, {"title": "Hi"})
    {'title': 'Hi'}
    >>> merge_context({"site": "MySite"}, {"title": "Hi"})
    {'base': {'site': 'MySite'}, 'title': 'Hi'}
    >>> merge_context({"site": "MySite"}, ["ignored"])
    {'base': {'site': 'MySite'}}
    """
    if base is None:
        return override

    merged: dict[str, typ.Any] = {BASE_CONTEXT_KEY: base}
    if isinstance(override, cabc.Mapping):
        merged.update(override)
    return merged


def shadows_reserved_key(
    base: cabc.Mapping[str, typ.Any] | None, override: object
) -> bool:
    """Return whether ``override`` shadows the reserved ``base`` entry."""
    return (
        base is not None
        and isinstance(override, cabc.Mapping)
        and BASE_CONTEXT_KEY in override
    )


__all__ = ["merge_context", "shadows_reserved_key"]
