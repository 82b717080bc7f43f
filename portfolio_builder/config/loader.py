"""Load the portfolio ``config.yml`` into a typed :class:`SiteConfig`."""

from __future__ import annotations

import collections.abc as cabc
import typing as typ

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError
from ruamel.yaml.nodes import MappingNode, ScalarNode

from portfolio_builder.errors import ConfigParseError, ConfigReadError

from .models import SiteConfig

if typ.TYPE_CHECKING:
    from pathlib import Path

TEMPLATE_ID_KEY = "template_id"


def load_site_config(path: Path) -> SiteConfig:
    """Load the YAML configuration describing the portfolio content.

    Parameters
    ----------
    path : Path
        Filesystem path to the configuration file (usually ``config.yml``).

    Returns
    -------
    SiteConfig
        Parsed configuration with ``template_id``, optional ``base`` context,
        pages and collections.

    Raises
    ------
    ConfigReadError
        If the file cannot be opened or read.
    ConfigParseError
        If the content is not valid YAML, the top level is not a mapping,
        ``template_id`` is missing, or ``base``/``pages``/``collections`` have
        the wrong type.

    Examples
    --------
    >>> from pathlib import Path
    >>> from portfolio_builder.config import load_site_config
    >>> config = load_site_config(Path("config.yml"))  # doctest: +SKIP
    >>> config.template_id  # doctest: +SKIP
    '0001'
    """
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigReadError(path, exc) from exc
    try:
        loaded = loader.load(text)
        root = loader.compose(text)
    except YAMLError as exc:
        msg = f"Error parsing YAML in '{path}': {exc}"
        raise ConfigParseError(msg) from exc

    if loaded is None:
        loaded = {}
    if not isinstance(loaded, cabc.Mapping):
        msg = f"Top-level YAML structure in '{path}' must be a mapping."
        raise ConfigParseError(msg)
    return build_site_config(
        loaded, template_id_text=_scalar_text(root, TEMPLATE_ID_KEY)
    )


def build_site_config(
    raw: cabc.Mapping[str, typ.Any], *, template_id_text: str | None = None
) -> SiteConfig:
    """Build a :class:`SiteConfig` from an already parsed mapping.

    ``template_id_text`` is the id as written in the source document. YAML 1.2
    resolves an unquoted ``0001`` to the integer ``1``, so the source text is
    preferred over ``str()`` of the parsed value whenever it is available.
    """
    template_id = raw.get(TEMPLATE_ID_KEY)
    if template_id is None or isinstance(template_id, (cabc.Mapping, list)):
        msg = f"Config is missing a scalar '{TEMPLATE_ID_KEY}'."
        raise ConfigParseError(msg)

    return SiteConfig(
        template_id=template_id_text or str(template_id),
        base=_optional_mapping(raw, "base"),
        pages=_optional_mapping(raw, "pages") or {},
        collections=_optional_mapping(raw, "collections") or {},
    )


def _scalar_text(node: object, key: str) -> str | None:
    """Return the source text of the scalar under ``key`` in a mapping node."""
    if not isinstance(node, MappingNode):
        return None
    for key_node, value_node in node.value:
        if key_node.value == key and isinstance(value_node, ScalarNode):
            return value_node.value
    return None


def _optional_mapping(
    raw: cabc.Mapping[str, typ.Any], key: str
) -> cabc.Mapping[str, typ.Any] | None:
    """Return ``raw[key]`` when it is a mapping, ``None`` when absent or null."""
    value = raw.get(key)
    match value:
        case None:
            return None
        case cabc.Mapping():
            _require_string_keys(value, key)
            return value
        case _:
            msg = f"'{key}' must be a mapping, got {type(value).__name__}."
            raise ConfigParseError(msg)


def _require_string_keys(value: cabc.Mapping[typ.Any, typ.Any], key: str) -> None:
    for name in value:
        if not isinstance(name, str):
            msg = f"'{key}' keys must be strings, got {name!r}."
            raise ConfigParseError(msg)


__all__ = ["build_site_config", "load_site_config"]
