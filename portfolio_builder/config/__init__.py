"""Load and validate the portfolio configuration document.

This subpackage parses ``config.yml`` into a frozen :class:`SiteConfig` and
checks it against the JSON schema that ships with the selected template.
:func:`load_site_config` handles reading and shape checks;
:func:`validate_site_config` runs the schema and aggregates every violation.

Examples
--------
>>> from pathlib import Path
>>> from portfolio_builder.config import load_site_config
>>> site = load_site_config(Path("config.yml"))  # doctest: +SKIP
>>> sorted(site.pages)  # doctest: +SKIP
['about', 'index']
"""

from .loader import build_site_config, load_site_config
from .models import SiteConfig
from .schema import validate_site_config

__all__ = [
    "SiteConfig",
    "build_site_config",
    "load_site_config",
    "validate_site_config",
]
