"""Common literal values used across portfolio_builder.

Remote locations, template layout names and CLI defaults live here so the
fetcher, renderers and tests share one source of truth.

Examples
--------
>>> from portfolio_builder import _constants
>>> _constants.TEMPLATE_PREFIX.format(template_id="0001")
'templates/0001/'
>>> _constants.BASE_TEMPLATE
'base.html'
"""

DEFAULT_REPO = "saksham-ghimire/portfolio-builder"
DEFAULT_BRANCH = "main"
DEFAULT_API_BASE = "https://api.github.com"
RAW_CONTENT_BASE = "https://raw.githubusercontent.com"

TEMPLATE_PREFIX = "templates/{template_id}/"
CONFIG_FILENAME = "config.yml"
SCHEMA_FILENAME = "schema.json"

PAGES_DIRNAME = "pages"
ASSETS_DIRNAME = "assets"
BASE_TEMPLATE = "base.html"
TEMPLATE_SUFFIX = ".html"
BASE_CONTEXT_KEY = "base"
