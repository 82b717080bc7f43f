"""Build static portfolio websites from a YAML config and a remote template.

This package exposes the ``portfolio-builder`` CLI. The build pipeline loads
``config.yml``, validates it against the template's JSON schema, downloads the
template from GitHub and renders pages and collection items with Jinja2.

Exports
-------
- ``app``: Cyclopts application behind the console script.
- ``main``: Convenience function that invokes the app and returns an exit code.

Examples
--------
>>> from portfolio_builder import main
>>> main(["--template", "0001"])  # doctest: +SKIP
0
"""

from __future__ import annotations

import logging

from .cli import app, main

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = ["app", "main"]
