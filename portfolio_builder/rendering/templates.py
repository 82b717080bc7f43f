"""Resolve page and collection templates inside a downloaded template tree.

A :class:`TemplateSet` wraps one Jinja2 environment rooted at the template's
``pages`` directory. When the configuration declares a ``base`` context every
target renders through ``base.html``; the target's own template is handed to
the layout as the ``page_template`` global.

A layout with a single content slot includes the page::

    <title>{{ base.site }} | {{ title }}</title>
    <main>{% include page_template %}</main>

A layout with several sections imports the page as a module instead. The
module's top-level ``{% set %}`` values and macros become attributes, and the
module itself renders as the page body::

    {% import page_template as page with context %}
    <title>{{ page.page_title }} | {{ base.site }}</title>
    <nav>{{ page.crumbs() }}</nav>
    <main>{{ page }}</main>

An include does not share the page's ``{% set %}`` values with the layout.
Without a ``base`` context the target template renders on its own.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from jinja2 import Environment, FileSystemLoader, Template, select_autoescape
from jinja2 import exceptions as jinja_exc
from markdown import markdown
from markupsafe import Markup

from portfolio_builder._constants import BASE_TEMPLATE, TEMPLATE_SUFFIX
from portfolio_builder.errors import RenderError, TemplateNotFoundError

if typ.TYPE_CHECKING:
    from pathlib import Path

PAGE_TEMPLATE_GLOBAL = "page_template"
_MARKDOWN_EXTENSIONS = ["sane_lists", "tables", "fenced_code"]


def markdown_filter(text: object) -> Markup:
    """Render Markdown text into HTML marked safe for autoescaping templates."""
    normalized = "" if text is None else str(text).strip()
    if not normalized:
        return Markup("")
    return Markup(markdown(normalized, extensions=_MARKDOWN_EXTENSIONS))  # noqa: S704


@dc.dataclass(frozen=True, slots=True)
class ResolvedTemplate:
    """A parsed entry-point template ready to render one target."""

    name: str
    template: Template
    uses_base: bool


class TemplateSet:
    """Load target templates (and the optional base layout) from a directory."""

    def __init__(self, templates_dir: Path, *, use_base: bool) -> None:
        """Create the Jinja environment for ``templates_dir``.

        Parameters
        ----------
        templates_dir : Path
            Directory holding ``<name>.html`` files and optionally
            ``base.html``.
        use_base : bool
            Whether targets render through ``base.html``.

        Notes
        -----
        Template caching is disabled so each resolved target owns its own copy
        of ``base.html`` with its own ``page_template`` global.
        """
        self.templates_dir = templates_dir
        self.use_base = use_base
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir)),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
            cache_size=0,
        )
        self.env.filters["markdown"] = markdown_filter

    def template_path(self, name: str) -> Path:
        """Return the filesystem path of the template for ``name``."""
        return self.templates_dir / f"{name}{TEMPLATE_SUFFIX}"

    def resolve(self, name: str) -> ResolvedTemplate:
        """Locate and parse the templates needed to render ``name``.

        Raises
        ------
        TemplateNotFoundError
            If ``<name>.html`` is missing, or ``base.html`` is missing while
            the set renders through the base layout.
        RenderError
            If either template fails to parse.
        """
        path = self.template_path(name)
        if not path.is_file():
            raise TemplateNotFoundError(name, path)
        if self.use_base:
            base_path = self.templates_dir / BASE_TEMPLATE
            if not base_path.is_file():
                raise TemplateNotFoundError(name, base_path)

        filename = f"{name}{TEMPLATE_SUFFIX}"
        try:
            target = self.env.get_template(filename)
            if self.use_base:
                target = self.env.get_template(
                    BASE_TEMPLATE, globals={PAGE_TEMPLATE_GLOBAL: filename}
                )
        except jinja_exc.TemplateSyntaxError as exc:
            raise RenderError(name, exc) from exc
        except jinja_exc.TemplateNotFound as exc:
            raise TemplateNotFoundError(name, path) from exc
        return ResolvedTemplate(name=name, template=target, uses_base=self.use_base)


__all__ = [
    "PAGE_TEMPLATE_GLOBAL",
    "ResolvedTemplate",
    "TemplateSet",
    "markdown_filter",
]
