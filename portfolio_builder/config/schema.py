"""Validate a :class:`SiteConfig` against the template's JSON schema."""

from __future__ import annotations

import collections.abc as cabc
import typing as typ

from jsonschema import exceptions as js_exc
from jsonschema.validators import validator_for

from portfolio_builder.errors import SchemaValidationError, SchemaViolation

if typ.TYPE_CHECKING:
    from .models import SiteConfig


def validate_site_config(
    site_config: SiteConfig, schema: cabc.Mapping[str, typ.Any]
) -> None:
    """Validate ``site_config`` and report every violation at once.

    Parameters
    ----------
    site_config : SiteConfig
        Loaded configuration; its :meth:`SiteConfig.to_document` output is
        what gets validated.
    schema : Mapping
        JSON schema published alongside the template. The draft is picked from
        its ``$schema`` key, falling back to the latest supported draft.

    Raises
    ------
    SchemaValidationError
        If the schema itself is malformed or the document has violations;
        the exception carries every :class:`SchemaViolation`, ordered by
        document path.
    """
    validator_cls = validator_for(schema)
    try:
        validator_cls.check_schema(schema)
    except js_exc.SchemaError as exc:
        violation = SchemaViolation(path="<schema>", message=exc.message)
        raise SchemaValidationError([violation]) from exc

    validator = validator_cls(schema)
    errors = sorted(
        validator.iter_errors(site_config.to_document()),
        key=lambda error: [str(part) for part in error.absolute_path],
    )
    if errors:
        raise SchemaValidationError([_to_violation(error) for error in errors])


def _to_violation(error: js_exc.ValidationError) -> SchemaViolation:
    return SchemaViolation(path=error.json_path, message=error.message)


__all__ = ["validate_site_config"]
