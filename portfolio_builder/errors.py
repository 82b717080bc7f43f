"""Exception hierarchy raised by the portfolio build pipeline.

Every failure the builder can hit derives from :class:`PortfolioBuilderError`
so the CLI can turn any of them into a single ``error: ...`` line and a
non-zero exit status. Each class names the failing operation; the underlying
cause is chained with ``raise ... from exc`` where one exists.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    from pathlib import Path


class PortfolioBuilderError(RuntimeError):
    """Base class for all fatal portfolio build failures."""


class ConfigReadError(PortfolioBuilderError):
    """Raised when the configuration file cannot be read from disk."""

    def __init__(self, path: Path, cause: OSError) -> None:
        self.path = path
        self.cause = cause
        super().__init__(
            f"Cannot read config file '{path}': {cause}. "
            "Run with --template first to download a starter config."
        )


class ConfigParseError(PortfolioBuilderError):
    """Raised when the configuration document is not valid YAML or has the wrong shape."""


@dc.dataclass(frozen=True, slots=True)
class SchemaViolation:
    """One schema validation failure located by its JSON path."""

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


class SchemaValidationError(PortfolioBuilderError):
    """Raised when the configuration fails schema validation."""

    def __init__(self, violations: typ.Sequence[SchemaViolation]) -> None:
        self.violations = list(violations)
        count = len(self.violations)
        noun = "error" if count == 1 else "errors"
        super().__init__(
            f"Config validation failed with {count} {noun}, please fix them"
        )


class RemoteFetchError(PortfolioBuilderError):
    """Raised when a template file, tree listing or schema cannot be downloaded."""


class TemplateNotFoundError(PortfolioBuilderError):
    """Raised when a page or collection has no matching template file."""

    def __init__(self, name: str, path: Path) -> None:
        self.name = name
        self.path = path
        super().__init__(f"Template for '{name}' not found at {path}")


class RenderError(PortfolioBuilderError):
    """Raised when a template fails to parse or execute."""

    def __init__(self, target: str, cause: Exception) -> None:
        self.target = target
        self.cause = cause
        super().__init__(f"Error rendering '{target}': {cause}")


class OutputWriteError(PortfolioBuilderError):
    """Raised when a rendered file or asset cannot be written."""

    def __init__(self, path: Path, cause: OSError) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Error writing output file {path}: {cause}")


class UnsafeOutputPathError(PortfolioBuilderError):
    """Raised when an output name resolves outside the output directory."""

    def __init__(self, name: str, output_dir: Path) -> None:
        self.name = name
        self.output_dir = output_dir
        super().__init__(
            f"Output path '{name}' escapes the output directory {output_dir}; "
            "pass --allow-unsafe-paths to write it anyway"
        )


class RenderFailuresError(PortfolioBuilderError):
    """Raised at the end of a keep-going run that collected failures."""

    def __init__(self, failures: typ.Sequence[PortfolioBuilderError]) -> None:
        self.failures = list(failures)
        super().__init__(f"{len(self.failures)} target(s) failed to render")


__all__ = [
    "ConfigParseError",
    "ConfigReadError",
    "OutputWriteError",
    "PortfolioBuilderError",
    "RemoteFetchError",
    "RenderError",
    "RenderFailuresError",
    "SchemaValidationError",
    "SchemaViolation",
    "TemplateNotFoundError",
    "UnsafeOutputPathError",
]
