"""Copy a template's static ``assets/`` folder into the output directory."""

from __future__ import annotations

import logging
import shutil
import typing as typ

from ._constants import ASSETS_DIRNAME
from .errors import OutputWriteError

if typ.TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


def copy_assets(templates_dir: Path, output_dir: Path) -> Path | None:
    """Mirror ``<templates_dir>/assets`` into ``<output_dir>/assets``.

    Existing files in the destination are overwritten; unrelated files are
    left alone.

    Returns
    -------
    Path or None
        The destination folder, or ``None`` when the template has no assets.

    Raises
    ------
    OutputWriteError
        If any file or directory cannot be copied.
    """
    source = templates_dir / ASSETS_DIRNAME
    if not source.is_dir():
        logger.debug("Template has no %s folder at %s", ASSETS_DIRNAME, source)
        return None

    destination = output_dir / ASSETS_DIRNAME
    try:
        shutil.copytree(source, destination, dirs_exist_ok=True)
    except OSError as exc:
        raise OutputWriteError(destination, exc) from exc
    logger.info("Copied folder: %s", destination)
    return destination


__all__ = ["copy_assets"]
