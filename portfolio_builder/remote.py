r"""Download portfolio templates, starter configs and schemas from GitHub.

Templates live in a public GitHub repository under ``templates/<id>/``. This
module lists that tree through the GitHub REST API and fetches individual
files from ``raw.githubusercontent.com``. Transient 5xx responses are retried
by the transport; every other failure surfaces as :class:`RemoteFetchError`.

Example
-------
>>> from pathlib import Path
>>> from portfolio_builder.remote import TemplateRepository
>>> repo = TemplateRepository()  # doctest: +SKIP
>>> repo.fetch_config("0001", Path("config.yml"))  # doctest: +SKIP
PosixPath('config.yml')
"""

from __future__ import annotations

import collections.abc as cabc
import json
import logging
import typing as typ
from http import HTTPStatus
from pathlib import Path, PurePosixPath

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ._constants import (
    CONFIG_FILENAME,
    DEFAULT_API_BASE,
    DEFAULT_BRANCH,
    DEFAULT_REPO,
    RAW_CONTENT_BASE,
    SCHEMA_FILENAME,
    TEMPLATE_PREFIX,
)
from .errors import RemoteFetchError

logger = logging.getLogger(__name__)

_ACCEPT_HEADER = "application/vnd.github+json"
_USER_AGENT = "portfolio-builder/0.1"


def build_session() -> requests.Session:
    """Return a session that retries idempotent requests on 5xx responses."""
    session = requests.Session()
    retry = Retry(
        total=5,
        read=5,
        connect=3,
        backoff_factor=0.5,
        status_forcelist=(500, 502, 503, 504),
        allowed_methods=("GET", "HEAD"),
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


class TemplateRepository:
    """Thin client for the GitHub repository that hosts portfolio templates."""

    def __init__(
        self,
        *,
        repo: str = DEFAULT_REPO,
        branch: str = DEFAULT_BRANCH,
        token: str | None = None,
        api_base: str = DEFAULT_API_BASE,
        raw_base: str = RAW_CONTENT_BASE,
        session: requests.Session | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialise the client with repository coordinates and transport.

        Parameters
        ----------
        repo : str, optional
            Repository in ``owner/name`` form.
        branch : str, optional
            Branch or ref the templates are read from.
        token : str | None, optional
            GitHub token sent as a bearer header to the tree API; raises the
            rate limit for repeated builds.
        api_base : str, optional
            GitHub REST API base URL.
        raw_base : str, optional
            Base URL serving raw file contents.
        session : requests.Session, optional
            Preconfigured session; defaults to :func:`build_session`.
        timeout : float, optional
            Per-request timeout in seconds.
        """
        normalized = repo.strip().strip("/")
        if not normalized:
            msg = "Repository name cannot be empty"
            raise ValueError(msg)
        self.repo = normalized
        self.branch = branch
        self._api_base = api_base.rstrip("/") or DEFAULT_API_BASE
        self._raw_base = raw_base.rstrip("/") or RAW_CONTENT_BASE
        self._session = session or build_session()
        self.timeout = timeout
        self._api_headers = {"Accept": _ACCEPT_HEADER, "User-Agent": _USER_AGENT}
        if token:
            self._api_headers["Authorization"] = f"Bearer {token}"

    def raw_url(self, path: str) -> str:
        """Return the raw content URL for ``path`` inside the repository."""
        return f"{self._raw_base}/{self.repo}/{self.branch}/{path.lstrip('/')}"

    def config_url(self, template_id: str) -> str:
        """Return the URL of the starter ``config.yml`` for a template."""
        return self.raw_url(_template_prefix(template_id) + CONFIG_FILENAME)

    def schema_url(self, template_id: str) -> str:
        """Return the URL of the JSON schema for a template."""
        return self.raw_url(_template_prefix(template_id) + SCHEMA_FILENAME)

    def fetch_config(self, template_id: str, destination: Path) -> Path:
        """Download the template's starter configuration to ``destination``."""
        logger.info("Fetching template configuration for id: %s", template_id)
        self._download(self.config_url(template_id), destination)
        return destination

    def fetch_schema(self, template_id: str) -> dict[str, typ.Any]:
        """Download and decode the template's JSON schema.

        Raises
        ------
        RemoteFetchError
            If the schema cannot be downloaded or is not a JSON object.
        """
        url = self.schema_url(template_id)
        response = self._get(url)
        try:
            payload = response.json()
        except (json.JSONDecodeError, ValueError) as exc:
            msg = f"Schema at {url} is not valid JSON"
            raise RemoteFetchError(msg) from exc
        if not isinstance(payload, cabc.Mapping):
            msg = f"Schema at {url} must be a JSON object"
            raise RemoteFetchError(msg)
        return dict(payload)

    def list_template_files(self, template_id: str) -> list[str]:
        """Return repository paths of every file under ``templates/<id>/``."""
        url = f"{self._api_base}/repos/{self.repo}/git/trees/{self.branch}"
        response = self._get(url, params={"recursive": "1"}, headers=self._api_headers)
        try:
            payload = response.json()
        except (json.JSONDecodeError, ValueError) as exc:
            msg = f"Repository tree for '{self.repo}' was not valid JSON"
            raise RemoteFetchError(msg) from exc

        tree = payload.get("tree") if isinstance(payload, cabc.Mapping) else None
        if not isinstance(tree, list):
            msg = f"Repository tree for '{self.repo}' has no 'tree' listing"
            raise RemoteFetchError(msg)
        if payload.get("truncated"):
            logger.warning("Repository tree for %s was truncated by GitHub", self.repo)

        prefix = _template_prefix(template_id)
        return [
            entry["path"]
            for entry in tree
            if isinstance(entry, cabc.Mapping)
            and entry.get("type") == "blob"
            and isinstance(entry.get("path"), str)
            and entry["path"].startswith(prefix)
        ]

    def download_template(self, template_id: str, destination: Path) -> Path:
        """Materialise the template tree under ``destination``.

        Parameters
        ----------
        template_id : str
            Template identifier, for example ``"0001"``.
        destination : Path
            Directory receiving the files; created when missing.

        Returns
        -------
        Path
            The local template root. Pages, ``base.html`` and ``assets/``
            sit in its ``pages`` subdirectory.

        Raises
        ------
        RemoteFetchError
            If the tree cannot be listed, holds no files for the template, or
            any file download fails.
        """
        logger.info("Downloading template '%s'...", template_id)
        files = self.list_template_files(template_id)
        if not files:
            msg = f"No files found for template '{template_id}' in {self.repo}"
            raise RemoteFetchError(msg)

        prefix = _template_prefix(template_id)
        template_root = destination.joinpath(*PurePosixPath(prefix).parts)
        for remote_path in files:
            relative = PurePosixPath(remote_path[len(prefix) :])
            if relative.is_absolute() or ".." in relative.parts:
                msg = f"Refusing to download unsafe template path '{remote_path}'"
                raise RemoteFetchError(msg)
            local_path = template_root.joinpath(*relative.parts)
            self._download(self.raw_url(remote_path), local_path)
            logger.debug("Downloaded: %s", relative)

        logger.info("Template downloaded to: %s", template_root)
        return template_root

    def _download(self, url: str, destination: Path) -> None:
        response = self._get(url)
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_bytes(response.content)
        except OSError as exc:
            msg = f"Failed to write {url} to {destination}: {exc}"
            raise RemoteFetchError(msg) from exc

    def _get(
        self,
        url: str,
        *,
        params: cabc.Mapping[str, str] | None = None,
        headers: cabc.Mapping[str, str] | None = None,
    ) -> requests.Response:
        try:
            response = self._session.get(
                url,
                params=params,
                headers=headers or {"User-Agent": _USER_AGENT},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            msg = f"Failed to download {url}: {exc}"
            raise RemoteFetchError(msg) from exc

        if response.status_code != HTTPStatus.OK:
            msg = f"Failed to download {url}: HTTP {response.status_code}"
            raise RemoteFetchError(msg)
        return response


def _template_prefix(template_id: str) -> str:
    normalized = template_id.strip().strip("/")
    if not normalized or "/" in normalized or normalized in {".", ".."}:
        msg = f"Invalid template id '{template_id}'"
        raise RemoteFetchError(msg)
    return TEMPLATE_PREFIX.format(template_id=normalized)


__all__ = ["TemplateRepository", "build_session"]
